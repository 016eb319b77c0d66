"""Qibla direction and distance to the Kaaba from an observer coordinate."""

import math

from ramadan.models import BearingResult, Coordinate, QiblaReading

KAABA = Coordinate(latitude=21.4225, longitude=39.8262)
EARTH_RADIUS_KM = 6371.0


def normalize_angle(angle: float) -> float:
    """Map any finite angle into [0, 360)."""
    normalized = ((angle % 360) + 360) % 360
    # -1e-20 % 360 rounds up to 360.0
    return 0.0 if normalized >= 360 else normalized


def angular_difference(a: float, b: float) -> float:
    """
    Shortest signed rotation from a to b, in (-180, 180].

    Positive means clockwise (turn right), negative counter-clockwise.
    """
    diff = ((b - a + 180) % 360) - 180
    return 180.0 if diff == -180 else diff


def relative_bearing(target: float, heading: float) -> float:
    """How far clockwise to rotate from heading to face target, in [0, 360)."""
    return normalize_angle(target - heading)


def initial_bearing(observer: Coordinate, target: Coordinate = KAABA) -> float:
    """
    Great-circle initial bearing from observer to target, degrees clockwise
    from true north in [0, 360). Imprecise near the target's antipode.
    """
    lat1 = math.radians(observer.latitude)
    lat2 = math.radians(target.latitude)
    d_lon = math.radians(target.longitude - observer.longitude)

    x = math.sin(d_lon)
    y = math.cos(lat1) * math.tan(lat2) - math.sin(lat1) * math.cos(d_lon)
    bearing = math.degrees(math.atan2(x, y))
    if bearing < 0:
        bearing += 360
    return normalize_angle(bearing)


def distance_km(observer: Coordinate, target: Coordinate = KAABA) -> float:
    """Haversine distance in kilometres."""
    lat1 = math.radians(observer.latitude)
    lat2 = math.radians(target.latitude)
    d_lat = math.radians(target.latitude - observer.latitude)
    d_lon = math.radians(target.longitude - observer.longitude)

    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
    )
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def bearing_result(observer: Coordinate, target: Coordinate = KAABA) -> BearingResult:
    return BearingResult(
        initial_bearing_degrees=initial_bearing(observer, target),
        distance_km=distance_km(observer, target),
    )


def heading_from_magnetometer(x: float, y: float) -> float:
    """Heading in degrees from raw magnetometer x/y components."""
    return normalize_angle(math.degrees(math.atan2(y, x)))


class QiblaTracker:
    """
    Relate live compass headings to the qibla direction for one observer.

    The bearing and distance are computed once per observer; each heading
    sample is then a cheap update().
    """

    def __init__(self, observer: Coordinate, target: Coordinate = KAABA):
        self._target = target
        self.set_observer(observer)

    def set_observer(self, observer: Coordinate) -> None:
        self.observer = observer
        result = bearing_result(observer, self._target)
        self.qibla_direction = result.initial_bearing_degrees
        self.distance_km = result.distance_km

    def update(self, heading: float, calibrated: bool = True) -> QiblaReading:
        heading = normalize_angle(heading)
        return QiblaReading(
            compass_heading=heading,
            qibla_direction=self.qibla_direction,
            qibla_angle=relative_bearing(self.qibla_direction, heading),
            turn=angular_difference(heading, self.qibla_direction),
            distance_km=self.distance_km,
            is_calibrated=calibrated,
        )
