"""Value types shared by the time resolver, countdown and qibla modules."""

import datetime
from dataclasses import dataclass, field
from enum import Enum


@dataclass(frozen=True)
class TimeOfDay:
    """Wall-clock time without a date."""

    hour: int
    minute: int

    def __str__(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"


@dataclass(frozen=True)
class ResolvedEvent:
    """A schedule entry pinned to an absolute instant."""

    name: str  # "Fajr", "Maghrib", ...
    instant: datetime.datetime


@dataclass(frozen=True)
class RemainingDuration:
    """Magnitude of the gap between two instants; the sign lives in is_past."""

    hours: int
    minutes: int
    seconds: int
    total_seconds: int  # signed: target - now
    is_past: bool


@dataclass(frozen=True)
class Coordinate:
    latitude: float  # decimal degrees
    longitude: float  # decimal degrees


@dataclass(frozen=True)
class BearingResult:
    initial_bearing_degrees: float  # [0, 360), clockwise from true north
    distance_km: float


@dataclass(frozen=True)
class QiblaReading:
    """Direction overlay derived from one heading sample."""

    compass_heading: float  # device facing, [0, 360)
    qibla_direction: float  # bearing to the Kaaba, [0, 360)
    qibla_angle: float  # clockwise rotation needed, [0, 360)
    turn: float  # shortest signed rotation, (-180, 180]; negative = left
    distance_km: float
    is_calibrated: bool


class CountdownPhase(Enum):
    IDLE = "idle"
    COUNTING = "counting"
    JUST_COMPLETED = "just_completed"
    POST_COMPLETION = "post_completion"


@dataclass
class CountdownState:
    """Mutable state owned by a single CountdownEngine."""

    target_instant: datetime.datetime | None = None
    remaining: RemainingDuration | None = None
    has_completed_once: bool = False
    phase: CountdownPhase = field(default=CountdownPhase.IDLE)
