"""Turn a day's "HH:MM" prayer times into instants and remaining durations."""

import datetime
import logging

import pytz

from ramadan.models import RemainingDuration, ResolvedEvent, TimeOfDay

_LOGGER = logging.getLogger(__name__)

FAJR = "Fajr"
SUNRISE = "Sunrise"
DHUHR = "Dhuhr"
ASR = "Asr"
MAGHRIB = "Maghrib"
ISHA = "Isha"

# Canonical order within one day
SCHEDULE_NAMES = [FAJR, SUNRISE, DHUHR, ASR, MAGHRIB, ISHA]
# Sunrise is not a prayer; it is left out of the next-prayer lookup
PRAYER_ORDER = [FAJR, DHUHR, ASR, MAGHRIB, ISHA]

PLACEHOLDER = "--:--:--"


class TimeResolutionError(Exception):
    """Base class for schedule resolution failures."""


class MalformedTimeFormat(TimeResolutionError, ValueError):
    """A time-of-day string could not be parsed as HH:MM."""


class MissingScheduleEntry(TimeResolutionError, KeyError):
    """The requested event is not present in the day's schedule."""


class NoUpcomingEvent(TimeResolutionError, LookupError):
    """No event could be found after the reference instant."""


def clean_time(raw: str) -> str:
    """Strip a trailing annotation, e.g. '05:30 (+03)' -> '05:30'."""
    return raw.strip().split(" ")[0]


def parse_time_of_day(raw: str) -> TimeOfDay:
    """
    Parse 'HH:MM' (optionally followed by an annotation) into a TimeOfDay.

    Raises MalformedTimeFormat if hour/minute are not integers in range.
    """
    if not isinstance(raw, str):
        raise MalformedTimeFormat(f"Expected a time string, got {raw!r}")
    parts = clean_time(raw).split(":")
    if len(parts) < 2:
        raise MalformedTimeFormat(f"Not an HH:MM time: {raw!r}")
    hour_str, minute_str = parts[0], parts[1]
    if not all(s.isascii() and s.isdigit() for s in (hour_str, minute_str)):
        raise MalformedTimeFormat(f"Not an HH:MM time: {raw!r}")
    hour, minute = int(hour_str), int(minute_str)
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise MalformedTimeFormat(f"Time out of range: {raw!r}")
    return TimeOfDay(hour, minute)


def to_instant(t: TimeOfDay, reference) -> datetime.datetime:
    """
    Combine the date part of reference with t (seconds zeroed).

    reference may be a date or a datetime. An aware reference carrying a
    pytz zone is localized through that zone so DST offsets stay correct;
    any other tzinfo is carried over unchanged.
    """
    if isinstance(reference, datetime.datetime):
        day = reference.date()
        tz = reference.tzinfo
    else:
        day = reference
        tz = None
    naive = datetime.datetime.combine(day, datetime.time(t.hour, t.minute))
    if tz is None:
        return naive
    zone = getattr(tz, "zone", None)
    if zone:
        return pytz.timezone(zone).localize(naive)
    return naive.replace(tzinfo=tz)


def remaining(target: datetime.datetime, now: datetime.datetime) -> RemainingDuration:
    """
    Time left from now until target.

    total_seconds is signed and truncated toward zero, so a target at exactly
    now (or less than a second behind) is not yet past.
    """
    total = int((target - now).total_seconds())
    magnitude = abs(total)
    return RemainingDuration(
        hours=magnitude // 3600,
        minutes=(magnitude % 3600) // 60,
        seconds=magnitude % 60,
        total_seconds=total,
        is_past=total < 0,
    )


def format_remaining(value: RemainingDuration | None) -> str:
    """Format as HH:MM:SS, or the placeholder when there is nothing to show."""
    if value is None:
        return PLACEHOLDER
    return f"{value.hours:02d}:{value.minutes:02d}:{value.seconds:02d}"


def _entry_instant(schedule: dict, name: str, reference) -> datetime.datetime:
    """Resolve one schedule entry, raising on absence or bad format."""
    raw = schedule.get(name) if schedule else None
    if not raw:
        raise MissingScheduleEntry(name)
    return to_instant(parse_time_of_day(raw), reference)


def find_next_event(schedule: dict, order, now: datetime.datetime) -> ResolvedEvent | None:
    """
    Return the first event in order that is strictly after now.

    When every event today has passed, wraps to the first name in order on
    tomorrow's date. Returns None only when that first name cannot be
    resolved from the schedule.
    """
    order = list(order)
    if not order:
        return None
    for name in order:
        try:
            instant = _entry_instant(schedule, name, now)
        except TimeResolutionError as exc:
            _LOGGER.debug("Skipping %s while looking for next event: %r", name, exc)
            continue
        if instant > now:
            return ResolvedEvent(name, instant)

    first = order[0]
    tomorrow = now.date() + datetime.timedelta(days=1)
    try:
        instant = _entry_instant(schedule, first, _same_zone(now, tomorrow))
    except TimeResolutionError as exc:
        _LOGGER.warning("No upcoming event: cannot resolve %s (%r)", first, exc)
        return None
    return ResolvedEvent(first, instant)


def resolve_break_fast_instant(schedule: dict, now: datetime.datetime) -> datetime.datetime | None:
    """
    Next Maghrib occurrence: today's, or tomorrow's once today's is at or
    before now.
    """
    try:
        instant = _entry_instant(schedule, MAGHRIB, now)
    except TimeResolutionError as exc:
        _LOGGER.warning("Break-fast time unavailable: %r", exc)
        return None
    if instant <= now:
        tomorrow = now.date() + datetime.timedelta(days=1)
        instant = _entry_instant(schedule, MAGHRIB, _same_zone(now, tomorrow))
    return instant


def resolve_pre_dawn_instant(schedule: dict, now) -> datetime.datetime | None:
    """Fajr on the date of now. No rollover is applied here."""
    try:
        return _entry_instant(schedule, FAJR, now)
    except TimeResolutionError as exc:
        _LOGGER.warning("Pre-dawn time unavailable: %r", exc)
        return None


def _same_zone(now, day: datetime.date):
    """A reference on another day that keeps the tzinfo of now."""
    if isinstance(now, datetime.datetime):
        return datetime.datetime.combine(day, datetime.time(), tzinfo=now.tzinfo)
    return day
