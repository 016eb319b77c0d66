"""Fetch prayer times and Hijri date from the Aladhan API."""

import datetime
import logging

import requests

from ramadan.settings import DEFAULT_METHOD
from ramadan.time_resolver import SCHEDULE_NAMES, clean_time

_LOGGER = logging.getLogger(__name__)

ALADHAN_BASE = "https://api.aladhan.com/v1"
REQUEST_TIMEOUT = 10

PRAYER_DISPLAY = {
    "Fajr": "Imsak / Fajr",
    "Sunrise": "Sunrise",
    "Dhuhr": "Dhuhr",
    "Asr": "Asr",
    "Maghrib": "Iftar / Maghrib",
    "Isha": "Isha",
}


class PrayerApiError(ValueError):
    """The API answered with a non-200 payload code."""


def _get(url: str, params: dict) -> dict:
    resp = requests.get(url, params=params, timeout=REQUEST_TIMEOUT)
    resp.raise_for_status()
    body = resp.json()
    if body.get("code") != 200:
        raise PrayerApiError(f"Aladhan API error: {body.get('status')}")
    return body["data"]


def _extract_timings(raw_timings: dict) -> dict:
    """Keep the six schedule entries, cleaned to 'HH:MM'."""
    timings = {}
    for name in SCHEDULE_NAMES:
        raw = raw_timings.get(name)
        if raw:
            timings[name] = clean_time(raw)
    return timings


def _extract_hijri(hijri_data: dict) -> dict:
    return {
        "day": hijri_data["day"],
        "month_name": hijri_data["month"]["en"],
        "month_ar": hijri_data["month"].get("ar", ""),
        "year": hijri_data["year"],
    }


def format_hijri(hijri: dict | None) -> str:
    if not hijri:
        return ""
    return f"{hijri['day']} {hijri['month_name']} {hijri['year']} H"


def fetch_prayer_times(
    lat: float,
    lon: float,
    date: datetime.date = None,
    method: int = DEFAULT_METHOD,
) -> dict:
    """
    Fetch prayer times and Hijri date for given coordinates and date.

    Returns a dict with:
        timings: {prayer_name: "HH:MM"} for the six schedule entries
        hijri: {day, month_name, month_ar, year}  Hijri date components
        gregorian: {date_str, weekday}
    Raises requests.RequestException or PrayerApiError on failure.
    """
    if date is None:
        date = datetime.date.today()
    date_str = date.strftime("%d-%m-%Y")
    data = _get(
        f"{ALADHAN_BASE}/timings/{date_str}",
        {"latitude": lat, "longitude": lon, "method": method},
    )

    timings = _extract_timings(data["timings"])
    missing = [n for n in SCHEDULE_NAMES if n not in timings]
    if missing:
        _LOGGER.warning("Aladhan response missing timings: %s", ", ".join(missing))

    greg_data = data["date"]["gregorian"]
    gregorian = {
        "date_str": greg_data.get("date", date_str),
        "weekday": greg_data.get("weekday", {}).get("en", ""),
    }

    return {
        "timings": timings,
        "hijri": _extract_hijri(data["date"]["hijri"]),
        "gregorian": gregorian,
    }


def fetch_monthly_prayer_times(
    lat: float,
    lon: float,
    year: int = None,
    month: int = None,
    method: int = DEFAULT_METHOD,
) -> list:
    """
    Fetch a whole month of prayer times.

    Returns a list of {date_str, timings, hijri} dicts, one per day.
    """
    today = datetime.date.today()
    year = year or today.year
    month = month or today.month
    data = _get(
        f"{ALADHAN_BASE}/calendar/{year}/{month}",
        {"latitude": lat, "longitude": lon, "method": method},
    )
    days = []
    for entry in data:
        days.append(
            {
                "date_str": entry["date"]["gregorian"]["date"],
                "timings": _extract_timings(entry["timings"]),
                "hijri": _extract_hijri(entry["date"]["hijri"]),
            }
        )
    return days
