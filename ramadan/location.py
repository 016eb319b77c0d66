"""Location detection using IP geolocation and manual config."""

import json
import logging
import os

import requests

from ramadan.models import Coordinate

_LOGGER = logging.getLogger(__name__)

DEFAULT_LOCATION = {
    "city": "Istanbul",
    "region": "Istanbul",
    "country": "TR",
    "lat": 41.0082,
    "lon": 28.9784,
    "timezone": "Europe/Istanbul",
}

REQUIRED_KEYS = ("city", "region", "country", "lat", "lon", "timezone")

IPAPI_URL = "http://ip-api.com/json/"

CONFIG_DIR = os.path.join(os.path.expanduser("~"), ".ramadan")
CONFIG_FILE = os.path.join(CONFIG_DIR, "location.json")


def get_location(timeout: int = 5) -> dict:
    """
    Detect current location via IP geolocation.

    Returns a dict with: city, region, country, lat, lon, timezone.
    Falls back to DEFAULT_LOCATION on failure.
    """
    try:
        resp = requests.get(
            IPAPI_URL,
            params={"fields": "city,regionName,country,lat,lon,timezone,status,message"},
            timeout=timeout,
        )
        resp.raise_for_status()
        data = resp.json()
        if data.get("status") == "success":
            return {
                "city": data.get("city", DEFAULT_LOCATION["city"]),
                "region": data.get("regionName", DEFAULT_LOCATION["region"]),
                "country": data.get("country", DEFAULT_LOCATION["country"]),
                "lat": float(data.get("lat", DEFAULT_LOCATION["lat"])),
                "lon": float(data.get("lon", DEFAULT_LOCATION["lon"])),
                "timezone": data.get("timezone", DEFAULT_LOCATION["timezone"]),
            }
        _LOGGER.warning("IP geolocation failed: %s", data.get("message"))
    except Exception as exc:
        _LOGGER.warning("IP geolocation unavailable, using default location: %s", exc)
    return dict(DEFAULT_LOCATION)


def to_coordinate(location: dict) -> Coordinate:
    return Coordinate(latitude=float(location["lat"]), longitude=float(location["lon"]))


def save_manual_location(location: dict) -> None:
    """Save a manually-set location to the config file."""
    os.makedirs(CONFIG_DIR, exist_ok=True)
    with open(CONFIG_FILE, "w", encoding="utf-8") as f:
        json.dump(location, f, indent=2)


def load_manual_location() -> dict | None:
    """Load a previously saved manual location, or return None."""
    if not os.path.isfile(CONFIG_FILE):
        return None
    try:
        with open(CONFIG_FILE, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as exc:
        _LOGGER.warning("Ignoring unreadable location file %s: %s", CONFIG_FILE, exc)
        return None
    if isinstance(data, dict) and all(k in data for k in REQUIRED_KEYS):
        return data
    return None


def clear_manual_location() -> None:
    """Remove the saved manual location config."""
    if os.path.isfile(CONFIG_FILE):
        os.remove(CONFIG_FILE)
