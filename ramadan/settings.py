"""User preferences persisted to a small JSON config file."""

import dataclasses
import json
import logging
import os
from dataclasses import dataclass

_LOGGER = logging.getLogger(__name__)

CONFIG_DIR = os.path.join(os.path.expanduser("~"), ".ramadan")
SETTINGS_FILE = os.path.join(CONFIG_DIR, "settings.json")

# Aladhan calculation method ids
CALCULATION_METHODS = {
    "karachi": 1,
    "isna": 2,
    "mwl": 3,
    "makkah": 4,
    "egypt": 5,
    "diyanet": 13,
}
DEFAULT_METHOD = CALCULATION_METHODS["diyanet"]


@dataclass(frozen=True)
class Settings:
    """Read-only snapshot handed to the countdown engines and reminders."""

    calculation_method: int = DEFAULT_METHOD
    notifications_before: int = 15  # minutes
    iftar_notification: bool = True
    imsak_notification: bool = True
    prayer_notifications: bool = True
    countdown_notification: bool = True


def load_settings() -> Settings:
    """Load saved settings; unknown keys are ignored, a bad file gives defaults."""
    if not os.path.isfile(SETTINGS_FILE):
        return Settings()
    try:
        with open(SETTINGS_FILE, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as exc:
        _LOGGER.warning("Ignoring unreadable settings file %s: %s", SETTINGS_FILE, exc)
        return Settings()
    if not isinstance(data, dict):
        return Settings()
    known = {f.name for f in dataclasses.fields(Settings)}
    return Settings(**{k: v for k, v in data.items() if k in known})


def save_settings(settings: Settings) -> None:
    os.makedirs(CONFIG_DIR, exist_ok=True)
    with open(SETTINGS_FILE, "w", encoding="utf-8") as f:
        json.dump(dataclasses.asdict(settings), f, indent=2)


def reset_settings() -> Settings:
    """Remove the saved settings and return the defaults."""
    if os.path.isfile(SETTINGS_FILE):
        os.remove(SETTINGS_FILE)
    return Settings()
