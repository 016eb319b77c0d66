#!/usr/bin/env python3
"""
Ramadan Companion console runner
Shows for the current location:
  - Gregorian + Hijri date
  - Daily prayer times and the next prayer
  - Countdown to iftar (Maghrib), then to imsak (Fajr) once iftar has passed
  - Qibla bearing and distance to the Kaaba
  - Desktop reminders before each prayer
"""

import argparse
import datetime
import logging
import signal
import sys
import time

import pytz

from ramadan.fasting_day import FastingDay
from ramadan.location import get_location, load_manual_location, to_coordinate
from ramadan.notifier import CountdownNotification, cancel_reminders
from ramadan.prayer_api import PRAYER_DISPLAY, fetch_prayer_times, format_hijri
from ramadan.qibla import bearing_result
from ramadan.settings import load_settings
from ramadan.time_resolver import SCHEDULE_NAMES

_LOGGER = logging.getLogger("ramadan")


def _parse_args(argv):
    parser = argparse.ArgumentParser(description="Iftar/imsak countdown and qibla direction.")
    parser.add_argument("--lat", type=float, help="observer latitude (decimal degrees)")
    parser.add_argument("--lon", type=float, help="observer longitude (decimal degrees)")
    parser.add_argument("--timezone", help="IANA timezone name, e.g. Europe/Istanbul")
    parser.add_argument("--method", type=int, help="Aladhan calculation method id")
    parser.add_argument("--once", action="store_true", help="print a single snapshot and exit")
    parser.add_argument("--no-reminders", action="store_true", help="do not schedule desktop reminders")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(argv)


def _resolve_location(args) -> dict:
    if args.lat is not None and args.lon is not None:
        return {
            "city": "Custom",
            "region": "",
            "country": "",
            "lat": args.lat,
            "lon": args.lon,
            "timezone": args.timezone or "UTC",
        }
    location = load_manual_location() or get_location()
    if args.timezone:
        location["timezone"] = args.timezone
    return location


def _zone(name: str):
    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError:
        _LOGGER.warning("Unknown timezone %r, using UTC", name)
        return pytz.utc


def _print_header(location, result, tz):
    now = datetime.datetime.now(tz)
    print(f"📍 {location['city']}, {location['region']}, {location['country']}")
    print(f"📅 {now.strftime('%A, %d %B %Y')}")
    hijri = format_hijri(result.get("hijri"))
    if hijri:
        print(f"☪  {hijri}")
    print()
    for name in SCHEDULE_NAMES:
        print(f"  {PRAYER_DISPLAY[name]:<18} {result['timings'].get(name, '--:--')}")
    print()

    qibla = bearing_result(to_coordinate(location))
    print(
        f"🕋 Qibla {qibla.initial_bearing_degrees:.1f}° from north, "
        f"{qibla.distance_km:,.0f} km to the Kaaba"
    )


def _status_line(day: FastingDay) -> str:
    parts = []
    nxt = day.next_prayer()
    if nxt is not None:
        parts.append(f"next {PRAYER_DISPLAY.get(nxt.name, nxt.name)} {nxt.instant.strftime('%H:%M')}")
    if day.break_fast.is_complete:
        parts.append("iftar passed")
    else:
        parts.append(f"iftar {day.break_fast.formatted_time}")
    if day.show_pre_dawn:
        parts.append(f"imsak {day.pre_dawn.formatted_time}")
    return " | ".join(parts)


def main(argv=None):
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    settings = load_settings()
    method = args.method or settings.calculation_method
    location = _resolve_location(args)
    tz = _zone(location["timezone"])

    try:
        today = datetime.datetime.now(tz).date()
        result = fetch_prayer_times(location["lat"], location["lon"], today, method)
    except Exception as exc:
        _LOGGER.error("Could not load prayer times: %s", exc)
        result = {"timings": {}, "hijri": None}

    _print_header(location, result, tz)

    def clock():
        return datetime.datetime.now(tz)

    # a one-shot snapshot never gets to dismiss a popup
    sink = None if args.once else CountdownNotification()
    day = FastingDay(
        result["timings"],
        clock=clock,
        hijri=result.get("hijri"),
        sink=sink,
        settings=settings,
        on_break_fast=lambda: print("\n🌇 Iftar time!"),
    )

    if args.once:
        day.tick()
        print(_status_line(day))
        return 0

    timers = [] if args.no_reminders else day.schedule_reminders()
    if hasattr(signal, "SIGCONT"):
        signal.signal(signal.SIGCONT, lambda signum, frame: day.resume())

    day.start()
    try:
        while True:
            if clock().date() != today:
                today = clock().date()
                try:
                    fresh = fetch_prayer_times(location["lat"], location["lon"], today, method)
                    day.refresh(fresh["timings"], fresh.get("hijri"))
                    if not args.no_reminders:
                        cancel_reminders(timers)
                        timers = day.schedule_reminders()
                except Exception as exc:
                    _LOGGER.warning("Could not refresh prayer times: %s", exc)
            sys.stdout.write("\r" + _status_line(day).ljust(72))
            sys.stdout.flush()
            time.sleep(1)
    except KeyboardInterrupt:
        print()
    finally:
        day.stop()
        cancel_reminders(timers)
    return 0


if __name__ == "__main__":
    sys.exit(main())
