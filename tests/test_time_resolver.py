"""Tests for the time_resolver module."""

import datetime
import unittest

import pytz

from ramadan.models import TimeOfDay
from ramadan.time_resolver import (
    PLACEHOLDER,
    PRAYER_ORDER,
    MalformedTimeFormat,
    MissingScheduleEntry,
    NoUpcomingEvent,
    TimeResolutionError,
    clean_time,
    find_next_event,
    format_remaining,
    parse_time_of_day,
    remaining,
    resolve_break_fast_instant,
    resolve_pre_dawn_instant,
    to_instant,
)

TIMINGS = {
    "Fajr": "05:00",
    "Dhuhr": "12:30",
    "Asr": "15:45",
    "Maghrib": "18:20",
    "Isha": "19:50",
}


def _at(hour, minute=0, second=0, day=1, tz=pytz.utc):
    return tz.localize(datetime.datetime(2025, 3, day, hour, minute, second))


class TestParseTimeOfDay(unittest.TestCase):
    def test_parses_plain_time(self):
        self.assertEqual(parse_time_of_day("05:07"), TimeOfDay(5, 7))

    def test_strips_timezone_annotation(self):
        self.assertEqual(parse_time_of_day("18:15 (+03)"), TimeOfDay(18, 15))
        self.assertEqual(clean_time("04:30 (PKT)"), "04:30")

    def test_ignores_seconds(self):
        self.assertEqual(parse_time_of_day("23:59:30"), TimeOfDay(23, 59))

    def test_rejects_garbage(self):
        for raw in ("", "noon", "12", "ab:cd", "12:xx", "-1:30", "²:30", "1²:30", "12:٣٠"):
            with self.subTest(raw=raw):
                with self.assertRaises(MalformedTimeFormat):
                    parse_time_of_day(raw)

    def test_rejects_out_of_range(self):
        for raw in ("24:00", "12:60", "99:99"):
            with self.subTest(raw=raw):
                with self.assertRaises(MalformedTimeFormat):
                    parse_time_of_day(raw)

    def test_error_taxonomy(self):
        self.assertTrue(issubclass(MalformedTimeFormat, ValueError))
        self.assertTrue(issubclass(MissingScheduleEntry, TimeResolutionError))
        self.assertTrue(issubclass(NoUpcomingEvent, LookupError))


class TestToInstant(unittest.TestCase):
    def test_round_trip_hour_minute(self):
        ref = _at(9, 41, 27)
        for raw in ("00:00", "05:00", "12:30", "23:59"):
            with self.subTest(raw=raw):
                t = parse_time_of_day(raw)
                dt = to_instant(t, ref)
                self.assertEqual(dt.strftime("%H:%M"), raw)
                self.assertEqual(dt.second, 0)
                self.assertEqual(dt.microsecond, 0)
                self.assertEqual(dt.date(), ref.date())

    def test_naive_reference(self):
        dt = to_instant(TimeOfDay(18, 15), datetime.date(2025, 3, 1))
        self.assertEqual(dt, datetime.datetime(2025, 3, 1, 18, 15))
        self.assertIsNone(dt.tzinfo)

    def test_localizes_in_pytz_zone_across_dst(self):
        tz = pytz.timezone("Europe/Berlin")
        # Reference taken in winter time, target day is in summer time
        ref = tz.localize(datetime.datetime(2025, 3, 29, 12, 0))
        summer_day = datetime.datetime.combine(
            datetime.date(2025, 3, 31), datetime.time(), tzinfo=ref.tzinfo
        )
        dt = to_instant(TimeOfDay(12, 0), summer_day)
        self.assertEqual(dt.utcoffset(), datetime.timedelta(hours=2))


class TestRemaining(unittest.TestCase):
    def test_zero_at_same_instant(self):
        now = _at(10)
        r = remaining(now, now)
        self.assertEqual(r.total_seconds, 0)
        self.assertFalse(r.is_past)
        self.assertEqual((r.hours, r.minutes, r.seconds), (0, 0, 0))

    def test_past_target_magnitude(self):
        t1 = _at(10)
        t2 = t1 + datetime.timedelta(hours=2, minutes=3, seconds=4)
        r = remaining(t1, t2)
        self.assertTrue(r.is_past)
        self.assertEqual(r.total_seconds, -7384)
        self.assertEqual(r.hours * 3600 + r.minutes * 60 + r.seconds, 7384)

    def test_one_second_either_side_has_same_magnitude(self):
        now = _at(10)
        ahead = remaining(now + datetime.timedelta(seconds=1), now)
        behind = remaining(now - datetime.timedelta(seconds=1), now)
        self.assertEqual((ahead.hours, ahead.minutes, ahead.seconds), (0, 0, 1))
        self.assertEqual((behind.hours, behind.minutes, behind.seconds), (0, 0, 1))
        self.assertFalse(ahead.is_past)
        self.assertTrue(behind.is_past)

    def test_format_remaining(self):
        now = _at(10)
        r = remaining(now + datetime.timedelta(hours=13, minutes=5, seconds=9), now)
        self.assertEqual(format_remaining(r), "13:05:09")
        self.assertEqual(format_remaining(None), PLACEHOLDER)


class TestFindNextEvent(unittest.TestCase):
    def test_wraps_to_tomorrow_fajr_after_isha(self):
        event = find_next_event(TIMINGS, PRAYER_ORDER, _at(20))
        self.assertEqual(event.name, "Fajr")
        self.assertEqual(event.instant, _at(5, day=2))

    def test_returns_dhuhr_at_noon(self):
        event = find_next_event(TIMINGS, PRAYER_ORDER, _at(12))
        self.assertEqual(event.name, "Dhuhr")
        self.assertEqual(event.instant, _at(12, 30))

    def test_event_at_exactly_now_is_not_next(self):
        event = find_next_event(TIMINGS, PRAYER_ORDER, _at(12, 30))
        self.assertEqual(event.name, "Asr")

    def test_skips_missing_and_malformed_entries(self):
        timings = dict(TIMINGS, Dhuhr="bad")
        del timings["Asr"]
        event = find_next_event(timings, PRAYER_ORDER, _at(12))
        self.assertEqual(event.name, "Maghrib")

    def test_non_ascii_digits_do_not_escape_as_value_error(self):
        timings = dict(TIMINGS, Dhuhr="1²:30", Maghrib="1⁸:20")
        event = find_next_event(timings, PRAYER_ORDER, _at(12))
        self.assertEqual(event.name, "Asr")
        self.assertIsNone(resolve_break_fast_instant(timings, _at(12)))
        self.assertIsNone(resolve_pre_dawn_instant({"Fajr": "⁰5:00"}, _at(12)))

    def test_none_when_first_name_missing(self):
        timings = {"Dhuhr": "12:30"}
        self.assertIsNone(find_next_event(timings, PRAYER_ORDER, _at(20)))
        self.assertIsNone(find_next_event({}, PRAYER_ORDER, _at(20)))
        self.assertIsNone(find_next_event(None, PRAYER_ORDER, _at(20)))


class TestBreakFastAndPreDawn(unittest.TestCase):
    def test_break_fast_today_before_sunset(self):
        self.assertEqual(resolve_break_fast_instant(TIMINGS, _at(17)), _at(18, 20))

    def test_break_fast_tomorrow_after_sunset(self):
        self.assertEqual(resolve_break_fast_instant(TIMINGS, _at(19)), _at(18, 20, day=2))

    def test_break_fast_tomorrow_at_exact_sunset(self):
        self.assertEqual(resolve_break_fast_instant(TIMINGS, _at(18, 20)), _at(18, 20, day=2))

    def test_break_fast_missing(self):
        self.assertIsNone(resolve_break_fast_instant({"Fajr": "05:00"}, _at(12)))

    def test_pre_dawn_has_no_rollover(self):
        self.assertEqual(resolve_pre_dawn_instant(TIMINGS, _at(20)), _at(5))

    def test_pre_dawn_missing_or_malformed(self):
        self.assertIsNone(resolve_pre_dawn_instant({}, _at(20)))
        self.assertIsNone(resolve_pre_dawn_instant({"Fajr": "5am"}, _at(20)))


if __name__ == "__main__":
    unittest.main()
