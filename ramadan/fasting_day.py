"""One day of fasting: iftar and imsak countdowns over a fetched schedule."""

import datetime
import logging

from ramadan import notifier
from ramadan.countdown import CountdownEngine
from ramadan.models import ResolvedEvent
from ramadan.prayer_api import PRAYER_DISPLAY
from ramadan.settings import Settings
from ramadan.time_resolver import (
    FAJR,
    MAGHRIB,
    PRAYER_ORDER,
    find_next_event,
    remaining,
    resolve_break_fast_instant,
    resolve_pre_dawn_instant,
)

_LOGGER = logging.getLogger(__name__)


class FastingDay:
    """
    Owns the break-fast and pre-dawn countdowns for one NamedSchedule.

    The break-fast countdown mirrors into the notification sink. The
    pre-dawn countdown points at today's Fajr until the break-fast event
    has passed, then at tomorrow's.
    """

    def __init__(
        self,
        schedule: dict,
        *,
        clock,
        hijri=None,
        sink=None,
        settings: Settings | None = None,
        scheduler=None,
        on_break_fast=None,
    ):
        self.schedule = dict(schedule or {})
        self.hijri = hijri
        self.settings = settings or Settings()
        self._clock = clock
        self._on_break_fast = on_break_fast
        self.break_fast_passed = False

        self.break_fast = CountdownEngine(
            clock=clock,
            scheduler=scheduler,
            sink=sink,
            show_notification=True,
            on_complete=self._break_fast_completed,
            settings=self.settings,
            name="iftar",
        )
        self.pre_dawn = CountdownEngine(
            clock=clock,
            scheduler=scheduler,
            settings=self.settings,
            name="imsak",
        )
        self._resolve_targets()

    def _resolve_targets(self) -> None:
        now = self._clock()
        todays = resolve_break_fast_instant(self.schedule, now)
        # resolve_break_fast_instant rolls to tomorrow once today's has passed
        self.break_fast_passed = todays is not None and todays.date() > now.date()
        self.break_fast.set_target(todays)
        self.pre_dawn.set_target(self._pre_dawn_target(now))

    def _pre_dawn_target(self, now: datetime.datetime):
        if self.break_fast_passed:
            now = now + datetime.timedelta(days=1)
        return resolve_pre_dawn_instant(self.schedule, now)

    def _break_fast_completed(self) -> None:
        self.break_fast_passed = True
        self.pre_dawn.set_target(self._pre_dawn_target(self._clock()))
        if self._on_break_fast:
            self._on_break_fast()

    @property
    def show_pre_dawn(self) -> bool:
        """The imsak countdown is shown once iftar has passed."""
        return self.break_fast_passed and self.pre_dawn.target is not None

    def next_prayer(self, now: datetime.datetime | None = None) -> ResolvedEvent | None:
        return find_next_event(self.schedule, PRAYER_ORDER, now or self._clock())

    # ── lifecycle ────────────────────────────────────────────────────────
    def start(self) -> None:
        self.break_fast.start()
        self.pre_dawn.start()

    def stop(self) -> None:
        self.break_fast.stop()
        self.pre_dawn.stop()

    def resume(self) -> None:
        self.break_fast.resume()
        self.pre_dawn.resume()

    def tick(self) -> None:
        now = self._clock()
        self.break_fast.tick(now)
        self.pre_dawn.tick(now)

    def refresh(self, schedule: dict, hijri=None) -> None:
        """Swap in a newly fetched schedule (e.g. after midnight)."""
        self.schedule = dict(schedule or {})
        if hijri is not None:
            self.hijri = hijri
        self._resolve_targets()

    def update_settings(self, settings: Settings) -> None:
        self.settings = settings
        self.break_fast.update_settings(settings)
        self.pre_dawn.update_settings(settings)

    # ── reminders ────────────────────────────────────────────────────────
    def schedule_reminders(self, callback=None) -> list:
        """Schedule desktop reminders for every upcoming event today."""
        now = self._clock()
        s = self.settings
        timers = []
        for name in PRAYER_ORDER:
            event = find_next_event(self.schedule, [name], now)
            if event is None or event.instant.date() != now.date():
                continue
            wants = s.prayer_notifications
            if name == MAGHRIB:
                wants = wants or s.iftar_notification
            elif name == FAJR:
                wants = wants or s.imsak_notification
            if not wants:
                continue
            secs = remaining(event.instant, now).total_seconds
            timers.extend(
                notifier.schedule_reminders(
                    PRAYER_DISPLAY.get(name, name),
                    secs,
                    minutes_before=(s.notifications_before,),
                    gui_callback=callback,
                )
            )
        _LOGGER.debug("Scheduled %d reminder timers", len(timers))
        return timers
