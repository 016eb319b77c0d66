"""Once-per-second countdown to a single target instant."""

import datetime
import logging
import threading

from ramadan.models import CountdownPhase, CountdownState
from ramadan.scheduler import TimerScheduler
from ramadan.settings import Settings
from ramadan.time_resolver import format_remaining, remaining

_LOGGER = logging.getLogger(__name__)

TICK_SECONDS = 1.0


def _system_clock() -> datetime.datetime:
    return datetime.datetime.now().astimezone()


class CountdownEngine:
    """
    Track the time left until one target instant.

    The completion callback fires once per crossing of the target, on the
    tick where the remaining time first goes negative (a remaining time of
    exactly zero still counts as upcoming). A new future target re-arms it.

    When show_notification is set and the settings snapshot allows it, each
    tick before the crossing pushes "HH:MM:SS" to the notification sink.
    The sink is dismissed once at the crossing and once more on stop().
    Sink and callback errors are logged and never reach the tick.
    """

    def __init__(
        self,
        target: datetime.datetime | None = None,
        *,
        clock=None,
        scheduler=None,
        sink=None,
        show_notification: bool = False,
        on_complete=None,
        settings: Settings | None = None,
        interval: float = TICK_SECONDS,
        name: str = "countdown",
    ):
        self.name = name
        self.state = CountdownState(target_instant=target)
        if target is not None:
            self.state.phase = CountdownPhase.COUNTING
        self._clock = clock or _system_clock
        self._scheduler = scheduler or TimerScheduler()
        self._sink = sink
        self._show_notification = show_notification
        self._on_complete = on_complete
        self._settings = settings or Settings()
        self._interval = interval

        self._lock = threading.RLock()
        self._running = False
        self._pending = None
        self._generation = 0
        self._last_tick_second = None

    # ── read-only views ──────────────────────────────────────────────────
    @property
    def running(self) -> bool:
        return self._running

    @property
    def phase(self) -> CountdownPhase:
        return self.state.phase

    @property
    def target(self) -> datetime.datetime | None:
        return self.state.target_instant

    @property
    def remaining(self):
        return self.state.remaining

    @property
    def is_complete(self) -> bool:
        return self.state.has_completed_once

    @property
    def formatted_time(self) -> str:
        return format_remaining(self.state.remaining)

    # ── configuration ────────────────────────────────────────────────────
    def update_settings(self, settings: Settings) -> None:
        self._settings = settings

    def set_target(self, target: datetime.datetime | None) -> None:
        """Replace the target; a new future target re-arms completion."""
        with self._lock:
            if target == self.state.target_instant:
                return
            self.state.target_instant = target
            if target is None:
                self.state.remaining = None
                self.state.phase = CountdownPhase.IDLE
            elif target >= self._clock():
                self.state.has_completed_once = False
                self.state.phase = CountdownPhase.COUNTING
            running = self._running
        if running:
            self._run_tick()

    # ── lifecycle ────────────────────────────────────────────────────────
    def start(self) -> None:
        """Tick once now, then once per interval until stop()."""
        with self._lock:
            if self._running:
                return
            self._running = True
            self._generation += 1
            generation = self._generation
        _LOGGER.debug("%s: started", self.name)
        self._run_tick()
        self._schedule_next(generation)

    def stop(self) -> None:
        """Cancel the pending tick; dismiss the mirrored notification once."""
        with self._lock:
            if not self._running:
                return
            self._running = False
            pending, self._pending = self._pending, None
        if pending is not None:
            pending.cancel()
        _LOGGER.debug("%s: stopped", self.name)
        if self._show_notification:
            self._dismiss()

    def resume(self) -> None:
        """Force a tick when the host comes back to the foreground."""
        if not self._running:
            return
        self._run_tick(dedupe=True)

    # ── ticking ──────────────────────────────────────────────────────────
    def _schedule_next(self, generation: int) -> None:
        with self._lock:
            if not self._running or generation != self._generation:
                return
            self._pending = self._scheduler.call_later(
                self._interval, lambda: self._on_timer(generation)
            )

    def _on_timer(self, generation: int) -> None:
        # a timer from before the last stop()/start() must not fork a second chain
        with self._lock:
            if not self._running or generation != self._generation:
                return
            self._pending = None
        self._run_tick(dedupe=True)
        self._schedule_next(generation)

    def _run_tick(self, dedupe: bool = False) -> None:
        with self._lock:
            if dedupe and not self._running:
                return
            now = self._clock()
            second = int(now.timestamp())
            if dedupe and second == self._last_tick_second:
                return
            self._last_tick_second = second
            self.tick(now)

    def tick(self, now: datetime.datetime | None = None) -> None:
        """Recompute the remaining time and fire edge-triggered side effects."""
        with self._lock:
            state = self.state
            if state.target_instant is None:
                state.remaining = None
                state.phase = CountdownPhase.IDLE
                return
            try:
                if now is None:
                    now = self._clock()
                value = remaining(state.target_instant, now)
            except Exception:
                _LOGGER.exception("%s: cannot compute remaining time, dropping target", self.name)
                state.target_instant = None
                state.remaining = None
                state.phase = CountdownPhase.IDLE
                return

            state.remaining = value
            if value.is_past:
                if not state.has_completed_once:
                    state.has_completed_once = True
                    state.phase = CountdownPhase.JUST_COMPLETED
                    _LOGGER.info("%s: target %s reached", self.name, state.target_instant)
                    self._fire_complete()
                    self._dismiss()
                else:
                    state.phase = CountdownPhase.POST_COMPLETION
                return

            if state.has_completed_once:
                state.has_completed_once = False
            state.phase = CountdownPhase.COUNTING
            if self._show_notification and self._settings.countdown_notification:
                self._update(format_remaining(value))

    # ── side channel ─────────────────────────────────────────────────────
    def _fire_complete(self) -> None:
        if self._on_complete is None:
            return
        try:
            self._on_complete()
        except Exception:
            _LOGGER.exception("%s: completion callback failed", self.name)

    def _update(self, text: str) -> None:
        if self._sink is None:
            return
        try:
            self._sink.update(text)
        except Exception as exc:
            _LOGGER.warning("%s: notification update failed: %s", self.name, exc)

    def _dismiss(self) -> None:
        if self._sink is None:
            return
        try:
            self._sink.dismiss()
        except Exception as exc:
            _LOGGER.warning("%s: notification dismiss failed: %s", self.name, exc)
