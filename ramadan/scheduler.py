"""One-shot cancellable timers for periodic countdown ticks."""

import threading


class TimerScheduler:
    """
    Schedule callbacks on daemon threading.Timer objects.

    call_later() returns the Timer so the caller can cancel() it.
    """

    def call_later(self, delay: float, callback) -> threading.Timer:
        t = threading.Timer(delay, callback)
        t.daemon = True
        t.start()
        return t
