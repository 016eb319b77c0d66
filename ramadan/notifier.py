"""Desktop notifications: the persistent iftar countdown and prayer reminders."""

import logging
import threading

from plyer import notification as plyer_notification

_LOGGER = logging.getLogger(__name__)

APP_NAME = "Ramadan Companion"
APP_ICON = ""  # Path to icon file; empty = default

COUNTDOWN_NOTIFICATION_ID = "iftar-countdown"


def _send_plyer(title: str, message: str, timeout: int = 10) -> None:
    """Send a desktop notification via plyer (cross-platform)."""
    try:
        kwargs = dict(
            app_name=APP_NAME,
            title=title,
            message=message,
            timeout=timeout,
        )
        if APP_ICON:
            kwargs["app_icon"] = APP_ICON
        plyer_notification.notify(**kwargs)
    except Exception as exc:
        _LOGGER.warning("Desktop notification failed: %s", exc)


def _send_plyer_async(title: str, message: str, timeout: int = 10) -> threading.Thread:
    """Send via plyer on a daemon thread; dbus or notify-send may block."""
    t = threading.Thread(target=_send_plyer, args=(title, message, timeout), daemon=True)
    t.start()
    return t


class CountdownNotification:
    """
    The single countdown notification, keyed by COUNTDOWN_NOTIFICATION_ID.

    update() replaces the shown text instead of stacking a new notification:
    the desktop popup is raised once when the countdown first appears and
    later updates only refresh the display callback. dismiss() is a no-op
    when nothing is shown. The popup is sent off the caller's thread.
    """

    identifier = COUNTDOWN_NOTIFICATION_ID

    def __init__(self, title: str = "Time until iftar", display=None):
        self.title = title
        self._display = display
        self._lock = threading.Lock()
        self.current = None

    @property
    def active(self) -> bool:
        return self.current is not None

    def update(self, time_str: str) -> None:
        with self._lock:
            first = self.current is None
            self.current = time_str
        if first:
            _send_plyer_async(self.title, time_str, timeout=10)
        if self._display:
            self._display(self.identifier, time_str)

    def dismiss(self) -> None:
        with self._lock:
            if self.current is None:
                return
            self.current = None
        if self._display:
            self._display(self.identifier, None)


def notify_reminder(prayer_display_name: str, minutes: int, callback=None) -> None:
    """
    Send a desktop notification for a reminder N minutes before an event.
    Optionally calls callback(title, message).
    """
    title = f"{prayer_display_name} in {minutes} minutes"
    message = f"{prayer_display_name} starts in {minutes} minutes. Get ready."
    _send_plyer(title, message, timeout=15)
    if callback:
        callback(title, message)


def notify_prayer_time(prayer_display_name: str, callback=None) -> None:
    """
    Send a desktop notification when the event time arrives.
    Optionally calls callback(title, message).
    """
    title = f"{prayer_display_name} time"
    message = f"It is now time for {prayer_display_name}."
    _send_plyer(title, message, timeout=30)
    if callback:
        callback(title, message)


def schedule_reminders(
    prayer_display_name: str,
    seconds_until_event: int,
    minutes_before=(15,),
    gui_callback=None,
) -> list:
    """
    Schedule a reminder for each entry of minutes_before and an alert
    exactly at the event time. Reminders already in the past are skipped.

    Returns list of Timer objects so they can be cancelled if needed.
    """
    timers = []

    for remind_minutes in sorted(set(minutes_before), reverse=True):
        if remind_minutes <= 0:
            continue
        delay = seconds_until_event - remind_minutes * 60
        if delay > 0:
            t = threading.Timer(
                delay,
                notify_reminder,
                args=(prayer_display_name, remind_minutes, gui_callback),
            )
            t.daemon = True
            t.start()
            timers.append(t)

    if seconds_until_event > 0:
        t = threading.Timer(
            seconds_until_event,
            notify_prayer_time,
            args=(prayer_display_name, gui_callback),
        )
        t.daemon = True
        t.start()
        timers.append(t)

    return timers


def cancel_reminders(timers: list) -> None:
    for t in timers:
        t.cancel()
