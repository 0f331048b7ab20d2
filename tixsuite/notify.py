"""
Design (notify.py)
- Purpose: Toast channel. One active notification at a time; showing a new one supersedes
           the old one and restarts the dismissal timer (TOAST_DURATION_SEC).
- Inputs: message + kind from TicketLedger / UI.
- Outputs: Subscribers are called with the new Notification, or None when it is dismissed.
- Side effects: Starts a threading.Timer per notification; desktop_notifier() forwards to plyer.
- Thread-safety: State is guarded by a lock; subscribers run on the caller's or timer's thread
                 (UI subscribers must marshal to the Tk thread themselves).
"""

import itertools
import logging
import threading
from typing import Callable, List, Optional

from plyer import notification as desktop_notification

from .config import APP_TITLE, DESKTOP_NOTIFY_TIMEOUT_SEC, TOAST_DURATION_SEC
from .models import Notification

logger = logging.getLogger(__name__)

Subscriber = Callable[[Optional[Notification]], None]

KINDS = ("success", "error", "warning", "info")


class Notifier:
    """
    Design (Notifier)
    - State:
        _current: active Notification or None
        _timer: dismissal timer of _current (cancelled when superseded or hidden)
        _subscribers: callbacks notified on every change
    - timer_factory: threading.Timer by default; tests pass a manual timer.
    """

    def __init__(self, duration_sec: float = TOAST_DURATION_SEC, timer_factory=threading.Timer) -> None:
        self.duration_sec = duration_sec
        self._timer_factory = timer_factory
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._current: Optional[Notification] = None
        self._timer = None
        self._subscribers: List[Subscriber] = []

    @property
    def current(self) -> Optional[Notification]:
        with self._lock:
            return self._current

    def subscribe(self, callback: Subscriber) -> None:
        with self._lock:
            self._subscribers.append(callback)

    def show(self, message: str, kind: str = "info") -> Notification:
        """
        Purpose: Publish a notification, replacing the current one.
        Side effects: Cancels the previous timer; starts a new dismissal timer.
        """
        if kind not in KINDS:
            kind = "info"
        with self._lock:
            note = Notification(id=next(self._ids), message=message, kind=kind)
            self._cancel_timer()
            self._current = note
            timer = self._timer_factory(self.duration_sec, self._expire, args=(note.id,))
            timer.daemon = True
            self._timer = timer
            timer.start()
        log = logger.warning if kind in ("error", "warning") else logger.info
        log("[%s] %s", kind, message)
        self._publish(note)
        return note

    def hide(self) -> None:
        with self._lock:
            self._cancel_timer()
            had_note = self._current is not None
            self._current = None
        if had_note:
            self._publish(None)

    def close(self) -> None:
        """Cancel any pending timer (app shutdown)."""
        with self._lock:
            self._cancel_timer()

    def _expire(self, note_id: int) -> None:
        # A superseded notification's timer must not hide its successor
        with self._lock:
            if self._current is None or self._current.id != note_id:
                return
            self._current = None
            self._timer = None
        self._publish(None)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _publish(self, note: Optional[Notification]) -> None:
        with self._lock:
            subscribers = list(self._subscribers)
        for callback in subscribers:
            try:
                callback(note)
            except Exception:
                logger.exception("Notification subscriber failed")


def desktop_notifier(enabled: Callable[[], bool], timeout: int = DESKTOP_NOTIFY_TIMEOUT_SEC) -> Subscriber:
    """
    Purpose: Build a Notifier subscriber that mirrors toasts as OS notifications via plyer.
    Inputs: enabled() checked on every notification (UI checkbox), timeout in seconds.
    """

    def _forward(note: Optional[Notification]) -> None:
        if note is None or not enabled():
            return
        try:
            desktop_notification.notify(title=APP_TITLE, message=note.message, timeout=timeout)
        except (NotImplementedError, OSError) as exc:
            logger.debug("Desktop notification unavailable: %s", exc)

    return _forward
