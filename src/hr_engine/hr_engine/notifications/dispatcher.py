from __future__ import annotations

import logging
from typing import Optional, Protocol

from ..core.enums import NotificationKind

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """Outbound notification delivery (in-app, email, ...)."""

    def notify(self, user_id: int, title: str, message: str, kind: NotificationKind) -> None:
        raise NotImplementedError


class LoggingNotifier:
    """Default notifier: writes notifications to the log."""

    def notify(self, user_id: int, title: str, message: str, kind: NotificationKind) -> None:
        logger.info("notify user=%s kind=%s title=%r message=%r", user_id, kind.value, title, message)


class NotificationDispatcher:
    """Fire-and-forget wrapper around a Notifier.

    Delivery failures are logged and never reach the caller, so a committed
    operation is not undone by a notification problem.
    """

    def __init__(self, notifier: Optional[Notifier] = None, *, enabled: bool = True):
        self._notifier = notifier or LoggingNotifier()
        self._enabled = enabled

    def dispatch(self, user_id: Optional[int], title: str, message: str, kind: NotificationKind) -> bool:
        if not self._enabled or user_id is None:
            return False
        try:
            self._notifier.notify(int(user_id), title, message, kind)
        except Exception:
            logger.warning("Notification %r to user %s failed", title, user_id, exc_info=True)
            return False
        return True
