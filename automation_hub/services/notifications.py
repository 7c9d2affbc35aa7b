"""Notification sinks for run outcomes."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Protocol


class Severity(str, Enum):
    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class NotificationSink(Protocol):
    def show(self, message: str, severity: Severity) -> None:  # pragma: no cover - protocol
        ...


_LEVELS = {
    Severity.SUCCESS: logging.INFO,
    Severity.INFO: logging.INFO,
    Severity.WARNING: logging.WARNING,
    Severity.ERROR: logging.ERROR,
}


def notify(sink: NotificationSink | None, message: str, severity: Severity) -> None:
    """Send ``message`` to ``sink`` if there is one; a failing sink is logged, never raised."""
    if sink is None:
        return
    try:
        sink.show(message, severity)
    except Exception:
        logging.getLogger(__name__).exception("Notification sink failed")


class LoggingNotificationSink:
    """Writes notifications to the ``automation_hub.notifications`` logger."""

    def __init__(self, logger: logging.Logger | None = None):
        self._logger = logger or logging.getLogger("automation_hub.notifications")

    def show(self, message: str, severity: Severity) -> None:
        severity = Severity(severity)
        self._logger.log(_LEVELS[severity], "[%s] %s", severity.value, message)


@dataclass(frozen=True)
class Notification:
    message: str
    severity: Severity


class CollectingNotificationSink:
    """Keeps every notification in memory, newest last."""

    def __init__(self) -> None:
        self.notifications: List[Notification] = []

    def show(self, message: str, severity: Severity) -> None:
        self.notifications.append(Notification(message=message, severity=Severity(severity)))

    @property
    def last(self) -> Notification | None:
        return self.notifications[-1] if self.notifications else None

    def clear(self) -> None:
        self.notifications.clear()


__all__ = [
    "CollectingNotificationSink",
    "LoggingNotificationSink",
    "Notification",
    "NotificationSink",
    "Severity",
    "notify",
]
