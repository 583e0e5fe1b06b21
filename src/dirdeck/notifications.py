"""Notification sinks that observe workflow outcomes."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol

from rich.console import Console
from rich.text import Text

LOGGER = logging.getLogger(__name__)


class Severity(str, Enum):
    """Severity attached to each notification."""

    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class Notification:
    message: str
    severity: Severity


class NotificationSink(Protocol):
    """Receives one event per completed or failed workflow."""

    def notify(self, message: str, severity: Severity) -> None: ...


class RecordingSink:
    """Keep notifications in memory, in arrival order."""

    def __init__(self) -> None:
        self.notifications: list[Notification] = []

    def notify(self, message: str, severity: Severity) -> None:
        self.notifications.append(Notification(message=message, severity=Severity(severity)))

    @property
    def messages(self) -> list[str]:
        return [item.message for item in self.notifications]

    @property
    def last(self) -> Optional[Notification]:
        return self.notifications[-1] if self.notifications else None

    def as_payload(self) -> list[dict[str, str]]:
        return [
            {"message": item.message, "severity": item.severity.value}
            for item in self.notifications
        ]


_STYLES = {
    Severity.INFO: "cyan",
    Severity.SUCCESS: "green",
    Severity.WARNING: "yellow",
    Severity.ERROR: "red",
}


class ConsoleSink:
    """Print notifications to a rich console.

    Messages can embed file names, so they are rendered as plain ``Text``
    rather than being parsed as console markup. Quiet mode hides info and
    success messages; warnings and errors are always shown.
    """

    def __init__(self, console: Console, *, quiet: bool = False) -> None:
        self._console = console
        self._quiet = quiet

    def notify(self, message: str, severity: Severity) -> None:
        severity = Severity(severity)
        LOGGER.debug("notification [%s] %s", severity.value, message)
        if self._quiet and severity in (Severity.INFO, Severity.SUCCESS):
            return
        self._console.print(Text(message, style=_STYLES[severity]))


__all__ = ["ConsoleSink", "Notification", "NotificationSink", "RecordingSink", "Severity"]
