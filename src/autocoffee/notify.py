"""User notifications.

Four severities mirror an editor's message channels: a transient success
line, and info, warning and error messages.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections import Counter
from enum import Enum

from rich.console import Console
from rich.markup import escape

__all__ = ["ConsoleNotifier", "Notifier", "Severity"]

logger = logging.getLogger(__name__)


class Severity(str, Enum):
    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


_LOG_LEVELS = {
    Severity.SUCCESS: logging.INFO,
    Severity.INFO: logging.INFO,
    Severity.WARNING: logging.WARNING,
    Severity.ERROR: logging.ERROR,
}


class Notifier(ABC):
    """Channel for messages meant for the user rather than the log."""

    def __init__(self) -> None:
        self.counts: Counter[Severity] = Counter()

    def notify(self, severity: Severity, message: str) -> None:
        self.counts[severity] += 1
        logger.log(_LOG_LEVELS[severity], "%s", message)
        self._show(severity, message)

    @abstractmethod
    def _show(self, severity: Severity, message: str) -> None:
        """Present the message to the user."""

    def success(self, message: str) -> None:
        self.notify(Severity.SUCCESS, message)

    def info(self, message: str) -> None:
        self.notify(Severity.INFO, message)

    def warning(self, message: str) -> None:
        self.notify(Severity.WARNING, message)

    def error(self, message: str) -> None:
        self.notify(Severity.ERROR, message)

    @property
    def error_count(self) -> int:
        return self.counts[Severity.ERROR]


class ConsoleNotifier(Notifier):
    """Prints notifications with Rich markup."""

    _STYLES = {
        Severity.SUCCESS: "[green]✓[/green] {}",
        Severity.INFO: "[blue]ℹ[/blue] {}",
        Severity.WARNING: "[yellow]Warning:[/yellow] {}",
        Severity.ERROR: "[red]Error:[/red] {}",
    }

    def __init__(self, console: Console | None = None) -> None:
        super().__init__()
        self.console = console or Console()

    def _show(self, severity: Severity, message: str) -> None:
        self.console.print(self._STYLES[severity].format(escape(message)), highlight=False)
