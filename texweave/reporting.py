"""User-facing progress reporting.

Components never print directly. They call ``Reporter.report`` with a level,
a context (usually a path relative to the source root) and a message, and the
CLI decides how that is rendered.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Protocol, runtime_checkable

from rich.console import Console
from rich.markup import escape

logger = logging.getLogger(__name__)


class Level(str, Enum):
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


@runtime_checkable
class Reporter(Protocol):
    """Anything that can surface a progress or failure message to the user."""

    def report(self, level: Level, context: str, message: str) -> None:
        ...


_TAG_STYLES: dict[Level, str] = {
    Level.INFO: "bold reverse cyan",
    Level.WARN: "bold reverse yellow",
    Level.ERROR: "bold reverse red",
}


class ConsoleReporter:
    """Renders reports as tagged lines on a rich console.

    Errors go to stderr, everything else to stdout.
    """

    def __init__(self, console: Console | None = None, err_console: Console | None = None) -> None:
        self.console = console or Console(highlight=False)
        self.err_console = err_console or Console(stderr=True, highlight=False)

    def report(self, level: Level, context: str, message: str) -> None:
        tag = f"[{_TAG_STYLES[level]}]{level.value.upper()}[/]"
        target = f" [bold]{escape(context)}[/bold]:" if context else ""
        line = f"{tag}{target} {escape(message)}"
        if level is Level.ERROR:
            self.err_console.print(line)
        else:
            self.console.print(line)


class NullReporter:
    """Discards user-facing reports but keeps them in the debug log."""

    def report(self, level: Level, context: str, message: str) -> None:
        logger.debug("%s %s: %s", level.value, context, message)
