"""User-facing notifications."""

from __future__ import annotations

import logging
from typing import Optional, Protocol

from rich.console import Console

from .settings import APP_NAME

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """One-way channel for informational and error messages."""

    def info(self, message: str) -> None:
        ...

    def error(self, message: str) -> None:
        ...


class ConsoleNotifier:
    """Print notifications to a rich console, prefixed with the app name."""

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console()

    def info(self, message: str) -> None:
        logger.debug(f"info: {message}")
        self._print(message, "green")

    def error(self, message: str) -> None:
        logger.debug(f"error: {message}")
        self._print(message, "red")

    def _print(self, message: str, style: str) -> None:
        # Git output may contain [brackets]; print it verbatim, not as markup
        self.console.print(
            f"{APP_NAME}: {message}",
            style=style,
            markup=False,
            highlight=False,
            soft_wrap=True,
        )
