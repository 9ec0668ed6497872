"""Notification sinks for user-facing status messages."""

from __future__ import annotations

import logging
from typing import Protocol


class Notifier(Protocol):
    """Fire-and-forget sink for toast-style messages."""

    def notify(self, title: str, description: str, variant: str = "default") -> None:
        ...


class LoggingNotifier:
    """Write notifications to the application log."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or logging.getLogger("phixo_studio.notifications")

    def notify(self, title: str, description: str, variant: str = "default") -> None:
        level = logging.WARNING if variant == "destructive" else logging.INFO
        self.logger.log(level, "%s: %s", title, description)
