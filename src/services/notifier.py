# src/services/notifier.py

"""Delivery of price alert notifications."""

import logging
from typing import Protocol

from rich.console import Console
from rich.panel import Panel

from src.services.alert_evaluator import NotificationRequest

logger = logging.getLogger("buying_list.notifier")


class Notifier(Protocol):
    """Anything that can show a notification request to the user."""

    def notify(self, request: NotificationRequest) -> None: ...


class ConsoleNotifier:
    """Log the alert and print it as a panel on stderr."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console(stderr=True)

    def notify(self, request: NotificationRequest) -> None:
        logger.info("Notification: %s", request.message.replace("\n", " | "))
        self.console.print(
            Panel(
                request.message,
                title="Price alert",
                border_style="green",
                expand=False,
            )
        )
