"""Notification channels used by the reminder service."""
import logging
from abc import ABC, abstractmethod
from typing import List, Tuple

from shelfmaster.data_structures import User

logger = logging.getLogger(__name__)


class NotificationChannel(ABC):
    """A destination for reminder messages (email, SMS, console...)."""

    @abstractmethod
    def notify(self, user: User, message: str) -> None:
        """Deliver message to user."""


class LogNotifier(NotificationChannel):
    """Writes reminders to the application log instead of delivering them."""

    def __init__(self, level: int = logging.INFO):
        self.level = level

    def notify(self, user: User, message: str) -> None:
        recipient = user.email or user.name
        logger.log(self.level, "Reminder to %s: %s", recipient, message)


class RecordingNotifier(NotificationChannel):
    """Keeps every message in memory; handy for previews and tests."""

    def __init__(self):
        self.sent: List[Tuple[str, str]] = []

    def notify(self, user: User, message: str) -> None:
        self.sent.append((user.name, message))

    @property
    def messages(self) -> List[str]:
        return [f"To {name}: {message}" for name, message in self.sent]
