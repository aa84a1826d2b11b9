"""Reminder service for ShelfMaster.

Notification channels register with the service; every reminder is pushed
to all of them.
"""
import logging
from datetime import date
from typing import Iterable, List, Optional

from shelfmaster.config import DATE_FORMAT_STORAGE, REMINDER_TEMPLATE
from shelfmaster.data_structures import Loan
from shelfmaster.notifications import NotificationChannel

logger = logging.getLogger(__name__)


class ReminderService:
    """Sends overdue reminders to registered notification channels."""

    def __init__(self):
        self._channels: List[NotificationChannel] = []

    @property
    def channels(self) -> List[NotificationChannel]:
        return list(self._channels)

    def add_channel(self, channel: Optional[NotificationChannel]) -> bool:
        """Register a channel. Returns False for None or an already registered channel."""
        if channel is None or channel in self._channels:
            return False
        self._channels.append(channel)
        return True

    def remove_channel(self, channel: NotificationChannel) -> bool:
        if channel not in self._channels:
            return False
        self._channels.remove(channel)
        return True

    @staticmethod
    def compose_message(loan: Loan, as_of: Optional[date] = None) -> str:
        return REMINDER_TEMPLATE.format(
            count=loan.user.overdue_count(as_of),
            title=loan.item.title,
            due_date=loan.due_date.strftime(DATE_FORMAT_STORAGE),
        )

    def send_reminders(self, overdue_loans: Iterable[Loan], overdue_cd_loans: Iterable[Loan] = (),
                       as_of: Optional[date] = None) -> bool:
        """Notify the borrower of every overdue loan through every channel.

        Args:
            overdue_loans: Overdue book loans.
            overdue_cd_loans: Overdue CD loans.
            as_of: Date used to count each user's overdue items (default: today).

        Returns:
            False if there was nothing to send, True otherwise.
        """
        loans = list(overdue_loans) + list(overdue_cd_loans)
        if not loans:
            return False
        for loan in loans:
            message = self.compose_message(loan, as_of)
            for channel in self._channels:
                channel.notify(loan.user, message)
        logger.info("Sent %d reminder(s) through %d channel(s)", len(loans), len(self._channels))
        return True
