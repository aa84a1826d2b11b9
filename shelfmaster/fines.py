"""Fine policy for overdue loans: one daily rate per item type."""
from enum import Enum

from shelfmaster.config import BOOK_FINE_PER_DAY, CD_FINE_PER_DAY


class FineKind(Enum):
    """Fine rule selected per loan type."""
    BOOK = "book"
    CD = "cd"

    @property
    def rate_per_day(self) -> int:
        return _RATES[self]

    def calculate(self, overdue_days: int) -> int:
        """Return the fine owed for the given number of overdue days.

        Args:
            overdue_days: Days past the due date (negative values count as 0).

        Returns:
            Fine amount in whole currency units.
        """
        return max(overdue_days, 0) * self.rate_per_day


_RATES = {
    FineKind.BOOK: BOOK_FINE_PER_DAY,
    FineKind.CD: CD_FINE_PER_DAY,
}
