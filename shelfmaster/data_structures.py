"""Domain records for ShelfMaster: catalog items, loans, users and staff.

Catalog items and loans carry the borrowing rules (availability, due dates,
overdue checks, fines). The User ledger gates new borrowing on unpaid fines
and overdue holdings. These classes raise LoanRuleError subclasses on rule
violations; the service layer turns those into Result values.
"""
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import ClassVar, List, Optional

from dateutil.relativedelta import relativedelta

from shelfmaster.config import BOOK_LOAN_DAYS, CD_LOAN_DAYS
from shelfmaster.exceptions import ItemUnavailableError, UnpaidFineError, OverdueItemHeldError
from shelfmaster.fines import FineKind


def _today(as_of: Optional[date]) -> date:
    return as_of if as_of is not None else date.today()


# =============================================================================
# CATALOG
# =============================================================================

class CatalogItem:
    """Borrow/return behaviour shared by books and CDs.

    Subclasses are dataclasses providing ``title``, ``available``,
    ``borrow_date`` and ``due_date`` plus an ``item_id`` property.
    """

    LOAN_DAYS: ClassVar[int] = 0
    ITEM_TYPE: ClassVar[str] = "Item"

    @property
    def item_id(self) -> str:
        raise NotImplementedError

    @property
    def is_borrowed(self) -> bool:
        return not self.available

    def borrow(self, borrow_date: Optional[date] = None) -> None:
        """Mark the item as borrowed from borrow_date for LOAN_DAYS days.

        Raises:
            ItemUnavailableError: If the item is already out.
        """
        if not self.available:
            raise ItemUnavailableError(self.item_id, self.title)
        borrow_date = _today(borrow_date)
        self.available = False
        self.borrow_date = borrow_date
        self.due_date = borrow_date + relativedelta(days=self.LOAN_DAYS)

    def return_item(self) -> None:
        self.available = True
        self.borrow_date = None
        self.due_date = None

    def restore(self, available: bool, borrow_date: Optional[date], due_date: Optional[date]) -> None:
        """Apply persisted state loaded from file."""
        if available:
            self.return_item()
            return
        self.available = False
        self.borrow_date = borrow_date
        if due_date is None and borrow_date is not None:
            due_date = borrow_date + relativedelta(days=self.LOAN_DAYS)
        self.due_date = due_date

    def is_overdue(self, as_of: Optional[date] = None) -> bool:
        return self.due_date is not None and _today(as_of) > self.due_date

    def remaining_days(self, as_of: Optional[date] = None) -> int:
        """Days left until the due date (negative when late, 0 when on the shelf)."""
        if self.due_date is None:
            return 0
        return (self.due_date - _today(as_of)).days


@dataclass(eq=False)
class Book(CatalogItem):
    """A book, lent for 28 days."""
    title: str
    author: str
    isbn: str
    available: bool = True
    borrow_date: Optional[date] = None
    due_date: Optional[date] = None

    LOAN_DAYS: ClassVar[int] = BOOK_LOAN_DAYS
    ITEM_TYPE: ClassVar[str] = "Book"

    @property
    def item_id(self) -> str:
        return self.isbn

    @property
    def creator(self) -> str:
        return self.author


@dataclass(eq=False)
class CD(CatalogItem):
    """A CD, lent for 7 days."""
    title: str
    artist: str
    cd_id: str
    available: bool = True
    borrow_date: Optional[date] = None
    due_date: Optional[date] = None

    LOAN_DAYS: ClassVar[int] = CD_LOAN_DAYS
    ITEM_TYPE: ClassVar[str] = "CD"

    @property
    def item_id(self) -> str:
        return self.cd_id

    @property
    def creator(self) -> str:
        return self.artist


# =============================================================================
# LOANS
# =============================================================================

class Loan:
    """A loan of a single book to a user.

    The due date is derived from the borrow date when the loan is opened.
    A loan is closed exactly once, by return_item().
    """

    fine_kind: ClassVar[FineKind] = FineKind.BOOK

    def __init__(self, user: 'User', book: Book, borrow_date: Optional[date] = None):
        if not book.available:
            raise ItemUnavailableError(book.item_id, book.title)
        self._open(user, book, borrow_date)

    def _open(self, user, item, borrow_date):
        item.borrow(_today(borrow_date))
        self.user = user
        self.item = item
        self.borrow_date = item.borrow_date
        self.due_date = item.due_date
        self.active = True

    @classmethod
    def restore(cls, user: 'User', item: CatalogItem, borrow_date: date, due_date: date,
                active: bool = True) -> 'Loan':
        """Rebuild a persisted loan without re-running the borrow rules.

        An active loan also brings the item's state in line with the loan dates.
        """
        loan = cls.__new__(cls)
        loan.user = user
        loan.item = item
        loan.borrow_date = borrow_date
        loan.due_date = due_date
        loan.active = active
        if active:
            item.restore(False, borrow_date, due_date)
        return loan

    @property
    def book(self) -> Book:
        return self.item

    def return_item(self) -> bool:
        """Close the loan and release the item. Returns False if already closed."""
        if not self.active:
            return False
        self.active = False
        self.item.return_item()
        return True

    def is_overdue(self, as_of: Optional[date] = None) -> bool:
        return self.active and self.due_date is not None and _today(as_of) > self.due_date

    def overdue_days(self, as_of: Optional[date] = None) -> int:
        as_of = _today(as_of)
        if not self.is_overdue(as_of):
            return 0
        return (as_of - self.due_date).days

    def calculate_fine(self, as_of: Optional[date] = None) -> int:
        return self.fine_kind.calculate(self.overdue_days(as_of))

    def __repr__(self):
        return (f"{type(self).__name__}(user={self.user.name!r}, item={self.item.title!r}, "
                f"borrow={self.borrow_date}, due={self.due_date}, active={self.active})")


class CDLoan(Loan):
    """A loan of a single CD; borrowing the CD is a side effect of opening it."""

    fine_kind: ClassVar[FineKind] = FineKind.CD

    def __init__(self, user: 'User', cd: CD, borrow_date: Optional[date] = None):
        self._open(user, cd, borrow_date)

    @property
    def cd(self) -> CD:
        return self.item


# =============================================================================
# USERS
# =============================================================================

@dataclass(eq=False)
class User:
    """A library member and their running ledger of loans and fines.

    Users are identified by name, compared case-insensitively.
    """
    name: str
    email: Optional[str] = None
    fine_balance: float = 0.0
    active_loans: List[Loan] = field(default_factory=list)
    active_cd_loans: List[CDLoan] = field(default_factory=list)

    def __eq__(self, other):
        if not isinstance(other, User):
            return NotImplemented
        return self.name.lower() == other.name.lower()

    def __hash__(self):
        return hash(self.name.lower())

    @property
    def key(self) -> str:
        return self.name.lower()

    @property
    def held_items(self) -> List[CatalogItem]:
        return [loan.item for loan in self.active_loans + self.active_cd_loans]

    # ---------- Borrowing rules ----------

    def ensure_can_borrow(self, as_of: Optional[date] = None) -> None:
        """Raise if the user may not start a new loan.

        Raises:
            UnpaidFineError: If the fine balance is above zero.
            OverdueItemHeldError: If any held item is overdue.
        """
        if self.fine_balance > 0:
            raise UnpaidFineError(self.name, self.fine_balance)
        overdue = self.overdue_count(as_of)
        if overdue:
            raise OverdueItemHeldError(self.name, overdue)

    def can_borrow(self, as_of: Optional[date] = None) -> bool:
        return self.fine_balance <= 0 and not self.has_overdue_items(as_of)

    def has_overdue_items(self, as_of: Optional[date] = None) -> bool:
        return self.overdue_count(as_of) > 0

    def overdue_count(self, as_of: Optional[date] = None) -> int:
        return sum(1 for loan in self.active_loans + self.active_cd_loans if loan.is_overdue(as_of))

    def borrow_book(self, book: Book, borrow_date: Optional[date] = None) -> Loan:
        """Open a book loan for this user.

        The borrow date is also the date the eligibility rules are checked
        against, so a backdated loan sees the holdings as they were that day.
        """
        self.ensure_can_borrow(borrow_date)
        loan = Loan(self, book, borrow_date)
        self.active_loans.append(loan)
        return loan

    def borrow_cd(self, cd: CD, borrow_date: Optional[date] = None) -> CDLoan:
        """Open a CD loan for this user; checked as of borrow_date like borrow_book."""
        self.ensure_can_borrow(borrow_date)
        loan = CDLoan(self, cd, borrow_date)
        self.active_cd_loans.append(loan)
        return loan

    def attach_loan(self, loan: Loan) -> None:
        """Track a restored active loan without re-checking the borrowing rules."""
        held = self.active_cd_loans if isinstance(loan, CDLoan) else self.active_loans
        if loan.active and loan not in held:
            held.append(loan)

    # ---------- Returning ----------

    def return_book(self, book: Book) -> Optional[Loan]:
        return self._return_from(self.active_loans, book)

    def return_cd(self, cd: CD) -> Optional[CDLoan]:
        return self._return_from(self.active_cd_loans, cd)

    def return_loan(self, loan: Loan) -> None:
        held = self.active_cd_loans if isinstance(loan, CDLoan) else self.active_loans
        if loan in held:
            held.remove(loan)
        loan.return_item()

    def _return_from(self, held, item):
        loan = next((l for l in held if l.item is item), None)
        if loan is None:
            return None
        held.remove(loan)
        loan.return_item()
        return loan

    # ---------- Fines ----------

    def charge_fine(self, amount: float) -> None:
        if amount < 0:
            raise ValueError(f"Fine amount must not be negative: {amount}")
        self.fine_balance += amount

    def pay_fine(self, amount: float) -> None:
        """Pay part or all of the outstanding fine; overpayment clears it."""
        if amount < 0:
            raise ValueError(f"Payment must not be negative: {amount}")
        if amount >= self.fine_balance:
            self.fine_balance = 0.0
        else:
            self.fine_balance -= amount

    def can_be_unregistered(self) -> bool:
        """True when the user holds nothing that is still out and owes nothing."""
        holds_unavailable = any(not item.available for item in self.held_items)
        return not holds_unavailable and self.fine_balance <= 0


# =============================================================================
# STAFF ACCOUNTS
# =============================================================================

class Role(Enum):
    ADMIN = "ADMIN"
    LIBRARIAN = "LIBRARIAN"


@dataclass
class StaffAccount:
    """An administrator or librarian login."""
    role: Role
    account_id: int
    name: str
    password: str

    def matches(self, name: str, password: str) -> bool:
        return self.name == name and self.password == password


@dataclass(frozen=True)
class Session:
    """The signed-in principal, passed explicitly to privileged operations."""
    role: Role
    account_id: int
    name: str
