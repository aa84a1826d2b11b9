"""Loan lifecycle service for ShelfMaster.

This service handles book loan operations including:
- Loan creation (with fine and overdue checks)
- Returns, charging any overdue fine to the borrower
- Overdue queries
- Persistence of the loan file
"""
import logging
from datetime import date
from typing import List, Optional

from shelfmaster.config import LOANS_FILE
from shelfmaster.data_structures import Book, CatalogItem, Loan, User
from shelfmaster.exceptions import ItemUnavailableError, UnpaidFineError, OverdueItemHeldError
from shelfmaster.records import decode_loan, encode_loan, parse_lines, ParseReport
from shelfmaster.result import Result, ErrorType

logger = logging.getLogger(__name__)


class BaseLoanService:
    """Shared loan bookkeeping for one kind of catalog item.

    Loans are kept for the lifetime of the service; returning a loan only
    flags it inactive so that history survives a save/load round-trip.
    """

    file_name: str = ""
    loan_class = Loan

    def __init__(self, catalog_service, user_service, store=None):
        """Initialize the service.

        Args:
            catalog_service: Service owning the items this service lends.
            user_service: UserService used to resolve borrowers.
            store: FileStore instance; defaults to the user service's store.
        """
        self.catalog = catalog_service
        self.users = user_service
        self.store = store if store is not None else user_service.store
        self._loans: List[Loan] = []

    # ---------- Hooks ----------

    def _find_item(self, item_id: str) -> Optional[CatalogItem]:
        raise NotImplementedError

    def _borrow(self, user: User, item: CatalogItem, borrow_date: Optional[date]) -> Loan:
        raise NotImplementedError

    def _decode(self, line: str):
        raise NotImplementedError

    def _persist_new(self, loan: Loan) -> None:
        self.save_loans()

    # ---------- Lifecycle ----------

    def _create(self, user: Optional[User], item: Optional[CatalogItem],
                borrow_date: Optional[date] = None) -> Result:
        if user is None or not self.users.contains(user):
            return Result.fail("User is not registered", ErrorType.NOT_FOUND)
        if item is None or not self.catalog.contains(item):
            return Result.fail("Item is not in the catalog", ErrorType.NOT_FOUND)

        try:
            loan = self._borrow(user, item, borrow_date)
        except UnpaidFineError as e:
            logger.debug("Loan refused: %s", e)
            return Result.fail(e.message, ErrorType.UNPAID_FINE)
        except OverdueItemHeldError as e:
            logger.debug("Loan refused: %s", e)
            return Result.fail(e.message, ErrorType.OVERDUE)
        except ItemUnavailableError as e:
            logger.debug("Loan refused: %s", e)
            return Result.fail(e.message, ErrorType.UNAVAILABLE)

        self._loans.append(loan)
        self._persist_new(loan)
        logger.info("%s lent '%s' to %s, due %s",
                    item.ITEM_TYPE, item.title, user.name, loan.due_date)
        return Result.ok(loan)

    def _return(self, user: Optional[User], item: Optional[CatalogItem],
                return_date: Optional[date] = None) -> Result:
        if user is None or item is None:
            return Result.fail("User and item are required", ErrorType.VALIDATION)
        loan = next(
            (l for l in self._loans if l.active and l.user == user and l.item is item),
            None,
        )
        if loan is None:
            return Result.fail(
                f"No active loan of '{item.title}' for '{user.name}'", ErrorType.NOT_FOUND
            )

        fine = loan.calculate_fine(return_date)
        loan.user.return_loan(loan)
        if fine:
            loan.user.charge_fine(fine)
            self.users.save_users()
            logger.info("Charged %s a fine of %s for '%s'", user.name, fine, item.title)
        self.save_loans()
        logger.info("%s '%s' returned by %s", item.ITEM_TYPE, item.title, user.name)
        return Result.ok(loan)

    # ---------- Queries ----------

    def find_active_loan(self, item: CatalogItem) -> Optional[Loan]:
        return next((l for l in self._loans if l.active and l.item is item), None)

    def get_overdue(self, as_of: Optional[date] = None) -> List[Loan]:
        return [l for l in self._loans if l.is_overdue(as_of)]

    def get_all(self) -> List[Loan]:
        return list(self._loans)

    # ---------- Persistence ----------

    def save_loans(self) -> None:
        self.store.write_lines(self.file_name, [encode_loan(l) for l in self._loans])

    def load_loans(self) -> ParseReport:
        """Replace the in-memory loans with the loan file.

        Records referring to an unknown user or item are dropped, as is a
        second active loan for an item that is already out.
        """
        report = parse_lines(self.store.read_lines(self.file_name), self._decode, self.file_name)
        self._loans.clear()
        for record in report.records:
            user = self.users.find_user_by_name(record.user_name)
            item = self._find_item(record.item_id)
            if user is None or item is None:
                logger.warning("Dropping loan of %s to %s: unknown reference",
                               record.item_id, record.user_name)
                continue
            if record.active and self.find_active_loan(item) is not None:
                logger.warning("Dropping duplicate active loan of %s", record.item_id)
                continue
            loan = self.loan_class.restore(
                user, item, record.borrow_date, record.due_date, record.active
            )
            self._loans.append(loan)
            user.attach_loan(loan)
        logger.info("Loaded %d loans from %s", len(self._loans), self.file_name)
        return report


class LoanService(BaseLoanService):
    """Handles book loans. New loans are appended to the loan file."""

    file_name = LOANS_FILE
    loan_class = Loan

    def __init__(self, book_service, user_service, store=None):
        super().__init__(book_service, user_service, store)

    def _find_item(self, item_id):
        return self.catalog.find_book_by_isbn(item_id)

    def _borrow(self, user, item, borrow_date):
        return user.borrow_book(item, borrow_date)

    def _decode(self, line):
        return decode_loan(line)

    def _persist_new(self, loan):
        self.store.append_line(self.file_name, encode_loan(loan))

    def create_loan(self, user: Optional[User], book: Optional[Book],
                    borrow_date: Optional[date] = None) -> Result:
        """Lend a book to a user.

        A loan is rejected (falsy Result) if the user or book is unknown,
        the user has unpaid fines or an overdue item, or the book is out.

        Args:
            user: Registered borrower.
            book: Book from the catalog.
            borrow_date: Loan start date (default: today).

        Returns:
            Result holding the new Loan.
        """
        return self._create(user, book, borrow_date)

    def return_loan(self, user: Optional[User], book: Optional[Book],
                    return_date: Optional[date] = None) -> Result:
        """Close the user's active loan of the book.

        Any fine accrued up to return_date is added to the user's balance.
        """
        return self._return(user, book, return_date)

    def get_overdue_loans(self, as_of: Optional[date] = None) -> List[Loan]:
        return self.get_overdue(as_of)

    def get_all_loans(self) -> List[Loan]:
        return self.get_all()
