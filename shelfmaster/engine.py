"""Business logic engine for ShelfMaster.

This module provides the LibraryEngine class which acts as a facade over
the focused service classes in shelfmaster/services/. The presentation
layer talks to the engine only.

Service Classes:
    - UserService: Members, fines and unregistration
    - BookService / CDService: Catalog
    - LoanService / CDLoanService: Loan lifecycle
    - ReminderService: Overdue notifications
    - AccountService: Admin and librarian logins
"""
import logging
from datetime import date
from typing import List, Optional, Union

from shelfmaster.data_structures import Book, CD, CDLoan, CatalogItem, Loan, Role, User
from shelfmaster.result import Result, ErrorType
from shelfmaster.services import (
    AccountService, BookService, CDLoanService, CDService, LoanService,
    ReminderService, UserService,
)
from shelfmaster.storage import FileStore

logger = logging.getLogger(__name__)


class LibraryEngine:
    """Orchestrates borrowing, returning, reminders and persistence.

    Attributes:
        store: FileStore instance for data persistence.
        user_service: UserService instance (lazy-loaded).
        book_service: BookService instance (lazy-loaded).
        cd_service: CDService instance (lazy-loaded).
        loan_service: LoanService instance (lazy-loaded).
        cd_loan_service: CDLoanService instance (lazy-loaded).
        reminder_service: ReminderService instance.
    """

    def __init__(self, store: Union[FileStore, str, None] = None, reminder_service: ReminderService = None):
        if store is None or isinstance(store, str):
            store = FileStore(store) if store else FileStore()
        self.store = store
        self._user_service = None
        self._book_service = None
        self._cd_service = None
        self._loan_service = None
        self._cd_loan_service = None
        self._admin_service = None
        self._librarian_service = None
        self.reminder_service = reminder_service or ReminderService()

    @property
    def user_service(self):
        """Lazy-load UserService instance."""
        if self._user_service is None:
            self._user_service = UserService(self.store)
        return self._user_service

    @property
    def book_service(self):
        """Lazy-load BookService instance."""
        if self._book_service is None:
            self._book_service = BookService(self.store)
        return self._book_service

    @property
    def cd_service(self):
        """Lazy-load CDService instance."""
        if self._cd_service is None:
            self._cd_service = CDService(self.store)
        return self._cd_service

    @property
    def loan_service(self):
        """Lazy-load LoanService instance."""
        if self._loan_service is None:
            self._loan_service = LoanService(self.book_service, self.user_service, self.store)
        return self._loan_service

    @property
    def cd_loan_service(self):
        """Lazy-load CDLoanService instance."""
        if self._cd_loan_service is None:
            self._cd_loan_service = CDLoanService(self.cd_service, self.user_service, self.store)
        return self._cd_loan_service

    @property
    def admin_service(self):
        if self._admin_service is None:
            self._admin_service = AccountService(self.store, Role.ADMIN)
        return self._admin_service

    @property
    def librarian_service(self):
        if self._librarian_service is None:
            self._librarian_service = AccountService(self.store, Role.LIBRARIAN)
        return self._librarian_service

    # ---------- Persistence ----------

    def load_all(self) -> dict:
        """Load every data file. Users and catalog must precede the loans.

        Returns:
            Mapping of file name to its ParseReport.
        """
        reports = {
            'users': self.user_service.load_users(),
            'books': self.book_service.load_books(),
            'cds': self.cd_service.load_cds(),
            'loans': self.loan_service.load_loans(),
            'cd_loans': self.cd_loan_service.load_loans(),
            'admins': self.admin_service.load_accounts(),
            'librarians': self.librarian_service.load_accounts(),
        }
        skipped = sum(r.skipped_count for r in reports.values())
        if skipped:
            logger.warning("Skipped %d malformed record(s) while loading", skipped)
        return reports

    def save_all(self) -> None:
        self.user_service.save_users()
        self.book_service.save_books()
        self.cd_service.save_cds()
        self.loan_service.save_loans()
        self.cd_loan_service.save_loans()

    # ---------- Lookups ----------

    def find_user_by_name(self, name: str) -> Optional[User]:
        return self.user_service.find_user_by_name(name)

    def find_book_by_isbn(self, isbn: str) -> Optional[Book]:
        return self.book_service.find_book_by_isbn(isbn)

    def find_cd_by_id(self, cd_id: str) -> Optional[CD]:
        return self.cd_service.find_cd_by_id(cd_id)

    def find_loan_user(self, item: CatalogItem) -> Optional[User]:
        """Return the user currently holding item, or None."""
        service = self.cd_loan_service if isinstance(item, CD) else self.loan_service
        loan = service.find_active_loan(item)
        return loan.user if loan else None

    # ---------- Borrow / Return ----------

    def borrow_book(self, user: Optional[User], book: Optional[Book],
                    borrow_date: Optional[date] = None) -> Result:
        """Lend a book and persist users and books on success.

        Delegates to LoanService.
        """
        result = self.loan_service.create_loan(user, book, borrow_date)
        if result:
            self.book_service.save_books()
            self.user_service.save_users()
        return result

    def return_book(self, user: Optional[User], book: Optional[Book],
                    return_date: Optional[date] = None) -> Result:
        result = self.loan_service.return_loan(user, book, return_date)
        if result:
            self.book_service.save_books()
            self.user_service.save_users()
        return result

    def borrow_cd(self, user: Optional[User], cd: Optional[CD],
                  borrow_date: Optional[date] = None) -> Result:
        """Lend a CD and persist users and CDs on success.

        Delegates to CDLoanService.
        """
        result = self.cd_loan_service.create_cd_loan(user, cd, borrow_date)
        if result:
            self.cd_service.save_cds()
            self.user_service.save_users()
        return result

    def return_cd(self, user: Optional[User], cd: Optional[CD],
                  return_date: Optional[date] = None) -> Result:
        result = self.cd_loan_service.return_cd_loan(user, cd, return_date)
        if result:
            self.cd_service.save_cds()
            self.user_service.save_users()
        return result

    # ---------- Users ----------

    def unregister_user(self, user: Optional[User]) -> Result:
        """Remove a user with no active loans and no outstanding fine."""
        if user is None:
            return Result.fail("User is not registered", ErrorType.NOT_FOUND)
        holds_loan = any(
            l.active and l.user == user
            for l in self.loan_service.get_all_loans() + self.cd_loan_service.get_all_cd_loans()
        )
        if holds_loan:
            return Result.fail(f"User '{user.name}' still holds active loans", ErrorType.HAS_OBLIGATIONS)
        return self.user_service.unregister_user(user)

    # ---------- Overdue ----------

    def get_overdue_loans(self, as_of: Optional[date] = None) -> List[Loan]:
        return self.loan_service.get_overdue_loans(as_of)

    def get_overdue_cd_loans(self, as_of: Optional[date] = None) -> List[CDLoan]:
        return self.cd_loan_service.get_overdue_cd_loans(as_of)

    def total_overdue_items(self, as_of: Optional[date] = None) -> int:
        return len(self.get_overdue_loans(as_of)) + len(self.get_overdue_cd_loans(as_of))

    def send_overdue_reminders(self, as_of: Optional[date] = None) -> bool:
        """Notify every borrower with an overdue book or CD.

        Delegates to ReminderService.
        """
        return self.reminder_service.send_reminders(
            self.get_overdue_loans(as_of), self.get_overdue_cd_loans(as_of), as_of
        )

    # ---------- Listings ----------

    def get_all_users(self) -> List[User]:
        return self.user_service.get_all_users()

    def get_all_books(self) -> List[Book]:
        return self.book_service.get_all_books()

    def get_all_cds(self) -> List[CD]:
        return self.cd_service.get_all_cds()

    def get_all_loans(self) -> List[Loan]:
        return self.loan_service.get_all_loans()

    def get_all_cd_loans(self) -> List[CDLoan]:
        return self.cd_loan_service.get_all_cd_loans()
