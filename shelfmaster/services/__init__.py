"""Services package for ShelfMaster business logic.

This package contains focused service classes, each owning one collection,
which the LibraryEngine facade wires together.
"""

from .user_service import UserService
from .catalog_service import BookService, CDService
from .loan_service import LoanService
from .cd_loan_service import CDLoanService
from .reminder_service import ReminderService
from .account_service import AccountService, require_role

__all__ = ['UserService', 'BookService', 'CDService', 'LoanService', 'CDLoanService',
           'ReminderService', 'AccountService', 'require_role']
