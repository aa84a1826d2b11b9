"""CD loan service for ShelfMaster.

CD loans follow the same lifecycle as book loans, with a 7 day period and
the CD fine rate. The CD loan file is rewritten in full on every change.
"""
from datetime import date
from typing import List, Optional

from shelfmaster.config import CD_LOANS_FILE
from shelfmaster.data_structures import CD, CDLoan, User
from shelfmaster.records import decode_cd_loan
from shelfmaster.result import Result

from .loan_service import BaseLoanService


class CDLoanService(BaseLoanService):
    """Handles CD loans."""

    file_name = CD_LOANS_FILE
    loan_class = CDLoan

    def __init__(self, cd_service, user_service, store=None):
        super().__init__(cd_service, user_service, store)

    def _find_item(self, item_id):
        return self.catalog.find_cd_by_id(item_id)

    def _borrow(self, user, item, borrow_date):
        return user.borrow_cd(item, borrow_date)

    def _decode(self, line):
        return decode_cd_loan(line)

    def create_cd_loan(self, user: Optional[User], cd: Optional[CD],
                       borrow_date: Optional[date] = None) -> Result:
        """Lend a CD to a user; same rules as book loans."""
        return self._create(user, cd, borrow_date)

    def return_cd_loan(self, user: Optional[User], cd: Optional[CD],
                       return_date: Optional[date] = None) -> Result:
        return self._return(user, cd, return_date)

    def get_overdue_cd_loans(self, as_of: Optional[date] = None) -> List[CDLoan]:
        return self.get_overdue(as_of)

    def get_all_cd_loans(self) -> List[CDLoan]:
        return self.get_all()
