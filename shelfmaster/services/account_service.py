"""Staff account service for ShelfMaster.

Administrators and librarians sign in with a name and password. A successful
login returns a Session value which callers pass to privileged operations;
there is no global "logged-in" state.
"""
import logging
from typing import Dict, Iterable, List, Optional

from shelfmaster.config import ADMINS_FILE, FIELD_SEPARATOR, LIBRARIANS_FILE
from shelfmaster.data_structures import Role, Session, StaffAccount
from shelfmaster.records import account_decoder, encode_account, has_separator, parse_lines, ParseReport
from shelfmaster.result import Result, ErrorType

logger = logging.getLogger(__name__)

_FILES = {
    Role.ADMIN: ADMINS_FILE,
    Role.LIBRARIAN: LIBRARIANS_FILE,
}


def require_role(session: Optional[Session], roles: Iterable[Role]) -> bool:
    """Return True if a session exists and its role is one of roles."""
    return session is not None and session.role in set(roles)


class AccountService:
    """Owns the accounts of one staff role, keyed by account id."""

    def __init__(self, store, role: Role):
        self.store = store
        self.role = role
        self.file_name = _FILES[role]
        self._accounts: Dict[int, StaffAccount] = {}

    def add_account(self, account_id: int, name: str, password: str) -> Result:
        if account_id in self._accounts:
            return Result.fail(f"Account id {account_id} already exists", ErrorType.DUPLICATE)
        if not name or not password:
            return Result.fail("Name and password are required", ErrorType.VALIDATION)
        if has_separator(name, password):
            return Result.fail(f"Name and password must not contain '{FIELD_SEPARATOR}'", ErrorType.VALIDATION)
        account = StaffAccount(self.role, account_id, name, password)
        self._accounts[account_id] = account
        self.save_accounts()
        logger.info("Added %s account %s", self.role.value.lower(), name)
        return Result.ok(account)

    def get_all_accounts(self) -> List[StaffAccount]:
        return list(self._accounts.values())

    def login(self, name: str, password: str) -> Optional[Session]:
        """Return a Session if the credentials match an account, else None."""
        for account in self._accounts.values():
            if account.matches(name, password):
                logger.info("%s %s signed in", self.role.value.title(), name)
                return Session(self.role, account.account_id, account.name)
        logger.info("Failed %s login for %s", self.role.value.lower(), name)
        return None

    def logout(self, session: Optional[Session]) -> None:
        """Sessions are plain values; logging out only records the event."""
        if session is not None:
            logger.info("%s %s signed out", session.role.value.title(), session.name)

    # ---------- Persistence ----------

    def save_accounts(self) -> None:
        self.store.write_lines(self.file_name, [encode_account(a) for a in self._accounts.values()])

    def load_accounts(self) -> ParseReport:
        report = parse_lines(self.store.read_lines(self.file_name), account_decoder(self.role), self.file_name)
        self._accounts.clear()
        for account in report.records:
            self._accounts.setdefault(account.account_id, account)
        logger.info("Loaded %d %s account(s)", len(self._accounts), self.role.value.lower())
        return report
