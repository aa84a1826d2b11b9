"""User service for ShelfMaster.

This service handles member registration, lookup, fine payments,
borrowing eligibility and unregistration, and persists the user file.
"""
import logging
from datetime import date
from typing import Dict, List, Optional

from shelfmaster.config import FIELD_SEPARATOR, USERS_FILE
from shelfmaster.data_structures import User
from shelfmaster.records import decode_user, encode_user, has_separator, parse_lines, ParseReport
from shelfmaster.result import Result, ErrorType

logger = logging.getLogger(__name__)


class UserService:
    """Owns the collection of registered users, keyed by lower-cased name."""

    def __init__(self, store):
        """Initialize UserService.

        Args:
            store: FileStore instance for data persistence.
        """
        self.store = store
        self._users: Dict[str, User] = {}

    def add_user(self, name: str, email: Optional[str] = None) -> Result:
        """Register a new user.

        Args:
            name: User name, unique regardless of case.
            email: Contact address, may be None.

        Returns:
            Result holding the new User, or a DUPLICATE/VALIDATION failure.
        """
        if not name or not name.strip():
            return Result.fail("User name is required", ErrorType.VALIDATION)
        name = name.strip()
        if has_separator(name, email):
            return Result.fail(f"Name and email must not contain '{FIELD_SEPARATOR}'", ErrorType.VALIDATION)
        if name.lower() in self._users:
            logger.debug("Rejected duplicate user %s", name)
            return Result.fail(f"User '{name}' already exists", ErrorType.DUPLICATE)
        user = User(name, email)
        self._users[user.key] = user
        self.save_users()
        logger.info("Registered user %s", name)
        return Result.ok(user)

    def find_user_by_name(self, name: Optional[str]) -> Optional[User]:
        if name is None:
            return None
        return self._users.get(name.strip().lower())

    def contains(self, user: User) -> bool:
        return self._users.get(user.key) is user

    def get_all_users(self) -> List[User]:
        return list(self._users.values())

    def can_borrow(self, user: Optional[User], as_of: Optional[date] = None) -> bool:
        if user is None:
            return False
        return user.can_borrow(as_of)

    def pay_fine(self, user: Optional[User], amount: float) -> Result:
        """Apply a payment to the user's fine balance.

        Returns:
            Result holding the remaining balance.
        """
        if amount < 0:
            return Result.fail("Payment must not be negative", ErrorType.VALIDATION)
        if user is None or not self.contains(user):
            return Result.fail("User is not registered", ErrorType.NOT_FOUND)
        user.pay_fine(amount)
        self.save_users()
        logger.info("User %s paid %s, balance now %s", user.name, amount, user.fine_balance)
        return Result.ok(user.fine_balance)

    def unregister_user(self, user: Optional[User]) -> Result:
        """Remove a user who holds no active loans and owes nothing."""
        if user is None or not self.contains(user):
            return Result.fail("User is not registered", ErrorType.NOT_FOUND)
        if not user.can_be_unregistered():
            logger.debug("Refused to unregister %s", user.name)
            return Result.fail(
                f"User '{user.name}' still has active loans or unpaid fines",
                ErrorType.HAS_OBLIGATIONS,
            )
        del self._users[user.key]
        self.save_users()
        logger.info("Unregistered user %s", user.name)
        return Result.ok(user)

    # ---------- Persistence ----------

    def save_users(self) -> None:
        self.store.write_lines(USERS_FILE, [encode_user(u) for u in self._users.values()])

    def load_users(self) -> ParseReport:
        """Replace the in-memory users with the content of the user file."""
        report = parse_lines(self.store.read_lines(USERS_FILE), decode_user, USERS_FILE)
        self._users.clear()
        for user in report.records:
            self._users.setdefault(user.key, user)
        logger.info("Loaded %d users", len(self._users))
        return report
