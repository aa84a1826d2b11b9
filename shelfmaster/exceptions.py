"""Custom exceptions for ShelfMaster."""


class ShelfMasterError(Exception):
    """Base exception for all ShelfMaster errors."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


class StorageError(ShelfMasterError):
    """Raised when reading or writing a data file fails."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Storage failure on '{path}': {reason}", {'path': path})


class LoanRuleError(ShelfMasterError):
    """Base class for borrowing rule violations raised by the domain layer."""
    pass


class ItemUnavailableError(LoanRuleError):
    """Raised when borrowing an item that is already out on loan."""

    def __init__(self, item_id: str, title: str = None):
        details = {'item_id': item_id}
        message = f"Item '{item_id}' is already borrowed"
        if title:
            details['title'] = title
            message = f"'{title}' ({item_id}) is already borrowed"
        super().__init__(message, details)


class UnpaidFineError(LoanRuleError):
    """Raised when a user with an outstanding fine tries to borrow."""

    def __init__(self, user_name: str, balance: float):
        details = {
            'user': user_name,
            'balance': balance
        }
        message = f"Cannot borrow: '{user_name}' has unpaid fines ({balance})"
        super().__init__(message, details)


class OverdueItemHeldError(LoanRuleError):
    """Raised when a user holding an overdue item tries to borrow."""

    def __init__(self, user_name: str, overdue_count: int):
        details = {
            'user': user_name,
            'overdue_count': overdue_count
        }
        message = f"Cannot borrow: '{user_name}' holds {overdue_count} overdue item(s)"
        super().__init__(message, details)
