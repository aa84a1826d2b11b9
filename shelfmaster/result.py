"""Result pattern for consistent return types in ShelfMaster.

Services never raise for expected business-rule failures (duplicate ids,
unknown users, unpaid fines...). They return a Result instead, which is
truthy on success and falsy on failure.
"""
from dataclasses import dataclass
from typing import Optional, TypeVar, Generic

T = TypeVar('T')


@dataclass
class Result(Generic[T]):
    """Represents the outcome of an operation.

    Attributes:
        success: Whether the operation succeeded.
        value: The return value on success, None on failure.
        error: Error message on failure, None on success.
        error_type: Type/category of error (e.g., "NOT_FOUND", "DUPLICATE").

    Usage:
        result = loan_service.create_loan(user, book)
        if result:
            print(f"Due: {result.value.due_date}")
        else:
            print(f"Error: {result.error}")
    """
    success: bool
    value: Optional[T] = None
    error: Optional[str] = None
    error_type: Optional[str] = None

    @classmethod
    def ok(cls, value: T = None) -> 'Result[T]':
        """Create a successful result."""
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, error: str, error_type: str = None) -> 'Result[T]':
        """Create a failure result.

        Args:
            error: Error message describing what went wrong.
            error_type: Optional error category for programmatic handling.
        """
        return cls(success=False, error=error, error_type=error_type)

    def __bool__(self) -> bool:
        return self.success


# Common error types for consistency
class ErrorType:
    """Standard error type constants."""
    NOT_FOUND = "NOT_FOUND"
    DUPLICATE = "DUPLICATE"
    UNAVAILABLE = "UNAVAILABLE"
    UNPAID_FINE = "UNPAID_FINE"
    OVERDUE = "OVERDUE"
    HAS_OBLIGATIONS = "HAS_OBLIGATIONS"
    VALIDATION = "VALIDATION"
    MALFORMED = "MALFORMED"
