"""Line codecs for the flat data files.

Each record type has an encoder producing one comma-separated line and a
decoder returning a Result. Decoding is lenient: a line that cannot be read
produces a failed Result and is reported as skipped by parse_lines(), never
raised.
"""
import logging
import math
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Callable, Generic, List, Optional, Tuple, TypeVar

from shelfmaster.config import DATE_FORMAT_STORAGE, FIELD_SEPARATOR, NULL_LITERAL
from shelfmaster.data_structures import Book, CD, Loan, Role, StaffAccount, User
from shelfmaster.result import Result, ErrorType

logger = logging.getLogger(__name__)

T = TypeVar('T')


# =============================================================================
# FIELD HELPERS
# =============================================================================

def format_date(value: Optional[date]) -> str:
    return NULL_LITERAL if value is None else value.strftime(DATE_FORMAT_STORAGE)


def parse_date(text: Optional[str]) -> Optional[date]:
    """Parse a stored date; None, blank and "null" mean no date.

    Raises:
        ValueError: If the text is not a YYYY-MM-DD date.
    """
    if text is None:
        return None
    text = text.strip()
    if not text or text.lower() == NULL_LITERAL:
        return None
    return datetime.strptime(text, DATE_FORMAT_STORAGE).date()


def parse_bool(text: Optional[str]) -> bool:
    """Only a case-insensitive "true" reads as True."""
    if text is None:
        return False
    return text.strip().lower() == "true"


def format_bool(value: bool) -> str:
    return "true" if value else "false"


def has_separator(*values: Optional[str]) -> bool:
    """True if any value would split into extra fields when written."""
    return any(value is not None and FIELD_SEPARATOR in value for value in values)


def _fields(line: str) -> List[str]:
    return [part.strip() for part in line.split(FIELD_SEPARATOR)]


def _part(parts: List[str], index: int) -> Optional[str]:
    return parts[index] if len(parts) > index else None


def _too_short(parts, minimum, kind) -> Result:
    return Result.fail(f"{kind} record needs {minimum} fields, got {len(parts)}", ErrorType.MALFORMED)


# =============================================================================
# CATALOG
# =============================================================================

def encode_book(book: Book) -> str:
    return FIELD_SEPARATOR.join([
        book.title, book.author, book.isbn, format_bool(book.available),
        format_date(book.borrow_date), format_date(book.due_date),
    ])


def encode_cd(cd: CD) -> str:
    return FIELD_SEPARATOR.join([
        cd.title, cd.artist, cd.cd_id, format_bool(cd.available),
        format_date(cd.borrow_date), format_date(cd.due_date),
    ])


def _decode_item(line: str, factory, kind: str) -> Result:
    parts = _fields(line)
    if len(parts) < 3 or not parts[2]:
        return _too_short(parts, 3, kind)
    item = factory(parts[0], parts[1], parts[2])
    available_text = _part(parts, 3)
    available = True if available_text is None else parse_bool(available_text)
    try:
        borrow_date = parse_date(_part(parts, 4))
        due_date = parse_date(_part(parts, 5))
    except ValueError as e:
        return Result.fail(f"{kind} record has a bad date: {e}", ErrorType.MALFORMED)
    if not available and borrow_date is None:
        return Result.fail(f"{kind} record is borrowed but has no borrow date", ErrorType.MALFORMED)
    item.restore(available, borrow_date, due_date)
    return Result.ok(item)


def decode_book(line: str) -> Result:
    return _decode_item(line, Book, "Book")


def decode_cd(line: str) -> Result:
    return _decode_item(line, CD, "CD")


# =============================================================================
# USERS
# =============================================================================

def encode_user(user: User) -> str:
    email = NULL_LITERAL if user.email is None else user.email
    return FIELD_SEPARATOR.join([user.name, email, str(float(user.fine_balance))])


def decode_user(line: str) -> Result:
    # Email is kept verbatim apart from the null literal
    parts = line.split(FIELD_SEPARATOR)
    if len(parts) < 3 or not parts[0].strip():
        return _too_short(parts, 3, "User")
    email = None if parts[1] == NULL_LITERAL else parts[1]
    try:
        fine = float(parts[2])
    except ValueError:
        fine = 0.0
    if not math.isfinite(fine):
        fine = 0.0
    return Result.ok(User(parts[0].strip(), email, max(fine, 0.0)))


# =============================================================================
# LOANS
# =============================================================================

@dataclass
class LoanRecord:
    """A persisted loan before its user and item references are resolved."""
    user_name: str
    item_id: str
    borrow_date: date
    due_date: date
    active: bool = True


def encode_loan(loan: Loan) -> str:
    return FIELD_SEPARATOR.join([
        loan.user.name, loan.item.item_id, format_date(loan.borrow_date),
        format_date(loan.due_date), format_bool(loan.active),
    ])


def _decode_loan(line: str, minimum: int, kind: str) -> Result:
    parts = _fields(line)
    if len(parts) < minimum:
        return _too_short(parts, minimum, kind)
    try:
        borrow_date = parse_date(parts[2])
        due_date = parse_date(parts[3])
    except ValueError as e:
        return Result.fail(f"{kind} record has a bad date: {e}", ErrorType.MALFORMED)
    if borrow_date is None or due_date is None:
        return Result.fail(f"{kind} record is missing a date", ErrorType.MALFORMED)
    active_text = _part(parts, 4)
    active = True if active_text is None else parse_bool(active_text)
    return Result.ok(LoanRecord(parts[0], parts[1], borrow_date, due_date, active))


def decode_loan(line: str) -> Result:
    """Book loans: userName,isbn,borrowDate,dueDate with an optional active flag."""
    return _decode_loan(line, 4, "Loan")


def decode_cd_loan(line: str) -> Result:
    """CD loans: userName,cdId,borrowDate,dueDate,active."""
    return _decode_loan(line, 5, "CD loan")


# =============================================================================
# STAFF
# =============================================================================

def encode_account(account: StaffAccount) -> str:
    return FIELD_SEPARATOR.join([str(account.account_id), account.name, account.password])


def account_decoder(role: Role) -> Callable[[str], Result]:
    """Return a decoder for id,name,password lines of the given role."""
    def decode(line: str) -> Result:
        parts = _fields(line)
        if len(parts) < 3:
            return _too_short(parts, 3, role.value.title())
        try:
            account_id = int(parts[0])
        except ValueError:
            return Result.fail(f"Account id is not a number: {parts[0]!r}", ErrorType.MALFORMED)
        return Result.ok(StaffAccount(role, account_id, parts[1], parts[2]))
    return decode


# =============================================================================
# PARSING
# =============================================================================

@dataclass
class ParseReport(Generic[T]):
    """Outcome of reading one data file.

    Attributes:
        records: Successfully decoded records, in file order.
        skipped: (line number, reason) for every malformed line.
        blank_lines: Number of empty lines that were ignored.
    """
    records: List[T] = field(default_factory=list)
    skipped: List[Tuple[int, str]] = field(default_factory=list)
    blank_lines: int = 0

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)


def parse_lines(lines: List[str], decoder: Callable[[str], Result], source: str = "") -> ParseReport:
    report = ParseReport()
    for number, line in enumerate(lines, start=1):
        if not line.strip():
            report.blank_lines += 1
            continue
        result = decoder(line)
        if result:
            report.records.append(result.value)
        else:
            report.skipped.append((number, result.error))
            logger.warning("Skipping line %d of %s: %s", number, source or "input", result.error)
    return report
