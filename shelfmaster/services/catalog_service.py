"""Catalog services for ShelfMaster.

BookService and CDService own the book and CD collections: adding items,
lookups by identifier, keyword search and persistence of the catalog files.
"""
import logging
from typing import Callable, Dict, List, Optional

from shelfmaster.config import BOOKS_FILE, CDS_FILE, FIELD_SEPARATOR
from shelfmaster.data_structures import Book, CD, CatalogItem
from shelfmaster.records import (
    decode_book, decode_cd, encode_book, encode_cd, has_separator, parse_lines, ParseReport
)
from shelfmaster.result import Result, ErrorType

logger = logging.getLogger(__name__)


def _clean(value: Optional[str]) -> str:
    return value.strip() if value else ""


class CatalogService:
    """Common storage and lookup for one kind of catalog item."""

    file_name: str = ""
    encoder: Callable = None
    decoder: Callable = None

    def __init__(self, store):
        """Initialize the service.

        Args:
            store: FileStore instance for data persistence.
        """
        self.store = store
        self._items: Dict[str, CatalogItem] = {}

    def _add(self, item: CatalogItem) -> Result:
        if not item.title or not item.item_id:
            return Result.fail("A title and an identifier are required", ErrorType.VALIDATION)
        if has_separator(item.title, item.creator, item.item_id):
            return Result.fail(f"Fields must not contain '{FIELD_SEPARATOR}'", ErrorType.VALIDATION)
        if item.item_id in self._items:
            logger.debug("Rejected duplicate %s %s", item.ITEM_TYPE, item.item_id)
            return Result.fail(f"{item.ITEM_TYPE} '{item.item_id}' already exists", ErrorType.DUPLICATE)
        self._items[item.item_id] = item
        self.save()
        logger.info("Added %s %s (%s)", item.ITEM_TYPE, item.item_id, item.title)
        return Result.ok(item)

    def _find(self, item_id: Optional[str]) -> Optional[CatalogItem]:
        if item_id is None:
            return None
        return self._items.get(item_id.strip())

    def contains(self, item: CatalogItem) -> bool:
        return self._items.get(item.item_id) is item

    def _all(self) -> List[CatalogItem]:
        return list(self._items.values())

    @staticmethod
    def _normalize_keyword(keyword: Optional[str]) -> str:
        if keyword is None:
            raise ValueError("Search keyword must not be None")
        return keyword.strip()

    def save(self) -> None:
        self.store.write_lines(self.file_name, [self.encoder(item) for item in self._items.values()])

    def load(self) -> ParseReport:
        """Replace the in-memory catalog with the content of the data file."""
        report = parse_lines(self.store.read_lines(self.file_name), self.decoder, self.file_name)
        self._items.clear()
        for item in report.records:
            self._items.setdefault(item.item_id, item)
        logger.info("Loaded %d records from %s", len(self._items), self.file_name)
        return report


class BookService(CatalogService):
    """Handles the book catalog."""

    file_name = BOOKS_FILE
    encoder = staticmethod(encode_book)
    decoder = staticmethod(decode_book)

    def add_book(self, title: str, author: str, isbn: str) -> Result:
        """Add a book; fails with DUPLICATE if the ISBN is taken."""
        return self._add(Book(_clean(title), _clean(author), _clean(isbn)))

    def find_book_by_isbn(self, isbn: Optional[str]) -> Optional[Book]:
        return self._find(isbn)

    def get_all_books(self) -> List[Book]:
        return self._all()

    def search(self, keyword: Optional[str]) -> List[Book]:
        """Find books whose title, author or ISBN contains the keyword.

        Title and author match case-insensitively. A blank keyword returns
        every book.

        Raises:
            ValueError: If keyword is None.
        """
        keyword = self._normalize_keyword(keyword)
        if not keyword:
            return self._all()
        key_lower = keyword.lower()
        return [
            b for b in self._items.values()
            if key_lower in b.title.lower() or key_lower in b.author.lower() or keyword in b.isbn
        ]

    def save_books(self) -> None:
        self.save()

    def load_books(self) -> ParseReport:
        return self.load()


class CDService(CatalogService):
    """Handles the CD catalog."""

    file_name = CDS_FILE
    encoder = staticmethod(encode_cd)
    decoder = staticmethod(decode_cd)

    def add_cd(self, title: str, artist: str, cd_id: str) -> Result:
        """Add a CD; fails with DUPLICATE if the id is taken."""
        return self._add(CD(_clean(title), _clean(artist), _clean(cd_id)))

    def find_cd_by_id(self, cd_id: Optional[str]) -> Optional[CD]:
        return self._find(cd_id)

    def get_all_cds(self) -> List[CD]:
        return self._all()

    def search(self, keyword: Optional[str]) -> List[CD]:
        """Find CDs by keyword.

        Matching rules:
            - title contains the keyword (case-insensitive)
            - artist equals the keyword (case-insensitive)
            - id equals the keyword exactly
        A blank keyword returns every CD.

        Raises:
            ValueError: If keyword is None.
        """
        keyword = self._normalize_keyword(keyword)
        if not keyword:
            return self._all()
        key_lower = keyword.lower()
        return [
            c for c in self._items.values()
            if key_lower in c.title.lower() or c.artist.lower() == key_lower or c.cd_id == keyword
        ]

    def save_cds(self) -> None:
        self.save()

    def load_cds(self) -> ParseReport:
        return self.load()
