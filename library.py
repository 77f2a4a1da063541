import logging
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple, Union

from book import Book
from errors import RangeError
from record_codec import lenient_int

logger = logging.getLogger(__name__)


class SearchField(Enum):
    TITLE = "title"
    AUTHOR = "author"
    YEAR = "year"


class EditableField(Enum):
    TITLE = "title"
    AUTHOR = "author"
    PUB_YEAR = "pub_year"


class Library:
    """Ordered, positional collection of book records.

    ``Library`` is the only owner of the records it holds. A book's ``index``
    always equals its position in ``self.books``; every mutation that shifts
    positions renumbers the books it moves.
    """

    def __init__(self, books: Optional[Iterable[Book]] = None) -> None:
        self.books: List[Book] = list(books or [])
        self._renumber(0)

    @classmethod
    def from_rows(cls, rows: Iterable[Book]) -> "Library":
        """Build a catalog from parsed rows, keeping file order.

        Indices are recomputed from position. A row whose stored index
        disagrees is logged and corrected, never trusted.
        """
        books = list(rows)
        for position, book in enumerate(books):
            if book.index != position:
                logger.warning(f"Row {position} carried index {book.index}; renumbered to {position}")
        return cls(books)

    # ------------------------- Core operations ------------------------- #
    def add_book(self, title: str, author: str, pub_year: int, date_added: int) -> int:
        """Append an available book and return its index.

        Field lengths and ``pub_year`` bounds are checked by the caller.
        """
        index = len(self.books)
        self.books.append(Book(index=index, title=title, author=author, pub_year=pub_year, date_added=date_added))
        logger.info(f"Added book {index}: {title!r} by {author!r}")
        return index

    def delete_at(self, position: int) -> Book:
        """Remove the book at ``position`` and close the gap it leaves."""
        self._check_position(position)
        removed = self.books.pop(position)
        self._renumber(position)
        logger.info(f"Deleted book {position}: {removed.title!r}")
        return removed

    def edit_field(self, position: int, field: Union[EditableField, str], value: Any) -> Book:
        """Overwrite exactly one of title / author / pub_year."""
        self._check_position(position)
        field = EditableField(field)
        book = self.books[position]
        if field is EditableField.TITLE:
            book.title = value
        elif field is EditableField.AUTHOR:
            book.author = value
        else:
            book.pub_year = int(value)
        logger.info(f"Edited {field.value} of book {position}")
        return book

    def find_by_position(self, position: int) -> Book:
        self._check_position(position)
        return self.books[position]

    def list_books(self) -> Tuple[Book, ...]:
        return tuple(self.books)

    def search_books(self, field: Union[SearchField, str], term: str) -> List[Tuple[int, Book]]:
        """Linear scan returning ``(position, book)`` pairs in catalog order.

        Title and author match case-insensitively on a substring; year
        matches exactly, with the term read leniently (``"abc"`` is 0 and
        so matches nothing).
        """
        field = SearchField(field)
        if field is SearchField.YEAR:
            year = lenient_int(term)
            return [(pos, book) for pos, book in enumerate(self.books) if book.pub_year == year]

        needle = term.casefold()
        attr = "title" if field is SearchField.TITLE else "author"
        return [(pos, book) for pos, book in enumerate(self.books)
                if needle in getattr(book, attr).casefold()]

    def get_statistics(self, current_date: Optional[int] = None) -> Dict[str, Any]:
        """Get library statistics."""
        on_loan = sum(1 for book in self.books if book.is_on_loan)
        stats: Dict[str, Any] = {
            "total_books": len(self.books),
            "available": len(self.books) - on_loan,
            "on_loan": on_loan,
            "unique_authors": len({book.author.casefold() for book in self.books}),
        }
        if current_date is not None:
            # Local import: lending depends on this module.
            from lending import overdue_report
            stats["overdue"] = len(overdue_report(self, current_date))
        return stats

    # ------------------------- Utilities ------------------------- #
    @property
    def num_rows(self) -> int:
        return len(self.books)

    def __len__(self) -> int:
        return len(self.books)

    def __iter__(self) -> Iterator[Book]:
        return iter(tuple(self.books))

    def _check_position(self, position: int) -> None:
        if not 0 <= position < len(self.books):
            raise RangeError(position, len(self.books))

    def _renumber(self, start: int) -> None:
        for position in range(start, len(self.books)):
            self.books[position].index = position
