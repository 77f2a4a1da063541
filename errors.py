"""Exceptions raised by the catalog core.

Every error the core can report derives from ``LibraryError`` so the CLI can
catch the whole family in one place. Most also inherit from the matching
builtin so callers that only know about ``ValueError`` / ``IndexError`` /
``OSError`` keep working.
"""

from typing import Optional


class LibraryError(Exception):
    """Base class for all catalog errors."""


class NotFoundError(LibraryError, FileNotFoundError):
    """The catalog file does not exist."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Database file '{path}' cannot be found.")
        self.path = path


class ParseError(LibraryError, ValueError):
    """A catalog row could not be split into a book record."""

    def __init__(self, message: str, line_number: Optional[int] = None) -> None:
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)
        self.line_number = line_number


class FormatError(LibraryError, ValueError):
    """Date text is not a real DD/MM/YYYY date."""


class RangeError(LibraryError, IndexError):
    """A catalog position is outside ``[0, len(catalog))``."""

    def __init__(self, position: int, size: int) -> None:
        super().__init__(f"Position {position} is out of range (catalog holds {size} books).")
        self.position = position
        self.size = size


class AlreadyOnLoanError(LibraryError):
    """Borrow attempted on a book that is already out."""


class NotOnLoanError(LibraryError):
    """Return attempted on a book that is not out."""


class SaveError(LibraryError, OSError):
    """Writing the catalog file failed; the previous file is left in place."""
