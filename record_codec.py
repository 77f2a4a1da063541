"""Text row <-> Book conversion for the comma-delimited catalog file.

Row layout (also the header line)::

    index,title,author,pub_year,date_added,date_out,date_due,name

Date columns hold epoch seconds with ``0`` meaning "absent"; ``name`` is the
literal ``0`` while the book is available.
"""

import re
from typing import List

from book import Book, Loan
from dates import NO_DATE
from errors import ParseError

DELIMITER = ","
ESCAPE_CHAR = "."
NO_BORROWER = "0"
COLUMNS = ("index", "title", "author", "pub_year", "date_added", "date_out", "date_due", "name")
FIELD_COUNT = len(COLUMNS)
HEADER = DELIMITER.join(COLUMNS)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def lenient_int(text: str) -> int:
    """Parse the leading integer of ``text``; anything else reads as 0.

    Mirrors C ``atoi``: ``"12abc"`` is 12, ``"abc"`` and ``""`` are 0. Legacy
    files rely on this, so non-numeric columns are tolerated rather than
    rejected.
    """
    match = _LEADING_INT.match(text or "")
    return int(match.group(1)) if match else 0


def escape_field(text: str) -> str:
    return text.replace(DELIMITER, ESCAPE_CHAR)


def parse_row(text: str) -> Book:
    fields: List[str] = text.rstrip("\r\n").split(DELIMITER)
    if len(fields) < FIELD_COUNT:
        raise ParseError(f"expected {FIELD_COUNT} fields, found {len(fields)}")
    if len(fields) > FIELD_COUNT:
        raise ParseError(f"expected {FIELD_COUNT} fields, found {len(fields)} (unescaped '{DELIMITER}'?)")

    index, title, author, pub_year, date_added, date_out, date_due, name = fields
    out = lenient_int(date_out)
    due = lenient_int(date_due)
    loan = None
    if not (out == NO_DATE and due == NO_DATE):
        loan = Loan(borrower=name, date_out=out, date_due=due)

    return Book(
        index=lenient_int(index),
        title=title,
        author=author,
        pub_year=lenient_int(pub_year),
        date_added=lenient_int(date_added),
        loan=loan,
    )


def serialize_row(book: Book) -> str:
    """Render ``book`` as one line of the catalog file.

    Delimiters inside the free-text fields are replaced with ``ESCAPE_CHAR``
    *on the book itself* before writing, so the in-memory record matches
    what was saved.
    """
    book.title = escape_field(book.title)
    book.author = escape_field(book.author)
    if book.loan is not None:
        book.loan.borrower = escape_field(book.loan.borrower)
        date_out, date_due, name = book.loan.date_out, book.loan.date_due, book.loan.borrower
    else:
        date_out, date_due, name = NO_DATE, NO_DATE, NO_BORROWER

    values = (book.index, book.title, book.author, book.pub_year, book.date_added, date_out, date_due, name)
    return DELIMITER.join(str(value) for value in values) + "\n"


def serialize_header() -> str:
    return HEADER + "\n"
