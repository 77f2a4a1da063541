from __future__ import annotations

from dataclasses import dataclass

from dates import instant_to_text, is_no_date
from errors import FormatError


@dataclass
class Loan:
    """An open loan: who has the book, when it went out and when it is due."""

    borrower: str
    date_out: int
    date_due: int


class Book:
    """A single catalog entry.

    ``index`` is positional: it always equals the book's place in the catalog
    and is renumbered when an earlier book is deleted. ``loan`` is ``None``
    while the book is available.
    """

    def __init__(self, index: int, title: str, author: str, pub_year: int, date_added: int,
                 loan: Loan | None = None) -> None:
        self.index = index
        self.title = title
        self.author = author
        self.pub_year = pub_year
        self.date_added = date_added
        self.loan = loan

    @property
    def is_on_loan(self) -> bool:
        return self.loan is not None

    @property
    def status(self) -> str:
        return "Out" if self.is_on_loan else "Available"

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        return f"Book {self.index + 1}: {self.title}, {self.author}, {self.pub_year} ({self.status.upper()})"

    def __repr__(self) -> str:
        return (f"Book(index={self.index!r}, title={self.title!r}, author={self.author!r}, "
                f"pub_year={self.pub_year!r}, date_added={self.date_added!r}, loan={self.loan!r})")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Book):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def to_dict(self) -> dict:
        return {
            "index": self.index,
            "title": self.title,
            "author": self.author,
            "pub_year": self.pub_year,
            "date_added": self.date_added,
            "borrower": self.loan.borrower if self.loan else None,
            "date_out": self.loan.date_out if self.loan else None,
            "date_due": self.loan.date_due if self.loan else None,
        }

    def to_display_dict(self) -> dict:
        """Same fields as ``to_dict`` with dates rendered as DD/MM/YYYY."""
        data = self.to_dict()
        data["status"] = self.status
        data["date_added"] = _render(self.date_added)
        data["date_out"] = _render(self.loan.date_out) if self.loan else None
        data["date_due"] = _render(self.loan.date_due) if self.loan else None
        return data


def _render(instant: int) -> str:
    if is_no_date(instant):
        return "-"
    try:
        return instant_to_text(instant)
    except FormatError:
        # out-of-range instant read leniently from the file
        return "?"
