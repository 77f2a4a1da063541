"""Loan lifecycle: ``Available --borrow--> OnLoan --return--> Available``."""

import logging
from typing import List, NamedTuple

from book import Book, Loan
from dates import SECONDS_PER_DAY, add_days, days_between
from errors import AlreadyOnLoanError, NotOnLoanError
from library import Library

logger = logging.getLogger(__name__)

LOAN_DAYS = 7
LOAN_PERIOD = LOAN_DAYS * SECONDS_PER_DAY


class OverdueEntry(NamedTuple):
    position: int
    title: str
    borrower: str
    days_overdue: int


def borrow_book(library: Library, position: int, borrower: str, current_date: int) -> Loan:
    """Lend the book at ``position`` to ``borrower`` for ``LOAN_DAYS`` days."""
    book = library.find_by_position(position)
    if book.loan is not None:
        raise AlreadyOnLoanError(f"'{book.title}' is already out (borrowed by {book.loan.borrower}).")
    book.loan = Loan(borrower=borrower, date_out=current_date, date_due=add_days(current_date, LOAN_DAYS))
    logger.info(f"Book {position} lent to {borrower!r}")
    return book.loan


def return_book(library: Library, position: int) -> Loan:
    """Close the loan on the book at ``position`` and return it."""
    book = library.find_by_position(position)
    if book.loan is None:
        raise NotOnLoanError(f"'{book.title}' is not currently out.")
    closed, book.loan = book.loan, None
    logger.info(f"Book {position} returned by {closed.borrower!r}")
    return closed


def is_overdue(book: Book, current_date: int) -> bool:
    # A book due today is not overdue yet.
    return book.loan is not None and book.loan.date_due < current_date


def overdue_report(library: Library, current_date: int) -> List[OverdueEntry]:
    return [
        OverdueEntry(
            position=position,
            title=book.title,
            borrower=book.loan.borrower,
            days_overdue=days_between(book.loan.date_due, current_date),
        )
        for position, book in enumerate(library)
        if is_overdue(book, current_date)
    ]
