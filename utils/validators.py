"""Input checks the CLI runs before calling into the catalog.

The catalog itself trusts its inputs; anything an operator types goes
through here first.
"""

from datetime import date
from typing import Optional

from config import settings


class TextValidator:
    """Free-text fields: title, author, borrower name."""

    @staticmethod
    def validate_text(text: Optional[str], max_length: Optional[int] = None) -> bool:
        if text is None:
            return False
        t = text.strip()
        limit = max_length if max_length is not None else settings.max_field_length
        return 0 < len(t) <= limit

    @staticmethod
    def validate_title(title: Optional[str]) -> bool:
        return TextValidator.validate_text(title)

    @staticmethod
    def validate_author(author: Optional[str]) -> bool:
        return TextValidator.validate_text(author)

    @staticmethod
    def validate_borrower(name: Optional[str]) -> bool:
        return TextValidator.validate_text(name)


class YearValidator:

    @staticmethod
    def validate_pub_year(year: int, current_year: Optional[int] = None) -> bool:
        """Publication year must be strictly between 0 and the current year."""
        ceiling = current_year if current_year is not None else date.today().year
        return 0 < year < ceiling


class DateFieldValidator:
    """Range checks for a typed-in current date (day, month, year)."""

    @staticmethod
    def validate_day(day: int) -> bool:
        return 1 <= day <= 31

    @staticmethod
    def validate_month(month: int) -> bool:
        return 1 <= month <= 12

    @staticmethod
    def validate_year(year: int) -> bool:
        return settings.min_current_year <= year <= settings.max_current_year

    @staticmethod
    def validate_fields(day: int, month: int, year: int) -> bool:
        return (DateFieldValidator.validate_day(day)
                and DateFieldValidator.validate_month(month)
                and DateFieldValidator.validate_year(year))
