"""Day-granularity dates stored as epoch seconds.

All stored dates are integer instants of *local midnight*. ``NO_DATE`` (0)
marks "no date" in the file format and must be checked before formatting.
"""

import calendar
import re
from datetime import MAXYEAR, MINYEAR, date, datetime, timedelta

from errors import FormatError

NO_DATE = 0
SECONDS_PER_DAY = 60 * 60 * 24

_DATE_PATTERN = re.compile(r"^(\d{2})/(\d{2})/(\d{4})$")
_FIRST_DAY = datetime(MINYEAR, 1, 1)
_LAST_DAY = datetime(MAXYEAR, 12, 31)


def _to_instant(moment: datetime) -> int:
    try:
        return int(moment.timestamp())
    except (OverflowError, OSError, ValueError):
        # Platform localtime cannot represent this day; fall back to UTC midnight.
        return calendar.timegm(moment.timetuple())


def date_from_fields(day: int, month: int, year: int) -> int:
    """Return the instant of local midnight on ``day/month/year``.

    Fields are expected to be range-checked by the caller. Out-of-range
    values roll over the way ``mktime`` does (32/01 is 01/02, month 13 is
    January of the next year) and anything outside the representable years
    clamps to the first or last representable day.
    """
    year += (month - 1) // 12
    month = (month - 1) % 12 + 1
    if year < MINYEAR:
        return _to_instant(_FIRST_DAY)
    if year > MAXYEAR:
        return _to_instant(_LAST_DAY)
    try:
        moment = datetime(year, month, 1) + timedelta(days=day - 1)
    except OverflowError:
        moment = _FIRST_DAY if day < 1 else _LAST_DAY
    return _to_instant(moment)


def instant_to_text(instant: int) -> str:
    """Render an instant as fixed-width ``DD/MM/YYYY``."""
    try:
        moment = datetime.fromtimestamp(instant)
    except (OverflowError, OSError, ValueError) as exc:
        raise FormatError(f"Instant {instant} cannot be rendered as a date.") from exc
    return f"{moment.day:02d}/{moment.month:02d}/{moment.year:04d}"


def text_to_instant(text: str) -> int:
    """Parse ``DD/MM/YYYY`` into the instant of that day's local midnight."""
    match = _DATE_PATTERN.match(text.strip()) if text is not None else None
    if not match:
        raise FormatError(f"'{text}' is not a DD/MM/YYYY date.")
    day, month, year = (int(group) for group in match.groups())
    try:
        moment = datetime(year, month, day)
    except ValueError as exc:
        raise FormatError(f"'{text}' is not a real calendar date.") from exc
    return _to_instant(moment)


def is_plausible_text(text: str) -> bool:
    """True when ``text`` survives a parse/format round trip unchanged."""
    try:
        return instant_to_text(text_to_instant(text)) == text.strip()
    except FormatError:
        return False


def is_no_date(instant: int) -> bool:
    return instant == NO_DATE


def today() -> int:
    current = date.today()
    return date_from_fields(current.day, current.month, current.year)


def year_of(instant: int) -> int:
    """Calendar year of an instant in local time."""
    return datetime.fromtimestamp(instant).year


def add_days(instant: int, days: int) -> int:
    return instant + days * SECONDS_PER_DAY


def days_between(earlier: int, later: int) -> int:
    """Whole days from ``earlier`` to ``later``, floored."""
    return (later - earlier) // SECONDS_PER_DAY
