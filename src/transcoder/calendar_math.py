"""Pure calendar helpers for the annotated text form.

Names are fixed English tuples rather than strftime output so rendering does
not depend on the process locale.
"""

import calendar
from datetime import date

from src.transcoder.errors import InvalidDateComponent

# Indexed by date.weekday() (Monday == 0)
WEEKDAY_ABBREVS: tuple[str, ...] = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

MONTH_ABBREVS: tuple[str, ...] = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

MONTH_NAMES: tuple[str, ...] = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


def _check_month(month: int) -> None:
    if not isinstance(month, int) or not 1 <= month <= 12:
        raise InvalidDateComponent(f"Month must be in 1..12, got {month!r}")


def weekday_abbrev(value: date) -> str:
    """Three-letter English weekday abbreviation, e.g. "Mon"."""
    return WEEKDAY_ABBREVS[value.weekday()]


def month_abbrev(month: int) -> str:
    """Three-letter English month abbreviation for a 1-based month index."""
    _check_month(month)
    return MONTH_ABBREVS[month - 1]


def month_full_name(month: int) -> str:
    """Full English month name for a 1-based month index."""
    _check_month(month)
    return MONTH_NAMES[month - 1]


def ordinal_suffix(day: int) -> str:
    """Ordinal suffix for a day of month.

    1, 21, 31 -> "st"; 2, 22 -> "nd"; 3, 23 -> "rd"; everything else
    (11, 12 and 13 included) -> "th".
    """
    if not isinstance(day, int) or not 1 <= day <= 31:
        raise InvalidDateComponent(f"Day must be in 1..31, got {day!r}")
    if day in (1, 21, 31):
        return "st"
    if day in (2, 22):
        return "nd"
    if day in (3, 23):
        return "rd"
    return "th"


def days_in_month(year: int, month: int) -> int:
    """Number of days in the given month, leap years included."""
    _check_month(month)
    if not isinstance(year, int) or not 1 <= year <= 9999:
        raise InvalidDateComponent(f"Year must be in 1..9999, got {year!r}")
    return calendar.monthrange(year, month)[1]
