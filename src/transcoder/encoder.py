"""ScheduleEncoder - renders a schedule as annotated day-by-day text.

Output format (one line per day, after a "Month Year" header and a blank line):

    February 2026

    Sun Feb 1st - empty
    Mon Feb 2nd - Production (A1), Client Meeting
    Tue Feb 3rd - Production (A1)

A ``(code)`` suffix marks stripes that belong to a block spanning several days
(see merge_codes). The first day of the sequence anchors the header.
"""

from datetime import date, timedelta

from src.transcoder.calendar_math import (
    days_in_month,
    month_abbrev,
    month_full_name,
    ordinal_suffix,
    weekday_abbrev,
)
from src.transcoder.errors import EmptySchedule, InvalidFirstDate, MissingDays
from src.transcoder.logging import get_logger
from src.transcoder.merge_codes import stripe_codes
from src.transcoder.models import UNKNOWN_ACTIVITY, ScheduleDay

log = get_logger(__name__)

EMPTY_KEYWORD = "empty"


def day_header(value: date) -> str:
    """Line header for a day, e.g. "Mon Feb 2nd"."""
    return (
        f"{weekday_abbrev(value)} {month_abbrev(value.month)} "
        f"{value.day}{ordinal_suffix(value.day)}"
    )


def _month_dates(year: int, month: int) -> list[date]:
    return [date(year, month, d) for d in range(1, days_in_month(year, month) + 1)]


def _first_date(days: list[ScheduleDay]) -> date:
    first = days[0].date
    if not isinstance(first, date):
        raise InvalidFirstDate(f"First day has no usable date: {first!r}")
    return first


def fill_month(days: list[ScheduleDay]) -> list[ScheduleDay]:
    """Pad a sparse schedule so it covers every day of its first day's month.

    Missing days are added with no stripes. Days outside that month are kept,
    after the month, in their original order.

    Raises:
        EmptySchedule: If ``days`` is empty.
        InvalidFirstDate: If the first day's date is unusable.
    """
    if not days:
        raise EmptySchedule("Cannot fill an empty schedule")
    first = _first_date(days)

    by_date = {day.date: day for day in days}
    month = _month_dates(first.year, first.month)
    filled = [by_date.get(d) or ScheduleDay(date=d) for d in month]
    in_month = set(month)
    filled.extend(day for day in days if day.date not in in_month)
    return filled


def _check_covers_month(days: list[ScheduleDay], first: date) -> None:
    expected = _month_dates(first.year, first.month)
    actual = [day.date for day in days]
    if actual == expected:
        return

    missing = sorted(set(expected) - set(actual))
    if missing:
        raise MissingDays(
            f"Schedule for {month_full_name(first.month)} {first.year} is missing "
            f"{len(missing)} day(s): {', '.join(d.isoformat() for d in missing)}"
        )
    # Every day is present but order or extra days break contiguity
    for previous, current in zip(actual, actual[1:]):
        if current - previous != timedelta(days=1):
            raise MissingDays(
                f"Schedule is not contiguous: {current.isoformat()} follows {previous.isoformat()}"
            )
    raise MissingDays(
        f"Schedule must start on {expected[0].isoformat()} and end on {expected[-1].isoformat()}"
    )


def encode_schedule(
    days: list[ScheduleDay],
    *,
    scope: str = "name",
    unknown: str = UNKNOWN_ACTIVITY,
    strict: bool = False,
) -> str:
    """Render a schedule as annotated text.

    Merge flags are trusted as given: a continuation is not checked against
    the previous day.

    Args:
        days: Ordered schedule days. Should cover one month contiguously.
        scope: Merge code scope, "name" or "run".
        unknown: Display name for stripes without label or activity.
        strict: If True, require every day of the first day's month, in order.

    Returns:
        Newline-separated text: header, blank line, one line per day.

    Raises:
        EmptySchedule: If ``days`` is empty.
        InvalidFirstDate: If the first day's date is unusable.
        MissingDays: In strict mode, if the month is not fully covered.
    """
    if not days:
        raise EmptySchedule("Cannot encode a schedule with no days")
    first = _first_date(days)
    if strict:
        _check_covers_month(days, first)

    codes = stripe_codes(days, scope=scope, unknown=unknown)

    lines = [f"{month_full_name(first.month)} {first.year:04d}", ""]
    for day, day_codes in zip(days, codes):
        header = day_header(day.date)
        if not day.stripes:
            lines.append(f"{header} - {EMPTY_KEYWORD}")
            continue

        entries = []
        for stripe, code in zip(day.stripes, day_codes):
            name = stripe.display_name(unknown)
            entries.append(f"{name} ({code})" if code else name)
        lines.append(f"{header} - {', '.join(entries)}")

    log.debug(
        "schedule_encoded",
        days=len(days),
        month=first.strftime("%Y-%m"),
        coded_stripes=sum(1 for row in codes for code in row if code),
    )
    return "\n".join(lines)
