"""AnnotatedTextDecoder - parses annotated day-by-day text back into a schedule.

Accepts what encode_schedule produces, plus the looser variants people and
models tend to write: full month or weekday names, trailing periods, a missing
month (the reference month is used), an en dash separator, or a bare
"<header> empty" line.

Merge codes are resolved per call: the first line a code appears on starts the
block (``merge_with_previous=False``) and every later occurrence continues it.
An entry without a code is always a standalone block.
"""

import re
from datetime import date

from src.transcoder.calendar_math import (
    MONTH_NAMES,
    WEEKDAY_ABBREVS,
    days_in_month,
    weekday_abbrev,
)
from src.transcoder.errors import DateResolutionError, MalformedLine
from src.transcoder.logging import get_logger
from src.transcoder.models import ScheduleDay, Stripe

log = get_logger(__name__)

# "February 2026", "Feb 2026", "Sept. 2026"
MONTH_HEADER_RE = re.compile(r"^(?P<month>[A-Za-z]+)\.?,?\s+\d{4}$")

# First " - " (or en dash) between day header and content
SEPARATOR_RE = re.compile(r"\s+[-–]\s+")

# "Mon Feb 2nd empty" with the separator left out
BARE_EMPTY_RE = re.compile(r"^(?P<header>.+?)\s+[-–]?\s*empty$", re.IGNORECASE)

DAY_TOKEN_RE = re.compile(r"^(?P<day>\d{1,2})(?:st|nd|rd|th)?\.?$", re.IGNORECASE)

# "Production (A1)"; anything else in parentheses is part of the name
CODE_SUFFIX_RE = re.compile(r"^(?P<name>.*\S)\s*\((?P<code>[A-Z]\d+)\)$")

_WEEKDAY_NAMES = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


def _lookup(word: str, names: tuple[str, ...]) -> int | None:
    """Index of the name ``word`` abbreviates (at least three letters), else None."""
    word = word.lower().rstrip(".")
    if len(word) < 3:
        return None
    for i, name in enumerate(names):
        if name.lower().startswith(word):
            return i
    return None


def _is_month_header(line: str) -> bool:
    """True for a "Month Year" line; the month may be abbreviated."""
    match = MONTH_HEADER_RE.match(line)
    return match is not None and _lookup(match.group("month"), MONTH_NAMES) is not None


def _resolve_header(
    header: str,
    reference_year: int,
    reference_month: int,
    *,
    strict: bool,
    line_number: int,
    line: str,
) -> date:
    tokens = header.replace(",", " ").split()
    if not tokens:
        raise DateResolutionError("Missing day header", line_number=line_number, line=line)

    day_match = DAY_TOKEN_RE.match(tokens[-1])
    if day_match is None:
        raise DateResolutionError(
            f"No day of month in header {header!r}", line_number=line_number, line=line
        )

    weekday: int | None = None
    month = reference_month
    for word in tokens[:-1]:
        month_index = _lookup(word, MONTH_NAMES)
        if month_index is not None:
            month = month_index + 1
            continue
        weekday_index = _lookup(word, _WEEKDAY_NAMES)
        if weekday_index is not None:
            weekday = weekday_index
            continue
        raise DateResolutionError(
            f"Unrecognized month or weekday {word!r}", line_number=line_number, line=line
        )

    day = int(day_match.group("day"))
    last_day = days_in_month(reference_year, month)
    if not 1 <= day <= last_day:
        raise DateResolutionError(
            f"Day {day} is out of range for {MONTH_NAMES[month - 1]} {reference_year} "
            f"(1..{last_day})",
            line_number=line_number,
            line=line,
        )

    resolved = date(reference_year, month, day)
    if weekday is not None and weekday != resolved.weekday():
        if strict:
            raise DateResolutionError(
                f"{WEEKDAY_ABBREVS[weekday]} does not match {resolved.isoformat()} "
                f"({weekday_abbrev(resolved)})",
                line_number=line_number,
                line=line,
            )
        log.warning(
            "weekday_mismatch",
            line_number=line_number,
            written=WEEKDAY_ABBREVS[weekday],
            actual=weekday_abbrev(resolved),
            date=resolved.isoformat(),
        )
    return resolved


def _split_line(line: str, line_number: int) -> tuple[str, str]:
    """Split a day line into (header, content)."""
    parts = SEPARATOR_RE.split(line, maxsplit=1)
    if len(parts) == 2:
        return parts[0].strip(), parts[1].strip()

    bare = BARE_EMPTY_RE.match(line)
    if bare:
        return bare.group("header").strip(), "empty"

    raise MalformedLine(
        "Expected '<day> - <activities>' or '<day> - empty'",
        line_number=line_number,
        line=line,
    )


def _parse_entries(content: str, seen_codes: set[str]) -> list[Stripe]:
    stripes = []
    for raw in content.split(","):
        entry = raw.strip()
        if not entry:
            continue

        match = CODE_SUFFIX_RE.match(entry)
        if match is None:
            stripes.append(Stripe(activity=entry))
            continue

        code = match.group("code")
        stripes.append(
            Stripe(activity=match.group("name").strip(), merge_with_previous=code in seen_codes)
        )
        seen_codes.add(code)
    return stripes


def decode_text(
    text: str,
    reference_year: int,
    reference_month: int,
    *,
    strict: bool = False,
) -> list[ScheduleDay]:
    """Parse annotated text into schedule days, in the order the lines appear.

    Args:
        text: Annotated text, optionally starting with a "Month Year" line.
        reference_year: Year for every line (lines carry no year).
        reference_month: Month used when a line names none.
        strict: If True, a weekday that disagrees with the date is an error.

    Returns:
        List of ScheduleDay with bare activity names (labels are not recovered).

    Raises:
        InvalidDateComponent: If the reference year or month is out of range.
        DateResolutionError: If a header is unparseable, out of range, or repeats a date.
        MalformedLine: If a line has no separator and is not an empty-day line.
    """
    days_in_month(reference_year, reference_month)

    days: list[ScheduleDay] = []
    seen_dates: set[date] = set()
    seen_codes: set[str] = set()
    header_allowed = True

    for line_number, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip()
        if not line:
            continue
        if header_allowed and _is_month_header(line):
            header_allowed = False
            continue
        header_allowed = False

        header, content = _split_line(line, line_number)
        day_date = _resolve_header(
            header,
            reference_year,
            reference_month,
            strict=strict,
            line_number=line_number,
            line=line,
        )
        if day_date in seen_dates:
            raise DateResolutionError(
                f"Duplicate date {day_date.isoformat()}", line_number=line_number, line=line
            )
        seen_dates.add(day_date)

        if content.lower() == "empty":
            stripes: list[Stripe] = []
        else:
            stripes = _parse_entries(content, seen_codes)
        days.append(ScheduleDay(date=day_date, stripes=stripes))

    log.debug("schedule_decoded", days=len(days), merge_codes=len(seen_codes))
    return days
