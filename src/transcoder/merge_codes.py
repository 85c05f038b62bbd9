"""Merge code assignment for multi-day blocks.

A merge code is a short ``<Letter><Number>`` tag (A1, B1, ..., Z1, A2, ...)
written after an activity name in the annotated text so that a block spanning
several days can be recognised on every line it appears on.

Two scopes are supported:

* ``"name"`` keys codes by display name. Every merged block sharing a name
  shares a code, so two unrelated runs of the same activity in one month
  decode as a single chain.
* ``"run"`` gives every contiguous run its own code, found in one forward scan.
"""

from src.transcoder.models import UNKNOWN_ACTIVITY, ScheduleDay

ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"


def code_for_index(index: int) -> str:
    """Code for the index-th merged key: 0 -> "A1", 25 -> "Z1", 26 -> "A2"."""
    return f"{ALPHABET[index % 26]}{index // 26 + 1}"


def assign_merge_codes(
    days: list[ScheduleDay], *, unknown: str = UNKNOWN_ACTIVITY
) -> dict[str, str]:
    """Map each display name that has a merge continuation anywhere to a code.

    Names are numbered in order of their first ``merge_with_previous`` stripe.
    Names that never continue a block get no code.
    """
    merged_keys: dict[str, None] = {}  # insertion-ordered set
    for day in days:
        for stripe in day.stripes:
            if stripe.merge_with_previous:
                merged_keys.setdefault(stripe.display_name(unknown), None)

    return {key: code_for_index(i) for i, key in enumerate(merged_keys)}


def _continues_on_next_day(days: list[ScheduleDay], index: int, key: str, unknown: str) -> bool:
    """True if the following day in the sequence continues a block named ``key``."""
    if index + 1 >= len(days):
        return False
    return any(
        stripe.merge_with_previous and stripe.display_name(unknown) == key
        for stripe in days[index + 1].stripes
    )


def assign_run_codes(
    days: list[ScheduleDay], *, unknown: str = UNKNOWN_ACTIVITY
) -> dict[tuple[int, int], str]:
    """Give every contiguous merged run its own code.

    Returns:
        Mapping of ``(day_index, stripe_index)`` to code for every stripe that
        belongs to a run. Codes are numbered in run-start order.
    """
    codes: dict[tuple[int, int], str] = {}
    active: dict[str, str] = {}
    issued = 0

    for i, day in enumerate(days):
        still_active: dict[str, str] = {}
        for j, stripe in enumerate(day.stripes):
            key = stripe.display_name(unknown)
            code = None
            if stripe.merge_with_previous:
                code = active.get(key)
            elif not _continues_on_next_day(days, i, key, unknown):
                continue

            # A run head, or a continuation whose head is missing
            if code is None:
                code = code_for_index(issued)
                issued += 1

            codes[(i, j)] = code
            still_active[key] = code
        active = still_active

    return codes


def stripe_codes(
    days: list[ScheduleDay],
    *,
    scope: str = "name",
    unknown: str = UNKNOWN_ACTIVITY,
) -> list[list[str | None]]:
    """Per-stripe merge code annotations, parallel to ``days[i].stripes``.

    A stripe is annotated only while it is part of a merge chain: it either
    continues the previous day's block or is the head of a block that the next
    day continues. Standalone stripes stay bare even when their name is coded
    elsewhere.

    Args:
        days: Schedule in display order.
        scope: "name" or "run" (see module docstring).
        unknown: Display name for stripes without label or activity.

    Raises:
        ValueError: If ``scope`` is not recognised.
    """
    if scope == "run":
        run_codes = assign_run_codes(days, unknown=unknown)
        return [
            [run_codes.get((i, j)) for j in range(len(day.stripes))]
            for i, day in enumerate(days)
        ]
    if scope != "name":
        raise ValueError(f"Unknown merge code scope {scope!r}. Valid: ['name', 'run']")

    name_codes = assign_merge_codes(days, unknown=unknown)
    annotations: list[list[str | None]] = []
    for i, day in enumerate(days):
        row: list[str | None] = []
        for stripe in day.stripes:
            key = stripe.display_name(unknown)
            code = name_codes.get(key)
            if code and not stripe.merge_with_previous and not _continues_on_next_day(
                days, i, key, unknown
            ):
                code = None
            row.append(code)
        annotations.append(row)
    return annotations
