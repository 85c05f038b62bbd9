"""Clean-up for schedules returned by the generation service.

The service's JSON is untrusted: dates may be malformed, days out of order, and
``mergeWithPrevious`` is frequently omitted on ranges such as "Production runs
Jan 15-20". normalize_schedule repairs what can be repaired and drops the rest.
"""

import re
from typing import Any

from pydantic import ValidationError

from src.transcoder.logging import get_logger
from src.transcoder.models import ScheduleDay, Stripe

log = get_logger(__name__)

ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _valid_day(item: Any) -> bool:
    return isinstance(item, dict) and isinstance(item.get("date"), str) and bool(
        ISO_DATE_RE.match(item["date"])
    )


def normalize_schedule(data: list[Any]) -> list[ScheduleDay]:
    """Build a clean schedule from a raw JSON day list.

    - entries without a ``YYYY-MM-DD`` date (or with an impossible one) are dropped
    - days are sorted by date
    - a stripe whose activity was on the previous entry is marked as a
      continuation unless it explicitly says ``"mergeWithPrevious": false``
    - continuation stripes without a label take their block's label, so a
      run keeps one display name (and one merge code) from head to tail

    Args:
        data: Parsed JSON array from the generation service.

    Returns:
        Date-sorted list of ScheduleDay.
    """
    items = [item for item in data if _valid_day(item)]
    dropped = len(data) - len(items)
    items.sort(key=lambda item: item["date"])

    days: list[ScheduleDay] = []
    previous_activities: set[str] = set()
    for item in items:
        raw_stripes = item.get("stripes")
        if not isinstance(raw_stripes, list):
            raw_stripes = []

        current_activities: set[str] = set()
        stripes = []
        for raw in raw_stripes:
            if not isinstance(raw, dict):
                continue
            activity = raw.get("activity") if isinstance(raw.get("activity"), str) else None
            label = raw.get("label") if isinstance(raw.get("label"), str) else None
            if activity is not None:
                current_activities.add(activity)
            explicit = raw.get("mergeWithPrevious")
            merge = explicit is True or (activity in previous_activities and explicit is not False)
            stripes.append(Stripe(activity=activity, label=label, merge_with_previous=merge))
        previous_activities = current_activities

        try:
            days.append(ScheduleDay(date=item["date"], stripes=stripes))
        except ValidationError:
            dropped += 1
            log.debug("normalize_dropped_day", date=item["date"])

    if dropped:
        log.info("normalize_dropped_entries", dropped=dropped, kept=len(days))
    return effective_labels(days)


def effective_labels(days: list[ScheduleDay]) -> list[ScheduleDay]:
    """Carry a block's label onto continuation stripes that omit it.

    A continuation stripe without a label takes the last label seen for its
    activity; any other stripe without a label is labeled with its activity.
    """
    last_label: dict[str | None, str] = {}
    labeled = []
    for day in days:
        stripes = []
        for stripe in day.stripes:
            if stripe.label and stripe.label.strip():
                label = stripe.label.strip()
                last_label[stripe.activity] = label
            elif stripe.merge_with_previous:
                label = last_label.get(stripe.activity, stripe.activity)
            else:
                label = stripe.activity
            stripes.append(stripe.model_copy(update={"label": label}))
        labeled.append(day.model_copy(update={"stripes": stripes}))
    return labeled
