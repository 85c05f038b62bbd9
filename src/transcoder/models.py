"""Pydantic models for schedule data.

All data structures use Pydantic v2 for validation, serialization, and type safety.
The JSON interchange shape is an array of
``{"date": "YYYY-MM-DD", "stripes": [{"activity", "label", "mergeWithPrevious"}]}``.
"""

import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

UNKNOWN_ACTIVITY = "Unknown"


class Stripe(BaseModel):
    """One labeled activity block on a calendar day.

    ``merge_with_previous`` marks the stripe as the continuation of an
    identically-named block on the immediately preceding day. The first day
    of a merged run always has it False.
    """

    model_config = ConfigDict(populate_by_name=True)

    activity: str | None = None  # Brush / activity type, e.g. "Production"
    label: str | None = None  # Optional override, e.g. "Picture Lock"
    merge_with_previous: bool = Field(default=False, alias="mergeWithPrevious")

    def display_name(self, unknown: str = UNKNOWN_ACTIVITY) -> str:
        """Label if present, else activity, else ``unknown``. Blank strings count as absent."""
        if self.label and self.label.strip():
            return self.label.strip()
        if self.activity and self.activity.strip():
            return self.activity.strip()
        return unknown


class ScheduleDay(BaseModel):
    """A calendar day and its stripes in display order (may be empty)."""

    date: datetime.date
    stripes: list[Stripe] = []


ScheduleAdapter = TypeAdapter(list[ScheduleDay])


def schedule_from_json(data: Any) -> list[ScheduleDay]:
    """Validate already-parsed JSON (a list of day objects) into ScheduleDay models.

    Raises:
        pydantic.ValidationError: If the data does not match the interchange shape.
    """
    return ScheduleAdapter.validate_python(data)


def schedule_to_json(days: list[ScheduleDay]) -> list[dict[str, Any]]:
    """Dump a schedule to the JSON interchange shape (camelCase, ISO dates, no nulls)."""
    return ScheduleAdapter.dump_python(days, mode="json", by_alias=True, exclude_none=True)
