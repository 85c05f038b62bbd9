from __future__ import annotations

from datetime import date

import pytest
from structlog.testing import capture_logs

from src.transcoder.calendar_math import days_in_month
from src.transcoder.models import ScheduleDay, Stripe


def build_month(year: int, month: int, stripes_by_day: dict[int, list[Stripe]]) -> list[ScheduleDay]:
    """Every day of the month, with stripes for the days given."""
    return [
        ScheduleDay(date=date(year, month, day), stripes=stripes_by_day.get(day, []))
        for day in range(1, days_in_month(year, month) + 1)
    ]


@pytest.fixture()
def february_schedule() -> list[ScheduleDay]:
    """February 2026 with one three-day block, one labeled two-day block and a standalone day."""
    return build_month(
        2026,
        2,
        {
            2: [Stripe(activity="Pre-Production")],
            3: [Stripe(activity="Production")],
            4: [
                Stripe(activity="Production", merge_with_previous=True),
                Stripe(activity="Client Meeting"),
            ],
            5: [Stripe(activity="Production", merge_with_previous=True)],
            10: [Stripe(activity="Post-Production", label="Picture Lock")],
            11: [Stripe(activity="Post-Production", label="Picture Lock", merge_with_previous=True)],
            20: [Stripe(activity="Production")],
        },
    )


@pytest.fixture()
def month_builder():
    return build_month


@pytest.fixture(autouse=True)
def log_output():
    """Capture structlog events instead of printing them."""
    with capture_logs() as logs:
        yield logs
