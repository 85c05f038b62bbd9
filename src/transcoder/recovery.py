"""RecoveryGate - rescues JSON answers to a "plain text expected" request.

The calendar recognition step asks the generation service for annotated text,
but the service sometimes answers with the JSON schedule instead (often
wrapped in a ```json fence). Rather than showing that to the user, the gate
detects it, parses the schedule and encodes it into the text it should have
been.
"""

import json
import re

from pydantic import ValidationError

from src.transcoder.encoder import encode_schedule
from src.transcoder.errors import EncodeError, RecoveryFailed
from src.transcoder.logging import get_logger
from src.transcoder.models import UNKNOWN_ACTIVITY, ScheduleDay, schedule_from_json

log = get_logger(__name__)

FENCE_OPEN_RE = re.compile(r"^```(?:json)?[ \t]*\n?", re.IGNORECASE)
FENCE_CLOSE_RE = re.compile(r"\n?```$")


def looks_like_json(response: str) -> bool:
    """True if a text response is probably a JSON schedule.

    Matches when the trimmed response starts with ``{`` or ``[``, contains a
    ```json fence, or mentions both ``"date":`` and ``"stripes":``.
    """
    trimmed = response.strip()
    if trimmed.startswith("{") or trimmed.startswith("["):
        return True
    if "```json" in response:
        return True
    return '"date":' in response and '"stripes":' in response


def strip_json_fence(response: str) -> str:
    """Remove a leading ```json and trailing ``` fence if present."""
    body = FENCE_OPEN_RE.sub("", response.strip(), count=1)
    return FENCE_CLOSE_RE.sub("", body, count=1).strip()


def parse_schedule_json(response: str) -> list[ScheduleDay]:
    """Parse a (possibly fenced) JSON array of days into a date-sorted schedule.

    Raises:
        RecoveryFailed: If the body is not JSON, not an array, or not day-shaped.
    """
    body = strip_json_fence(response)
    try:
        data = json.loads(body)
    except json.JSONDecodeError as e:
        raise RecoveryFailed(f"Response looked like JSON but could not be parsed: {e}") from e

    if not isinstance(data, list):
        raise RecoveryFailed(
            f"Expected a JSON array of days, got {type(data).__name__}"
        )

    try:
        days = schedule_from_json(data)
    except ValidationError as e:
        raise RecoveryFailed(
            f"JSON array is not a day/stripe schedule: {e.error_count()} validation error(s)"
        ) from e
    return sorted(days, key=lambda day: day.date)


class RecoveryGate:
    """Pass plain-text responses through; convert JSON schedules to annotated text."""

    def __init__(self, *, scope: str = "name", unknown: str = UNKNOWN_ACTIVITY) -> None:
        self.scope = scope
        self.unknown = unknown

    def recover(self, response: str) -> str:
        """Encode a JSON schedule response as annotated text.

        Raises:
            RecoveryFailed: If the response cannot be parsed or encoded.
        """
        days = parse_schedule_json(response)
        try:
            text = encode_schedule(days, scope=self.scope, unknown=self.unknown)
        except EncodeError as e:
            raise RecoveryFailed(f"Recovered schedule could not be encoded: {e}") from e

        log.info("recovery_succeeded", days=len(days))
        return text

    def process(self, response: str) -> str:
        """Return ``response`` unchanged unless it looks like JSON, else recover it.

        Raises:
            RecoveryFailed: If the response looks like JSON but is unusable.
        """
        if not looks_like_json(response):
            return response

        log.warning("recovery_triggered", length=len(response))
        try:
            return self.recover(response)
        except RecoveryFailed as e:
            log.error("recovery_failed", error=str(e))
            raise
