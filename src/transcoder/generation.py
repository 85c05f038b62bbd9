"""ScheduleGenerator - client for the external schedule generation service.

The service (an OpenAI-compatible chat completions endpoint) does the work the
codec deliberately does not: reading calendar images and understanding free
text. Everything it returns is untrusted:

* recognition answers go through RecoveryGate, since the model sometimes sends
  the JSON schedule instead of the requested text;
* schedule answers go through normalize_schedule;
* annotated text that is already well-formed is decoded locally and never sent.

Network failures and 5xx/429 responses raise TransientError and are retried
with tenacity; other failures raise GenerationError.
"""

import json
from datetime import date
from typing import Any

import requests
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_fixed

from src.transcoder.calendar_math import month_full_name
from src.transcoder.config import TranscoderConfig, get_config
from src.transcoder.decoder import decode_text
from src.transcoder.errors import (
    DecodeError,
    GenerationError,
    RateLimitError,
    TransientError,
)
from src.transcoder.logging import get_logger
from src.transcoder.models import ScheduleDay
from src.transcoder.normalize import normalize_schedule
from src.transcoder.prompts import (
    DEFAULT_ACTIVITY_NAMES,
    GENERATE_SYSTEM,
    POPULATE_SYSTEM,
    RECOGNIZE_DEFAULT_INSTRUCTION,
    RECOGNIZE_SYSTEM,
)
from src.transcoder.recovery import RecoveryGate, strip_json_fence

log = get_logger(__name__)


class ScheduleGenerator:
    """Calendar recognition and schedule generation over the chat completions API."""

    def __init__(
        self,
        config: TranscoderConfig | None = None,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize ScheduleGenerator.

        Args:
            config: Settings to use; defaults to the get_config() singleton.
            session: HTTP session; a new requests.Session if omitted.
        """
        self.config = config or get_config()
        self.session = session or requests.Session()
        self.gate = RecoveryGate(
            scope=self.config.merge_code_scope, unknown=self.config.unknown_activity
        )
        self._retrying = Retrying(
            stop=stop_after_attempt(self.config.generation_max_attempts),
            wait=wait_fixed(self.config.generation_retry_wait_seconds),
            retry=retry_if_exception_type(TransientError),
            reraise=True,
        )

    def recognize(
        self,
        images: list[str],
        reference: date,
        instruction: str | None = None,
    ) -> str:
        """Describe calendar images as annotated text.

        Args:
            images: Image URLs or ``data:image/png;base64,...`` strings, one per page.
            reference: Any date in the month the calendar shows.
            instruction: Extra user instruction; a generic one if omitted.

        Returns:
            Annotated text, recovered from JSON if the service sent JSON.

        Raises:
            GenerationError: If no images are given or the service fails.
            RecoveryFailed: If the service sent unusable JSON.
        """
        if not images:
            raise GenerationError("At least one calendar image is required")

        system = RECOGNIZE_SYSTEM.format(
            month_name=month_full_name(reference.month), year=reference.year
        )
        content: list[dict[str, Any]] = [
            {"type": "text", "text": (instruction or RECOGNIZE_DEFAULT_INSTRUCTION).strip()}
        ]
        content.extend({"type": "image_url", "image_url": {"url": image}} for image in images)

        response = self._complete(
            [{"role": "system", "content": system}, {"role": "user", "content": content}],
            json_mode=False,
        )
        return self.gate.process(response)

    def generate(
        self,
        prompt: str,
        reference: date,
        activity_names: list[str] | None = None,
    ) -> list[ScheduleDay]:
        """Turn a free-text production timeline into a schedule.

        Args:
            prompt: The user's description, e.g. "Production runs Jan 15-20".
            reference: Date whose year is assumed when the prompt gives none.
            activity_names: Activity types the schedule may use.

        Raises:
            GenerationError: If the prompt is blank or the response is unusable.
        """
        if not prompt or not prompt.strip():
            raise GenerationError("Prompt is required")

        system = GENERATE_SYSTEM.format(
            activity_names=", ".join(activity_names or DEFAULT_ACTIVITY_NAMES),
            year=reference.year,
        )
        response = self._complete(
            [{"role": "system", "content": system}, {"role": "user", "content": prompt.strip()}],
            json_mode=True,
        )
        return parse_schedule_response(response)

    def populate(self, summary: str, reference_year: int, reference_month: int) -> list[ScheduleDay]:
        """Turn (possibly user-edited) annotated text into a schedule.

        Well-formed text is decoded locally; anything the decoder rejects is
        sent to the service with the same grammar rules.

        Raises:
            GenerationError: If the summary is blank or the service fails.
        """
        if not summary or not summary.strip():
            raise GenerationError("Summary is required")

        try:
            days = decode_text(summary, reference_year, reference_month)
        except DecodeError as e:
            log.info("populate_local_decode_failed", error=str(e))
        else:
            if days:
                log.info("populate_decoded_locally", days=len(days))
                return days

        system = POPULATE_SYSTEM.format(year=reference_year)
        response = self._complete(
            [{"role": "system", "content": system}, {"role": "user", "content": summary.strip()}],
            json_mode=True,
        )
        return parse_schedule_response(response)

    def _complete(self, messages: list[dict[str, Any]], *, json_mode: bool) -> str:
        if not self.config.openai_api_key:
            raise GenerationError("OpenAI API key not configured")

        payload: dict[str, Any] = {
            "model": self.config.openai_model,
            "messages": messages,
            "temperature": self.config.openai_temperature,
        }
        if json_mode:
            payload["response_format"] = {"type": "json_object"}
        return self._retrying(self._post, payload)

    def _post(self, payload: dict[str, Any]) -> str:
        """Send one chat completion request and return the message content."""
        try:
            resp = self.session.post(
                self.config.openai_url,
                headers={"Authorization": f"Bearer {self.config.openai_api_key}"},
                json=payload,
                timeout=self.config.request_timeout_seconds,
            )
        except (requests.ConnectionError, requests.Timeout) as e:
            log.warning("generation_request_failed", error=str(e), type=type(e).__name__)
            raise TransientError(f"Generation request failed: {e}") from e

        if resp.status_code == 429:
            log.warning("generation_rate_limited")
            raise RateLimitError("Generation service rate limit exceeded")
        if resp.status_code >= 500:
            log.warning("generation_server_error", status=resp.status_code)
            raise TransientError(f"Generation service error: {resp.status_code}")
        if resp.status_code >= 400:
            log.error("generation_rejected", status=resp.status_code, body=resp.text[:200])
            raise GenerationError(f"Generation service rejected request: {resp.status_code}")

        try:
            data = resp.json()
        except ValueError as e:
            raise GenerationError("Generation service returned a non-JSON body") from e

        choices = data.get("choices") if isinstance(data, dict) else None
        content = None
        if choices:
            content = (choices[0].get("message") or {}).get("content")
        if not content:
            raise GenerationError("No response from generation service")

        log.debug("generation_completed", model=payload["model"], length=len(content))
        return content


def parse_schedule_response(response: str) -> list[ScheduleDay]:
    """Parse a ``{"schedule": [...]}`` answer into a normalized schedule.

    Raises:
        GenerationError: If the answer is not JSON or has no schedule array.
    """
    try:
        data = json.loads(strip_json_fence(response))
    except json.JSONDecodeError as e:
        raise GenerationError(f"Generation response was not valid JSON: {e}") from e

    schedule = data.get("schedule") if isinstance(data, dict) else None
    if not isinstance(schedule, list):
        raise GenerationError("Invalid schedule format from generation service")
    return normalize_schedule(schedule)
