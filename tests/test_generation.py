from __future__ import annotations

import json
from datetime import date

import pytest
import requests

from src.transcoder.config import TranscoderConfig
from src.transcoder.errors import GenerationError, RateLimitError, RecoveryFailed, TransientError
from src.transcoder.generation import ScheduleGenerator, parse_schedule_response


class FakeResponse:
    def __init__(self, status_code: int = 200, content: str | None = None, body=None) -> None:
        self.status_code = status_code
        if body is None:
            body = {"choices": [{"message": {"content": content}}]}
        self._body = body
        self.text = "" if isinstance(body, Exception) else json.dumps(body)

    def json(self):
        if isinstance(self._body, Exception):
            raise self._body
        return self._body


class FakeSession:
    """Returns queued responses (or raises queued exceptions) and records payloads."""

    def __init__(self, *responses) -> None:
        self.responses = list(responses)
        self.calls: list[dict] = []

    def post(self, url, headers=None, json=None, timeout=None):
        self.calls.append({"url": url, "headers": headers, "json": json, "timeout": timeout})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture()
def config() -> TranscoderConfig:
    return TranscoderConfig(
        openai_api_key="test-key",
        generation_max_attempts=3,
        generation_retry_wait_seconds=0,
    )


def _schedule_content(days) -> str:
    return json.dumps({"schedule": days})


def test_recognize_returns_text(config) -> None:
    session = FakeSession(FakeResponse(content="February 2026\n\nSun Feb 1st - empty"))
    generator = ScheduleGenerator(config, session=session)

    text = generator.recognize(["data:image/png;base64,AAAA"], date(2026, 2, 1))

    assert text == "February 2026\n\nSun Feb 1st - empty"
    payload = session.calls[0]["json"]
    assert payload["model"] == "gpt-4o"
    assert "response_format" not in payload
    assert "February 2026" in payload["messages"][0]["content"]
    user_content = payload["messages"][1]["content"]
    assert user_content[1] == {"type": "image_url", "image_url": {"url": "data:image/png;base64,AAAA"}}
    assert session.calls[0]["headers"]["Authorization"] == "Bearer test-key"


def test_recognize_recovers_json_answer(config) -> None:
    content = '```json\n[{"date":"2026-02-02","stripes":[{"activity":"DESIGN"},{"activity":"AWARD"}]}]\n```'
    generator = ScheduleGenerator(config, session=FakeSession(FakeResponse(content=content)))

    text = generator.recognize(["https://example.com/page1.png"], date(2026, 2, 1))

    assert "Mon Feb 2nd - DESIGN, AWARD" in text.split("\n")


def test_recognize_surfaces_unusable_json(config) -> None:
    generator = ScheduleGenerator(config, session=FakeSession(FakeResponse(content='{"oops": 1}')))

    with pytest.raises(RecoveryFailed):
        generator.recognize(["https://example.com/page1.png"], date(2026, 2, 1))


def test_recognize_requires_images(config) -> None:
    with pytest.raises(GenerationError):
        ScheduleGenerator(config, session=FakeSession()).recognize([], date(2026, 2, 1))


def test_generate_normalizes_schedule(config) -> None:
    content = _schedule_content(
        [
            {"date": "2026-01-16", "stripes": [{"activity": "Production"}]},
            {"date": "2026-01-15", "stripes": [{"activity": "Production", "label": "Shoot"}]},
        ]
    )
    session = FakeSession(FakeResponse(content=content))
    generator = ScheduleGenerator(config, session=session)

    days = generator.generate("Production runs Jan 15-16", date(2026, 1, 1), ["Production", "VFX"])

    assert [d.date for d in days] == [date(2026, 1, 15), date(2026, 1, 16)]
    assert days[1].stripes[0].merge_with_previous is True
    payload = session.calls[0]["json"]
    assert payload["response_format"] == {"type": "json_object"}
    assert "Production, VFX" in payload["messages"][0]["content"]
    assert "assume 2026" in payload["messages"][0]["content"]


def test_generate_requires_prompt(config) -> None:
    with pytest.raises(GenerationError, match="Prompt"):
        ScheduleGenerator(config, session=FakeSession()).generate("   ", date(2026, 1, 1))


def test_populate_decodes_locally_without_request(config) -> None:
    session = FakeSession()
    generator = ScheduleGenerator(config, session=session)

    days = generator.populate("Mon Feb 2nd - Shoot (A1)\nTue Feb 3rd - Shoot (A1)", 2026, 2)

    assert session.calls == []
    assert [s.merge_with_previous for d in days for s in d.stripes] == [False, True]


def test_populate_falls_back_to_service(config) -> None:
    content = _schedule_content([{"date": "2026-02-02", "stripes": [{"activity": "Shoot"}]}])
    session = FakeSession(FakeResponse(content=content))
    generator = ScheduleGenerator(config, session=session)

    days = generator.populate("Shooting all of the first week of Feb", 2026, 2)

    assert len(session.calls) == 1
    assert days[0].date == date(2026, 2, 2)


def test_retries_transient_errors(config) -> None:
    content = _schedule_content([])
    session = FakeSession(
        requests.ConnectionError("reset"),
        FakeResponse(status_code=503, body={"error": "busy"}),
        FakeResponse(content=content),
    )
    generator = ScheduleGenerator(config, session=session)

    assert generator.generate("anything", date(2026, 1, 1)) == []
    assert len(session.calls) == 3


def test_gives_up_after_max_attempts(config) -> None:
    session = FakeSession(*[FakeResponse(status_code=429, body={}) for _ in range(3)])
    generator = ScheduleGenerator(config, session=session)

    with pytest.raises(RateLimitError):
        generator.generate("anything", date(2026, 1, 1))
    assert len(session.calls) == 3


def test_timeout_is_transient(config) -> None:
    config.generation_max_attempts = 1
    generator = ScheduleGenerator(config, session=FakeSession(requests.Timeout("slow")))

    with pytest.raises(TransientError):
        generator.generate("anything", date(2026, 1, 1))


def test_client_error_is_not_retried(config) -> None:
    session = FakeSession(FakeResponse(status_code=401, body={"error": "bad key"}))
    generator = ScheduleGenerator(config, session=session)

    with pytest.raises(GenerationError, match="401"):
        generator.generate("anything", date(2026, 1, 1))
    assert len(session.calls) == 1


def test_missing_api_key(config) -> None:
    config.openai_api_key = ""
    generator = ScheduleGenerator(config, session=FakeSession())

    with pytest.raises(GenerationError, match="API key"):
        generator.generate("anything", date(2026, 1, 1))


def test_empty_content(config) -> None:
    generator = ScheduleGenerator(config, session=FakeSession(FakeResponse(content="")))

    with pytest.raises(GenerationError, match="No response"):
        generator.generate("anything", date(2026, 1, 1))


def test_non_json_body(config) -> None:
    response = FakeResponse(body=ValueError("not json"))
    generator = ScheduleGenerator(config, session=FakeSession(response))

    with pytest.raises(GenerationError, match="non-JSON"):
        generator.generate("anything", date(2026, 1, 1))


@pytest.mark.parametrize("content", ["not json", '{"days": []}', '{"schedule": {}}'])
def test_parse_schedule_response_rejects_bad_shapes(content: str) -> None:
    with pytest.raises(GenerationError):
        parse_schedule_response(content)
