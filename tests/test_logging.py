import io
import json
import logging

import structlog

from src.transcoder.logging import get_logger, setup_logging


def test_setup_logging_writes_json_to_given_stream() -> None:
    stream = io.StringIO()
    root_handlers = logging.getLogger().handlers[:]
    try:
        setup_logging(json_output=True, log_level="INFO", stream=stream)
        log = get_logger("tests.logging")
        log.debug("hidden_event")
        log.info("schedule_encoded", days=28)
    finally:
        structlog.reset_defaults()
        logging.getLogger().handlers = root_handlers

    lines = stream.getvalue().splitlines()
    assert len(lines) == 1
    entry = json.loads(lines[0])
    assert entry["event"] == "schedule_encoded"
    assert entry["days"] == 28
    assert entry["level"] == "info"
    assert "timestamp" in entry


def test_setup_logging_routes_stdlib_logging_to_stream() -> None:
    stream = io.StringIO()
    root = logging.getLogger()
    root_handlers, root_level = root.handlers[:], root.level
    try:
        setup_logging(log_level="WARNING", stream=stream)
        logging.getLogger("urllib3").warning("connection pool is full")
    finally:
        structlog.reset_defaults()
        root.handlers = root_handlers
        root.setLevel(root_level)

    assert "connection pool is full" in stream.getvalue()
