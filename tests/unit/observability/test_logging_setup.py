"""
smart-properties: unit tests for logging setup

Purpose
- Validate that structlog events reach the package logger with their fields
  and render as JSON lines or plain text.
"""

from __future__ import annotations

import io
import json
import logging

import pytest

from smart_properties.observability.logging import ROOT_LOGGER_NAME, get_logger, setup_logging


def test_library_is_silent_by_default(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger=ROOT_LOGGER_NAME):
        get_logger("smart_properties.tests").debug("quiet_event", detail=1)

    assert caplog.records == []


def test_json_lines_include_event_and_fields() -> None:
    stream = io.StringIO()
    setup_logging("DEBUG", "json", stream=stream)

    get_logger("smart_properties.tests").info("property_declared", owner="Article", count=2)

    line = json.loads(stream.getvalue().strip())
    assert line["event"] == "property_declared"
    assert line["level"] == "INFO"
    assert line["logger"] == "smart_properties.tests"
    assert line["fields"] == {"owner": "Article", "count": 2}
    assert line["timestamp"].endswith("Z")


def test_text_format_sorts_fields() -> None:
    stream = io.StringIO()
    setup_logging("info", "text", stream=stream)

    get_logger("smart_properties.tests").warning("lint_completed", zeta=1, alpha="a")

    assert stream.getvalue().strip() == (
        'WARNING smart_properties.tests: lint_completed alpha="a" zeta=1'
    )


def test_setup_replaces_previous_handler() -> None:
    first, second = io.StringIO(), io.StringIO()
    setup_logging("INFO", "text", stream=first)
    logger = setup_logging("INFO", "text", stream=second)

    get_logger("smart_properties.tests").info("only_once")

    marked = [handler for handler in logger.handlers if handler.stream is second]
    assert len(marked) == 1
    assert first.getvalue() == ""
    assert "only_once" in second.getvalue()


def test_level_filters_events() -> None:
    stream = io.StringIO()
    setup_logging("ERROR", "text", stream=stream)

    get_logger("smart_properties.tests").info("dropped")

    assert stream.getvalue() == ""


def test_invalid_settings_are_rejected() -> None:
    with pytest.raises(ValueError, match="log format"):
        setup_logging("INFO", "xml")  # type: ignore[arg-type]
    with pytest.raises(ValueError, match="logging level"):
        setup_logging("LOUD", "text")
