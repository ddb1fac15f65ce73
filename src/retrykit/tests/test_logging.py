"""Tests for structured logging."""

from __future__ import annotations

import io

import orjson
import pytest

from retrykit import RetrykitSettings, configure_from_settings, configure_logging, get_logger, log_context
from retrykit.foundation.config import LoggingSettings
from retrykit.runtime.observability import ConsoleRenderer, JsonRenderer, NoOpRenderer


def test_json_renderer_emits_one_object_per_line() -> None:
    out = io.StringIO()
    configure_logging(format="json", output=out)

    log = get_logger("retrykit.retry", operation="fetch")
    log.warning("retry scheduled", attempt=1, delay=0.5)
    log.info("attempt succeeded after retries", attempt=2)

    lines = out.getvalue().splitlines()
    assert len(lines) == 2
    first = orjson.loads(lines[0])
    assert first["event"] == "retry scheduled"
    assert first["level"] == "warning"
    assert first["logger"] == "retrykit.retry"
    assert first["operation"] == "fetch"
    assert first["delay"] == 0.5
    assert "timestamp" in first


def test_json_renderer_stringifies_unknown_values() -> None:
    out = io.StringIO()
    configure_logging(format="json", output=out)

    get_logger().error("retries exhausted", error=ValueError("boom"))

    assert orjson.loads(out.getvalue())["error"] == "boom"


def test_console_renderer_plain_output() -> None:
    out = io.StringIO()
    configure_logging(format="console", output=out, colors=False)

    get_logger().bind(operation="sync").warning("retry scheduled", attempt=2, jitter=True)

    line = out.getvalue().strip()
    assert "[warning] retry scheduled" in line
    assert 'attempt=2 jitter=true operation="sync"' in line
    assert "\033[" not in line


def test_level_filters_entries() -> None:
    out = io.StringIO()
    configure_logging(format="json", level="warning", output=out)

    log = get_logger()
    log.info("hidden")
    log.error("shown")

    assert [orjson.loads(line)["event"] for line in out.getvalue().splitlines()] == ["shown"]


def test_log_context_scopes_fields() -> None:
    out = io.StringIO()
    configure_logging(format="json", output=out)
    log = get_logger()

    with log_context(request_id="r-1"):
        log.info("inside")
    log.info("outside")

    inside, outside = (orjson.loads(line) for line in out.getvalue().splitlines())
    assert inside["request_id"] == "r-1"
    assert "request_id" not in outside


def test_bound_context_overrides_scoped_context() -> None:
    out = io.StringIO()
    configure_logging(format="json", output=out)

    with log_context(operation="outer"):
        get_logger(operation="inner").info("event")

    assert orjson.loads(out.getvalue())["operation"] == "inner"


def test_unbind_drops_keys(captured, capture_logger) -> None:
    capture_logger.bind(a=1, b=2).unbind("a").info("event")

    assert captured.entries[0].context == {"b": 2}


def test_unknown_format_rejected() -> None:
    with pytest.raises(ValueError, match="Unknown format"):
        configure_logging(format="xml")


@pytest.mark.parametrize(
    ("fmt", "renderer_type"),
    [("console", ConsoleRenderer), ("json", JsonRenderer), ("none", NoOpRenderer)],
)
def test_configure_from_settings(fmt: str, renderer_type: type) -> None:
    settings = LoggingSettings(format=fmt, level="debug")
    assert isinstance(configure_from_settings(settings, output=io.StringIO()), renderer_type)


def test_configure_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RETRYKIT_LOG_FORMAT", "json")
    monkeypatch.setenv("RETRYKIT_LOG_LEVEL", "error")

    settings = RetrykitSettings()
    out = io.StringIO()
    configure_from_settings(settings.logging, output=out)

    log = get_logger()
    log.warning("hidden")
    log.error("shown")

    assert orjson.loads(out.getvalue())["event"] == "shown"
