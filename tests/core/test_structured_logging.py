"""JSON log output: one parseable object per line with context lifted out."""

from __future__ import annotations

import json
import logging
import sys

from passport.core.logging import _ContainerFormatter, _JsonFormatter


def _record(msg: str = "test message", args: tuple = ()) -> logging.LogRecord:
    return logging.LogRecord(
        name="passport.services.credential_service",
        level=logging.INFO,
        pathname="credential_service.py",
        lineno=42,
        msg=msg,
        args=args,
        exc_info=None,
    )


def test_json_formatter_produces_valid_json() -> None:
    parsed = json.loads(_JsonFormatter().format(_record("Hello %s", ("world",))))
    assert parsed["level"] == "INFO"
    assert parsed["logger"] == "passport.services.credential_service"
    assert parsed["message"] == "Hello world"
    assert "timestamp" in parsed


def test_json_formatter_lifts_context_fields() -> None:
    record = _record()
    record.request_id = "abc-123"  # type: ignore[attr-defined]
    record.method = "POST"  # type: ignore[attr-defined]
    record.path = "/api/credentials/issue"  # type: ignore[attr-defined]
    record.credential_id = "SSP-1"  # type: ignore[attr-defined]
    record.duration_ms = 12.5  # type: ignore[attr-defined]

    parsed = json.loads(_JsonFormatter().format(record))
    assert parsed["request_id"] == "abc-123"
    assert parsed["method"] == "POST"
    assert parsed["path"] == "/api/credentials/issue"
    assert parsed["credential_id"] == "SSP-1"
    assert parsed["duration_ms"] == 12.5


def test_json_formatter_skips_placeholder_request_id() -> None:
    record = _record()
    record.request_id = "-"  # type: ignore[attr-defined]
    parsed = json.loads(_JsonFormatter().format(record))
    assert "request_id" not in parsed


def test_json_formatter_includes_exception_info() -> None:
    try:
        raise ValueError("test error")
    except ValueError:
        record = _record()
        record.exc_info = sys.exc_info()
        output = _JsonFormatter().format(record)

    parsed = json.loads(output)
    assert "ValueError: test error" in parsed["exception"]


def test_container_formatter_is_not_json() -> None:
    output = _ContainerFormatter().format(_record("server started"))
    assert "INFO" in output
    assert "server started" in output
    try:
        json.loads(output)
        raise AssertionError("Container format should not be valid JSON")
    except json.JSONDecodeError:
        pass
