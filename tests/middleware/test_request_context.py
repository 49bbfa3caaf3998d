"""Request context middleware: X-Request-ID on every response, one
summary log line per request carrying the request ID.
"""

from __future__ import annotations

import logging
import uuid

import pytest
from fastapi.testclient import TestClient

from passport.middleware.request_context import (
    _RequestContextFilter,
    install_request_context_filter,
    request_id_var,
)


def test_request_id_generated_when_not_provided(client: TestClient) -> None:
    resp = client.get("/health")
    req_id = resp.headers.get("x-request-id")
    assert req_id is not None
    uuid.UUID(req_id)


def test_request_id_echoed_when_provided(client: TestClient) -> None:
    resp = client.get("/health", headers={"X-Request-ID": "trace-me-123"})
    assert resp.headers.get("x-request-id") == "trace-me-123"


def test_request_id_present_on_error_responses(client: TestClient) -> None:
    resp = client.get("/api/credentials/my")  # no token -> 401
    assert resp.status_code == 401
    assert resp.headers.get("x-request-id") is not None


def test_request_id_present_on_domain_errors(client: TestClient) -> None:
    resp = client.post("/api/credentials/verify-qr", json={})
    assert resp.status_code == 400
    assert resp.headers.get("x-request-id") is not None


def test_summary_line_logged_with_context(
    client: TestClient, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.INFO, logger="passport.middleware.request_context"):
        client.get("/ready", headers={"X-Request-ID": "req-42"})

    summaries = [r for r in caplog.records if getattr(r, "path", None) == "/ready"]
    assert len(summaries) == 1
    assert summaries[0].status_code == 200  # type: ignore[attr-defined]
    assert summaries[0].method == "GET"  # type: ignore[attr-defined]


def test_filter_stamps_current_request_id() -> None:
    record = logging.LogRecord("t", logging.INFO, "f.py", 1, "m", (), None)
    token = request_id_var.set("req-7")
    try:
        _RequestContextFilter().filter(record)
    finally:
        request_id_var.reset(token)
    assert record.request_id == "req-7"  # type: ignore[attr-defined]


def test_install_filter_is_idempotent() -> None:
    install_request_context_filter()
    install_request_context_filter()
    for handler in logging.getLogger().handlers:
        count = sum(isinstance(f, _RequestContextFilter) for f in handler.filters)
        assert count <= 1
