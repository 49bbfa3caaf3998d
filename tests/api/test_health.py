from __future__ import annotations

import httpx
from fastapi.testclient import TestClient

from passport.main import create_app
from passport.services.container import ServiceContainer
from passport.services.content_store import IpfsContentStore
from passport.services.ledger import HttpLedgerClient
from tests.conftest import make_settings


def test_health_reports_fallback_strategies(client: TestClient) -> None:
    resp = client.get("/health")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "ok"
    assert body["service"] == "skills-passport"
    assert body["version"]
    assert body["checks"] == {
        "database": "in_memory",
        "content_store": "mirror",
        "ledger": "local",
    }


def test_health_reports_configured_collaborators() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(200))
    settings = make_settings()
    container = ServiceContainer(
        settings,
        content_store=IpfsContentStore(
            "http://ipfs.test:5001", timeout=1.0, transport=transport
        ),
        ledger=HttpLedgerClient("http://ledger.test", timeout=1.0, transport=transport),
    )
    client = TestClient(create_app(settings, container=container))

    checks = client.get("/health").json()["checks"]
    assert checks["content_store"] == "ipfs"
    assert checks["ledger"] == "http"


def test_ready_returns_200(client: TestClient) -> None:
    resp = client.get("/ready")
    assert resp.status_code == 200


def test_docs_disabled_outside_dev(client: TestClient) -> None:
    assert client.get("/docs").status_code == 404


def test_docs_enabled_in_dev() -> None:
    client = TestClient(create_app(make_settings(app_env="dev")))
    assert client.get("/docs").status_code == 200
