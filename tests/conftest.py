from __future__ import annotations

import base64
from typing import Any
from uuid import UUID, uuid4

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from passport.core.config import Settings
from passport.main import create_app
from passport.models.enums import UserRole

HELLO_B64 = base64.b64encode(b"hello").decode()


def make_settings(**overrides: Any) -> Settings:
    """Test settings: in-memory repos, mirror content store, local ledger."""
    values: dict[str, Any] = {
        "app_env": "test",
        "log_level": "info",
        "log_json": False,
        "port": 8000,
        "database_url": None,
        "ipfs_url": None,
        "ledger_url": None,
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def app() -> FastAPI:
    # A fresh app per test: its own container, repos and signing key.
    return create_app(make_settings())


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


def mint_token(
    client: TestClient,
    user_id: UUID | None = None,
    role: UserRole = UserRole.PROFESSIONAL,
    email: str = "test-user@example.com",
) -> str:
    """Create a valid ES256 JWT signed by this app's token service."""
    tokens = client.app.state.container.tokens  # type: ignore[attr-defined]
    return tokens.create_access_token(
        sub=str(user_id or uuid4()), email=email, role=role
    )


def auth(token: str | None) -> dict[str, str]:
    if token is None:
        return {}
    return {"Authorization": f"Bearer {token}"}


def register_user(
    client: TestClient,
    role: UserRole = UserRole.PROFESSIONAL,
    email: str | None = None,
    name: str = "Test User",
) -> tuple[str, dict]:
    """Register through the API; return (token, user json)."""
    email = email or f"{role.value}-{uuid4().hex[:8]}@example.com"
    resp = client.post(
        "/api/auth/register",
        json={
            "email": email,
            "password": "correct-horse",
            "name": name,
            "role": role.value,
        },
    )
    assert resp.status_code == 201, resp.text
    body = resp.json()
    return body["token"], body["user"]


def issue_body(holder_email: str, **overrides: Any) -> dict[str, Any]:
    body: dict[str, Any] = {
        "holderEmail": holder_email,
        "credentialType": "certificate",
        "title": "Certified Safari Guide",
        "description": "Level 2 field guiding",
        "issueDate": "2024-01-15T00:00:00Z",
        "metadata": {"grade": "A"},
        "documentData": HELLO_B64,
    }
    body.update(overrides)
    return body
