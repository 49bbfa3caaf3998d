from __future__ import annotations

from fastapi.testclient import TestClient

from passport.models.enums import UserRole
from tests.conftest import auth, register_user

_BODY = {
    "institutionName": "Serengeti Guiding School",
    "institutionType": "vocational",
    "country": "Tanzania",
    "accreditationNumber": "TZ-VOC-0042",
}


def test_register_institution_starts_unaccredited(client: TestClient) -> None:
    token, user = register_user(client, UserRole.INSTITUTION)

    resp = client.post("/api/institutions/register", json=_BODY, headers=auth(token))
    assert resp.status_code == 201
    body = resp.json()
    assert body["userId"] == user["id"]
    assert body["institutionName"] == "Serengeti Guiding School"
    assert body["accreditationNumber"] == "TZ-VOC-0042"
    assert body["isAccredited"] is False


def test_register_institution_twice_is_409(client: TestClient) -> None:
    token, _ = register_user(client, UserRole.INSTITUTION)
    client.post("/api/institutions/register", json=_BODY, headers=auth(token))

    resp = client.post("/api/institutions/register", json=_BODY, headers=auth(token))
    assert resp.status_code == 409
    assert resp.json() == {"error": "Institution already registered"}


def test_register_institution_requires_institution_role(client: TestClient) -> None:
    token, _ = register_user(client, UserRole.EMPLOYER)
    resp = client.post("/api/institutions/register", json=_BODY, headers=auth(token))
    assert resp.status_code == 403


def test_register_institution_requires_name(client: TestClient) -> None:
    token, _ = register_user(client, UserRole.INSTITUTION)
    resp = client.post(
        "/api/institutions/register",
        json={**_BODY, "institutionName": " "},
        headers=auth(token),
    )
    assert resp.status_code == 400


def test_accreditation_number_is_optional(client: TestClient) -> None:
    token, _ = register_user(client, UserRole.INSTITUTION)
    body = {k: v for k, v in _BODY.items() if k != "accreditationNumber"}
    resp = client.post("/api/institutions/register", json=body, headers=auth(token))
    assert resp.status_code == 201
    assert resp.json()["accreditationNumber"] is None


def test_get_my_institution(client: TestClient) -> None:
    token, _ = register_user(client, UserRole.INSTITUTION)
    created = client.post(
        "/api/institutions/register", json=_BODY, headers=auth(token)
    ).json()

    resp = client.get("/api/institutions/me", headers=auth(token))
    assert resp.status_code == 200
    assert resp.json() == created


def test_get_my_institution_without_profile_is_404(client: TestClient) -> None:
    token, _ = register_user(client, UserRole.INSTITUTION)
    resp = client.get("/api/institutions/me", headers=auth(token))
    assert resp.status_code == 404
    assert resp.json() == {"error": "Institution not found"}
