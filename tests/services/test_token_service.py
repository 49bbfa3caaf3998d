from __future__ import annotations

import time
import uuid

import jwt
import pytest

from passport.models.enums import UserRole
from passport.services.token_service import AUDIENCE, ISSUER, TokenService


def test_token_round_trip_carries_claims() -> None:
    svc = TokenService()
    sub = str(uuid.uuid4())
    token = svc.create_access_token(sub=sub, email="a@example.com", role=UserRole.INSTITUTION)

    claims = svc.decode_access_token(token)
    assert claims["sub"] == sub
    assert claims["email"] == "a@example.com"
    assert claims["role"] == "institution"
    assert claims["iss"] == ISSUER
    assert claims["aud"] == AUDIENCE
    assert claims["exp"] - claims["iat"] == 24 * 3600
    uuid.UUID(claims["jti"])


def test_ttl_is_configurable() -> None:
    svc = TokenService(ttl_hours=1)
    token = svc.create_access_token(sub="s", email="e@example.com", role=UserRole.EMPLOYER)
    claims = svc.decode_access_token(token)
    assert claims["exp"] - claims["iat"] == 3600


def test_token_header_pins_es256() -> None:
    svc = TokenService()
    token = svc.create_access_token(sub="s", email="e@example.com", role=UserRole.EMPLOYER)
    assert jwt.get_unverified_header(token)["alg"] == "ES256"


def test_token_from_other_key_is_rejected() -> None:
    token = TokenService().create_access_token(
        sub="s", email="e@example.com", role=UserRole.PROFESSIONAL
    )
    with pytest.raises(jwt.InvalidSignatureError):
        TokenService().decode_access_token(token)


def test_hs256_token_is_rejected() -> None:
    now = int(time.time())
    forged = jwt.encode(
        {
            "sub": "s",
            "role": "institution",
            "iss": ISSUER,
            "aud": AUDIENCE,
            "exp": now + 60,
            "iat": now,
            "jti": "x",
        },
        "shared-secret-of-at-least-32-bytes!!",
        algorithm="HS256",
    )
    with pytest.raises(jwt.InvalidTokenError):
        TokenService().decode_access_token(forged)
