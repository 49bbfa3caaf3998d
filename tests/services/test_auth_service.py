from __future__ import annotations

import asyncio

import pytest

from passport.core.errors import ConflictError, ValidationError
from passport.models.enums import UserRole
from passport.repos.user_repo import InMemoryUserRepo
from passport.services.auth_service import (
    authenticate_user,
    hash_password,
    register_user,
    verify_password,
)


def _register(repo: InMemoryUserRepo, **overrides):
    values = {
        "email": "Amani@Example.com",
        "password": "correct-horse",
        "name": "Amani",
        "role": UserRole.PROFESSIONAL,
    }
    values.update(overrides)
    return asyncio.run(register_user(repo, **values))


def test_hash_and_verify_password() -> None:
    hashed = hash_password("correct-horse")
    assert hashed.startswith("$argon2")
    assert verify_password("correct-horse", hashed) is True
    assert verify_password("wrong-horse", hashed) is False


def test_verify_password_tolerates_garbage_hash() -> None:
    assert verify_password("anything", "not-an-argon2-hash") is False
    assert verify_password("", "whatever") is False


def test_register_normalizes_email_and_hashes_password() -> None:
    repo = InMemoryUserRepo()
    user = _register(repo)
    assert user.email == "amani@example.com"
    assert user.password_hash != "correct-horse"
    assert user.is_verified is False
    assert user.wallet_address.startswith("0x")


def test_register_duplicate_email_conflicts() -> None:
    repo = InMemoryUserRepo()
    _register(repo)
    with pytest.raises(ConflictError):
        _register(repo, email="amani@example.com ")


@pytest.mark.parametrize(
    "overrides,message",
    [
        ({"email": ""}, "All fields are required"),
        ({"name": " "}, "All fields are required"),
        ({"password": ""}, "All fields are required"),
        ({"email": "amani.example.com"}, "Invalid email address"),
        ({"password": "1234567"}, "Password must be at least 8 characters"),
    ],
)
def test_register_validation(overrides: dict, message: str) -> None:
    with pytest.raises(ValidationError, match=message):
        _register(InMemoryUserRepo(), **overrides)


def test_authenticate_user() -> None:
    repo = InMemoryUserRepo()
    user = _register(repo)
    authed = asyncio.run(authenticate_user(repo, " AMANI@example.com", "correct-horse"))
    assert authed == user
    assert asyncio.run(authenticate_user(repo, "amani@example.com", "nope-nope")) is None
    assert asyncio.run(authenticate_user(repo, "ghost@example.com", "correct-horse")) is None
