from __future__ import annotations

import logging
import re

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHash, VerificationError, VerifyMismatchError

from passport.core.errors import ConflictError, ValidationError
from passport.models.enums import UserRole
from passport.models.user import User
from passport.repos.user_repo import UserRepo
from passport.services.ledger import generate_wallet_address

logger = logging.getLogger(__name__)

# Argon2 hash strings encode parameters + salt
_ph = PasswordHasher()

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MIN_PASSWORD_LENGTH = 8


def normalize_email(email: str) -> str:
    return email.strip().lower()


def hash_password(plain_password: str) -> str:
    if not plain_password:
        raise ValueError("password must be non-empty")
    return _ph.hash(plain_password)


# verify_password() must catch Argon2 exceptions and return False
def verify_password(plain_password: str, password_hash: str) -> bool:
    if not plain_password or not password_hash:
        return False
    try:
        return _ph.verify(password_hash, plain_password)
    except (VerifyMismatchError, VerificationError, InvalidHash):
        return False


async def register_user(
    repo: UserRepo,
    *,
    email: str,
    password: str,
    name: str,
    role: UserRole,
) -> User:
    """Create a user with a server-generated wallet address."""
    email = normalize_email(email)
    name = name.strip()

    if not email or not name or not password:
        raise ValidationError("All fields are required")
    if not _EMAIL_RE.match(email):
        raise ValidationError("Invalid email address")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
        )

    if await repo.get_by_email(email) is not None:
        logger.warning("Rejected duplicate email=%s", email)
        raise ConflictError("A user with this email already exists")

    user = User.new(
        email=email,
        password_hash=hash_password(password),
        name=name,
        role=role,
        wallet_address=generate_wallet_address(),
    )
    # The repo re-checks uniqueness; a concurrent registration surfaces
    # as ConflictError from there.
    await repo.add(user)
    logger.info("User registered  user_id=%s role=%s", user.id, user.role)
    return user


async def authenticate_user(repo: UserRepo, email: str, password: str) -> User | None:
    user = await repo.get_by_email(normalize_email(email))
    if user is None:
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user
