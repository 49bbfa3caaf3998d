from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID, uuid4

from passport.models.enums import UserRole


@dataclass(frozen=True, slots=True)
class User:
    id: UUID
    wallet_address: str
    email: str
    password_hash: str
    name: str
    role: UserRole  # fixed at registration
    is_verified: bool
    created_at: datetime
    updated_at: datetime

    @staticmethod
    def new(
        *,
        email: str,
        password_hash: str,
        name: str,
        role: UserRole,
        wallet_address: str,
    ) -> User:
        now = datetime.now(UTC)
        return User(
            id=uuid4(),
            wallet_address=wallet_address,
            email=email,
            password_hash=password_hash,
            name=name,
            role=role,
            is_verified=False,
            created_at=now,
            updated_at=now,
        )
