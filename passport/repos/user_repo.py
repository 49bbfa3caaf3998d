from __future__ import annotations

from typing import Protocol
from uuid import UUID

from passport.core.errors import ConflictError
from passport.models.user import User


class UserRepo(Protocol):
    async def get_by_id(self, user_id: UUID) -> User | None: ...
    async def get_by_email(self, email: str) -> User | None: ...
    async def add(self, user: User) -> None: ...


class InMemoryUserRepo:
    """Process-local users, keyed the same ways the users table is unique."""

    def __init__(self) -> None:
        self._users: dict[UUID, User] = {}
        self._id_by_email: dict[str, UUID] = {}
        self._wallets: set[str] = set()

    async def get_by_id(self, user_id: UUID) -> User | None:
        return self._users.get(user_id)

    async def get_by_email(self, email: str) -> User | None:
        user_id = self._id_by_email.get(email)
        return self._users.get(user_id) if user_id is not None else None

    async def add(self, user: User) -> None:
        # Emails arrive normalized from the auth service.
        if user.email in self._id_by_email:
            raise ConflictError("A user with this email already exists")
        if user.wallet_address in self._wallets:
            raise ConflictError("Wallet address already registered")
        self._users[user.id] = user
        self._id_by_email[user.email] = user.id
        self._wallets.add(user.wallet_address)
