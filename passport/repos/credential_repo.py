"""Credential repository contract and its in-memory implementation.

The repository exclusively owns persisted credential state. After
``add``, ``update_status`` is the only mutation path; everything else on
the record is write-once.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Protocol
from uuid import UUID

from passport.core.errors import StorageError
from passport.models.credential import Credential
from passport.models.enums import CredentialStatus


class CredentialRepo(Protocol):
    async def add(self, credential: Credential) -> None: ...
    async def get_by_id(self, credential_id: UUID) -> Credential | None: ...
    async def get_by_public_id(self, public_id: str) -> Credential | None: ...
    async def list_by_holder(self, holder_id: UUID) -> list[Credential]: ...
    async def list_by_issuer(self, issuer_id: UUID) -> list[Credential]: ...
    async def update_status(
        self, credential_id: UUID, status: CredentialStatus
    ) -> Credential | None: ...


def _newest_first(credentials: list[Credential]) -> list[Credential]:
    # Reversed insertion order first, so equal timestamps still list the
    # most recently added record first (sorted() is stable).
    return sorted(reversed(credentials), key=lambda c: c.created_at, reverse=True)


class InMemoryCredentialRepo:
    def __init__(self) -> None:
        self._by_id: dict[UUID, Credential] = {}
        self._by_public_id: dict[str, UUID] = {}

    async def add(self, credential: Credential) -> None:
        # Mirrors the unique index on credentials.public_id.
        if credential.public_id in self._by_public_id:
            raise StorageError("duplicate credential public id")
        # Stored records must not alias the caller's metadata dict.
        self._by_id[credential.id] = replace(
            credential, metadata=dict(credential.metadata)
        )
        self._by_public_id[credential.public_id] = credential.id

    async def get_by_id(self, credential_id: UUID) -> Credential | None:
        return self._by_id.get(credential_id)

    async def get_by_public_id(self, public_id: str) -> Credential | None:
        internal_id = self._by_public_id.get(public_id)
        if internal_id is None:
            return None
        return self._by_id.get(internal_id)

    async def list_by_holder(self, holder_id: UUID) -> list[Credential]:
        return _newest_first(
            [c for c in self._by_id.values() if c.holder_id == holder_id]
        )

    async def list_by_issuer(self, issuer_id: UUID) -> list[Credential]:
        return _newest_first(
            [c for c in self._by_id.values() if c.issuer_id == issuer_id]
        )

    async def update_status(
        self, credential_id: UUID, status: CredentialStatus
    ) -> Credential | None:
        cred = self._by_id.get(credential_id)
        if cred is None:
            return None

        updated = replace(cred, status=status)
        self._by_id[credential_id] = updated
        return updated
