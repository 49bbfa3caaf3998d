from __future__ import annotations

from dataclasses import replace
from typing import Protocol
from uuid import UUID

from passport.core.errors import ConflictError
from passport.models.institution import Institution


class InstitutionRepo(Protocol):
    async def get_by_id(self, institution_id: UUID) -> Institution | None: ...
    async def get_by_user_id(self, user_id: UUID) -> Institution | None: ...
    async def add(self, institution: Institution) -> None: ...
    async def update_accreditation(
        self, institution_id: UUID, is_accredited: bool
    ) -> Institution | None: ...


class InMemoryInstitutionRepo:
    def __init__(self) -> None:
        self._by_id: dict[UUID, Institution] = {}
        self._by_user: dict[UUID, Institution] = {}

    async def get_by_id(self, institution_id: UUID) -> Institution | None:
        return self._by_id.get(institution_id)

    async def get_by_user_id(self, user_id: UUID) -> Institution | None:
        return self._by_user.get(user_id)

    async def add(self, institution: Institution) -> None:
        if institution.user_id in self._by_user:
            raise ConflictError("Institution already registered")
        self._by_id[institution.id] = institution
        self._by_user[institution.user_id] = institution

    async def update_accreditation(
        self, institution_id: UUID, is_accredited: bool
    ) -> Institution | None:
        inst = self._by_id.get(institution_id)
        if inst is None:
            return None

        updated = replace(inst, is_accredited=is_accredited)
        self._by_id[institution_id] = updated
        self._by_user[updated.user_id] = updated
        return updated
