"""PostgreSQL implementation of InstitutionRepo."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from passport.db.engine import translate_db_errors
from passport.db.tables import InstitutionRow
from passport.models.institution import Institution


class PgInstitutionRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, institution_id: UUID) -> Institution | None:
        return await self._one(
            select(InstitutionRow).where(InstitutionRow.id == institution_id)
        )

    async def get_by_user_id(self, user_id: UUID) -> Institution | None:
        return await self._one(
            select(InstitutionRow).where(InstitutionRow.user_id == user_id)
        )

    async def add(self, institution: Institution) -> None:
        row = InstitutionRow(
            id=institution.id,
            user_id=institution.user_id,
            institution_name=institution.institution_name,
            institution_type=institution.institution_type,
            country=institution.country,
            accreditation_number=institution.accreditation_number,
            is_accredited=institution.is_accredited,
            created_at=institution.created_at,
        )
        with translate_db_errors("Institution already registered"):
            self._session.add(row)
            await self._session.flush()

    async def update_accreditation(
        self, institution_id: UUID, is_accredited: bool
    ) -> Institution | None:
        stmt = (
            update(InstitutionRow)
            .where(InstitutionRow.id == institution_id)
            .values(is_accredited=is_accredited)
        )
        with translate_db_errors():
            result = await self._session.execute(stmt)
        if result.rowcount == 0:
            return None
        return await self.get_by_id(institution_id)

    async def _one(self, stmt) -> Institution | None:
        with translate_db_errors():
            row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_institution(row)


def _row_to_institution(row: InstitutionRow) -> Institution:
    return Institution(
        id=row.id,
        user_id=row.user_id,
        institution_name=row.institution_name,
        institution_type=row.institution_type,
        country=row.country,
        accreditation_number=row.accreditation_number,
        is_accredited=row.is_accredited,
        created_at=row.created_at,
    )
