"""PostgreSQL implementation of CredentialRepo.

Each method is a single statement, so a write either fully applies or
not at all. ``update_status`` is the only UPDATE this repo issues.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from passport.db.engine import translate_db_errors
from passport.db.tables import CredentialRow
from passport.models.credential import Credential
from passport.models.enums import CredentialStatus, CredentialType, parse_stored


class PgCredentialRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, credential: Credential) -> None:
        row = CredentialRow(
            id=credential.id,
            public_id=credential.public_id,
            holder_id=credential.holder_id,
            issuer_id=credential.issuer_id,
            credential_type=credential.credential_type.value,
            title=credential.title,
            description=credential.description,
            content_ref=credential.content_ref,
            anchor_ref=credential.anchor_ref,
            proof_artifact=credential.proof_artifact,
            issue_date=credential.issue_date,
            expiry_date=credential.expiry_date,
            status=credential.status.value,
            metadata_json=credential.metadata,
            created_at=credential.created_at,
        )
        with translate_db_errors():
            self._session.add(row)
            await self._session.flush()

    async def get_by_id(self, credential_id: UUID) -> Credential | None:
        stmt = select(CredentialRow).where(CredentialRow.id == credential_id)
        with translate_db_errors():
            row = (await self._session.execute(stmt)).scalar_one_or_none()
        return _row_to_credential(row) if row is not None else None

    async def get_by_public_id(self, public_id: str) -> Credential | None:
        stmt = select(CredentialRow).where(CredentialRow.public_id == public_id)
        with translate_db_errors():
            row = (await self._session.execute(stmt)).scalar_one_or_none()
        return _row_to_credential(row) if row is not None else None

    async def list_by_holder(self, holder_id: UUID) -> list[Credential]:
        stmt = (
            select(CredentialRow)
            .where(CredentialRow.holder_id == holder_id)
            .order_by(CredentialRow.created_at.desc())
        )
        with translate_db_errors():
            rows = (await self._session.execute(stmt)).scalars().all()
        # An unknown stored value raises here instead of dropping the row.
        return [_row_to_credential(r) for r in rows]

    async def list_by_issuer(self, issuer_id: UUID) -> list[Credential]:
        stmt = (
            select(CredentialRow)
            .where(CredentialRow.issuer_id == issuer_id)
            .order_by(CredentialRow.created_at.desc())
        )
        with translate_db_errors():
            rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_credential(r) for r in rows]

    async def update_status(
        self, credential_id: UUID, status: CredentialStatus
    ) -> Credential | None:
        stmt = (
            update(CredentialRow)
            .where(CredentialRow.id == credential_id)
            .values(status=status.value)
        )
        with translate_db_errors():
            result = await self._session.execute(stmt)
        if result.rowcount == 0:
            return None
        return await self.get_by_id(credential_id)


def _row_to_credential(row: CredentialRow) -> Credential:
    return Credential(
        id=row.id,
        public_id=row.public_id,
        holder_id=row.holder_id,
        issuer_id=row.issuer_id,
        credential_type=parse_stored(CredentialType, row.credential_type),
        title=row.title,
        description=row.description,
        content_ref=row.content_ref,
        anchor_ref=row.anchor_ref,
        proof_artifact=row.proof_artifact,
        issue_date=row.issue_date,
        expiry_date=row.expiry_date,
        status=parse_stored(CredentialStatus, row.status),
        metadata=dict(row.metadata_json or {}),
        created_at=row.created_at,
    )
