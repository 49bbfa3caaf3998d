"""PostgreSQL implementation of UserRepo."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from passport.db.engine import translate_db_errors
from passport.db.tables import UserRow
from passport.models.enums import UserRole, parse_stored
from passport.models.user import User


class PgUserRepo:
    """Satisfies the UserRepo Protocol using PostgreSQL via SQLAlchemy."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, user_id: UUID) -> User | None:
        stmt = select(UserRow).where(UserRow.id == user_id)
        with translate_db_errors():
            row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_user(row)

    async def get_by_email(self, email: str) -> User | None:
        stmt = select(UserRow).where(UserRow.email == email)
        with translate_db_errors():
            row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_user(row)

    async def add(self, user: User) -> None:
        row = UserRow(
            id=user.id,
            wallet_address=user.wallet_address,
            email=user.email,
            password_hash=user.password_hash,
            name=user.name,
            role=user.role.value,
            is_verified=user.is_verified,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )
        with translate_db_errors("A user with this email already exists"):
            self._session.add(row)
            await self._session.flush()


def _row_to_user(row: UserRow) -> User:
    return User(
        id=row.id,
        wallet_address=row.wallet_address,
        email=row.email,
        password_hash=row.password_hash,
        name=row.name,
        role=parse_stored(UserRole, row.role),
        is_verified=row.is_verified,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
