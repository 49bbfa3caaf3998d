"""Composition root.

Everything long-lived is built once here from Settings:

  content store   IPFS node, or mirror mode when IPFS_URL is unset/invalid
  ledger          HTTP ledger node, or the in-process local ledger
  proof renderer  QR generator
  token service   ES256 signer with an ephemeral key
  persistence     async engine + session factory (DATABASE_URL set),
                  otherwise one set of in-memory repositories

Repositories are handed out per request: a fresh session-bound set for
PostgreSQL, or the shared in-memory set. Nothing here is a module-level
singleton, so every test can build its own isolated container.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from passport.core.config import Settings
from passport.db.engine import create_engine_and_session_factory, session_scope
from passport.repos.credential_repo import CredentialRepo, InMemoryCredentialRepo
from passport.repos.institution_repo import InMemoryInstitutionRepo, InstitutionRepo
from passport.repos.pg_credential_repo import PgCredentialRepo
from passport.repos.pg_institution_repo import PgInstitutionRepo
from passport.repos.pg_user_repo import PgUserRepo
from passport.repos.user_repo import InMemoryUserRepo, UserRepo
from passport.services.content_store import ContentStore, build_content_store
from passport.services.credential_service import CredentialService
from passport.services.ledger import LedgerClient, build_ledger_client
from passport.services.proof_artifact import QrProofGenerator
from passport.services.token_service import TokenService

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Repos:
    users: UserRepo
    institutions: InstitutionRepo
    credentials: CredentialRepo


class ServiceContainer:
    def __init__(
        self,
        settings: Settings,
        *,
        content_store: ContentStore | None = None,
        ledger: LedgerClient | None = None,
    ) -> None:
        timeout = settings.external_timeout_seconds
        self.settings = settings
        self.content_store = content_store or build_content_store(
            settings.ipfs_url, timeout=timeout
        )
        self.ledger = ledger or build_ledger_client(settings.ledger_url, timeout=timeout)
        self.proofs = QrProofGenerator()
        self.tokens = TokenService(ttl_hours=settings.jwt_expiration_hours)

        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None
        self._memory: Repos | None = None

        if settings.database_url:
            self._engine, self._session_factory = create_engine_and_session_factory(
                settings.database_url, echo=settings.is_dev
            )
        else:
            logger.warning("No DATABASE_URL configured: using in-memory repositories")
            self._memory = Repos(
                users=InMemoryUserRepo(),
                institutions=InMemoryInstitutionRepo(),
                credentials=InMemoryCredentialRepo(),
            )

    @asynccontextmanager
    async def repos(self) -> AsyncIterator[Repos]:
        """One unit of work: commit on clean exit, roll back on error."""
        if self._session_factory is None:
            assert self._memory is not None
            yield self._memory
            return

        async with session_scope(self._session_factory) as session:
            yield Repos(
                users=PgUserRepo(session),
                institutions=PgInstitutionRepo(session),
                credentials=PgCredentialRepo(session),
            )

    def credential_service(self, repos: Repos) -> CredentialService:
        return CredentialService(
            content_store=self.content_store,
            ledger=self.ledger,
            proofs=self.proofs,
            credentials=repos.credentials,
            users=repos.users,
            institutions=repos.institutions,
        )

    async def database_status(self) -> str:
        """``ok`` / ``degraded`` for PostgreSQL, ``in_memory`` without one."""
        if self._engine is None:
            return "in_memory"
        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception as e:
            logger.warning("Database health check failed: %s", e)
            return "degraded"
        return "ok"

    async def aclose(self) -> None:
        # Reverse construction order.
        if self._engine is not None:
            await self._engine.dispose()
            logger.info("Database engine disposed")
        await self.ledger.aclose()
        await self.content_store.aclose()
