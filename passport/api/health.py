"""Health and readiness endpoints.

  /health (liveness):
    Always 200 while the process can answer. ``status`` says whether a
    dependency is impaired, ``checks`` says which one and which
    strategy each collaborator runs in:

      database       ok | degraded | in_memory
      content_store  ipfs | mirror
      ledger         http | local

    ``mirror`` and ``local`` are not failures, but a production
    deployment reporting them is misconfigured.

  /ready (readiness):
    200 when this instance can take traffic. Every collaborator has a
    working fallback, so readiness does not gate on them.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version
from typing import Annotated

from fastapi import APIRouter, Depends, Response

from passport.api.dependencies import get_container
from passport.services.container import ServiceContainer

router = APIRouter(tags=["health"])

SERVICE_NAME = "skills-passport"


def _service_version() -> str:
    try:
        return version(SERVICE_NAME)
    except PackageNotFoundError:
        return "0.0.0+local"


@router.get("/health")
async def health(
    container: Annotated[ServiceContainer, Depends(get_container)],
) -> dict:
    database = await container.database_status()
    checks = {
        "database": database,
        "content_store": container.content_store.mode,
        "ledger": container.ledger.mode,
    }
    return {
        "status": "degraded" if database == "degraded" else "ok",
        "service": SERVICE_NAME,
        "version": _service_version(),
        "checks": checks,
    }


@router.get("/ready")
async def ready() -> Response:
    return Response(status_code=200)
