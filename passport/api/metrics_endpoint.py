"""Prometheus scrape endpoint.

Exposes the default registry in text exposition format, e.g.:

  # TYPE credential_operations_total counter
  credential_operations_total{operation="verify",outcome="revoked"} 3.0
  content_store_mirror_writes_total 12.0

A rising ``content_store_mirror_writes_total`` means issuance is running
without a reachable IPFS node.

Left unauthenticated; restrict it at the ingress in production.
"""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, generate_latest

router = APIRouter(tags=["observability"])


@router.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    return Response(content=generate_latest(REGISTRY), media_type=CONTENT_TYPE_LATEST)
