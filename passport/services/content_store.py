"""Content store: hash-addressed storage for credential documents.

Two strategies behind one Protocol, chosen once by the composition root:

  IpfsContentStore: talks to an IPFS node's HTTP API
    (``/api/v0/add``, ``/api/v0/block/stat``, ``/api/v0/cat``).

  MirrorContentStore: DEGRADED MODE for when no IPFS node is reachable.
    The reference is derived from a SHA-256 digest of the payload and
    carries the ``mock-ipfs-`` prefix, so issuance keeps working and
    operators can find degraded-mode records with a prefix query:

      SELECT public_id FROM credentials WHERE content_ref LIKE 'mock-ipfs-%';

    Payloads are held in process memory only.
"""

from __future__ import annotations

import hashlib
import logging
from typing import Protocol, runtime_checkable

import httpx

from passport.core.errors import InvalidPayload, StorageUnavailable
from passport.core.metrics import CONTENT_STORE_MIRROR_WRITES

logger = logging.getLogger(__name__)

MIRROR_PREFIX = "mock-ipfs-"


@runtime_checkable
class ContentStore(Protocol):
    mode: str

    async def store(self, data: bytes) -> str:
        """Persist bytes, return a content-derived reference."""
        ...

    async def exists(self, content_ref: str) -> bool:
        """True if the reference resolves. Never raises for a well-formed ref."""
        ...

    async def retrieve(self, content_ref: str) -> bytes:
        """Fetch the bytes behind a reference."""
        ...

    async def aclose(self) -> None: ...


def is_mirror_ref(content_ref: str) -> bool:
    return content_ref.startswith(MIRROR_PREFIX)


class MirrorContentStore:
    mode = "mirror"

    def __init__(self) -> None:
        self._blobs: dict[str, bytes] = {}

    async def store(self, data: bytes) -> str:
        if not data:
            raise InvalidPayload()
        content_ref = f"{MIRROR_PREFIX}{hashlib.sha256(data).hexdigest()}"
        self._blobs[content_ref] = data
        CONTENT_STORE_MIRROR_WRITES.inc()
        logger.warning("Document stored in mirror mode  content_ref=%s", content_ref)
        return content_ref

    async def exists(self, content_ref: str) -> bool:
        return content_ref in self._blobs

    async def retrieve(self, content_ref: str) -> bytes:
        try:
            return self._blobs[content_ref]
        except KeyError:
            raise StorageUnavailable(
                "Document not available from the mirror content store"
            ) from None

    async def aclose(self) -> None:
        return None


class IpfsContentStore:
    mode = "ipfs"

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url, timeout=timeout, transport=transport
        )

    async def store(self, data: bytes) -> str:
        if not data:
            raise InvalidPayload()
        try:
            resp = await self._client.post(
                "/api/v0/add",
                params={"pin": "true"},
                files={"file": ("document", data, "application/octet-stream")},
            )
            resp.raise_for_status()
            content_ref = resp.json()["Hash"]
        except (httpx.HTTPError, ValueError, KeyError) as e:
            logger.error("IPFS upload failed: %s", e)
            raise StorageUnavailable(f"Failed to upload to IPFS: {e}") from e

        logger.debug("Document stored  content_ref=%s bytes=%d", content_ref, len(data))
        return content_ref

    async def exists(self, content_ref: str) -> bool:
        try:
            resp = await self._client.post(
                "/api/v0/block/stat", params={"arg": content_ref}
            )
        except httpx.HTTPError as e:
            logger.warning("IPFS stat failed  content_ref=%s: %s", content_ref, e)
            return False
        return resp.status_code == 200

    async def retrieve(self, content_ref: str) -> bytes:
        try:
            resp = await self._client.post("/api/v0/cat", params={"arg": content_ref})
            resp.raise_for_status()
        except httpx.HTTPError as e:
            raise StorageUnavailable(f"Failed to download from IPFS: {e}") from e
        return resp.content

    async def aclose(self) -> None:
        await self._client.aclose()


def build_content_store(ipfs_url: str | None, *, timeout: float) -> ContentStore:
    """Pick the strategy once, at startup."""
    if not ipfs_url:
        logger.warning("No IPFS_URL configured: content store runs in mirror mode")
        return MirrorContentStore()
    try:
        url = httpx.URL(ipfs_url)
    except httpx.InvalidURL as e:
        logger.warning("Invalid IPFS_URL (%s): content store runs in mirror mode", e)
        return MirrorContentStore()
    if url.scheme not in ("http", "https") or not url.host:
        logger.warning(
            "IPFS_URL must be an http(s) URL (got %r): content store runs in mirror mode",
            ipfs_url,
        )
        return MirrorContentStore()
    logger.info("Content store: IPFS at %s", ipfs_url)
    return IpfsContentStore(ipfs_url, timeout=timeout)
