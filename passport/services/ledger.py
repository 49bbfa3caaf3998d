"""Ledger anchoring: tamper-evident fingerprints for issued credentials.

The ledger is an external append-only service with a two-call contract:

    anchor(credential_id, content_ref) -> anchor_ref
    confirm_anchored(credential_id, anchor_ref) -> bool

The fingerprint is blake2b-256 over ``credential_id + content_ref``,
hex-encoded (64 chars).

``anchor_ref`` is the reference persisted on the credential at issuance.
A ledger node ignores it and answers from its own records; the local
ledger has no records that outlive the process, so a persisted anchor
ref is its evidence that anchoring once succeeded.

KNOWN GAP: ``confirm_anchored`` only asks whether the id was ever
anchored. It does not recompute the fingerprint from the credential's
current content_ref, so a document swapped after anchoring would still
confirm. Fixing this needs the ledger to expose the stored fingerprint.
"""

from __future__ import annotations

import hashlib
import logging
from typing import Protocol, runtime_checkable

import httpx
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

from passport.core.errors import AnchorUnavailable

logger = logging.getLogger(__name__)

FINGERPRINT_HEX_LENGTH = 64


def fingerprint(credential_id: str, content_ref: str) -> str:
    combined = f"{credential_id}{content_ref}".encode()
    return hashlib.blake2b(combined, digest_size=32).hexdigest()


def generate_wallet_address() -> str:
    """Fresh wallet-style address: ``0x`` + hex Ed25519 public key.

    The private half is discarded; the address is an identifier only.
    """
    public = Ed25519PrivateKey.generate().public_key()
    raw = public.public_bytes(encoding=Encoding.Raw, format=PublicFormat.Raw)
    return f"0x{raw.hex()}"


@runtime_checkable
class LedgerClient(Protocol):
    mode: str

    async def anchor(self, credential_id: str, content_ref: str) -> str: ...
    async def confirm_anchored(self, credential_id: str, anchor_ref: str) -> bool: ...
    async def aclose(self) -> None: ...


class LocalLedger:
    """Prototype ledger: the anchor reference is the fingerprint itself.

    Nothing is kept in memory, so confirmation survives restarts: any
    credential carrying an anchor ref was anchored.
    """

    mode = "local"

    async def anchor(self, credential_id: str, content_ref: str) -> str:
        return fingerprint(credential_id, content_ref)

    async def confirm_anchored(self, credential_id: str, anchor_ref: str) -> bool:
        return bool(anchor_ref)

    async def aclose(self) -> None:
        return None


class HttpLedgerClient:
    """Client for a ledger node exposing

        POST /anchors            {"credentialId", "fingerprint"} -> {"anchorRef"}
        GET  /anchors/{id}       200 anchored | 404 unknown
    """

    mode = "http"

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

    async def anchor(self, credential_id: str, content_ref: str) -> str:
        digest = fingerprint(credential_id, content_ref)
        try:
            resp = await self._client.post(
                "/anchors",
                json={"credentialId": credential_id, "fingerprint": digest},
            )
            resp.raise_for_status()
            anchor_ref = resp.json()["anchorRef"]
        except (httpx.HTTPError, ValueError, KeyError) as e:
            logger.error("Ledger anchor failed  credential_id=%s: %s", credential_id, e)
            raise AnchorUnavailable(f"Failed to anchor credential: {e}") from e
        return str(anchor_ref)

    async def confirm_anchored(self, credential_id: str, anchor_ref: str) -> bool:
        try:
            resp = await self._client.get(f"/anchors/{credential_id}")
        except httpx.HTTPError as e:
            logger.error("Ledger lookup failed  credential_id=%s: %s", credential_id, e)
            raise AnchorUnavailable(f"Failed to query ledger: {e}") from e

        if resp.status_code == 404:
            return False
        if resp.status_code >= 500:
            raise AnchorUnavailable(f"Ledger returned {resp.status_code}")
        return resp.status_code == 200

    async def aclose(self) -> None:
        await self._client.aclose()


def build_ledger_client(ledger_url: str | None, *, timeout: float) -> LedgerClient:
    if not ledger_url:
        logger.warning("No LEDGER_URL configured: anchoring with the local ledger")
        return LocalLedger()
    logger.info("Ledger: HTTP node at %s", ledger_url)
    return HttpLedgerClient(ledger_url, timeout=timeout)
