"""Credential issuance and verification workflow.

ISSUE runs in strict order, fail-fast, with no compensation:

    decode base64 → content store → SSP-<uuid> → ledger anchor
        → QR proof artifact → persist (status=issued)

Nothing outside this call is committed before the final repository
write, so a failed issuance leaves no record behind and the caller can
simply retry. (The content store may keep an orphaned document, and a
ledger may keep an anchor for an id that never got a row; neither is
reachable through this service.)

VERIFY treats "not found" and "invalid" as answers, not errors:

    valid = status == issued AND ledger.confirm_anchored(public_id, anchor_ref)

Expiry dates are NOT compared against the clock here, and issuance never
starts in PENDING; both are open product questions.

The service keeps no state between calls. It is built per request from
long-lived collaborators plus request-scoped repositories.
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import logging
from uuid import UUID

from passport.core.errors import (
    AuthorizationError,
    InternalError,
    NotFoundError,
    ValidationError,
)
from passport.core.metrics import CREDENTIAL_OPERATIONS, EXTERNAL_CALL_DURATION
from passport.models.credential import (
    Credential,
    IssueCredentialRequest,
    IssueCredentialResult,
    VerificationResult,
    new_public_id,
)
from passport.models.enums import CredentialStatus
from passport.repos.credential_repo import CredentialRepo
from passport.repos.institution_repo import InstitutionRepo
from passport.repos.user_repo import UserRepo
from passport.services.content_store import ContentStore
from passport.services.ledger import LedgerClient
from passport.services.proof_artifact import QrProofGenerator

logger = logging.getLogger(__name__)

MSG_VALID = "Credential is valid and verified"
MSG_REVOKED = "Credential has been revoked"
MSG_FAILED = "Credential verification failed"
MSG_NOT_FOUND = "Credential not found"


class CredentialService:
    def __init__(
        self,
        *,
        content_store: ContentStore,
        ledger: LedgerClient,
        proofs: QrProofGenerator,
        credentials: CredentialRepo,
        users: UserRepo,
        institutions: InstitutionRepo,
    ) -> None:
        self._content_store = content_store
        self._ledger = ledger
        self._proofs = proofs
        self._credentials = credentials
        self._users = users
        self._institutions = institutions

    # ------------------------------------------------------------------
    # Issue
    # ------------------------------------------------------------------

    async def issue(
        self,
        request: IssueCredentialRequest,
        issuer_id: UUID,
        holder_id: UUID,
    ) -> IssueCredentialResult:
        """Run the issuance pipeline. Any step's failure aborts the whole call.

        Caller role and holder resolution are the boundary's job; this
        method receives already-resolved ids.
        """
        try:
            result = await self._issue(request, issuer_id, holder_id)
        except Exception:
            CREDENTIAL_OPERATIONS.labels(operation="issue", outcome="failure").inc()
            raise
        CREDENTIAL_OPERATIONS.labels(operation="issue", outcome="success").inc()
        return result

    async def _issue(
        self,
        request: IssueCredentialRequest,
        issuer_id: UUID,
        holder_id: UUID,
    ) -> IssueCredentialResult:
        document = _decode_document(request.document_data)

        with EXTERNAL_CALL_DURATION.labels(collaborator="content_store").time():
            content_ref = await self._content_store.store(document)

        public_id = new_public_id()

        with EXTERNAL_CALL_DURATION.labels(collaborator="ledger").time():
            anchor_ref = await self._ledger.anchor(public_id, content_ref)

        with EXTERNAL_CALL_DURATION.labels(collaborator="proof_artifact").time():
            png = await asyncio.to_thread(self._proofs.render, public_id)
        proof_artifact = base64.b64encode(png).decode("ascii")

        credential = Credential.new(
            public_id=public_id,
            holder_id=holder_id,
            issuer_id=issuer_id,
            credential_type=request.credential_type,
            title=request.title,
            description=request.description,
            content_ref=content_ref,
            anchor_ref=anchor_ref,
            proof_artifact=proof_artifact,
            issue_date=request.issue_date,
            expiry_date=request.expiry_date,
            metadata=dict(request.metadata),
        )
        await self._credentials.add(credential)

        logger.info(
            "Credential issued  credential_id=%s issuer=%s holder=%s type=%s",
            public_id,
            issuer_id,
            holder_id,
            request.credential_type,
            extra={"credential_id": public_id},
        )
        return IssueCredentialResult(
            public_id=public_id,
            content_ref=content_ref,
            anchor_ref=anchor_ref,
            proof_artifact=proof_artifact,
        )

    # ------------------------------------------------------------------
    # Verify
    # ------------------------------------------------------------------

    async def verify(self, public_id: str) -> VerificationResult:
        credential = await self._credentials.get_by_public_id(public_id)
        if credential is None:
            CREDENTIAL_OPERATIONS.labels(operation="verify", outcome="not_found").inc()
            logger.info("Verification for unknown credential_id=%s", public_id)
            return VerificationResult(valid=False, message=MSG_NOT_FOUND)

        anchored = await self._ledger.confirm_anchored(
            public_id, credential.anchor_ref
        )
        valid = credential.status == CredentialStatus.ISSUED and anchored

        # Display-only lookups: a missing record just leaves the field empty.
        # Run one after the other; an AsyncSession is not safe for
        # concurrent use.
        issuer = await self._institutions.get_by_user_id(credential.issuer_id)
        holder = await self._users.get_by_id(credential.holder_id)

        if valid:
            message, outcome = MSG_VALID, "valid"
        elif credential.status == CredentialStatus.REVOKED:
            message, outcome = MSG_REVOKED, "revoked"
        else:
            message, outcome = MSG_FAILED, "invalid"

        CREDENTIAL_OPERATIONS.labels(operation="verify", outcome=outcome).inc()
        logger.info(
            "Credential verified  credential_id=%s outcome=%s anchored=%s",
            public_id,
            outcome,
            anchored,
            extra={"credential_id": public_id},
        )
        return VerificationResult(
            valid=valid,
            message=message,
            credential=credential,
            issuer=issuer,
            holder=holder,
        )

    async def verify_proof_artifact(self, image_bytes: bytes) -> VerificationResult:
        """Scanned-code verification: decode the image, then the same ``verify``."""
        public_id = await asyncio.to_thread(self._proofs.decode, image_bytes)
        return await self.verify(public_id.strip())

    # ------------------------------------------------------------------
    # Revoke
    # ------------------------------------------------------------------

    async def revoke(self, public_id: str, caller_id: UUID) -> Credential:
        """Issuer-only; unconditional, so revoking twice is harmless."""
        credential = await self._get_or_404(public_id)
        if credential.issuer_id != caller_id:
            logger.warning(
                "Revoke denied  credential_id=%s caller=%s",
                public_id,
                caller_id,
                extra={"credential_id": public_id},
            )
            CREDENTIAL_OPERATIONS.labels(operation="revoke", outcome="failure").inc()
            raise AuthorizationError("Not authorized to revoke this credential")

        updated = await self._credentials.update_status(
            credential.id, CredentialStatus.REVOKED
        )
        if updated is None:
            # Row vanished between read and write.
            raise NotFoundError(MSG_NOT_FOUND)

        CREDENTIAL_OPERATIONS.labels(operation="revoke", outcome="success").inc()
        logger.info(
            "Credential revoked  credential_id=%s issuer=%s",
            public_id,
            caller_id,
            extra={"credential_id": public_id},
        )
        return updated

    # ------------------------------------------------------------------
    # Reads for participants
    # ------------------------------------------------------------------

    async def get_for_participant(self, public_id: str, caller_id: UUID) -> Credential:
        """Full record, visible to its holder or issuer only."""
        credential = await self._get_or_404(public_id)
        if caller_id not in (credential.holder_id, credential.issuer_id):
            raise AuthorizationError("Not authorized to view this credential")
        return credential

    async def proof_artifact_png(self, public_id: str, caller_id: UUID) -> bytes:
        credential = await self.get_for_participant(public_id, caller_id)
        try:
            return base64.b64decode(credential.proof_artifact, validate=True)
        except (binascii.Error, ValueError) as e:
            raise InternalError(f"Invalid stored proof artifact: {e}") from e

    async def list_for_holder(self, holder_id: UUID) -> list[Credential]:
        return await self._credentials.list_by_holder(holder_id)

    async def list_for_issuer(self, issuer_id: UUID) -> list[Credential]:
        return await self._credentials.list_by_issuer(issuer_id)

    async def _get_or_404(self, public_id: str) -> Credential:
        credential = await self._credentials.get_by_public_id(public_id)
        if credential is None:
            raise NotFoundError(MSG_NOT_FOUND)
        return credential


def _decode_document(document_data: str) -> bytes:
    try:
        return base64.b64decode(document_data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValidationError(f"Invalid base64 data: {e}") from e
