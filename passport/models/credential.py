from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

from passport.models.enums import CredentialStatus, CredentialType
from passport.models.institution import Institution
from passport.models.user import User

PUBLIC_ID_PREFIX = "SSP-"


def new_public_id() -> str:
    """``SSP-<uuid4>``. Collisions are treated as negligible; no retry loop."""
    return f"{PUBLIC_ID_PREFIX}{uuid.uuid4()}"


@dataclass(frozen=True, slots=True)
class Credential:
    """An issued credential record.

    ``public_id`` is the shareable identifier printed in QR codes and
    verification URLs; ``id`` is the internal storage key. Holder, issuer,
    content_ref, anchor_ref and proof_artifact are written once at
    creation. ``status`` changes only through the repository's
    ``update_status``.
    """

    id: UUID
    public_id: str
    holder_id: UUID
    issuer_id: UUID
    credential_type: CredentialType
    title: str
    description: str
    content_ref: str
    anchor_ref: str
    proof_artifact: str  # base64 PNG
    issue_date: datetime
    expiry_date: datetime | None
    status: CredentialStatus
    metadata: dict[str, Any]
    created_at: datetime

    @staticmethod
    def new(
        *,
        public_id: str,
        holder_id: UUID,
        issuer_id: UUID,
        credential_type: CredentialType,
        title: str,
        description: str,
        content_ref: str,
        anchor_ref: str,
        proof_artifact: str,
        issue_date: datetime,
        expiry_date: datetime | None,
        metadata: dict[str, Any],
    ) -> Credential:
        return Credential(
            id=uuid4(),
            public_id=public_id,
            holder_id=holder_id,
            issuer_id=issuer_id,
            credential_type=credential_type,
            title=title,
            description=description,
            content_ref=content_ref,
            anchor_ref=anchor_ref,
            proof_artifact=proof_artifact,
            issue_date=issue_date,
            expiry_date=expiry_date,
            # Issuance is immediate; PENDING is never assigned here.
            status=CredentialStatus.ISSUED,
            metadata=metadata,
            created_at=datetime.now(UTC),
        )


@dataclass(frozen=True, slots=True)
class IssueCredentialRequest:
    credential_type: CredentialType
    title: str
    description: str
    issue_date: datetime
    document_data: str  # base64 transport encoding
    expiry_date: datetime | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class IssueCredentialResult:
    public_id: str
    content_ref: str
    anchor_ref: str
    proof_artifact: str  # base64 PNG


@dataclass(frozen=True, slots=True)
class VerificationResult:
    valid: bool
    message: str
    credential: Credential | None = None
    issuer: Institution | None = None
    holder: User | None = None
