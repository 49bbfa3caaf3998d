"""Credential endpoints.

- POST /api/credentials/issue                 institution; resolve holder, issue
- GET  /api/credentials/verify/{credentialId} public
- POST /api/credentials/verify-qr             public; code text or scanned image
- GET  /api/credentials/my                    holder's credentials
- GET  /api/credentials/issued                institution's issued credentials
- GET  /api/credentials/{credentialId}        holder or issuer
- POST /api/credentials/{credentialId}/revoke issuing institution only
- GET  /api/credentials/{credentialId}/qr     holder or issuer; PNG download

The router only does boundary work: role checks, holder lookup, the
optional accreditation gate, payload shapes. The workflow itself lives
in CredentialService.

Static paths are declared before ``/{credentialId}`` so they are not
captured by it.
"""

from __future__ import annotations

import base64
import binascii
import logging
from datetime import UTC, datetime
from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Depends, status
from fastapi.responses import Response
from pydantic import BaseModel, Field

from passport.api.auth import UserOut
from passport.api.dependencies import (
    get_container,
    get_credential_service,
    get_repos,
    require_role,
    require_user,
)
from passport.api.institutions import InstitutionOut
from passport.core.errors import (
    InstitutionNotAccredited,
    NotFoundError,
    ValidationError,
)
from passport.models.credential import (
    Credential,
    IssueCredentialRequest,
    VerificationResult,
)
from passport.models.enums import CredentialStatus, CredentialType, UserRole, parse_input
from passport.models.principal import Principal
from passport.services.auth_service import normalize_email
from passport.services.container import Repos, ServiceContainer
from passport.services.credential_service import CredentialService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/credentials", tags=["credentials"])

_require_institution = require_role(UserRole.INSTITUTION)


# --- Request / Response schemas -------------------------------------------


class IssueCredentialIn(BaseModel):
    holderEmail: str
    credentialType: str
    title: str
    description: str = ""
    issueDate: datetime
    expiryDate: datetime | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    documentData: str  # base64


class IssueCredentialOut(BaseModel):
    credentialId: str
    contentRef: str
    anchorRef: str
    proofArtifact: str  # base64 PNG


class VerifyQrIn(BaseModel):
    qrData: str | None = None
    qrImage: str | None = None  # base64 image, optionally a data: URL


class CredentialOut(BaseModel):
    id: UUID
    credentialId: str
    holderId: UUID
    issuerId: UUID
    credentialType: CredentialType
    title: str
    description: str
    contentRef: str
    anchorRef: str
    issueDate: datetime
    expiryDate: datetime | None
    status: CredentialStatus
    metadata: dict[str, Any]
    createdAt: datetime

    @classmethod
    def from_credential(cls, c: Credential) -> CredentialOut:
        return cls(
            id=c.id,
            credentialId=c.public_id,
            holderId=c.holder_id,
            issuerId=c.issuer_id,
            credentialType=c.credential_type,
            title=c.title,
            description=c.description,
            contentRef=c.content_ref,
            anchorRef=c.anchor_ref,
            issueDate=c.issue_date,
            expiryDate=c.expiry_date,
            status=c.status,
            metadata=c.metadata,
            createdAt=c.created_at,
        )


class CredentialListOut(BaseModel):
    credentials: list[CredentialOut]
    total: int


class VerificationOut(BaseModel):
    valid: bool
    credential: CredentialOut | None = None
    issuer: InstitutionOut | None = None
    holder: UserOut | None = None
    message: str

    @classmethod
    def from_result(cls, result: VerificationResult) -> VerificationOut:
        return cls(
            valid=result.valid,
            credential=(
                CredentialOut.from_credential(result.credential)
                if result.credential
                else None
            ),
            issuer=(
                InstitutionOut.from_institution(result.issuer) if result.issuer else None
            ),
            holder=UserOut.from_user(result.holder) if result.holder else None,
            message=result.message,
        )


class RevokeOut(BaseModel):
    message: str
    credentialId: str


def _as_utc(value: datetime | None) -> datetime | None:
    # Naive timestamps from clients are taken as UTC.
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


def _list_out(credentials: list[Credential]) -> CredentialListOut:
    return CredentialListOut(
        credentials=[CredentialOut.from_credential(c) for c in credentials],
        total=len(credentials),
    )


# --- Issue ----------------------------------------------------------------


@router.post(
    "/issue",
    response_model=IssueCredentialOut,
    status_code=status.HTTP_201_CREATED,
)
async def issue_credential(
    body: IssueCredentialIn,
    principal: Annotated[Principal, Depends(_require_institution)],
    container: Annotated[ServiceContainer, Depends(get_container)],
    repos: Annotated[Repos, Depends(get_repos)],
    service: Annotated[CredentialService, Depends(get_credential_service)],
) -> IssueCredentialOut:
    if container.settings.require_accreditation:
        institution = await repos.institutions.get_by_user_id(principal.user_id)
        if institution is None:
            raise NotFoundError("Institution not found")
        if not institution.is_accredited:
            logger.warning("Issuance by unaccredited institution user=%s", principal.user_id)
            raise InstitutionNotAccredited()

    title = body.title.strip()
    if not title:
        raise ValidationError("Title is required")

    holder = await repos.users.get_by_email(normalize_email(body.holderEmail))
    if holder is None:
        raise NotFoundError("Holder not found")

    request = IssueCredentialRequest(
        credential_type=parse_input(CredentialType, body.credentialType),
        title=title,
        description=body.description,
        issue_date=_as_utc(body.issueDate),
        document_data=body.documentData,
        expiry_date=_as_utc(body.expiryDate),
        metadata=body.metadata,
    )
    result = await service.issue(request, issuer_id=principal.user_id, holder_id=holder.id)
    return IssueCredentialOut(
        credentialId=result.public_id,
        contentRef=result.content_ref,
        anchorRef=result.anchor_ref,
        proofArtifact=result.proof_artifact,
    )


# --- Public verification --------------------------------------------------


@router.get("/verify/{credentialId}", response_model=VerificationOut)
async def verify_credential(
    credentialId: str,
    service: Annotated[CredentialService, Depends(get_credential_service)],
) -> VerificationOut:
    result = await service.verify(credentialId)
    return VerificationOut.from_result(result)


@router.post("/verify-qr", response_model=VerificationOut)
async def verify_qr(
    body: VerifyQrIn,
    service: Annotated[CredentialService, Depends(get_credential_service)],
) -> VerificationOut:
    """Same semantics as the path variant; the code text is the credential id."""
    if body.qrData and body.qrData.strip():
        result = await service.verify(body.qrData.strip())
    elif body.qrImage:
        result = await service.verify_proof_artifact(_decode_image(body.qrImage))
    else:
        raise ValidationError("Either qrData or qrImage is required")
    return VerificationOut.from_result(result)


def _decode_image(encoded: str) -> bytes:
    if encoded.startswith("data:"):
        _, _, encoded = encoded.partition(",")
    try:
        return base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValidationError(f"Invalid base64 image: {e}") from e


# --- Listings -------------------------------------------------------------


@router.get("/my", response_model=CredentialListOut)
async def my_credentials(
    principal: Annotated[Principal, Depends(require_user)],
    service: Annotated[CredentialService, Depends(get_credential_service)],
) -> CredentialListOut:
    return _list_out(await service.list_for_holder(principal.user_id))


@router.get("/issued", response_model=CredentialListOut)
async def issued_credentials(
    principal: Annotated[Principal, Depends(_require_institution)],
    service: Annotated[CredentialService, Depends(get_credential_service)],
) -> CredentialListOut:
    return _list_out(await service.list_for_issuer(principal.user_id))


# --- Single credential ----------------------------------------------------


@router.get("/{credentialId}", response_model=CredentialOut)
async def get_credential(
    credentialId: str,
    principal: Annotated[Principal, Depends(require_user)],
    service: Annotated[CredentialService, Depends(get_credential_service)],
) -> CredentialOut:
    credential = await service.get_for_participant(credentialId, principal.user_id)
    return CredentialOut.from_credential(credential)


@router.post("/{credentialId}/revoke", response_model=RevokeOut)
async def revoke_credential(
    credentialId: str,
    principal: Annotated[Principal, Depends(_require_institution)],
    service: Annotated[CredentialService, Depends(get_credential_service)],
) -> RevokeOut:
    await service.revoke(credentialId, principal.user_id)
    return RevokeOut(message="Credential revoked successfully", credentialId=credentialId)


@router.get(
    "/{credentialId}/qr",
    response_class=Response,
    responses={200: {"content": {"image/png": {}}}},
)
async def get_credential_qr(
    credentialId: str,
    principal: Annotated[Principal, Depends(require_user)],
    service: Annotated[CredentialService, Depends(get_credential_service)],
) -> Response:
    png = await service.proof_artifact_png(credentialId, principal.user_id)
    return Response(
        content=png,
        media_type="image/png",
        headers={
            "Content-Disposition": f'attachment; filename="credential-{credentialId}-qr.png"'
        },
    )
