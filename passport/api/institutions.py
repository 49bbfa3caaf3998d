"""Institution profile endpoints.

An institution-role user registers exactly one profile. Accreditation
starts false; flipping it is an administrative action with no HTTP
route here (see InstitutionRepo.update_accreditation).
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from passport.api.dependencies import get_repos, require_role, require_user
from passport.core.errors import ConflictError, NotFoundError, ValidationError
from passport.models.enums import UserRole
from passport.models.institution import Institution
from passport.models.principal import Principal
from passport.services.container import Repos

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/institutions", tags=["institutions"])


class RegisterInstitutionIn(BaseModel):
    institutionName: str
    institutionType: str
    country: str
    accreditationNumber: str | None = None


class InstitutionOut(BaseModel):
    id: UUID
    userId: UUID
    institutionName: str
    institutionType: str
    country: str
    accreditationNumber: str | None
    isAccredited: bool
    createdAt: datetime

    @classmethod
    def from_institution(cls, inst: Institution) -> InstitutionOut:
        return cls(
            id=inst.id,
            userId=inst.user_id,
            institutionName=inst.institution_name,
            institutionType=inst.institution_type,
            country=inst.country,
            accreditationNumber=inst.accreditation_number,
            isAccredited=inst.is_accredited,
            createdAt=inst.created_at,
        )


@router.post(
    "/register",
    response_model=InstitutionOut,
    status_code=status.HTTP_201_CREATED,
)
async def register_institution(
    payload: RegisterInstitutionIn,
    principal: Annotated[Principal, Depends(require_role(UserRole.INSTITUTION))],
    repos: Annotated[Repos, Depends(get_repos)],
) -> InstitutionOut:
    name = payload.institutionName.strip()
    inst_type = payload.institutionType.strip()
    country = payload.country.strip()
    if not name or not inst_type or not country:
        raise ValidationError("Institution name, type and country are required")

    if await repos.institutions.get_by_user_id(principal.user_id) is not None:
        raise ConflictError("Institution already registered")

    accreditation_number = (payload.accreditationNumber or "").strip() or None
    institution = Institution.new(
        user_id=principal.user_id,
        institution_name=name,
        institution_type=inst_type,
        country=country,
        accreditation_number=accreditation_number,
    )
    await repos.institutions.add(institution)

    logger.info(
        "Institution registered  institution_id=%s user_id=%s",
        institution.id,
        principal.user_id,
    )
    return InstitutionOut.from_institution(institution)


@router.get("/me", response_model=InstitutionOut)
async def get_my_institution(
    principal: Annotated[Principal, Depends(require_user)],
    repos: Annotated[Repos, Depends(get_repos)],
) -> InstitutionOut:
    institution = await repos.institutions.get_by_user_id(principal.user_id)
    if institution is None:
        raise NotFoundError("Institution not found")
    return InstitutionOut.from_institution(institution)
