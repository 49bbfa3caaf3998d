"""JSON auth endpoints (/api/auth/register, /api/auth/login).

Both return { token, user } so a client can keep the token in memory and
go straight to its dashboard. The user view never carries the password
hash.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from passport.api.dependencies import get_container, get_repos
from passport.core.errors import AuthenticationError
from passport.models.enums import UserRole, parse_input
from passport.models.user import User
from passport.services import auth_service
from passport.services.container import Repos, ServiceContainer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


# --- Request / Response schemas -------------------------------------------


class RegisterIn(BaseModel):
    email: str
    password: str
    name: str
    role: str


class LoginIn(BaseModel):
    email: str
    password: str


class UserOut(BaseModel):
    id: UUID
    walletAddress: str
    email: str
    name: str
    role: UserRole
    isVerified: bool
    createdAt: datetime
    updatedAt: datetime

    @classmethod
    def from_user(cls, user: User) -> UserOut:
        return cls(
            id=user.id,
            walletAddress=user.wallet_address,
            email=user.email,
            name=user.name,
            role=user.role,
            isVerified=user.is_verified,
            createdAt=user.created_at,
            updatedAt=user.updated_at,
        )


class AuthResponse(BaseModel):
    token: str
    user: UserOut


def _auth_response(container: ServiceContainer, user: User) -> AuthResponse:
    token = container.tokens.create_access_token(
        sub=str(user.id), email=user.email, role=user.role
    )
    return AuthResponse(token=token, user=UserOut.from_user(user))


# --- POST /api/auth/register ----------------------------------------------


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register(
    payload: RegisterIn,
    container: Annotated[ServiceContainer, Depends(get_container)],
    repos: Annotated[Repos, Depends(get_repos)],
) -> AuthResponse:
    user = await auth_service.register_user(
        repos.users,
        email=payload.email,
        password=payload.password,
        name=payload.name,
        role=parse_input(UserRole, payload.role),
    )
    return _auth_response(container, user)


# --- POST /api/auth/login -------------------------------------------------


@router.post("/login", response_model=AuthResponse)
async def login(
    payload: LoginIn,
    container: Annotated[ServiceContainer, Depends(get_container)],
    repos: Annotated[Repos, Depends(get_repos)],
) -> AuthResponse:
    user = await auth_service.authenticate_user(
        repos.users, payload.email, payload.password
    )
    if user is None:
        logger.warning("Login failed  email=%s", auth_service.normalize_email(payload.email))
        raise AuthenticationError("Invalid credentials")

    logger.info("Login succeeded  user_id=%s", user.id)
    return _auth_response(container, user)
