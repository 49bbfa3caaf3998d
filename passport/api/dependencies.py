from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from typing import Annotated
from uuid import UUID

import jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer

from passport.models.enums import UserRole
from passport.models.principal import Principal
from passport.services.container import Repos, ServiceContainer
from passport.services.credential_service import CredentialService

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


async def get_repos(
    container: Annotated[ServiceContainer, Depends(get_container)],
) -> AsyncGenerator[Repos, None]:
    """Request-scoped repositories; the unit of work closes with the request."""
    async with container.repos() as repos:
        yield repos


def get_credential_service(
    container: Annotated[ServiceContainer, Depends(get_container)],
    repos: Annotated[Repos, Depends(get_repos)],
) -> CredentialService:
    return container.credential_service(repos)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def require_user(
    raw_token: Annotated[str, Depends(oauth2_scheme)],
    container: Annotated[ServiceContainer, Depends(get_container)],
) -> Principal:
    """Extract and validate the JWT bearer token. Returns a Principal.

    Used as a FastAPI dependency on any protected endpoint.
    """
    try:
        claims = container.tokens.decode_access_token(raw_token)
    except jwt.ExpiredSignatureError:
        logger.warning("Expired token rejected")
        raise _unauthorized("Token expired") from None
    except jwt.InvalidTokenError as e:
        logger.warning("Invalid token rejected: %s", e)
        raise _unauthorized("Invalid token") from None

    try:
        principal = Principal(user_id=UUID(claims["sub"]), role=UserRole(claims["role"]))
    except ValueError:
        # Signed by us but not a shape we issue.
        logger.warning("Token with malformed sub/role rejected")
        raise _unauthorized("Invalid token") from None

    logger.debug(
        "Token validated for user=%s role=%s", principal.user_id, principal.role
    )
    return principal


def require_role(role: UserRole):
    """Dependency factory: demand a specific role.

    Usage: Depends(require_role(UserRole.INSTITUTION))
    Returns the Principal if the role matches, else 403.
    """

    def _guard(
        principal: Annotated[Principal, Depends(require_user)],
    ) -> Principal:
        if not principal.has_role(role):
            logger.warning(
                "Access denied: user=%s role=%s required=%s",
                principal.user_id,
                principal.role,
                role,
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return principal

    return _guard
