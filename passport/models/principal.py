from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from passport.models.enums import UserRole


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated identity extracted from a validated JWT.

    Carried through the request via FastAPI's dependency system.
    The role is read from the signed token, never from the request body.
    """

    user_id: UUID
    role: UserRole

    def has_role(self, role: UserRole) -> bool:
        return self.role == role
