"""Closed enumerations stored as lowercase strings at the persistence boundary.

Rows carry plain strings; repositories convert them back with
``parse_stored`` on every read path. An unrecognised value means the
database and the code disagree about the schema, so it is reported as an
InternalError instead of being defaulted or dropped.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TypeVar

from passport.core.errors import InternalError, ValidationError


class UserRole(StrEnum):
    PROFESSIONAL = "professional"
    INSTITUTION = "institution"
    EMPLOYER = "employer"


class CredentialType(StrEnum):
    CERTIFICATE = "certificate"
    LICENSE = "license"
    DEGREE = "degree"
    WORK_EXPERIENCE = "workexperience"
    SKILL = "skill"


class CredentialStatus(StrEnum):
    PENDING = "pending"
    ISSUED = "issued"
    REVOKED = "revoked"
    EXPIRED = "expired"


E = TypeVar("E", bound=StrEnum)


def parse_stored(enum_cls: type[E], raw: str) -> E:
    """Parse a value read back from storage. Unknown → InternalError."""
    try:
        return enum_cls(raw)
    except ValueError:
        raise InternalError(
            f"Invalid stored {enum_cls.__name__} value: {raw!r}"
        ) from None


def parse_input(enum_cls: type[E], raw: str) -> E:
    """Parse a caller-supplied value. Unknown → ValidationError."""
    try:
        return enum_cls(raw.strip().lower())
    except ValueError:
        allowed = "|".join(m.value for m in enum_cls)
        raise ValidationError(
            f"{enum_cls.__name__} must be one of {allowed} (got {raw!r})"
        ) from None
