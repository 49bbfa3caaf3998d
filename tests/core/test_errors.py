from __future__ import annotations

import pytest

from passport.core.errors import (
    AnchorUnavailable,
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    EncodingError,
    ExternalServiceError,
    InstitutionNotAccredited,
    InternalError,
    InvalidPayload,
    NotFoundError,
    PassportError,
    ProofDecodeError,
    StorageError,
    StorageUnavailable,
    ValidationError,
)
from passport.models.enums import CredentialType, UserRole, parse_input, parse_stored


@pytest.mark.parametrize(
    "cls,parent,status",
    [
        (ValidationError, PassportError, 400),
        (InvalidPayload, ValidationError, 400),
        (ProofDecodeError, ValidationError, 400),
        (AuthenticationError, PassportError, 401),
        (AuthorizationError, PassportError, 403),
        (InstitutionNotAccredited, AuthorizationError, 403),
        (NotFoundError, PassportError, 404),
        (ConflictError, PassportError, 409),
        (StorageError, PassportError, 500),
        (ExternalServiceError, PassportError, 502),
        (StorageUnavailable, ExternalServiceError, 502),
        (AnchorUnavailable, ExternalServiceError, 502),
        (InternalError, PassportError, 500),
        (EncodingError, InternalError, 500),
    ],
)
def test_error_taxonomy(cls: type, parent: type, status: int) -> None:
    assert issubclass(cls, parent)
    assert cls.status_code == status


def test_default_and_custom_messages() -> None:
    assert InstitutionNotAccredited().message == "Institution not accredited"
    err = NotFoundError("Holder not found")
    assert err.message == "Holder not found"
    assert str(err) == "Holder not found"


def test_parse_stored_unknown_is_internal_error() -> None:
    assert parse_stored(UserRole, "employer") is UserRole.EMPLOYER
    with pytest.raises(InternalError):
        parse_stored(UserRole, "Employer")


def test_parse_input_is_lenient_on_case_only() -> None:
    assert parse_input(CredentialType, " License ") is CredentialType.LICENSE
    with pytest.raises(ValidationError, match="certificate|license"):
        parse_input(CredentialType, "diploma")
