"""Error taxonomy for the passport service.

Every failure that can leave the service layer is a ``PassportError``.
Each class carries the HTTP status it maps to, so the API boundary can
render any of them with a single exception handler instead of a
try/except ladder in every endpoint.

    PassportError
    ├── ValidationError            400  malformed input, user-correctable
    │   ├── InvalidPayload              empty document bytes
    │   └── ProofDecodeError            scanned image has no readable code
    ├── AuthenticationError        401
    ├── AuthorizationError         403
    │   └── InstitutionNotAccredited
    ├── NotFoundError              404
    ├── ConflictError              409
    ├── StorageError               500  repository/backend failure
    ├── ExternalServiceError       502  content store / ledger unreachable
    │   ├── StorageUnavailable
    │   └── AnchorUnavailable
    └── InternalError              500  invariant violation
        └── EncodingError               proof artifact over capacity
"""

from __future__ import annotations


class PassportError(Exception):
    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(PassportError):
    status_code = 400
    default_message = "Invalid request"


class InvalidPayload(ValidationError):
    default_message = "Document payload must not be empty"


class ProofDecodeError(ValidationError):
    default_message = "Could not read a credential code from the image"


class AuthenticationError(PassportError):
    status_code = 401
    default_message = "Invalid credentials"


class AuthorizationError(PassportError):
    status_code = 403
    default_message = "Insufficient permissions"


class InstitutionNotAccredited(AuthorizationError):
    default_message = "Institution not accredited"


class NotFoundError(PassportError):
    status_code = 404
    default_message = "Not found"


class ConflictError(PassportError):
    status_code = 409
    default_message = "Resource already exists"


class StorageError(PassportError):
    status_code = 500
    default_message = "Database error"


class ExternalServiceError(PassportError):
    status_code = 502
    default_message = "Upstream service unavailable"


class StorageUnavailable(ExternalServiceError):
    default_message = "Content store unavailable"


class AnchorUnavailable(ExternalServiceError):
    default_message = "Ledger unavailable"


class InternalError(PassportError):
    status_code = 500
    default_message = "Internal server error"


class EncodingError(InternalError):
    default_message = "Failed to encode proof artifact"
