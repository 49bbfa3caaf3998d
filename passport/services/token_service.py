"""JWT access token creation and validation (ES256).

The signing key pair is generated when the TokenService is built, so
tokens do not survive a restart. Loading a persistent key from a file
or KMS is left to the deployment.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta

import jwt
from cryptography.hazmat.primitives.asymmetric import ec

from passport.models.enums import UserRole

ALGORITHM = "ES256"
ISSUER = "skills-passport"
AUDIENCE = "skills-passport"


class TokenService:
    def __init__(self, *, ttl_hours: int = 24) -> None:
        self._private_key = ec.generate_private_key(ec.SECP256R1())
        self._public_key = self._private_key.public_key()
        self._ttl = timedelta(hours=ttl_hours)

    def create_access_token(self, *, sub: str, email: str, role: UserRole) -> str:
        """Build and sign an access token.

        Claims: sub, email, role, iss, aud, exp, iat, jti.
        """
        now = datetime.now(UTC)
        payload = {
            "sub": sub,
            "email": email,
            "role": role.value,
            "iss": ISSUER,
            "aud": AUDIENCE,
            "exp": now + self._ttl,
            "iat": now,
            "jti": str(uuid.uuid4()),
        }
        return jwt.encode(payload, self._private_key, algorithm=ALGORITHM)

    def decode_access_token(self, token: str) -> dict:
        """Verify signature and claims, return the payload.

        Pins the algorithm to ES256 (no alg:none / alg switching).
        Raises jwt.ExpiredSignatureError, jwt.InvalidTokenError on failure.
        """
        return jwt.decode(
            token,
            self._public_key,
            algorithms=[ALGORITHM],
            issuer=ISSUER,
            audience=AUDIENCE,
            options={"require": ["sub", "role", "exp", "iat", "jti"]},
        )
