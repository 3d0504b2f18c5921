# chirpy/infra/jwt/jwt_access_token_codec.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any, Final
from uuid import UUID

import jwt

from chirpy.services._shared.errors import (
    MalformedSubjectError,
    MalformedTokenError,
    SignatureInvalidError,
    TokenExpiredError,
)
from chirpy.services._shared.ports import AccessTokenCodec

ALGORITHM: Final[str] = "HS256"
DEFAULT_ISSUER: Final[str] = "chirpy"
REQUIRED_CLAIMS: Final[list[str]] = ["iss", "sub", "iat", "exp"]


@dataclass(frozen=True, slots=True)
class JWTAccessTokenCodec(AccessTokenCodec):
    """
    HS256 JWT adapter built on PyJWT.

    Claims are limited to ``iss``, ``sub``, ``iat`` and ``exp``; timestamps
    have second resolution, so two tokens issued for the same user within the
    same second are identical.

    :param issuer: Fixed ``iss`` claim value, also enforced on verification.
    :param leeway: Clock skew tolerated on ``exp``; zero keeps the comparison
        strict (``now >= exp`` is expired).
    """

    issuer: str = DEFAULT_ISSUER
    leeway: timedelta = timedelta(0)

    def issue(self, user_id: UUID, secret: str, ttl: timedelta) -> str:
        if ttl <= timedelta(0):
            raise ValueError("Access token ttl must be positive.")
        issued_at = datetime.now(UTC).replace(microsecond=0)
        claims: dict[str, Any] = {
            "iss": self.issuer,
            "sub": str(user_id),
            "iat": issued_at,
            "exp": issued_at + ttl,
        }
        return jwt.encode(claims, secret, algorithm=ALGORITHM)

    def verify(self, token: str, secret: str) -> UUID:
        try:
            claims = jwt.decode(
                token,
                secret,
                algorithms=[ALGORITHM],
                issuer=self.issuer,
                leeway=self.leeway,
                options={"require": REQUIRED_CLAIMS},
            )
        # Order matters: InvalidSignatureError subclasses DecodeError
        except jwt.InvalidSignatureError as exc:
            raise SignatureInvalidError() from exc
        except jwt.ExpiredSignatureError as exc:
            raise TokenExpiredError() from exc
        except jwt.InvalidTokenError as exc:
            raise MalformedTokenError() from exc

        try:
            return UUID(str(claims["sub"]))
        except ValueError as exc:
            raise MalformedSubjectError() from exc
