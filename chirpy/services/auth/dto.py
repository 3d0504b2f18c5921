# chirpy/services/auth/dto.py
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any
from uuid import UUID

from chirpy.core.config import DEV_PLATFORM

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for login.

    :param email: User email (normalized by the directory).
    :type email: str
    :param password: Raw password (to be verified).
    :type password: str
    """

    email: str
    password: str


@dataclass(frozen=True, slots=True)
class RefreshIn:
    """
    Input DTO for exchanging a refresh token for an access token.

    :param authorization: Raw ``Authorization`` header value carrying the
        refresh token as a bearer credential.
    :type authorization: str | None
    """

    authorization: str | None


@dataclass(frozen=True, slots=True)
class RevokeIn:
    """
    Input DTO for revoking a refresh token.

    :param authorization: Raw ``Authorization`` header value.
    :type authorization: str | None
    """

    authorization: str | None


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class SessionOut:
    """
    Output DTO for a successful login: public user fields plus both tokens.

    :param user_id: Authenticated user id.
    :type user_id: UUID
    :param email: Login email.
    :type email: str
    :param created_at: Account creation instant.
    :type created_at: datetime | None
    :param updated_at: Last account update instant.
    :type updated_at: datetime | None
    :param access_token: Signed short-lived JWT.
    :type access_token: str
    :param refresh_token: Opaque long-lived token.
    :type refresh_token: str
    """

    user_id: UUID
    email: str
    created_at: datetime | None
    updated_at: datetime | None
    access_token: str
    refresh_token: str


@dataclass(frozen=True, slots=True)
class AccessTokenOut:
    """
    Output DTO for a refresh exchange.

    :param access_token: Newly signed access JWT.
    :type access_token: str
    """

    access_token: str


# ------------------------------ Config DTO -------------------------------- #


@dataclass(frozen=True, slots=True)
class AuthTokenConfig:
    """
    Token emission and admin policy.

    :param secret: HS256 signing key for access tokens.
    :type secret: str
    :param issuer: ``iss`` claim value.
    :type issuer: str
    :param access_expires: Access token lifetime.
    :type access_expires: timedelta
    :param refresh_expires: Refresh token lifetime.
    :type refresh_expires: timedelta
    :param leeway: Clock skew tolerated on access token expiry.
    :type leeway: timedelta
    :param platform: Operating mode; only ``"dev"`` allows resets.
    :type platform: str
    """

    secret: str
    issuer: str = "chirpy"
    access_expires: timedelta = timedelta(hours=1)
    refresh_expires: timedelta = timedelta(days=60)
    leeway: timedelta = timedelta(0)
    platform: str = "production"

    @property
    def admin_reset_allowed(self) -> bool:
        return self.platform == DEV_PLATFORM

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> AuthTokenConfig:
        """
        Build the policy from a Flask config mapping.

        :param config: Usually ``app.config``.
        :raises ValueError: If ``JWT_SECRET`` is empty, a token lifetime is
            not positive, or the leeway is negative.
        """
        secret = str(config.get("JWT_SECRET") or "")
        if not secret:
            raise ValueError("JWT_SECRET must be configured.")
        access_expires = timedelta(seconds=int(config.get("ACCESS_TOKEN_TTL_SECONDS", 3600)))
        refresh_expires = timedelta(days=int(config.get("REFRESH_TOKEN_TTL_DAYS", 60)))
        leeway = timedelta(seconds=int(config.get("TOKEN_LEEWAY_SECONDS", 0)))
        if access_expires <= timedelta(0):
            raise ValueError("ACCESS_TOKEN_TTL_SECONDS must be positive.")
        if refresh_expires <= timedelta(0):
            raise ValueError("REFRESH_TOKEN_TTL_DAYS must be positive.")
        if leeway < timedelta(0):
            raise ValueError("TOKEN_LEEWAY_SECONDS must not be negative.")
        return cls(
            secret=secret,
            issuer=str(config.get("JWT_ISSUER", "chirpy")),
            access_expires=access_expires,
            refresh_expires=refresh_expires,
            leeway=leeway,
            platform=str(config.get("PLATFORM", "production")).strip().lower(),
        )
