"""Authentication sessions: login, refresh, revoke and the bearer gate."""

from .bearer import extract_bearer_token
from .dto import AccessTokenOut, AuthTokenConfig, LoginIn, RefreshIn, RevokeIn, SessionOut
from .service import ACCOUNT_GONE, AuthService

__all__ = [
    "ACCOUNT_GONE",
    "AuthService",
    "AuthTokenConfig",
    "LoginIn",
    "RefreshIn",
    "RevokeIn",
    "SessionOut",
    "AccessTokenOut",
    "extract_bearer_token",
]
