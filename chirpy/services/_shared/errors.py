"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and should never import or depend
on Flask, HTTP, or SQLAlchemy directly. They serve as stable contracts between
the token codec, the refresh-token stores, and the application services.

Every error carries a stable machine-readable ``code``. The translation to
HTTP responses (RFC 7807) is handled by ``chirpy/core/errors.py`` via
``BaseService.translate_exceptions()``.

Hierarchy
---------
::

    ServiceError
    ├── NotFoundError
    ├── ConflictError
    ├── ForbiddenOperationError
    ├── AuthenticationError
    │   ├── CredentialError
    │   │   ├── MissingCredentialError
    │   │   └── MalformedCredentialError
    │   ├── AccessTokenError
    │   │   ├── MalformedTokenError
    │   │   ├── SignatureInvalidError
    │   │   ├── TokenExpiredError
    │   │   └── MalformedSubjectError
    │   ├── LoginError
    │   │   ├── InvalidCredentialsError
    │   │   └── UserNotFoundError
    │   ├── RefreshTokenError
    │   │   ├── RefreshTokenNotFoundError
    │   │   ├── RefreshTokenExpiredError
    │   │   └── RefreshTokenRevokedError
    │   └── UnauthorizedError
    └── InfrastructureError
        ├── StorageError
        └── HashingError
"""

from __future__ import annotations

from dataclasses import dataclass

# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - They can be safely raised from adapters, repositories or domain logic.
    - The API layer translates them to ``APIError`` through ``BaseService``.
    """

    code = "bad_request"
    default_message = "Request could not be processed."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self.args[0]) if self.args else self.default_message


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    Raised when an entity is not found in the repository.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param key: Identifier or search key.
    :type key: object
    """

    entity: str
    key: object

    code = "not_found"

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.entity} not found: {self.key}"


@dataclass(slots=True)
class ConflictError(ServiceError):
    """
    Raised when a unique constraint or business rule conflict occurs.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param detail: Short human-readable explanation.
    :type detail: str
    """

    entity: str
    detail: str

    code = "conflict"

    def __str__(self) -> str:  # pragma: no cover
        return f"Conflict on {self.entity}: {self.detail}"


class ForbiddenOperationError(ServiceError):
    """Raised when an administrative operation runs outside its allowed mode."""

    code = "forbidden"
    default_message = "Operation not allowed on this platform."


# --------------------------------------------------------------------------- #
# Authentication
# --------------------------------------------------------------------------- #


class AuthenticationError(ServiceError):
    """Base class for every credential or token rejection."""

    code = "unauthorized"
    default_message = "Unauthorized."


class CredentialError(AuthenticationError):
    """The transport-level ``Authorization`` header is unusable."""


class MissingCredentialError(CredentialError):
    code = "missing_credentials"
    default_message = "No authorization header."


class MalformedCredentialError(CredentialError):
    code = "malformed_credentials"
    default_message = "Invalid authorization header."


class AccessTokenError(AuthenticationError):
    """An access token failed verification."""

    code = "invalid_token"
    default_message = "Invalid access token."


class MalformedTokenError(AccessTokenError):
    default_message = "Access token could not be parsed."


class SignatureInvalidError(AccessTokenError):
    default_message = "Access token signature is invalid."


class TokenExpiredError(AccessTokenError):
    code = "token_expired"
    default_message = "Access token has expired."


class MalformedSubjectError(AccessTokenError):
    default_message = "Access token subject is not a valid user id."


class LoginError(AuthenticationError):
    """
    Credential check failed at login.

    Both subclasses share ``code`` and the public message so clients cannot
    tell a wrong password from an unknown account.
    """

    code = "invalid_credentials"
    default_message = "Incorrect email or password."


class InvalidCredentialsError(LoginError):
    pass


class UserNotFoundError(LoginError):
    pass


class RefreshTokenError(AuthenticationError):
    """A refresh token is not in the Active state."""

    default_message = "Refresh token is not valid."


class RefreshTokenNotFoundError(RefreshTokenError):
    code = "refresh_token_not_found"
    default_message = "Refresh token not found."


class RefreshTokenExpiredError(RefreshTokenError):
    code = "refresh_token_expired"
    default_message = "Refresh token has expired."


class RefreshTokenRevokedError(RefreshTokenError):
    code = "refresh_token_revoked"
    default_message = "Refresh token has been revoked."


class UnauthorizedError(AuthenticationError):
    """
    Umbrella rejection for the refresh path.

    :param reason: ``code`` of the underlying :class:`RefreshTokenError`.
    """

    default_message = "Refresh token is no longer valid. Please sign in."

    def __init__(self, message: str | None = None, *, reason: str | None = None) -> None:
        super().__init__(message)
        self.reason = reason


# --------------------------------------------------------------------------- #
# Infrastructure
# --------------------------------------------------------------------------- #


class InfrastructureError(ServiceError):
    """Internal fault distinct from any credential problem."""

    code = "internal_server_error"
    default_message = "Unexpected internal error."


class StorageError(InfrastructureError):
    """The backing store failed or timed out."""

    code = "service_unavailable"
    default_message = "Session storage is unavailable."


class HashingError(InfrastructureError):
    """The password hasher failed for a reason unrelated to the input."""

    default_message = "Password hashing failed."
