"""
DTOs for IdentityService.

Data Transfer Objects (DTOs) isolate the service layer from ORM models,
ensuring clear input/output contracts and type safety.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

# --------------------------------------------------------------------------- #
# Input DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class UserRegisterIn:
    """
    Input DTO for user registration.

    :param email: Login email (normalized to lowercase by the model).
    :type email: str
    :param password: Raw password, hashed by the service.
    :type password: str
    """

    email: str
    password: str


@dataclass(frozen=True, slots=True)
class UserUpdateIn:
    """
    Input DTO for updating the authenticated user's credentials.

    :param email: Optional new email.
    :type email: str | None
    :param password: Optional new raw password.
    :type password: str | None
    """

    email: str | None = None
    password: str | None = None


# --------------------------------------------------------------------------- #
# Output DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class UserPublicOut:
    """
    Output DTO representing public-safe user data.

    :param id: User identifier.
    :type id: UUID
    :param email: Email address.
    :type email: str
    :param created_at: Creation instant (UTC).
    :type created_at: datetime
    :param updated_at: Last update instant (UTC).
    :type updated_at: datetime
    """

    id: UUID
    email: str
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True, slots=True)
class ResetOut:
    """
    Output DTO for the administrative reset.

    :param users: Number of deleted accounts.
    :type users: int
    :param refresh_tokens: Number of deleted refresh tokens.
    :type refresh_tokens: int
    """

    users: int
    refresh_tokens: int
