"""
IdentityService
===============

Aggregate service responsible for the `User` aggregate:
- Registration with a hashed password
- Credential updates (email and password) for the authenticated user
- Administrative wipe of all accounts in dev mode
"""

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from sqlalchemy.exc import IntegrityError

from chirpy.models.user import User
from chirpy.repositories.user import UserRepository
from chirpy.services._shared.base import BaseService, ServiceContext
from chirpy.services._shared.clock import as_utc
from chirpy.services._shared.errors import (
    ConflictError,
    ForbiddenOperationError,
    NotFoundError,
)
from chirpy.services._shared.ports import PasswordHasher, RefreshTokenStore
from chirpy.services.identity.dto import (
    ResetOut,
    UserPublicOut,
    UserRegisterIn,
    UserUpdateIn,
)

log = logging.getLogger(__name__)


def violates_email_uniqueness(exc: IntegrityError) -> bool:
    """
    Check whether an IntegrityError comes from the unique email constraint.

    PostgreSQL reports the constraint name; SQLite reports ``table.column``.
    """
    message = str(exc.orig).lower() if exc.orig else ""
    return "uq_users_email" in message or "users.email" in message


def _to_public(user: User) -> UserPublicOut:
    return UserPublicOut(
        id=user.id,
        email=user.email,
        created_at=as_utc(user.created_at),
        updated_at=as_utc(user.updated_at),
    )


class IdentityService(BaseService):
    """
    Application service for the `User` aggregate.

    Responsibilities
    ----------------
    - Register users ensuring email uniqueness.
    - Update the user's credentials, revoking sessions on a password change.
    - Wipe accounts when the platform allows administrative resets.
    """

    def __init__(
        self,
        *,
        hasher: PasswordHasher,
        refresh_store: RefreshTokenStore | None = None,
        allow_reset: bool = False,
        ctx: ServiceContext | None = None,
    ) -> None:
        """
        :param hasher: Password hasher producing the stored digests.
        :param refresh_store: Store whose tokens are revoked on a password change.
        :param allow_reset: ``True`` only on the ``dev`` platform.
        """
        super().__init__(ctx=ctx)
        self.hasher = hasher
        self.refresh_store = refresh_store
        self.allow_reset = allow_reset

    # --------------------------------------------------------------------- #
    # Registration
    # --------------------------------------------------------------------- #

    def register_user(self, dto: UserRegisterIn) -> UserPublicOut:
        """
        Register a new user.

        :param dto: User registration input DTO.
        :type dto: UserRegisterIn
        :returns: Public-safe user DTO.
        :rtype: UserPublicOut
        :raises ConflictError: Email already registered.
        :raises HashingError: Hasher failure.
        """
        digest = self.hasher.hash(dto.password)

        with self.rw_uow() as uow:
            repo: UserRepository = uow.users

            if repo.exists_by_email(dto.email):
                raise ConflictError("User", "email already in use")

            try:
                user = repo.add(User(email=dto.email, password_hash=digest))
            except IntegrityError as exc:
                if violates_email_uniqueness(exc):
                    raise ConflictError("User", "email already in use") from exc
                raise

            out = _to_public(user)

        log.info("identity.user_registered", extra={"user_id": str(out.id)})
        return out

    # --------------------------------------------------------------------- #
    # Update credentials
    # --------------------------------------------------------------------- #

    def update_user(self, user_id: UUID, dto: UserUpdateIn) -> UserPublicOut:
        """
        Update the email and/or password of ``user_id``.

        A new password is hashed before it reaches the repository, and once
        committed every active refresh token of the user is revoked.

        :param user_id: Authenticated user identifier.
        :type user_id: UUID
        :param dto: Input DTO containing new values.
        :type dto: UserUpdateIn
        :returns: Updated user DTO.
        :rtype: UserPublicOut
        :raises NotFoundError: When user not found.
        :raises ConflictError: When the new email is taken.
        """
        updates: dict[str, Any] = {}
        if dto.email is not None:
            updates["email"] = dto.email
        if dto.password is not None:
            updates["password_hash"] = self.hasher.hash(dto.password)

        with self.rw_uow() as uow:
            repo: UserRepository = uow.users
            user = repo.get_for_update(user_id)
            if user is None:
                raise NotFoundError("User", user_id)

            try:
                repo.update(user, **updates)
            except IntegrityError as exc:
                if violates_email_uniqueness(exc):
                    raise ConflictError("User", "email already in use") from exc
                raise

            out = _to_public(user)

        if dto.password is not None and self.refresh_store is not None:
            revoked = self.refresh_store.revoke_all_for_user(user_id)
            log.info("identity.sessions_revoked count=%s", revoked, extra={"user_id": str(user_id)})

        log.info("identity.user_updated", extra={"user_id": str(user_id)})
        return out

    # --------------------------------------------------------------------- #
    # Admin
    # --------------------------------------------------------------------- #

    def reset_users(self) -> ResetOut:
        """
        Delete every account and its refresh-token rows.

        :raises ForbiddenOperationError: Outside the ``dev`` platform.
        """
        if not self.allow_reset:
            raise ForbiddenOperationError()

        with self.rw_uow() as uow:
            tokens = uow.refresh_tokens.delete_all()
            users = uow.users.delete_all()

        log.info("identity.reset users=%s refresh_tokens=%s", users, tokens)
        return ResetOut(users=users, refresh_tokens=tokens)
