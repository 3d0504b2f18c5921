# chirpy/services/auth/service.py
from __future__ import annotations

import logging
from uuid import UUID

from chirpy.services._shared.base import BaseService, ServiceContext
from chirpy.services._shared.errors import (
    ForbiddenOperationError,
    InvalidCredentialsError,
    RefreshTokenError,
    UnauthorizedError,
    UserNotFoundError,
)
from chirpy.services._shared.ports import (
    AccessTokenCodec,
    AccountDirectory,
    PasswordHasher,
    RefreshTokenStore,
)
from chirpy.services.auth.bearer import extract_bearer_token
from chirpy.services.auth.dto import (
    AccessTokenOut,
    AuthTokenConfig,
    LoginIn,
    RefreshIn,
    RevokeIn,
    SessionOut,
)

log = logging.getLogger(__name__)

# Verified against when the account is unknown so both login failures cost one hash check
_DUMMY_PASSWORD = "chirpy-dummy-password"

# ``reason`` of a refresh whose token is active but whose account was deleted
ACCOUNT_GONE = "account_not_found"


class AuthService(BaseService):
    """
    Authentication lifecycle service (login / refresh / revoke / authorize).

    Access tokens are stateless HS256 JWTs issued through an
    :class:`AccessTokenCodec`. Refresh tokens are opaque and owned by a
    :class:`RefreshTokenStore`; refreshing never rotates or consumes them.
    The service keeps no per-session state of its own.
    """

    def __init__(
        self,
        *,
        accounts: AccountDirectory,
        hasher: PasswordHasher,
        codec: AccessTokenCodec,
        refresh_store: RefreshTokenStore,
        token_cfg: AuthTokenConfig,
        ctx: ServiceContext | None = None,
    ) -> None:
        """
        Initialize the service with its dependencies.

        :param accounts: Account lookups (by email, by id).
        :param hasher: Password hasher used to verify login credentials.
        :param codec: Adapter issuing and verifying access tokens.
        :param refresh_store: Stateful store for refresh tokens.
        :param token_cfg: Secret, lifetimes and admin mode.
        """
        super().__init__(ctx=ctx)
        self.accounts = accounts
        self.hasher = hasher
        self.codec = codec
        self.refresh_store = refresh_store
        self.cfg = token_cfg
        self._dummy_digest: str | None = None

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def login(self, dto: LoginIn) -> SessionOut:
        """
        Verify credentials and issue a new access token and refresh token.

        Existing refresh tokens of the user are left untouched.

        :param dto: Login input.
        :returns: Public user fields plus both tokens.
        :raises UserNotFoundError: No account for the email.
        :raises InvalidCredentialsError: Password does not match.
        """
        account = self.accounts.find_by_email(dto.email)
        if account is None:
            self.hasher.verify(dto.password, self._dummy_hash())
            log.warning("auth.login.failed", extra={"reason": UserNotFoundError.code})
            raise UserNotFoundError()

        if not self.hasher.verify(dto.password, account.password_hash):
            log.warning(
                "auth.login.failed",
                extra={"reason": InvalidCredentialsError.code, "user_id": str(account.id)},
            )
            raise InvalidCredentialsError()

        access = self.codec.issue(account.id, self.cfg.secret, self.cfg.access_expires)
        refresh = self.refresh_store.issue(account.id, ttl=self.cfg.refresh_expires)
        log.info("auth.login.succeeded", extra={"user_id": str(account.id)})

        return SessionOut(
            user_id=account.id,
            email=account.email,
            created_at=account.created_at,
            updated_at=account.updated_at,
            access_token=access,
            refresh_token=refresh.token,
        )

    # ------------------------------------------------------------------ #
    # Refresh
    # ------------------------------------------------------------------ #

    def refresh(self, dto: RefreshIn) -> AccessTokenOut:
        """
        Exchange an active refresh token for a new access token.

        :param dto: Refresh input carrying the raw ``Authorization`` header.
        :returns: The new access token.
        :raises CredentialError: Header missing or not a bearer credential.
        :raises UnauthorizedError: Refresh token unknown, expired or revoked,
            or its owner no longer exists; the specific store error is chained
            and its code kept in ``reason``.
        """
        token = extract_bearer_token(dto.authorization)
        try:
            user_id = self.refresh_store.lookup_owner(token)
        except RefreshTokenError as exc:
            log.warning("auth.refresh.rejected", extra={"reason": exc.code})
            raise UnauthorizedError(reason=exc.code) from exc

        account = self.accounts.find_by_id(user_id)
        if account is None:
            log.warning(
                "auth.refresh.rejected",
                extra={"reason": ACCOUNT_GONE, "user_id": str(user_id)},
            )
            raise UnauthorizedError(reason=ACCOUNT_GONE)

        access = self.codec.issue(account.id, self.cfg.secret, self.cfg.access_expires)
        log.info("auth.refresh.succeeded", extra={"user_id": str(account.id)})
        return AccessTokenOut(access_token=access)

    # ------------------------------------------------------------------ #
    # Revoke
    # ------------------------------------------------------------------ #

    def revoke(self, dto: RevokeIn) -> None:
        """
        Revoke the presented refresh token.

        Unknown, expired or already revoked tokens are accepted silently.

        :raises CredentialError: Header missing or not a bearer credential.
        """
        token = extract_bearer_token(dto.authorization)
        self.refresh_store.revoke(token)
        log.info("auth.revoke")

    # ------------------------------------------------------------------ #
    # Authorization gate
    # ------------------------------------------------------------------ #

    def authorize(self, authorization: str | None, secret: str | None = None) -> UUID:
        """
        Resolve the user id behind a bearer access token.

        :param authorization: Raw ``Authorization`` header value.
        :param secret: Signing key; defaults to the configured one.
        :returns: Authenticated user id.
        :raises AuthenticationError: Any credential or token failure.
        """
        token = extract_bearer_token(authorization)
        return self.codec.verify(token, secret or self.cfg.secret)

    # ------------------------------------------------------------------ #
    # Admin
    # ------------------------------------------------------------------ #

    def reset_sessions(self) -> int:
        """
        Delete every refresh token.

        :returns: Number of records removed.
        :raises ForbiddenOperationError: Platform is not ``dev``.
        """
        if not self.cfg.admin_reset_allowed:
            log.warning("auth.reset.forbidden", extra={"reason": ForbiddenOperationError.code})
            raise ForbiddenOperationError()
        removed = self.refresh_store.reset_all()
        log.info("auth.reset removed=%s", removed)
        return removed

    # ------------------------------------------------------------------ #
    # Utilities
    # ------------------------------------------------------------------ #

    def _dummy_hash(self) -> str:
        if self._dummy_digest is None:
            self._dummy_digest = self.hasher.hash(_DUMMY_PASSWORD)
        return self._dummy_digest
