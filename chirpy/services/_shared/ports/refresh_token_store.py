from __future__ import annotations

import secrets
import threading
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from enum import Enum, auto
from typing import Final, Protocol
from uuid import UUID

from chirpy.services._shared.clock import utcnow
from chirpy.services._shared.errors import (
    RefreshTokenExpiredError,
    RefreshTokenNotFoundError,
    RefreshTokenRevokedError,
)

DEFAULT_REFRESH_TTL: Final[timedelta] = timedelta(days=60)

# 32 random bytes, hex encoded
TOKEN_BYTES: Final[int] = 32


class RefreshTokenState(Enum):
    """Lifecycle state of a refresh token at a given instant."""

    ACTIVE = auto()
    EXPIRED = auto()
    REVOKED = auto()


@dataclass(frozen=True, slots=True)
class RefreshToken:
    """
    Read-model for a persisted refresh token.

    :ivar token: Opaque random string handed to the client.
    :ivar user_id: Owner user id.
    :ivar created_at: Issuance instant (UTC).
    :ivar expires_at: Absolute expiration (UTC).
    :ivar revoked_at: Revocation instant, ``None`` while not revoked.
    """

    token: str
    user_id: UUID
    created_at: datetime
    expires_at: datetime
    revoked_at: datetime | None = None

    @property
    def revoked(self) -> bool:
        return self.revoked_at is not None

    def state(self, now: datetime | None = None) -> RefreshTokenState:
        """
        Evaluate the lifecycle state at ``now``.

        Expiry is checked before revocation, so an expired token that was also
        revoked reports ``EXPIRED``.
        """
        now = now or utcnow()
        if now >= self.expires_at:
            return RefreshTokenState.EXPIRED
        if self.revoked_at is not None:
            return RefreshTokenState.REVOKED
        return RefreshTokenState.ACTIVE

    def require_active(self, now: datetime | None = None) -> UUID:
        """
        Return the owner id if the token is active.

        :raises RefreshTokenExpiredError: ``now >= expires_at``.
        :raises RefreshTokenRevokedError: ``revoked_at`` is set.
        """
        state = self.state(now)
        if state is RefreshTokenState.EXPIRED:
            raise RefreshTokenExpiredError()
        if state is RefreshTokenState.REVOKED:
            raise RefreshTokenRevokedError()
        return self.user_id


def new_token() -> str:
    """Generate a new random opaque refresh token."""
    return secrets.token_hex(TOKEN_BYTES)


class RefreshTokenStore(Protocol):
    """
    Stateful store owning the refresh-token lifecycle.

    Concurrent operations on the same token MUST be resolved atomically by the
    backend: a revoke racing a lookup is seen either as active or as revoked.
    Backend faults surface as :class:`~chirpy.services._shared.errors.StorageError`.
    """

    def issue(self, user_id: UUID, *, ttl: timedelta | None = None) -> RefreshToken:
        """Persist and return a brand-new active refresh token for ``user_id``."""
        ...

    def get(self, token: str) -> RefreshToken | None:
        """Fetch a single record snapshot (if present), whatever its state."""
        ...

    def lookup_owner(self, token: str) -> UUID:
        """
        Resolve the owner of an active token.

        :raises RefreshTokenNotFoundError: No record exists.
        :raises RefreshTokenExpiredError: ``now >= expires_at``.
        :raises RefreshTokenRevokedError: ``revoked_at`` is set.
        """
        ...

    def revoke(self, token: str) -> None:
        """Set ``revoked_at`` once; silently ignore unknown tokens."""
        ...

    def revoke_all_for_user(self, user_id: UUID) -> int:
        """
        Revoke every not-yet-revoked token of ``user_id``.

        :returns: Number of tokens affected.
        """
        ...

    def purge_stale(self, now: datetime | None = None) -> int:
        """
        Delete expired and revoked records.

        :returns: Number of records removed.
        """
        ...

    def reset_all(self) -> int:
        """
        Delete every record, terminating all sessions.

        :returns: Number of records removed.
        """
        ...


class InMemoryRefreshTokenStore(RefreshTokenStore):
    """
    In-memory refresh-token store.

    .. note::
       Uses a threading lock so it can back a single-process dev server as
       well as unit tests.
    """

    def __init__(self, *, default_ttl: timedelta = DEFAULT_REFRESH_TTL) -> None:
        self._by_token: dict[str, RefreshToken] = {}
        self._default_ttl = default_ttl
        self._lock = threading.Lock()

    def issue(self, user_id: UUID, *, ttl: timedelta | None = None) -> RefreshToken:
        now = utcnow()
        record = RefreshToken(
            token=new_token(),
            user_id=user_id,
            created_at=now,
            expires_at=now + (ttl if ttl is not None else self._default_ttl),
        )
        with self._lock:
            self._by_token[record.token] = record
        return record

    def get(self, token: str) -> RefreshToken | None:
        with self._lock:
            return self._by_token.get(token)

    def lookup_owner(self, token: str) -> UUID:
        record = self.get(token)
        if record is None:
            raise RefreshTokenNotFoundError()
        return record.require_active()

    def revoke(self, token: str) -> None:
        with self._lock:
            record = self._by_token.get(token)
            if record is None or record.revoked_at is not None:
                return
            self._by_token[token] = replace(record, revoked_at=utcnow())

    def revoke_all_for_user(self, user_id: UUID) -> int:
        now = utcnow()
        count = 0
        with self._lock:
            for token, record in self._by_token.items():
                if record.user_id == user_id and record.revoked_at is None:
                    self._by_token[token] = replace(record, revoked_at=now)
                    count += 1
        return count

    def purge_stale(self, now: datetime | None = None) -> int:
        now = now or utcnow()
        with self._lock:
            stale = [
                token
                for token, record in self._by_token.items()
                if record.state(now) is not RefreshTokenState.ACTIVE
            ]
            for token in stale:
                del self._by_token[token]
        return len(stale)

    def reset_all(self) -> int:
        with self._lock:
            count = len(self._by_token)
            self._by_token.clear()
        return count
