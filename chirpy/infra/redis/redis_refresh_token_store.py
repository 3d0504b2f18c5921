# chirpy/infra/redis/redis_refresh_token_store.py
from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import cast
from uuid import UUID

import redis
from redis.exceptions import RedisError

from chirpy.services._shared.clock import utcnow
from chirpy.services._shared.errors import RefreshTokenNotFoundError, StorageError
from chirpy.services._shared.ports import (
    DEFAULT_REFRESH_TTL,
    RefreshToken,
    RefreshTokenStore,
    RefreshTokenState,
    new_token,
)

log = logging.getLogger(__name__)

# Revoked records are kept until their natural expiry so lookups can still
# report REVOKED rather than NOT_FOUND.
KEY_PREFIX = "rt:"
USER_INDEX_PREFIX = "rt:u:"


@contextmanager
def _storage_errors(operation: str) -> Iterator[None]:
    """Re-raise redis-py faults (timeouts, connection loss) as ``StorageError``."""
    try:
        yield
    except RedisError as exc:
        log.error("refresh_store.%s failed", operation, exc_info=True)
        raise StorageError() from exc


@dataclass(slots=True)
class RedisRefreshTokenStore(RefreshTokenStore):
    """
    Redis-backed refresh-token store.

    Layout
    ------
    - ``rt:{token}``: hash with ``user_id``, ``created_at``, ``expires_at`` and,
      once revoked, ``revoked_at`` (epoch seconds). Key TTL equals the token
      lifetime, so Redis drops expired records by itself.
    - ``rt:u:{user_id}``: set of the user's tokens, used for bulk revocation.

    :param r: A Redis client (already connected).
    :param default_ttl: Lifetime used when :meth:`issue` gets no ``ttl``.
    """

    r: redis.Redis
    default_ttl: timedelta = DEFAULT_REFRESH_TTL

    # -------------------- helpers --------------------

    @staticmethod
    def _k(token: str) -> str:
        return f"{KEY_PREFIX}{token}"

    @staticmethod
    def _ku(user_id: UUID | str) -> str:
        return f"{USER_INDEX_PREFIX}{user_id}"

    @staticmethod
    def _to_ts(dt: datetime) -> int:
        return int(dt.timestamp())

    @staticmethod
    def _from_ts(raw: bytes | str | None) -> datetime | None:
        if raw is None:
            return None
        value = raw.decode() if isinstance(raw, bytes | bytearray) else str(raw)
        return datetime.fromtimestamp(int(value), tz=UTC)

    @staticmethod
    def _decode(raw: bytes | str) -> str:
        return raw.decode() if isinstance(raw, bytes | bytearray) else str(raw)

    def _token_members(self, user_id: UUID) -> list[str]:
        return sorted(self._decode(m) for m in self.r.smembers(self._ku(user_id)))

    # -------------------- API ------------------------

    def issue(self, user_id: UUID, *, ttl: timedelta | None = None) -> RefreshToken:
        now = utcnow().replace(microsecond=0)
        lifetime = ttl if ttl is not None else self.default_ttl
        record = RefreshToken(
            token=new_token(),
            user_id=user_id,
            created_at=now,
            expires_at=now + lifetime,
        )
        key = self._k(record.token)
        with _storage_errors("issue"):
            pipe = self.r.pipeline(transaction=True)
            pipe.hset(
                key,
                mapping={
                    "user_id": str(user_id),
                    "created_at": str(self._to_ts(record.created_at)),
                    "expires_at": str(self._to_ts(record.expires_at)),
                },
            )
            pipe.expire(key, max(1, int(lifetime.total_seconds())))
            pipe.sadd(self._ku(user_id), record.token)
            pipe.execute()
        return record

    def get(self, token: str) -> RefreshToken | None:
        with _storage_errors("get"):
            h = cast(dict[bytes, bytes], self.r.hgetall(self._k(token)))
        if not h:
            return None
        created_at = self._from_ts(h.get(b"created_at"))
        expires_at = self._from_ts(h.get(b"expires_at"))
        if created_at is None or expires_at is None:
            return None
        return RefreshToken(
            token=token,
            user_id=UUID(self._decode(h[b"user_id"])),
            created_at=created_at,
            expires_at=expires_at,
            revoked_at=self._from_ts(h.get(b"revoked_at")),
        )

    def lookup_owner(self, token: str) -> UUID:
        view = self.get(token)
        if view is None:
            raise RefreshTokenNotFoundError()
        return view.require_active()

    def revoke(self, token: str) -> None:
        key = self._k(token)
        now = str(self._to_ts(utcnow()))
        with _storage_errors("revoke"):
            # WATCH guards against setting revoked_at on a key that expired or
            # was reset between the existence check and the write.
            with self.r.pipeline() as p:
                while True:
                    try:
                        p.watch(key)
                        if not p.exists(key):
                            p.unwatch()
                            return
                        p.multi()
                        # HSETNX keeps the first revocation instant
                        p.hsetnx(key, "revoked_at", now)
                        p.execute()
                        return
                    except redis.WatchError:
                        continue

    def revoke_all_for_user(self, user_id: UUID) -> int:
        count = 0
        with _storage_errors("revoke_all_for_user"):
            for token in self._token_members(user_id):
                view = self.get(token)
                if view is None:
                    self.r.srem(self._ku(user_id), token)
                    continue
                if view.revoked_at is None:
                    self.revoke(token)
                    count += 1
        return count

    def purge_stale(self, now: datetime | None = None) -> int:
        now = now or utcnow()
        removed = 0
        with _storage_errors("purge_stale"):
            for raw_index in self.r.scan_iter(match=f"{USER_INDEX_PREFIX}*"):
                index_key = self._decode(raw_index)
                for member in list(self.r.smembers(index_key)):
                    token = self._decode(member)
                    view = self.get(token)
                    if view is None or view.state(now) is not RefreshTokenState.ACTIVE:
                        pipe = self.r.pipeline(transaction=True)
                        pipe.delete(self._k(token))
                        pipe.srem(index_key, token)
                        pipe.execute()
                        removed += 1 if view is not None else 0
        return removed

    def reset_all(self) -> int:
        removed = 0
        with _storage_errors("reset_all"):
            keys = [self._decode(k) for k in self.r.scan_iter(match=f"{KEY_PREFIX}*")]
            tokens = [k for k in keys if not k.startswith(USER_INDEX_PREFIX)]
            if keys:
                removed = len(tokens)
                self.r.delete(*keys)
        return removed
