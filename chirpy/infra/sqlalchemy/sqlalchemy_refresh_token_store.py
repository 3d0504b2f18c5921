# chirpy/infra/sqlalchemy/sqlalchemy_refresh_token_store.py
from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from chirpy.models.refresh_token import RefreshToken as RefreshTokenRow
from chirpy.services._shared.clock import as_utc, utcnow
from chirpy.services._shared.errors import RefreshTokenNotFoundError, StorageError
from chirpy.services._shared.ports import (
    DEFAULT_REFRESH_TTL,
    RefreshToken,
    RefreshTokenStore,
    new_token,
)
from chirpy.uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork

log = logging.getLogger(__name__)


def _to_view(row: RefreshTokenRow) -> RefreshToken:
    return RefreshToken(
        token=row.token,
        user_id=row.user_id,
        created_at=as_utc(row.created_at),
        expires_at=as_utc(row.expires_at),
        revoked_at=as_utc(row.revoked_at) if row.revoked_at is not None else None,
    )


@contextmanager
def _storage_errors(operation: str) -> Iterator[None]:
    """Re-raise SQLAlchemy faults (timeouts, lost connections) as ``StorageError``."""
    try:
        yield
    except SQLAlchemyError as exc:
        log.error("refresh_store.%s failed", operation, exc_info=True)
        raise StorageError() from exc


@dataclass(slots=True)
class SQLAlchemyRefreshTokenStore(RefreshTokenStore):
    """
    Relational refresh-token store on the ``refresh_tokens`` table.

    Each operation runs in its own unit of work. Revocation is a single
    conditional ``UPDATE`` so a concurrent lookup observes either the active
    or the revoked row, never a partial write.

    :param default_ttl: Lifetime used when :meth:`issue` gets no ``ttl``.
    """

    default_ttl: timedelta = DEFAULT_REFRESH_TTL

    def issue(self, user_id: UUID, *, ttl: timedelta | None = None) -> RefreshToken:
        now = utcnow()
        row = RefreshTokenRow(
            token=new_token(),
            user_id=user_id,
            created_at=now,
            updated_at=now,
            expires_at=now + (ttl if ttl is not None else self.default_ttl),
            revoked_at=None,
        )
        with _storage_errors("issue"), SQLAlchemyUnitOfWork() as uow:
            uow.refresh_tokens.add(row)
            view = _to_view(row)
        return view

    def get(self, token: str) -> RefreshToken | None:
        with _storage_errors("get"), SQLAlchemyReadOnlyUnitOfWork() as uow:
            row = uow.refresh_tokens.get(token)
            return _to_view(row) if row is not None else None

    def lookup_owner(self, token: str) -> UUID:
        view = self.get(token)
        if view is None:
            raise RefreshTokenNotFoundError()
        return view.require_active()

    def revoke(self, token: str) -> None:
        with _storage_errors("revoke"), SQLAlchemyUnitOfWork() as uow:
            changed = uow.refresh_tokens.mark_revoked(token, now=utcnow())
        if not changed:
            log.debug("refresh_store.revoke no-op (unknown or already revoked)")

    def revoke_all_for_user(self, user_id: UUID) -> int:
        with _storage_errors("revoke_all_for_user"), SQLAlchemyUnitOfWork() as uow:
            return uow.refresh_tokens.mark_all_revoked_for_user(user_id, now=utcnow())

    def purge_stale(self, now: datetime | None = None) -> int:
        with _storage_errors("purge_stale"), SQLAlchemyUnitOfWork() as uow:
            return uow.refresh_tokens.delete_stale(now=now or utcnow())

    def reset_all(self) -> int:
        with _storage_errors("reset_all"), SQLAlchemyUnitOfWork() as uow:
            return uow.refresh_tokens.delete_all()
