"""Refresh token repository: single-statement reads and writes."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import delete, or_, update

from chirpy.models.refresh_token import RefreshToken
from chirpy.repositories.base import BaseRepository


class RefreshTokenRepository(BaseRepository[RefreshToken]):
    """Persistence-only repository for :class:`RefreshToken` rows.

    Every mutation is a single ``UPDATE``/``DELETE`` statement so the database
    resolves races on the same row.
    """

    model = RefreshToken

    def _pk_attr(self):
        return RefreshToken.token

    def mark_revoked(self, token: str, *, now: datetime) -> int:
        """
        Set ``revoked_at`` unless already set.

        :returns: ``1`` if the row changed, ``0`` if missing or already revoked.
        """
        stmt = (
            update(RefreshToken)
            .where(RefreshToken.token == token, RefreshToken.revoked_at.is_(None))
            .values(revoked_at=now, updated_at=now)
        )
        return int(self.session.execute(stmt).rowcount or 0)

    def mark_all_revoked_for_user(self, user_id: uuid.UUID, *, now: datetime) -> int:
        stmt = (
            update(RefreshToken)
            .where(RefreshToken.user_id == user_id, RefreshToken.revoked_at.is_(None))
            .values(revoked_at=now, updated_at=now)
        )
        return int(self.session.execute(stmt).rowcount or 0)

    def delete_stale(self, *, now: datetime) -> int:
        """Delete rows that are expired or revoked at ``now``."""
        stmt = delete(RefreshToken).where(
            or_(RefreshToken.expires_at <= now, RefreshToken.revoked_at.is_not(None))
        )
        return int(self.session.execute(stmt).rowcount or 0)

