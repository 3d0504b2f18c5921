from __future__ import annotations

from datetime import timedelta
from typing import Protocol
from uuid import UUID


class AccessTokenCodec(Protocol):
    """Port for issuing and verifying self-contained, signed access tokens."""

    def issue(self, user_id: UUID, secret: str, ttl: timedelta) -> str:
        """Sign a token asserting ``user_id`` that expires ``ttl`` from now."""
        ...

    def verify(self, token: str, secret: str) -> UUID:
        """
        Verify ``token`` against ``secret`` and return its subject.

        :raises MalformedTokenError: Token cannot be parsed.
        :raises SignatureInvalidError: MAC does not match ``secret``.
        :raises TokenExpiredError: ``now >= exp``.
        :raises MalformedSubjectError: Subject is not a user id.
        """
        ...
