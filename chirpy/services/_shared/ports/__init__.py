"""
chirpy.services._shared.ports
=============================

Collection of *ports* (hexagonal interfaces) that define the contracts for
password hashing, access-token signing, refresh-token persistence and account
lookup.

These ports decouple the service layer from concrete implementations.

Modules
-------
- :mod:`password_hasher`:
    Defines :class:`~.PasswordHasher`: salted adaptive hashing.

- :mod:`token_codec`:
    Defines :class:`~.AccessTokenCodec`: signed, time-limited identity assertions.

- :mod:`refresh_token_store`:
    Defines :class:`~.RefreshTokenStore`, :class:`~.RefreshToken`,
    :class:`~.RefreshTokenState` and the in-memory adapter.

- :mod:`account_directory`:
    Defines :class:`~.AccountDirectory` and :class:`~.Account`.

Design Notes
------------
Concrete adapters (SQLAlchemy, Redis, PyJWT, werkzeug) live under
``chirpy.infra``. In-memory doubles live next to their port.
"""

from __future__ import annotations

from .account_directory import Account, AccountDirectory, InMemoryAccountDirectory
from .password_hasher import PasswordHasher
from .refresh_token_store import (
    DEFAULT_REFRESH_TTL,
    InMemoryRefreshTokenStore,
    RefreshToken,
    RefreshTokenState,
    RefreshTokenStore,
    new_token,
)
from .token_codec import AccessTokenCodec

__all__ = [
    "Account",
    "AccountDirectory",
    "InMemoryAccountDirectory",
    "PasswordHasher",
    "AccessTokenCodec",
    "RefreshTokenStore",
    "RefreshToken",
    "RefreshTokenState",
    "InMemoryRefreshTokenStore",
    "DEFAULT_REFRESH_TTL",
    "new_token",
]
