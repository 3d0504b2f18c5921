from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol
from uuid import UUID


@dataclass(frozen=True, slots=True)
class Account:
    """
    Read-model of a user account as seen by the authentication layer.

    :ivar id: User id (access token subject).
    :ivar email: Normalized login email.
    :ivar password_hash: Opaque digest with embedded salt and cost.
    """

    id: UUID
    email: str
    password_hash: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


class AccountDirectory(Protocol):
    """Port for the account lookups the authentication layer consumes."""

    def find_by_email(self, email: str) -> Account | None: ...

    def find_by_id(self, user_id: UUID) -> Account | None: ...


class InMemoryAccountDirectory(AccountDirectory):
    """Dictionary-backed directory used in unit tests."""

    def __init__(self, accounts: list[Account] | None = None) -> None:
        self._by_id: dict[UUID, Account] = {a.id: a for a in accounts or []}

    def add(self, account: Account) -> Account:
        self._by_id[account.id] = account
        return account

    def remove(self, user_id: UUID) -> None:
        self._by_id.pop(user_id, None)

    def find_by_email(self, email: str) -> Account | None:
        needle = email.strip().lower()
        return next((a for a in self._by_id.values() if a.email == needle), None)

    def find_by_id(self, user_id: UUID) -> Account | None:
        return self._by_id.get(user_id)
