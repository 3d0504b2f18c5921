# chirpy/infra/sqlalchemy/sqlalchemy_account_directory.py
from __future__ import annotations

from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from chirpy.models.user import User
from chirpy.services._shared.clock import as_utc
from chirpy.services._shared.errors import StorageError
from chirpy.services._shared.ports import Account, AccountDirectory
from chirpy.uow import SQLAlchemyReadOnlyUnitOfWork


def to_account(user: User) -> Account:
    """Project a :class:`User` row onto the read-model used by authentication."""
    return Account(
        id=user.id,
        email=user.email,
        password_hash=user.password_hash,
        created_at=as_utc(user.created_at) if user.created_at is not None else None,
        updated_at=as_utc(user.updated_at) if user.updated_at is not None else None,
    )


class SQLAlchemyAccountDirectory(AccountDirectory):
    """Account lookups on the ``users`` table, one read-only unit of work per call."""

    def find_by_email(self, email: str) -> Account | None:
        try:
            with SQLAlchemyReadOnlyUnitOfWork() as uow:
                user = uow.users.get_by_email(email)
                return to_account(user) if user is not None else None
        except SQLAlchemyError as exc:
            raise StorageError() from exc

    def find_by_id(self, user_id: UUID) -> Account | None:
        try:
            with SQLAlchemyReadOnlyUnitOfWork() as uow:
                user = uow.users.get(user_id)
                return to_account(user) if user is not None else None
        except SQLAlchemyError as exc:
            raise StorageError() from exc
