"""Unit of Work base: one session, the chirpy repositories bound to it."""

from __future__ import annotations

from abc import ABC, abstractmethod

from sqlalchemy.orm import Session, scoped_session

from chirpy.repositories import RefreshTokenRepository, UserRepository


class UnitOfWork(ABC):
    """
    Transactional boundary for one service call.

    ``users`` and ``refresh_tokens`` share :attr:`session`, so a refresh-token
    wipe and a user wipe issued in the same block land in one transaction.
    Subclasses decide whether leaving the block commits.

    :param session: Session (or Flask-scoped session) the repositories use.
    """

    users: UserRepository
    refresh_tokens: RefreshTokenRepository

    def __init__(self, session: Session | scoped_session) -> None:
        self.session = session
        self.users = UserRepository(session=session)
        self.refresh_tokens = RefreshTokenRepository(session=session)

    def __enter__(self) -> UnitOfWork:
        # The session starts lazily on the first statement.
        return self

    @abstractmethod
    def __exit__(self, exc_type, exc, tb) -> None: ...

    @abstractmethod
    def commit(self) -> None: ...

    def rollback(self) -> None:
        self.session.rollback()
