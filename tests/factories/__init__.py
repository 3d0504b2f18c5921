"""Factory Boy helpers wired to the project's SQLAlchemy session."""

from __future__ import annotations

import factory

from chirpy.core.config import TestingConfig

# Cheap cost so factories stay fast; same digest format as production
TEST_HASH_METHOD = TestingConfig.PASSWORD_HASH_METHOD
DEFAULT_PASSWORD = "Passw0rd!"


class SQLAlchemySession:
    """Store the session provided by the pytest fixture layer."""

    _session = None

    @classmethod
    def set(cls, session):
        """Register the SQLAlchemy session used to persist factory objects."""
        cls._session = session

    @classmethod
    def get(cls):
        """Return the registered SQLAlchemy session.

        Raises
        ------
        RuntimeError
            If factories are used without the ``factories`` fixture wiring.
        """
        if cls._session is None:
            raise RuntimeError("Factories session not set. Did you request the 'factories' fixture?")
        return cls._session


class BaseFactory(factory.alchemy.SQLAlchemyModelFactory):
    """Base class persisting through the Flask-scoped session."""

    class Meta:
        abstract = True
        sqlalchemy_session_factory = SQLAlchemySession.get
        # Commit so units of work opened by the code under test see the rows
        sqlalchemy_session_persistence = "commit"
