"""Pytest fixtures: a testing app, a fresh schema per test and API helpers.

Each test gets its own application context and a freshly created in-memory
SQLite schema, so committed data never leaks between cases.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Generator
from typing import Any

import pytest
from flask import Flask

from chirpy.core.config import TestingConfig
from chirpy.core.extensions import db as _db
from chirpy.factory import create_app
from chirpy.infra.hashing import WerkzeugPasswordHasher
from tests.factories import TEST_HASH_METHOD


@pytest.fixture(scope="session")
def app() -> Flask:
    """Create a Flask application configured for testing.

    Returns
    -------
    flask.Flask
        Application instance with :class:`TestingConfig` applied.
    """
    # Ensure env-based config does not leak into tests
    os.environ.pop("DATABASE_URL", None)
    application = create_app(TestingConfig)
    application.logger.setLevel("WARNING")
    return application

@pytest.fixture()
def session(app: Flask) -> Generator[Any, None, None]:
    """Push an app context and create the schema for a single test.

    Yields
    ------
    sqlalchemy.orm.scoping.scoped_session
        The Flask-scoped session that units of work also use.
    """
    with app.app_context():
        _db.create_all()
        try:
            yield _db.session
        finally:
            _db.session.remove()
            _db.drop_all()

@pytest.fixture()
def client(app: Flask, session: Any):
    """Return a Flask test client bound to the per-test schema."""
    return app.test_client()

@pytest.fixture(scope="session")
def hasher() -> WerkzeugPasswordHasher:
    """Password hasher with a low PBKDF2 cost."""
    return WerkzeugPasswordHasher(method=TEST_HASH_METHOD)

@pytest.fixture(scope="session")
def faker():
    """Provide a :class:`faker.Faker` instance seeded for deterministic tests."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk

@pytest.fixture()
def bearer() -> Callable[[str], dict[str, str]]:
    """Build an ``Authorization`` header for a token."""

    def _factory(token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token}"}

    return _factory

# -- Hook up Factory Boy to the per-test session -------------------------------
@pytest.fixture()
def factories(session: Any) -> Generator[None, None, None]:
    """Wire Factory Boy's session helper to the per-test session."""
    from tests.factories import SQLAlchemySession

    SQLAlchemySession.set(session)
    try:
        yield
    finally:
        SQLAlchemySession.set(None)
