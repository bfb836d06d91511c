"""Shared fixtures."""

import pytest

from byline_scout.database.models import init_db, close_connections


@pytest.fixture
def db():
    """Fresh in-memory database; yields the session factory."""
    _, factory = init_db("sqlite://")
    yield factory
    close_connections()


@pytest.fixture
def session(db):
    session = db()
    yield session
    session.close()
