"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules. The
multisite fixtures build a small WordPress-like schema in a SQLite
file so scans run against real SQL.
"""

from collections.abc import Iterator
from pathlib import Path

import pytest
from sqlalchemy import Connection, Engine, create_engine

from tests.multisite import MultisiteBuilder


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    """Path of the SQLite database file used by a test."""
    return tmp_path / "wordpress.db"


@pytest.fixture
def db_url(db_path: Path) -> str:
    """SQLAlchemy URL of the test database."""
    return f"sqlite:///{db_path}"


@pytest.fixture
def engine(db_url: str) -> Iterator[Engine]:
    """Engine bound to the test database."""
    eng = create_engine(db_url)
    yield eng
    eng.dispose()


@pytest.fixture
def multisite(engine: Engine) -> MultisiteBuilder:
    """Empty multisite with a site registry and no sites."""
    return MultisiteBuilder(engine).create_registry()


@pytest.fixture
def connection(engine: Engine) -> Iterator[Connection]:
    """Read connection to the test database.

    No transaction starts until the first query, so tests populate
    ``multisite`` before scanning through this connection.
    """
    with engine.connect() as conn:
        yield conn
