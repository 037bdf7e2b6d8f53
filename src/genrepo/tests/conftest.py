"""
Core pytest configuration for the entire test suite.

This module provides only the settings, logging and database setup shared by ALL
test packages. Domain fixtures (entities, tables, repositories, sample data) live in:
- tests/test_fixtures/entities.py
- tests/test_fixtures/tables.py
- tests/test_fixtures/repository_fixtures.py

and are registered globally by importing them at the bottom of this file.
"""

from __future__ import annotations

# -------------------------------
# Standard library imports
# -------------------------------
import os
import logging
from pathlib import Path
from typing import Iterator
from urllib.parse import urlparse

# -------------------------------
# Early logging tuning
# -------------------------------
# Set the level for noisy third-party loggers at import time, before importing modules
# that might initialize them. Keep this block above the genrepo imports.
NOISY_LOGGERS = (
    "faker",
    "faker.factory",
    "sqlalchemy",
    "sqlalchemy.engine",
    "sqlalchemy.engine.Engine",
)
for _name in NOISY_LOGGERS:
    logging.getLogger(_name).setLevel(logging.WARNING)

# -------------------------------
# Third-party / project imports
# -------------------------------
import pytest
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from genrepo.config import get_settings
from genrepo.core.logging.builder import setup_logging
from genrepo.db import create_db_engine, make_session_factory, metadata
from genrepo.tests.test_fixtures import tables  # noqa: F401 - registers tables on `metadata`

settings = get_settings()
logger = logging.getLogger(__name__)


@pytest.fixture(scope="session", autouse=True)
def configure_logging():
    """
    Install the package logging configuration for the whole session.

    pytest's `caplog` attaches its own handler per test, so `caplog.records` keeps
    working after dictConfig replaces the root handlers.
    """
    setup_logging(settings)
    yield


# ------------------------------------------------------------------------------------------------
# Test database URL
# ------------------------------------------------------------------------------------------------


def safe_log_db_url(db_url: str) -> str:
    """
    Return the database URL without credentials, for logging.
    """
    parsed = urlparse(db_url)
    if parsed.scheme.startswith("sqlite"):
        return db_url
    return f"{parsed.scheme}://{parsed.hostname}:{parsed.port or ''}/{parsed.path.lstrip('/')}"


def get_test_database_url(tmp_path: Path) -> str:
    """
    Determine the test database URL.

    1. `TEST_DATABASE_URL` environment variable (CI/CD override, e.g. Postgres)
    2. App settings with `TESTING=true` and `TEST_POSTGRES_DB` set
    3. A throwaway SQLite file inside the test's tmp_path
    """
    if test_url := os.getenv("TEST_DATABASE_URL"):
        return test_url

    if settings.TESTING and settings.TEST_POSTGRES_DB:
        return settings.DATABASE_URL

    return f"sqlite:///{tmp_path / 'test_database.db'}"


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ships with foreign key enforcement off
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


# ------------------------------------------------------------------------------------------------
# DATABASE FIXTURES
# ------------------------------------------------------------------------------------------------


@pytest.fixture()
def engine(tmp_path: Path) -> Iterator[Engine]:
    """
    Engine with all test tables created; dropped again on teardown.

    Function-scoped: every test starts from empty tables, whether it runs against the
    per-test SQLite file or a shared server database.
    """
    url = get_test_database_url(tmp_path)
    logger.debug(f"Using test DB: {safe_log_db_url(url)}")

    test_engine = create_db_engine(
        settings.model_copy(update={"SQLALCHEMY_DATABASE_URI": url, "SQLALCHEMY_ECHO": False})
    )
    if test_engine.dialect.name == "sqlite":
        event.listen(test_engine, "connect", _enable_sqlite_foreign_keys)

    metadata.create_all(test_engine)
    yield test_engine

    metadata.drop_all(test_engine)
    test_engine.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return make_session_factory(engine)


@pytest.fixture()
def db_session(session_factory: sessionmaker[Session]) -> Iterator[Session]:
    """
    One session per test. Repositories never commit, so everything the test writes is
    discarded by the final rollback.
    """
    session = session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


# Repository test fixtures
from .test_fixtures.repository_fixtures import (  # noqa: E402, F401
    fake,
    author_repository,
    book_repository,
    tag_repository,
    sample_author,
    create_author,
    created_author,
    multiple_authors,
)
