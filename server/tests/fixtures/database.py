"""Database fixtures for testing.

Every test gets its own schema: a fresh SQLite file by default, or the
database named by FINKAN_TEST_DATABASE_URL (tables are dropped afterwards).
"""

import os
import pytest
from typing import Generator
from sqlalchemy.engine import Engine, Connection

from finkan_server.core.database import create_test_engine, get_connection, metadata


@pytest.fixture
def db_url(tmp_path) -> str:
    """Database URL for the current test."""
    return os.getenv("FINKAN_TEST_DATABASE_URL") or f"sqlite:///{tmp_path / 'finkan.db'}"


@pytest.fixture
def db_engine(db_url: str) -> Generator[Engine, None, None]:
    """Create an engine with the FinKan schema for one test."""
    engine = create_test_engine(db_url)
    metadata.create_all(engine)
    yield engine
    metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db_connection(db_engine: Engine) -> Generator[Connection, None, None]:
    """Provide a database connection for a test.

    Function-scoped so each test gets a fresh connection.
    Automatically commits on success, rolls back on failure.
    Commit explicitly before calling the API so its connection sees the rows.

    Example:
        def test_create_profile(db_connection):
            profile_id = create_test_profile(db_connection, suffix="x")
            db_connection.commit()
    """
    with get_connection(db_engine) as conn:
        yield conn
