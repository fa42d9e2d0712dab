"""Database connection and schema management using SQLAlchemy Core"""

from __future__ import annotations

import logging
import time
import uuid
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    Uuid,
    create_engine,
    event,
    func,
    text,
)
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.pool import NullPool

logger = logging.getLogger(__name__)


metadata = MetaData()

WORKSPACE_ROLES = ("owner", "admin", "member")
TASK_PRIORITIES = ("low", "medium", "high", "urgent")
TASK_STATUSES = ("todo", "in_progress", "review", "done")

# Profiles table - one row per person, created on first successful login
profiles_table = Table(
    "profiles",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid.uuid4),
    Column("email", String(255), nullable=False, unique=True, index=True),
    Column("full_name", String(255), nullable=True),
    Column("avatar_url", Text, nullable=True),
    Column("role", String(20), nullable=False, server_default="member"),
    Column("microsoft_id", String(255), nullable=True, unique=True, index=True),
    Column("auth_provider", String(50), nullable=True),
    Column("created_at", DateTime(timezone=True), server_default=func.now(), nullable=False),
    Column("updated_at", DateTime(timezone=True), server_default=func.now(), nullable=False),
)

# Workspaces table - top-level container
workspaces_table = Table(
    "workspaces",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid.uuid4),
    Column("name", String(255), nullable=False),
    Column("icon", String(32), nullable=True),
    Column("description", Text, nullable=True),
    Column("created_by", Uuid, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True, index=True),
    Column("is_archived", Boolean, nullable=False, server_default=text("false")),
    Column("created_at", DateTime(timezone=True), server_default=func.now(), nullable=False),
    Column("updated_at", DateTime(timezone=True), server_default=func.now(), nullable=False),
)

# Workspace members table - the authorization relation, carries the role
workspace_members_table = Table(
    "workspace_members",
    metadata,
    Column("workspace_id", Uuid, ForeignKey("workspaces.id", ondelete="CASCADE"), primary_key=True),
    Column("profile_id", Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), primary_key=True),
    Column("role", String(20), nullable=False, server_default="member"),
    Column("created_at", DateTime(timezone=True), server_default=func.now(), nullable=False),
    Index("idx_workspace_members_profile", "profile_id"),
)

# Projects table - one kanban board, soft-deleted through is_archived
projects_table = Table(
    "projects",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid.uuid4),
    Column("workspace_id", Uuid, ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False, index=True),
    Column("name", String(255), nullable=False),
    Column("description", Text, nullable=True),
    Column("created_by", Uuid, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True),
    Column("is_archived", Boolean, nullable=False, server_default=text("false")),
    Column("created_at", DateTime(timezone=True), server_default=func.now(), nullable=False),
    Column("updated_at", DateTime(timezone=True), server_default=func.now(), nullable=False),
)

# Columns table - ordered stages of a project
# (project_id, position) is kept dense by core.ordering; no unique constraint
# so renumbering can pass through intermediate states inside a transaction.
columns_table = Table(
    "columns",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid.uuid4),
    Column("project_id", Uuid, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False),
    Column("name", String(255), nullable=False),
    Column("position", Integer, nullable=False),
    Column("created_at", DateTime(timezone=True), server_default=func.now(), nullable=False),
    Column("updated_at", DateTime(timezone=True), server_default=func.now(), nullable=False),
    Index("idx_columns_project_position", "project_id", "position"),
)

# Tasks table - ordered cards within a column
tasks_table = Table(
    "tasks",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid.uuid4),
    Column("column_id", Uuid, ForeignKey("columns.id", ondelete="CASCADE"), nullable=False),
    Column("title", String(500), nullable=False),
    Column("description", Text, nullable=True),
    Column("assignee_id", Uuid, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True, index=True),
    Column("priority", String(20), nullable=False, server_default="medium"),
    Column("status", String(20), nullable=False, server_default="todo"),
    Column("due_date", DateTime(timezone=True), nullable=True),
    Column("is_recurring", Boolean, nullable=False, server_default=text("false")),
    Column("recurrence_pattern", String(255), nullable=True),
    Column("position", Integer, nullable=False),
    Column("created_by", Uuid, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True),
    Column("created_at", DateTime(timezone=True), server_default=func.now(), nullable=False),
    Column("updated_at", DateTime(timezone=True), server_default=func.now(), nullable=False),
    Index("idx_tasks_column_position", "column_id", "position"),
)

# Auth sessions table - identity provider tokens kept for a profile
auth_sessions_table = Table(
    "auth_sessions",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid.uuid4),
    Column("user_id", Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True),
    Column("access_token", Text, nullable=False),
    Column("refresh_token", Text, nullable=True),
    Column("expires_at", DateTime(timezone=True), nullable=True),
    Column("created_at", DateTime(timezone=True), server_default=func.now(), nullable=False),
)


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def _enable_sqlite_foreign_keys(engine: Engine) -> None:
    """SQLite ignores ON DELETE CASCADE unless foreign keys are switched on per connection."""

    @event.listens_for(engine, "connect")
    def _set_pragma(dbapi_connection: Any, connection_record: Any) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def create_db_engine(database_url: str, **kwargs: Any) -> Engine:
    """
    Create SQLAlchemy engine with connection pooling.

    Args:
        database_url: Database connection string (PostgreSQL in production)
        **kwargs: Additional engine options

    Returns:
        SQLAlchemy Engine instance
    """
    engine_options: dict[str, Any] = {
        "pool_pre_ping": True,  # Verify connections before using
        "echo": False,  # Set to True for SQL debugging
    }

    if _is_sqlite(database_url):
        engine_options["connect_args"] = {"check_same_thread": False}
    else:
        engine_options.update(
            {
                "pool_recycle": 3600,  # Recycle connections after 1 hour
                "pool_size": 5,
                "max_overflow": 10,
            }
        )

    # Allow override of defaults
    engine_options.update(kwargs)

    engine = create_engine(database_url, **engine_options)
    if _is_sqlite(database_url):
        _enable_sqlite_foreign_keys(engine)
    return engine


def create_test_engine(database_url: str) -> Engine:
    """
    Create engine for testing with NullPool (no connection pooling).

    Args:
        database_url: Database connection string

    Returns:
        SQLAlchemy Engine instance with NullPool
    """
    connect_args = {"check_same_thread": False} if _is_sqlite(database_url) else {}
    engine = create_engine(
        database_url,
        poolclass=NullPool,
        echo=False,
        connect_args=connect_args,
    )
    if _is_sqlite(database_url):
        _enable_sqlite_foreign_keys(engine)
    return engine


@contextmanager
def get_connection(engine: Engine) -> Iterator[Connection]:
    """
    Context manager for one unit of work.

    Commits when the block exits normally and rolls back every statement
    of the block on any exception.

    Usage:
        with get_connection(engine) as conn:
            result = conn.execute(...)
    """
    conn = engine.connect()
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def init_db(engine: Engine) -> None:
    """Create any missing tables."""
    metadata.create_all(engine)
    logger.info("Database schema ready")


def wait_for_db(engine: Engine, max_retries: int = 30, retry_interval: float = 1) -> bool:
    """
    Wait for database to be ready (used on container start-up).

    Args:
        engine: SQLAlchemy Engine instance
        max_retries: Maximum number of connection attempts
        retry_interval: Seconds between retries

    Returns:
        True if database is ready, False otherwise
    """
    for attempt in range(max_retries):
        try:
            with get_connection(engine) as conn:
                conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            if attempt < max_retries - 1:
                logger.warning(
                    f"Database not ready (attempt {attempt + 1}/{max_retries}), retrying in {retry_interval}s..."
                )
                time.sleep(retry_interval)
            else:
                logger.error(
                    f"Failed to connect to database after {max_retries} attempts: {e}"
                )
                return False

    return False


def row_to_dict(row: Optional[Any]) -> Optional[dict[str, Any]]:
    """Convert a result row into a plain dict (None passes through)."""
    if row is None:
        return None
    return dict(row._mapping)
