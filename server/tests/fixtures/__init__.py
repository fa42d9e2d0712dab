"""Pytest fixtures for FinKan tests."""

from .database import db_url, db_engine, db_connection
from .auth import auth_headers, auth_context, override_auth_dependencies
from .entities import test_profile, test_workspace, test_project, test_board, outsider

__all__ = [
    # Database fixtures
    "db_url",
    "db_engine",
    "db_connection",
    # Auth fixtures
    "auth_headers",
    "auth_context",
    "override_auth_dependencies",
    # Entity fixtures
    "test_profile",
    "test_workspace",
    "test_project",
    "test_board",
    "outsider",
]
