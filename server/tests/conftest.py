"""
Test configuration and fixtures for FinKan tests

This module provides:
- Import of all fixtures from fixtures/ (database, auth, entities)
- Import of all factories from factories/ (profiles, workspaces, projects, board)
- Application fixtures (settings, app, FastAPI test client)

Usage:
    def test_api_endpoint(test_project, test_client, auth_headers):
        project_id, _, owner_id = test_project
        response = test_client.get(
            f"/api/projects/{project_id}/columns", headers=auth_headers(owner_id)
        )
        assert response.status_code == 200

    # Create custom test data
    def test_with_multiple_projects(db_connection):
        from tests.factories import create_test_project
        proj1_id, _, _ = create_test_project(db_connection, suffix="1")
        proj2_id, _, _ = create_test_project(db_connection, suffix="2")
"""

import pytest
from typing import Generator

from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine

from finkan_server.config import Settings
from finkan_server.main import create_app

# Import all fixtures and factories for test usage
from tests.fixtures import *  # noqa: F401, F403
from tests.factories import *  # noqa: F401, F403


@pytest.fixture
def test_settings(db_url: str) -> Settings:
    """Settings for the app under test (no .env lookups matter: every key is explicit)."""
    return Settings(
        database_url=db_url,
        jwt_secret="test-secret-key-that-is-long-enough-for-hs256",
        session_ttl_days=7,
        client_url="http://client.test",
        cors_origins="http://client.test",
        microsoft_client_id="test-client-id",
        microsoft_client_secret="test-client-secret",
        microsoft_redirect_uri="http://testserver/auth/microsoft/callback",
        log_level="WARNING",
    )


@pytest.fixture
def test_app(test_settings: Settings, db_engine: Engine) -> FastAPI:
    """FastAPI app bound to the per-test engine."""
    return create_app(settings=test_settings, engine=db_engine)


@pytest.fixture
def test_client(test_app: FastAPI) -> Generator[TestClient, None, None]:
    """Create a FastAPI test client.

    Redirects are not followed so login and logout responses can be inspected.
    """
    with TestClient(test_app, follow_redirects=False) as client:
        yield client
