"""Authentication fixtures for testing.

API tests authenticate with real session tokens signed with the test
settings, so the credential checks in finkan_server.auth are exercised.
override_auth_dependencies is available for tests that only care about
the handler behind the dependency.
"""

import pytest
from typing import Callable, Generator, Optional
from uuid import UUID

from finkan_server.auth import AuthContext, get_auth_context
from finkan_server.config import Settings
from finkan_server.core.sessions import issue_session_token

from tests.factories import TEST_PROFILE_EMAIL


class TestAuthContext:
    """Container for test authentication context.

    Allows tests to customize which profile they're authenticated as.
    """

    __test__ = False

    def __init__(self, profile_id: UUID, email: str = TEST_PROFILE_EMAIL, role: str = "member"):
        self.profile_id = profile_id
        self.email = email
        self.role = role

    def as_auth_context(self) -> AuthContext:
        """Convert to FastAPI AuthContext."""
        return AuthContext(
            profile_id=self.profile_id,
            email=self.email,
            role=self.role,
            auth_method="bearer",
        )


def make_session_token(
    settings: Settings, profile_id: UUID, email: Optional[str] = None, role: str = "member"
) -> str:
    profile = {"id": profile_id, "email": email or f"{profile_id}@example.com", "role": role}
    return issue_session_token(
        profile, settings.jwt_secret, settings.session_ttl, settings.jwt_algorithm
    )


@pytest.fixture
def auth_headers(test_settings: Settings) -> Callable[..., dict[str, str]]:
    """Build Authorization headers carrying a valid session token.

    Example:
        def test_list(test_client, test_workspace, auth_headers):
            _, owner_id = test_workspace
            response = test_client.get("/api/workspaces", headers=auth_headers(owner_id))
    """

    def _headers(profile_id: UUID, email: Optional[str] = None) -> dict[str, str]:
        token = make_session_token(test_settings, profile_id, email)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def auth_context(test_workspace) -> TestAuthContext:
    """Authentication context of the test workspace owner."""
    _, owner_id = test_workspace
    return TestAuthContext(profile_id=owner_id)


@pytest.fixture
def override_auth_dependencies(test_app, auth_context: TestAuthContext) -> Generator[None, None, None]:
    """Override FastAPI auth dependencies with test auth context.

    The fixture automatically clears overrides after the test completes.
    """

    async def mock_get_auth_context() -> AuthContext:
        return auth_context.as_auth_context()

    test_app.dependency_overrides[get_auth_context] = mock_get_auth_context

    yield

    test_app.dependency_overrides.clear()
