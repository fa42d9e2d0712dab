"""Test data factories for consistent test entities."""

from .constants import (
    TEST_PROFILE_ID,
    TEST_WORKSPACE_ID,
    TEST_PROJECT_ID,
    TEST_PROFILE_EMAIL,
    make_test_profile_id,
)
from .profiles import create_test_profile
from .workspaces import create_test_workspace, add_test_member
from .projects import create_test_project
from .board import create_test_column, create_test_task, get_test_columns

__all__ = [
    # Constants
    "TEST_PROFILE_ID",
    "TEST_WORKSPACE_ID",
    "TEST_PROJECT_ID",
    "TEST_PROFILE_EMAIL",
    "make_test_profile_id",
    # Factories
    "create_test_profile",
    "create_test_workspace",
    "add_test_member",
    "create_test_project",
    "create_test_column",
    "create_test_task",
    "get_test_columns",
]
