"""Workspace and membership factories."""

from typing import Optional
from uuid import UUID

from sqlalchemy import insert, select
from sqlalchemy.engine import Connection

from finkan_server.core.database import workspace_members_table, workspaces_table
from .constants import TEST_WORKSPACE_ID, TEST_WORKSPACE_NAME, make_test_workspace_id
from .profiles import create_test_profile


def add_test_member(
    conn: Connection,
    workspace_id: UUID,
    profile_id: UUID,
    role: str = "member",
) -> None:
    """Add a profile to a workspace with the given role."""
    conn.execute(
        insert(workspace_members_table).values(
            workspace_id=workspace_id, profile_id=profile_id, role=role
        )
    )


def create_test_workspace(
    conn: Connection,
    workspace_id: Optional[UUID] = None,
    name: Optional[str] = None,
    owner_id: Optional[UUID] = None,
    suffix: Optional[str] = None,
    create_owner: bool = True,
) -> tuple[UUID, UUID]:
    """Create a workspace and its owner membership.

    With a suffix the workspace id, name and (auto-created) owner are all
    derived from it, so `create_test_workspace(conn, suffix="other")` gives
    an unrelated workspace with its own owner. Calling twice with the same
    id is a no-op.

    Returns:
        Tuple of (workspace_id, owner_id)
    """
    workspace_id = make_test_workspace_id(suffix) if suffix else workspace_id or TEST_WORKSPACE_ID
    name = name or (f"Test Workspace {suffix}" if suffix else TEST_WORKSPACE_NAME)

    if owner_id is None:
        if not create_owner:
            raise ValueError("owner_id must be provided or create_owner must be True")
        owner_id = create_test_profile(conn, suffix=suffix)

    already = conn.execute(
        select(workspaces_table.c.id).where(workspaces_table.c.id == workspace_id)
    ).first()
    if already is None:
        conn.execute(
            insert(workspaces_table).values(
                id=workspace_id, name=name, icon="💼", created_by=owner_id
            )
        )
        add_test_member(conn, workspace_id, owner_id, role="owner")

    return workspace_id, owner_id
