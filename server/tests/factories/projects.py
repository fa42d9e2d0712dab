"""Project factory: a board inside a workspace."""

from typing import Optional
from uuid import UUID

from sqlalchemy import insert, select
from sqlalchemy.engine import Connection

from finkan_server.core.database import projects_table, workspaces_table
from finkan_server.core.provisioning import provision_default_columns
from .constants import (
    TEST_PROJECT_DESCRIPTION,
    TEST_PROJECT_ID,
    TEST_PROJECT_NAME,
    make_test_project_id,
)
from .workspaces import create_test_workspace


def create_test_project(
    conn: Connection,
    project_id: Optional[UUID] = None,
    name: Optional[str] = None,
    description: Optional[str] = None,
    workspace_id: Optional[UUID] = None,
    suffix: Optional[str] = None,
    create_workspace: bool = True,
    default_columns: bool = True,
) -> tuple[UUID, UUID, UUID]:
    """Create a project, by default with To Do / In Progress / Done columns.

    The project's creator is the workspace's creator. Without a workspace_id
    a workspace (and its owner) is created first.

    Returns:
        Tuple of (project_id, workspace_id, owner_id)

    Example:
        project_id, workspace_id, owner_id = create_test_project(conn)

        # Empty board next to it
        empty_id, _, _ = create_test_project(
            conn, workspace_id=workspace_id, suffix="empty", default_columns=False
        )
    """
    if suffix:
        project_id = make_test_project_id(suffix)
        name = name or f"Test Project {suffix}"
    else:
        project_id = project_id or TEST_PROJECT_ID
        name = name or TEST_PROJECT_NAME
        description = description or TEST_PROJECT_DESCRIPTION

    if workspace_id is None:
        if not create_workspace:
            raise ValueError("workspace_id must be provided or create_workspace must be True")
        workspace_id, owner_id = create_test_workspace(conn, suffix=suffix)
    else:
        owner_id = conn.execute(
            select(workspaces_table.c.created_by).where(workspaces_table.c.id == workspace_id)
        ).scalar_one()

    already = conn.execute(
        select(projects_table.c.id).where(projects_table.c.id == project_id)
    ).first()
    if already is None:
        conn.execute(
            insert(projects_table).values(
                id=project_id,
                workspace_id=workspace_id,
                name=name,
                description=description,
                created_by=owner_id,
            )
        )
        if default_columns:
            provision_default_columns(conn, project_id)

    return project_id, workspace_id, owner_id
