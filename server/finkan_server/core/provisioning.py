"""Provisioning of workspaces and default board columns."""

from typing import Any, Optional
from uuid import UUID
import logging

from sqlalchemy import insert
from sqlalchemy.engine import Connection

from .database import (
    columns_table,
    row_to_dict,
    workspace_members_table,
    workspaces_table,
)

logger = logging.getLogger(__name__)

DEFAULT_WORKSPACE_ICON = "💼"
DEFAULT_COLUMNS = ("To Do", "In Progress", "Done")


def provision_workspace(
    conn: Connection,
    owner_id: UUID,
    name: str,
    icon: Optional[str] = None,
    description: Optional[str] = None,
) -> dict[str, Any]:
    """Create a workspace and make its creator the owner.

    Creates:
    1. Workspace row with created_by set to the creator
    2. Workspace membership with owner role

    Both statements run on the caller's connection so they commit or roll
    back together.

    Args:
        conn: Database connection
        owner_id: Creator's profile id
        name: Workspace name
        icon: Emoji icon (defaults to a briefcase)
        description: Optional description

    Returns:
        Workspace row as a dict, with the creator's role
    """
    workspace = conn.execute(
        insert(workspaces_table)
        .values(
            name=name,
            icon=icon or DEFAULT_WORKSPACE_ICON,
            description=description,
            created_by=owner_id,
        )
        .returning(*workspaces_table.c)
    ).fetchone()

    conn.execute(
        insert(workspace_members_table).values(
            workspace_id=workspace.id,
            profile_id=owner_id,
            role="owner",
        )
    )

    logger.info(f"Provisioned workspace {workspace.id} for owner {owner_id}")
    result = row_to_dict(workspace)
    result["role"] = "owner"
    return result


def provision_default_columns(conn: Connection, project_id: UUID) -> list[dict[str, Any]]:
    """Create the To Do / In Progress / Done columns at positions 0, 1, 2.

    Args:
        conn: Database connection
        project_id: Freshly created project

    Returns:
        Created column rows in position order
    """
    created = []
    for position, name in enumerate(DEFAULT_COLUMNS):
        row = conn.execute(
            insert(columns_table)
            .values(project_id=project_id, name=name, position=position)
            .returning(*columns_table.c)
        ).fetchone()
        created.append(row_to_dict(row))
    return created
