"""Workspace membership checks.

Every protected resource is resolved to its owning workspace by walking
task -> column -> project -> workspace. Existence is always checked before
membership: a missing resource raises NotFound, an existing resource the
caller cannot see raises AccessDenied.
"""

from __future__ import annotations

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import and_, select
from sqlalchemy.engine import Connection

from .database import (
    columns_table,
    projects_table,
    tasks_table,
    workspace_members_table,
    workspaces_table,
)
from .exceptions import AccessDenied, NotFound

logger = logging.getLogger(__name__)

MANAGER_ROLES = ("owner", "admin")


def workspace_of_project(conn: Connection, project_id: UUID) -> UUID:
    row = conn.execute(
        select(projects_table.c.workspace_id).where(projects_table.c.id == project_id)
    ).fetchone()
    if row is None:
        raise NotFound("project", project_id)
    return row.workspace_id


def workspace_of_column(conn: Connection, column_id: UUID) -> UUID:
    row = conn.execute(
        select(projects_table.c.workspace_id)
        .select_from(
            columns_table.join(projects_table, columns_table.c.project_id == projects_table.c.id)
        )
        .where(columns_table.c.id == column_id)
    ).fetchone()
    if row is None:
        raise NotFound("column", column_id)
    return row.workspace_id


def workspace_of_task(conn: Connection, task_id: UUID) -> UUID:
    row = conn.execute(
        select(projects_table.c.workspace_id)
        .select_from(
            tasks_table.join(columns_table, tasks_table.c.column_id == columns_table.c.id).join(
                projects_table, columns_table.c.project_id == projects_table.c.id
            )
        )
        .where(tasks_table.c.id == task_id)
    ).fetchone()
    if row is None:
        raise NotFound("task", task_id)
    return row.workspace_id


def member_role(conn: Connection, workspace_id: UUID, profile_id: UUID) -> Optional[str]:
    """Return the caller's role in the workspace, or None for non-members."""
    row = conn.execute(
        select(workspace_members_table.c.role).where(
            and_(
                workspace_members_table.c.workspace_id == workspace_id,
                workspace_members_table.c.profile_id == profile_id,
            )
        )
    ).fetchone()
    return row.role if row else None


def _require_workspace(conn: Connection, workspace_id: UUID) -> None:
    exists = conn.execute(
        select(workspaces_table.c.id).where(workspaces_table.c.id == workspace_id)
    ).fetchone()
    if exists is None:
        raise NotFound("workspace", workspace_id)


def require_member(conn: Connection, workspace_id: UUID, profile_id: UUID) -> str:
    """Ensure the workspace exists and the caller is a member.

    Returns:
        The caller's role

    Raises:
        NotFound: workspace does not exist
        AccessDenied: caller is not a member
    """
    _require_workspace(conn, workspace_id)
    role = member_role(conn, workspace_id, profile_id)
    if role is None:
        logger.info(f"Denied profile {profile_id} access to workspace {workspace_id}: not a member")
        raise AccessDenied("You are not a member of this workspace")
    return role


def require_manager(conn: Connection, workspace_id: UUID, profile_id: UUID) -> str:
    """Like require_member, but the role must be owner or admin."""
    role = require_member(conn, workspace_id, profile_id)
    if role not in MANAGER_ROLES:
        logger.info(f"Denied profile {profile_id} management of workspace {workspace_id}: role {role}")
        raise AccessDenied("Only workspace owners and admins can do this")
    return role


def require_owner(conn: Connection, workspace_id: UUID, profile_id: UUID) -> str:
    """Like require_member, but the role must be owner."""
    role = require_member(conn, workspace_id, profile_id)
    if role != "owner":
        logger.info(f"Denied profile {profile_id} owner action on workspace {workspace_id}: role {role}")
        raise AccessDenied("Only the workspace owner can do this")
    return role


def shares_workspace(conn: Connection, profile_id: UUID, other_id: UUID) -> bool:
    """True when both profiles are members of at least one common workspace."""
    mine = workspace_members_table.alias("mine")
    theirs = workspace_members_table.alias("theirs")
    row = conn.execute(
        select(mine.c.workspace_id)
        .select_from(mine.join(theirs, mine.c.workspace_id == theirs.c.workspace_id))
        .where(and_(mine.c.profile_id == profile_id, theirs.c.profile_id == other_id))
        .limit(1)
    ).fetchone()
    return row is not None
