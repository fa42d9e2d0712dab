"""Workspace and membership service."""

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from sqlalchemy import and_, delete, func, insert, select, update
from sqlalchemy.engine import Connection, Engine

from .access import require_manager, require_member, require_owner
from .database import (
    get_connection,
    profiles_table,
    workspace_members_table,
    workspaces_table,
)
from .exceptions import NotFound, ValidationError
from .identity import ensure_profile
from .models import (
    MemberAdd,
    Workspace,
    WorkspaceCreate,
    WorkspaceMember,
    WorkspaceUpdate,
    required_text,
)
from .provisioning import provision_workspace

logger = logging.getLogger(__name__)


def _member_query():
    return select(
        workspace_members_table.c.workspace_id,
        workspace_members_table.c.profile_id,
        workspace_members_table.c.role,
        workspace_members_table.c.created_at,
        profiles_table.c.email,
        profiles_table.c.full_name,
        profiles_table.c.avatar_url,
    ).select_from(
        workspace_members_table.join(
            profiles_table, workspace_members_table.c.profile_id == profiles_table.c.id
        )
    )


class WorkspaceService:
    """Service for workspaces and their members."""

    def __init__(self, engine: Engine):
        """
        Initialize workspace service.

        Args:
            engine: SQLAlchemy engine instance
        """
        self.engine = engine

    def list_for_profile(self, profile_id: UUID) -> list[Workspace]:
        """List workspaces the profile is a member of, with the profile's role."""
        with get_connection(self.engine) as conn:
            rows = conn.execute(
                select(workspaces_table, workspace_members_table.c.role)
                .select_from(
                    workspaces_table.join(
                        workspace_members_table,
                        workspaces_table.c.id == workspace_members_table.c.workspace_id,
                    )
                )
                .where(workspace_members_table.c.profile_id == profile_id)
                .order_by(workspaces_table.c.created_at.desc(), workspaces_table.c.name)
            ).fetchall()
            return [Workspace.model_validate(dict(row._mapping)) for row in rows]

    def create(self, profile_id: UUID, email: str, request: WorkspaceCreate) -> Workspace:
        """
        Create a workspace owned by the caller.

        The caller's profile (lazily created if missing), the workspace row and
        the owner membership are written in one transaction.

        Args:
            profile_id: Caller's profile id from the verified session
            email: Caller's email from the verified session
            request: Workspace fields

        Returns:
            Created workspace with role "owner"

        Raises:
            ValidationError: If the name is blank
        """
        name = required_text(request.name, "Workspace name")

        with get_connection(self.engine) as conn:
            ensure_profile(conn, profile_id, email)
            workspace = provision_workspace(
                conn,
                owner_id=profile_id,
                name=name,
                icon=request.icon,
                description=request.description,
            )
            return Workspace.model_validate(workspace)

    def _get(self, conn: Connection, workspace_id: UUID, role: str) -> Workspace:
        row = conn.execute(
            select(workspaces_table).where(workspaces_table.c.id == workspace_id)
        ).fetchone()
        data = dict(row._mapping)
        data["role"] = role
        return Workspace.model_validate(data)

    def get(self, workspace_id: UUID, profile_id: UUID) -> Workspace:
        """Get a workspace the caller is a member of."""
        with get_connection(self.engine) as conn:
            role = require_member(conn, workspace_id, profile_id)
            return self._get(conn, workspace_id, role)

    def update(self, workspace_id: UUID, profile_id: UUID, changes: WorkspaceUpdate) -> Workspace:
        """Update name, icon or description (owners and admins)."""
        values: dict[str, Any] = changes.model_dump(exclude_unset=True)
        if "name" in values:
            values["name"] = required_text(values["name"], "Workspace name")

        with get_connection(self.engine) as conn:
            role = require_manager(conn, workspace_id, profile_id)
            if values:
                conn.execute(
                    update(workspaces_table)
                    .where(workspaces_table.c.id == workspace_id)
                    .values(**values, updated_at=func.now())
                )
            return self._get(conn, workspace_id, role)

    def delete(self, workspace_id: UUID, profile_id: UUID) -> None:
        """
        Delete a workspace (owner only).

        Members, projects, columns and tasks are removed by ON DELETE CASCADE.

        Raises:
            NotFound: If the workspace does not exist
            AccessDenied: If the caller is not the owner
        """
        with get_connection(self.engine) as conn:
            require_owner(conn, workspace_id, profile_id)
            conn.execute(delete(workspaces_table).where(workspaces_table.c.id == workspace_id))
        logger.info(f"Workspace {workspace_id} deleted by {profile_id}")

    def list_members(self, workspace_id: UUID, profile_id: UUID) -> list[WorkspaceMember]:
        with get_connection(self.engine) as conn:
            require_member(conn, workspace_id, profile_id)
            rows = conn.execute(
                _member_query()
                .where(workspace_members_table.c.workspace_id == workspace_id)
                .order_by(workspace_members_table.c.created_at, profiles_table.c.email)
            ).fetchall()
            return [WorkspaceMember.model_validate(dict(row._mapping)) for row in rows]

    def add_member(self, workspace_id: UUID, profile_id: UUID, request: MemberAdd) -> WorkspaceMember:
        """
        Add an existing profile to the workspace by email.

        Raises:
            NotFound: If the workspace or the profile does not exist
            AccessDenied: If the caller is not an owner or admin
            ValidationError: If the profile is already a member
        """
        with get_connection(self.engine) as conn:
            require_manager(conn, workspace_id, profile_id)

            profile = conn.execute(
                select(profiles_table.c.id).where(
                    func.lower(profiles_table.c.email) == request.email.lower()
                )
            ).fetchone()
            if profile is None:
                raise NotFound("profile", request.email)

            already = conn.execute(
                select(workspace_members_table.c.role).where(
                    and_(
                        workspace_members_table.c.workspace_id == workspace_id,
                        workspace_members_table.c.profile_id == profile.id,
                    )
                )
            ).fetchone()
            if already is not None:
                raise ValidationError("Profile is already a member of this workspace")

            conn.execute(
                insert(workspace_members_table).values(
                    workspace_id=workspace_id,
                    profile_id=profile.id,
                    role=request.role,
                )
            )
            row = conn.execute(
                _member_query().where(
                    and_(
                        workspace_members_table.c.workspace_id == workspace_id,
                        workspace_members_table.c.profile_id == profile.id,
                    )
                )
            ).fetchone()
            return WorkspaceMember.model_validate(dict(row._mapping))

    def remove_member(self, workspace_id: UUID, profile_id: UUID, member_id: UUID) -> None:
        """
        Remove a member. Owners and admins may remove anyone but the owner;
        any member may remove themselves.
        """
        with get_connection(self.engine) as conn:
            if member_id == profile_id:
                require_member(conn, workspace_id, profile_id)
            else:
                require_manager(conn, workspace_id, profile_id)

            target = conn.execute(
                select(workspace_members_table.c.role).where(
                    and_(
                        workspace_members_table.c.workspace_id == workspace_id,
                        workspace_members_table.c.profile_id == member_id,
                    )
                )
            ).fetchone()
            if target is None:
                raise NotFound("member", member_id)
            if target.role == "owner":
                raise ValidationError("The workspace owner cannot be removed")

            conn.execute(
                delete(workspace_members_table).where(
                    and_(
                        workspace_members_table.c.workspace_id == workspace_id,
                        workspace_members_table.c.profile_id == member_id,
                    )
                )
            )
