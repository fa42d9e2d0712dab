"""Workspaces API client"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from .types import Member, Workspace

if TYPE_CHECKING:
    from .client import FinKan

logger = logging.getLogger("finkan_client.workspaces")


class WorkspacesAPI:
    """Workspaces and membership"""

    def __init__(self, client: "FinKan"):
        self._client = client

    async def list(self) -> list[Workspace]:
        """List the workspaces the caller belongs to.

        Example:
            workspaces = await client.workspaces.list()
            # [Workspace(name="Finance", role="owner", ...)]
        """
        data = await self._client.request("GET", "/api/workspaces")
        return [Workspace.from_dict(item) for item in data]

    async def create(
        self, name: str, icon: str | None = None, description: str | None = None
    ) -> Workspace:
        payload: dict[str, Any] = {"name": name}
        if icon is not None:
            payload["icon"] = icon
        if description is not None:
            payload["description"] = description
        data = await self._client.request("POST", "/api/workspaces", json=payload)
        workspace = Workspace.from_dict(data)
        logger.info(f"Created workspace '{workspace.name}' ({workspace.id})")
        return workspace

    async def get(self, workspace_id: str) -> Workspace:
        data = await self._client.request("GET", f"/api/workspaces/{workspace_id}")
        return Workspace.from_dict(data)

    async def update(self, workspace_id: str, **changes: Any) -> Workspace:
        """Update name, icon and/or description; only the given keys are sent."""
        data = await self._client.request(
            "PATCH", f"/api/workspaces/{workspace_id}", json=changes
        )
        return Workspace.from_dict(data)

    async def delete(self, workspace_id: str) -> None:
        await self._client.request("DELETE", f"/api/workspaces/{workspace_id}")
        logger.info(f"Deleted workspace {workspace_id}")

    async def members(self, workspace_id: str) -> list[Member]:
        data = await self._client.request("GET", f"/api/workspaces/{workspace_id}/members")
        return [Member.from_dict(item) for item in data]

    async def add_member(self, workspace_id: str, email: str, role: str = "member") -> Member:
        data = await self._client.request(
            "POST",
            f"/api/workspaces/{workspace_id}/members",
            json={"email": email, "role": role},
        )
        return Member.from_dict(data)

    async def remove_member(self, workspace_id: str, profile_id: str) -> None:
        await self._client.request(
            "DELETE", f"/api/workspaces/{workspace_id}/members/{profile_id}"
        )
