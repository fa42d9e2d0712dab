"""Projects, columns and tasks API clients"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Optional

from .types import Column, Project, Task

if TYPE_CHECKING:
    from .client import FinKan

logger = logging.getLogger("finkan_client.board")


def _drop_none(values: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in values.items() if v is not None}


class ProjectsAPI:
    """Projects API client"""

    def __init__(self, client: "FinKan"):
        self._client = client

    async def list(self, workspace_id: str, include_archived: bool = False) -> list[Project]:
        params = {"include_archived": "true"} if include_archived else None
        data = await self._client.request(
            "GET", f"/api/workspaces/{workspace_id}/projects", params=params
        )
        return [Project.from_dict(item) for item in data]

    async def create(
        self,
        workspace_id: str,
        name: str,
        description: str | None = None,
        default_columns: bool = True,
    ) -> Project:
        """Create a project; the server adds To Do / In Progress / Done unless
        default_columns is False."""
        payload = _drop_none(
            {"name": name, "description": description, "default_columns": default_columns}
        )
        data = await self._client.request(
            "POST", f"/api/workspaces/{workspace_id}/projects", json=payload
        )
        project = Project.from_dict(data)
        logger.info(f"Created project '{project.name}' ({project.id})")
        return project

    async def get(self, project_id: str) -> Project:
        return Project.from_dict(await self._client.request("GET", f"/api/projects/{project_id}"))

    async def update(self, project_id: str, **changes: Any) -> Project:
        data = await self._client.request("PATCH", f"/api/projects/{project_id}", json=changes)
        return Project.from_dict(data)

    async def archive(self, project_id: str) -> Project:
        data = await self._client.request("POST", f"/api/projects/{project_id}/archive")
        return Project.from_dict(data)


class ColumnsAPI:
    """Columns API client"""

    def __init__(self, client: "FinKan"):
        self._client = client

    async def list(self, project_id: str) -> list[Column]:
        """List a project's columns in board order."""
        data = await self._client.request("GET", f"/api/projects/{project_id}/columns")
        return [Column.from_dict(item) for item in data]

    async def create(self, project_id: str, name: str) -> Column:
        data = await self._client.request(
            "POST", f"/api/projects/{project_id}/columns", json={"name": name}
        )
        return Column.from_dict(data)

    async def update(
        self, column_id: str, name: str | None = None, position: int | None = None
    ) -> Column:
        """Rename a column and/or move it to a new index."""
        data = await self._client.request(
            "PATCH",
            f"/api/columns/{column_id}",
            json=_drop_none({"name": name, "position": position}),
        )
        return Column.from_dict(data)

    async def delete(self, column_id: str) -> None:
        """Delete a column together with its tasks."""
        await self._client.request("DELETE", f"/api/columns/{column_id}")


class TasksAPI:
    """Tasks API client"""

    def __init__(self, client: "FinKan"):
        self._client = client

    async def list(self, column_id: str) -> list[Task]:
        data = await self._client.request("GET", f"/api/columns/{column_id}/tasks")
        return [Task.from_dict(item) for item in data]

    async def list_for_project(self, project_id: str) -> list[Task]:
        data = await self._client.request("GET", f"/api/projects/{project_id}/tasks")
        return [Task.from_dict(item) for item in data]

    async def create(self, column_id: str, title: str, **fields: Any) -> Task:
        """Create a task at the end of a column.

        Example:
            task = await client.tasks.create(todo.id, "Reconcile bank", priority="high")
        """
        payload = {"column_id": column_id, "title": title, **fields}
        data = await self._client.request("POST", "/api/tasks", json=payload)
        return Task.from_dict(data)

    async def get(self, task_id: str) -> Task:
        return Task.from_dict(await self._client.request("GET", f"/api/tasks/{task_id}"))

    async def update(self, task_id: str, **changes: Any) -> Task:
        """Update task fields; keys passed explicitly as None clear the field."""
        data = await self._client.request("PATCH", f"/api/tasks/{task_id}", json=changes)
        return Task.from_dict(data)

    async def move(self, task_id: str, column_id: str, position: Optional[int] = None) -> Task:
        data = await self._client.request(
            "POST",
            f"/api/tasks/{task_id}/move",
            json=_drop_none({"column_id": column_id, "position": position}),
        )
        return Task.from_dict(data)

    async def delete(self, task_id: str) -> None:
        await self._client.request("DELETE", f"/api/tasks/{task_id}")
