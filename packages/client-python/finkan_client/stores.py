"""Client-side state stores.

Each store keeps an in-memory copy of what the server returned and reloads
it after every mutation, so the server's ordering is always what callers
see. Listeners registered with `subscribe` are called after each reload.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable, Optional

from .types import Column, Project, Task, Workspace

if TYPE_CHECKING:
    from .client import FinKan

logger = logging.getLogger("finkan_client.stores")

Listener = Callable[[], None]


class _Store:
    def __init__(self, client: "FinKan"):
        self._client = client
        self._listeners: list[Listener] = []
        self.loading = False
        self.error: Optional[str] = None

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener; returns a function that removes it."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()


class WorkspaceStore(_Store):
    """Workspaces of the signed-in user and the currently selected one."""

    def __init__(self, client: "FinKan"):
        super().__init__(client)
        self.workspaces: list[Workspace] = []
        self.current_id: Optional[str] = None

    @property
    def current(self) -> Optional[Workspace]:
        return next((w for w in self.workspaces if w.id == self.current_id), None)

    async def fetch(self) -> list[Workspace]:
        self.loading = True
        try:
            self.workspaces = await self._client.workspaces.list()
            self.error = None
        except Exception as e:
            self.error = str(e)
            raise
        finally:
            self.loading = False
        if self.current_id not in {w.id for w in self.workspaces}:
            self.current_id = self.workspaces[0].id if self.workspaces else None
        self._notify()
        return self.workspaces

    def select(self, workspace_id: str) -> None:
        self.current_id = workspace_id
        self._notify()

    async def create(self, name: str, **fields: Any) -> Workspace:
        workspace = await self._client.workspaces.create(name, **fields)
        self.current_id = workspace.id
        await self.fetch()
        return workspace

    async def update(self, workspace_id: str, **changes: Any) -> None:
        await self._client.workspaces.update(workspace_id, **changes)
        await self.fetch()

    async def delete(self, workspace_id: str) -> None:
        await self._client.workspaces.delete(workspace_id)
        await self.fetch()


class ProjectStore(_Store):
    """Projects of one workspace."""

    def __init__(self, client: "FinKan", workspace_id: str):
        super().__init__(client)
        self.workspace_id = workspace_id
        self.projects: list[Project] = []

    async def fetch(self) -> list[Project]:
        self.loading = True
        try:
            self.projects = await self._client.projects.list(self.workspace_id)
            self.error = None
        except Exception as e:
            self.error = str(e)
            raise
        finally:
            self.loading = False
        self._notify()
        return self.projects

    async def create(self, name: str, **fields: Any) -> Project:
        project = await self._client.projects.create(self.workspace_id, name, **fields)
        await self.fetch()
        return project

    async def update(self, project_id: str, **changes: Any) -> None:
        await self._client.projects.update(project_id, **changes)
        await self.fetch()

    async def archive(self, project_id: str) -> None:
        await self._client.projects.archive(project_id)
        await self.fetch()


class BoardStore(_Store):
    """
    Columns and tasks of one project.

    Example:
        board = BoardStore(client, project.id)
        await board.fetch()
        todo, _, done = board.columns
        await board.move_task(board.tasks[todo.id][0].id, done.id)
    """

    def __init__(self, client: "FinKan", project_id: str):
        super().__init__(client)
        self.project_id = project_id
        self.columns: list[Column] = []
        self.tasks: dict[str, list[Task]] = {}

    async def fetch(self) -> None:
        self.loading = True
        try:
            columns = await self._client.columns.list(self.project_id)
            tasks = await self._client.tasks.list_for_project(self.project_id)
            self.error = None
        except Exception as e:
            self.error = str(e)
            raise
        finally:
            self.loading = False

        grouped: dict[str, list[Task]] = {column.id: [] for column in columns}
        for task in tasks:
            grouped.setdefault(task.column_id, []).append(task)
        for column_tasks in grouped.values():
            column_tasks.sort(key=lambda t: t.position)

        self.columns = sorted(columns, key=lambda c: c.position)
        self.tasks = grouped
        logger.debug(f"Board {self.project_id}: {len(columns)} columns, {len(tasks)} tasks")
        self._notify()

    def tasks_in(self, column_id: str) -> list[Task]:
        return self.tasks.get(column_id, [])

    async def add_column(self, name: str) -> Column:
        column = await self._client.columns.create(self.project_id, name)
        await self.fetch()
        return column

    async def update_column(
        self, column_id: str, name: str | None = None, position: int | None = None
    ) -> None:
        await self._client.columns.update(column_id, name=name, position=position)
        await self.fetch()

    async def delete_column(self, column_id: str) -> None:
        await self._client.columns.delete(column_id)
        await self.fetch()

    async def add_task(self, column_id: str, title: str, **fields: Any) -> Task:
        task = await self._client.tasks.create(column_id, title, **fields)
        await self.fetch()
        return task

    async def update_task(self, task_id: str, **changes: Any) -> None:
        await self._client.tasks.update(task_id, **changes)
        await self.fetch()

    async def move_task(self, task_id: str, column_id: str, position: int | None = None) -> None:
        await self._client.tasks.move(task_id, column_id, position)
        await self.fetch()

    async def delete_task(self, task_id: str) -> None:
        await self._client.tasks.delete(task_id)
        await self.fetch()
