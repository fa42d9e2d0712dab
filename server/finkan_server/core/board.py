"""Board service: projects, their ordered columns and the tasks inside them."""

from __future__ import annotations

import logging
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.engine import Connection, Engine

from .access import (
    member_role,
    require_member,
    workspace_of_column,
    workspace_of_project,
    workspace_of_task,
)
from .database import columns_table, get_connection, projects_table, tasks_table
from .exceptions import NotFound, ValidationError
from .models import (
    BoardColumn,
    ColumnCreate,
    ColumnUpdate,
    Project,
    ProjectCreate,
    ProjectUpdate,
    Task,
    TaskCreate,
    TaskMove,
    TaskUpdate,
    required_text,
)
from .ordering import COLUMNS, TASKS, lock_parents, move_within, next_position, renumber
from .provisioning import provision_default_columns

logger = logging.getLogger(__name__)

# Task fields that may be omitted from an update but never cleared
NON_NULLABLE_TASK_FIELDS = ("title", "priority", "status", "is_recurring")


class BoardService:
    """Projects, columns and tasks, scoped by workspace membership."""

    def __init__(self, engine: Engine):
        self.engine = engine

    # Projects

    def list_projects(
        self, workspace_id: UUID, profile_id: UUID, include_archived: bool = False
    ) -> list[Project]:
        with get_connection(self.engine) as conn:
            require_member(conn, workspace_id, profile_id)
            stmt = select(projects_table).where(projects_table.c.workspace_id == workspace_id)
            if not include_archived:
                stmt = stmt.where(projects_table.c.is_archived.is_(False))
            rows = conn.execute(
                stmt.order_by(projects_table.c.created_at.desc(), projects_table.c.name)
            ).fetchall()
            return [Project.model_validate(dict(row._mapping)) for row in rows]

    def create_project(
        self, workspace_id: UUID, profile_id: UUID, request: ProjectCreate
    ) -> Project:
        """
        Create a project, with the default columns unless asked not to.

        Args:
            workspace_id: Workspace to create the project in
            profile_id: Caller's profile id
            request: Project fields

        Returns:
            Created project

        Raises:
            NotFound: If the workspace does not exist
            AccessDenied: If the caller is not a member
            ValidationError: If the name is blank
        """
        name = required_text(request.name, "Project name")

        with get_connection(self.engine) as conn:
            require_member(conn, workspace_id, profile_id)
            row = conn.execute(
                insert(projects_table)
                .values(
                    workspace_id=workspace_id,
                    name=name,
                    description=request.description,
                    created_by=profile_id,
                )
                .returning(*projects_table.c)
            ).fetchone()
            if request.default_columns:
                provision_default_columns(conn, row.id)
            logger.info(f"Created project {row.id} in workspace {workspace_id}")
            return Project.model_validate(dict(row._mapping))

    def _project(self, conn: Connection, project_id: UUID) -> Project:
        row = conn.execute(
            select(projects_table).where(projects_table.c.id == project_id)
        ).fetchone()
        return Project.model_validate(dict(row._mapping))

    def get_project(self, project_id: UUID, profile_id: UUID) -> Project:
        with get_connection(self.engine) as conn:
            require_member(conn, workspace_of_project(conn, project_id), profile_id)
            return self._project(conn, project_id)

    def update_project(
        self, project_id: UUID, profile_id: UUID, changes: ProjectUpdate
    ) -> Project:
        values: dict[str, Any] = changes.model_dump(exclude_unset=True)
        if "name" in values:
            values["name"] = required_text(values["name"], "Project name")

        with get_connection(self.engine) as conn:
            require_member(conn, workspace_of_project(conn, project_id), profile_id)
            if values:
                conn.execute(
                    update(projects_table)
                    .where(projects_table.c.id == project_id)
                    .values(**values, updated_at=func.now())
                )
            return self._project(conn, project_id)

    def archive_project(self, project_id: UUID, profile_id: UUID) -> Project:
        """Soft-delete a project. Its columns and tasks are kept."""
        with get_connection(self.engine) as conn:
            require_member(conn, workspace_of_project(conn, project_id), profile_id)
            conn.execute(
                update(projects_table)
                .where(projects_table.c.id == project_id)
                .values(is_archived=True, updated_at=func.now())
            )
            logger.info(f"Project {project_id} archived by {profile_id}")
            return self._project(conn, project_id)

    # Columns

    def list_columns(self, project_id: UUID, profile_id: UUID) -> list[BoardColumn]:
        with get_connection(self.engine) as conn:
            require_member(conn, workspace_of_project(conn, project_id), profile_id)
            rows = conn.execute(
                select(columns_table)
                .where(columns_table.c.project_id == project_id)
                .order_by(columns_table.c.position)
            ).fetchall()
            return [BoardColumn.model_validate(dict(row._mapping)) for row in rows]

    def create_column(
        self, project_id: UUID, profile_id: UUID, request: ColumnCreate
    ) -> BoardColumn:
        """Append a column at the end of the project."""
        name = required_text(request.name, "Column name")

        with get_connection(self.engine) as conn:
            require_member(conn, workspace_of_project(conn, project_id), profile_id)
            lock_parents(conn, COLUMNS, project_id)
            row = conn.execute(
                insert(columns_table)
                .values(
                    project_id=project_id,
                    name=name,
                    position=next_position(conn, COLUMNS, project_id),
                )
                .returning(*columns_table.c)
            ).fetchone()
            return BoardColumn.model_validate(dict(row._mapping))

    def _column(self, conn: Connection, column_id: UUID) -> BoardColumn:
        row = conn.execute(
            select(columns_table).where(columns_table.c.id == column_id)
        ).fetchone()
        if row is None:
            raise NotFound("column", column_id)
        return BoardColumn.model_validate(dict(row._mapping))

    def update_column(
        self, column_id: UUID, profile_id: UUID, changes: ColumnUpdate
    ) -> BoardColumn:
        """
        Rename a column and/or move it to a new index within its project.

        Moving shifts the sibling columns so positions stay 0..n-1.
        """
        values = changes.model_dump(exclude_unset=True)
        name = values.get("name")
        if "name" in values:
            name = required_text(name, "Column name")

        with get_connection(self.engine) as conn:
            require_member(conn, workspace_of_column(conn, column_id), profile_id)
            column = self._column(conn, column_id)

            if name is not None:
                conn.execute(
                    update(columns_table)
                    .where(columns_table.c.id == column_id)
                    .values(name=name, updated_at=func.now())
                )

            if values.get("position") is not None:
                lock_parents(conn, COLUMNS, column.project_id)
                move_within(conn, COLUMNS, column.project_id, column_id, values["position"])

            return self._column(conn, column_id)

    def delete_column(self, column_id: UUID, profile_id: UUID) -> None:
        """
        Delete a column together with its tasks, then close the gap.

        The task delete, the column delete and the renumbering of the
        remaining columns share one transaction.
        """
        with get_connection(self.engine) as conn:
            require_member(conn, workspace_of_column(conn, column_id), profile_id)
            column = self._column(conn, column_id)
            lock_parents(conn, COLUMNS, column.project_id)

            removed = conn.execute(
                delete(tasks_table).where(tasks_table.c.column_id == column_id)
            ).rowcount
            conn.execute(delete(columns_table).where(columns_table.c.id == column_id))
            remaining = renumber(conn, COLUMNS, column.project_id)

        logger.info(
            f"Deleted column {column_id} ({removed} tasks); project {column.project_id} has {remaining} columns"
        )

    # Tasks

    def list_tasks(self, column_id: UUID, profile_id: UUID) -> list[Task]:
        with get_connection(self.engine) as conn:
            require_member(conn, workspace_of_column(conn, column_id), profile_id)
            rows = conn.execute(
                select(tasks_table)
                .where(tasks_table.c.column_id == column_id)
                .order_by(tasks_table.c.position)
            ).fetchall()
            return [Task.model_validate(dict(row._mapping)) for row in rows]

    def list_project_tasks(self, project_id: UUID, profile_id: UUID) -> list[Task]:
        """All tasks of a board, in column order then task order."""
        with get_connection(self.engine) as conn:
            require_member(conn, workspace_of_project(conn, project_id), profile_id)
            rows = conn.execute(
                select(tasks_table)
                .select_from(
                    tasks_table.join(columns_table, tasks_table.c.column_id == columns_table.c.id)
                )
                .where(columns_table.c.project_id == project_id)
                .order_by(columns_table.c.position, tasks_table.c.position)
            ).fetchall()
            return [Task.model_validate(dict(row._mapping)) for row in rows]

    def _check_assignee(
        self, conn: Connection, workspace_id: UUID, assignee_id: Optional[UUID]
    ) -> None:
        if assignee_id is not None and member_role(conn, workspace_id, assignee_id) is None:
            raise ValidationError("Assignee must be a member of the workspace")

    def _task(self, conn: Connection, task_id: UUID) -> Task:
        row = conn.execute(select(tasks_table).where(tasks_table.c.id == task_id)).fetchone()
        if row is None:
            raise NotFound("task", task_id)
        return Task.model_validate(dict(row._mapping))

    def create_task(self, profile_id: UUID, request: TaskCreate) -> Task:
        """
        Append a task to the end of a column.

        Args:
            profile_id: Caller's profile id, recorded as created_by
            request: Task fields, including the target column

        Returns:
            Created task

        Raises:
            NotFound: If the column does not exist
            AccessDenied: If the caller is not a member of the column's workspace
            ValidationError: If the title is blank or the assignee is not a member
        """
        title = required_text(request.title, "Task title")

        with get_connection(self.engine) as conn:
            workspace_id = workspace_of_column(conn, request.column_id)
            require_member(conn, workspace_id, profile_id)
            self._check_assignee(conn, workspace_id, request.assignee_id)

            lock_parents(conn, TASKS, request.column_id)
            row = conn.execute(
                insert(tasks_table)
                .values(
                    column_id=request.column_id,
                    title=title,
                    description=request.description,
                    assignee_id=request.assignee_id,
                    priority=request.priority,
                    status=request.status,
                    due_date=request.due_date,
                    is_recurring=request.is_recurring,
                    recurrence_pattern=request.recurrence_pattern,
                    position=next_position(conn, TASKS, request.column_id),
                    created_by=profile_id,
                )
                .returning(*tasks_table.c)
            ).fetchone()
            return Task.model_validate(dict(row._mapping))

    def get_task(self, task_id: UUID, profile_id: UUID) -> Task:
        with get_connection(self.engine) as conn:
            require_member(conn, workspace_of_task(conn, task_id), profile_id)
            return self._task(conn, task_id)

    def update_task(self, task_id: UUID, profile_id: UUID, changes: TaskUpdate) -> Task:
        """
        Write the task fields present in the request.

        Column and position are not part of the update; use move_task.
        """
        values: dict[str, Any] = changes.model_dump(exclude_unset=True)
        for field in NON_NULLABLE_TASK_FIELDS:
            if field in values and values[field] is None:
                raise ValidationError(f"Task {field} cannot be cleared")
        if "title" in values:
            values["title"] = required_text(values["title"], "Task title")

        with get_connection(self.engine) as conn:
            workspace_id = workspace_of_task(conn, task_id)
            require_member(conn, workspace_id, profile_id)
            if "assignee_id" in values:
                self._check_assignee(conn, workspace_id, values["assignee_id"])

            if values:
                conn.execute(
                    update(tasks_table)
                    .where(tasks_table.c.id == task_id)
                    .values(**values, updated_at=func.now())
                )
            return self._task(conn, task_id)

    def move_task(self, task_id: UUID, profile_id: UUID, request: TaskMove) -> Task:
        """
        Move a task to another column of the same project, or reorder it.

        A task moved to a different column is appended at the end of the
        destination and the source column is renumbered. A task moved
        within its own column is placed at the requested position.

        Raises:
            NotFound: If the task or the destination column does not exist
            AccessDenied: If the caller is not a member
            ValidationError: If the destination belongs to another project
        """
        with get_connection(self.engine) as conn:
            require_member(conn, workspace_of_task(conn, task_id), profile_id)
            task = self._task(conn, task_id)
            source = self._column(conn, task.column_id)
            target = self._column(conn, request.column_id)
            if target.project_id != source.project_id:
                raise ValidationError("Tasks can only move between columns of the same project")

            if target.id == source.id:
                if request.position is not None:
                    lock_parents(conn, TASKS, source.id)
                    move_within(conn, TASKS, source.id, task_id, request.position)
                return self._task(conn, task_id)

            lock_parents(conn, TASKS, source.id, target.id)
            conn.execute(
                update(tasks_table)
                .where(tasks_table.c.id == task_id)
                .values(
                    column_id=target.id,
                    position=next_position(conn, TASKS, target.id),
                    updated_at=func.now(),
                )
            )
            renumber(conn, TASKS, source.id)
            logger.debug(f"Moved task {task_id} from column {source.id} to {target.id}")
            return self._task(conn, task_id)

    def delete_task(self, task_id: UUID, profile_id: UUID) -> None:
        with get_connection(self.engine) as conn:
            require_member(conn, workspace_of_task(conn, task_id), profile_id)
            task = self._task(conn, task_id)
            lock_parents(conn, TASKS, task.column_id)
            conn.execute(delete(tasks_table).where(tasks_table.c.id == task_id))
            renumber(conn, TASKS, task.column_id)
