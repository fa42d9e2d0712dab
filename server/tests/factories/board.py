"""Column and task factories for building boards in tests."""

from uuid import UUID
from typing import Any, Optional
from sqlalchemy import func, insert, select
from sqlalchemy.engine import Connection

from finkan_server.core.database import columns_table, tasks_table


def get_test_columns(conn: Connection, project_id: UUID) -> list[UUID]:
    """Return the project's column ids in position order."""
    rows = conn.execute(
        select(columns_table.c.id)
        .where(columns_table.c.project_id == project_id)
        .order_by(columns_table.c.position)
    ).fetchall()
    return [row.id for row in rows]


def create_test_column(
    conn: Connection,
    project_id: UUID,
    name: str = "Column",
    position: Optional[int] = None,
) -> UUID:
    """Create a column, appended at the end unless a position is given."""
    if position is None:
        position = conn.execute(
            select(func.count())
            .select_from(columns_table)
            .where(columns_table.c.project_id == project_id)
        ).scalar()

    row = conn.execute(
        insert(columns_table)
        .values(project_id=project_id, name=name, position=position)
        .returning(columns_table.c.id)
    ).fetchone()
    return row.id


def create_test_task(
    conn: Connection,
    column_id: UUID,
    title: str = "Task",
    position: Optional[int] = None,
    created_by: Optional[UUID] = None,
    **fields: Any,
) -> UUID:
    """Create a task, appended at the end of the column unless a position is given.

    Example:
        task_id = create_test_task(conn, todo_id, title="Write tests", priority="high")
    """
    if position is None:
        position = conn.execute(
            select(func.count())
            .select_from(tasks_table)
            .where(tasks_table.c.column_id == column_id)
        ).scalar()

    row = conn.execute(
        insert(tasks_table)
        .values(
            column_id=column_id,
            title=title,
            position=position,
            created_by=created_by,
            **fields,
        )
        .returning(tasks_table.c.id)
    ).fetchone()
    return row.id
