"""Dense 0-based positions for columns within a project and tasks within a column.

Every helper here runs inside the caller's transaction. Callers lock the
parent row first so that two requests appending to the same parent cannot
both read the same sibling count.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from sqlalchemy import Table, func, select, update
from sqlalchemy.engine import Connection

from .database import columns_table, projects_table, tasks_table


@dataclass(frozen=True)
class OrderedCollection:
    """An ordered child table and the parent it is ordered within."""

    table: Table
    parent_key: str
    parent_table: Table

    @property
    def parent_column(self):
        return self.table.c[self.parent_key]


COLUMNS = OrderedCollection(columns_table, "project_id", projects_table)
TASKS = OrderedCollection(tasks_table, "column_id", columns_table)


def lock_parents(conn: Connection, collection: OrderedCollection, *parent_ids: UUID) -> None:
    """Take a row lock on each parent, in a stable order to avoid deadlocks.

    Emits SELECT ... FOR UPDATE on PostgreSQL; dialects without row locks
    (SQLite) serialize writers on the whole database instead.
    """
    parent = collection.parent_table
    for parent_id in sorted(set(parent_ids), key=str):
        conn.execute(
            select(parent.c.id).where(parent.c.id == parent_id).with_for_update()
        )


def next_position(conn: Connection, collection: OrderedCollection, parent_id: UUID) -> int:
    """Append position: the number of current siblings."""
    count = conn.execute(
        select(func.count())
        .select_from(collection.table)
        .where(collection.parent_column == parent_id)
    ).scalar()
    return int(count or 0)


def sibling_ids(
    conn: Connection,
    collection: OrderedCollection,
    parent_id: UUID,
    exclude: Optional[UUID] = None,
) -> list[UUID]:
    table = collection.table
    stmt = select(table.c.id).where(collection.parent_column == parent_id)
    if exclude is not None:
        stmt = stmt.where(table.c.id != exclude)
    stmt = stmt.order_by(table.c.position, table.c.created_at, table.c.id)
    return [row.id for row in conn.execute(stmt)]


def _write_positions(conn: Connection, collection: OrderedCollection, ids: list[UUID]) -> None:
    table = collection.table
    for index, item_id in enumerate(ids):
        conn.execute(
            update(table)
            .where(table.c.id == item_id)
            .where(table.c.position != index)
            .values(position=index)
        )


def renumber(conn: Connection, collection: OrderedCollection, parent_id: UUID) -> int:
    """Rewrite sibling positions to 0..n-1, keeping their relative order.

    Returns:
        Number of siblings
    """
    ids = sibling_ids(conn, collection, parent_id)
    _write_positions(conn, collection, ids)
    return len(ids)


def move_within(
    conn: Connection,
    collection: OrderedCollection,
    parent_id: UUID,
    item_id: UUID,
    new_index: int,
) -> int:
    """Place one item at new_index among its siblings and shift the rest.

    The index is clamped to the valid range.

    Returns:
        The position the item ended up at
    """
    ids = sibling_ids(conn, collection, parent_id, exclude=item_id)
    index = max(0, min(new_index, len(ids)))
    ids.insert(index, item_id)
    _write_positions(conn, collection, ids)
    return index
