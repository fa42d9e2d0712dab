"""Unit tests for dense column and task positions."""

import random

import pytest
from sqlalchemy import delete, select

from finkan_server.core.database import columns_table, get_connection, tasks_table
from finkan_server.core.ordering import (
    COLUMNS,
    TASKS,
    lock_parents,
    move_within,
    next_position,
    renumber,
)
from tests.factories import create_test_column, create_test_task


def positions(conn, collection, parent_id):
    table = collection.table
    rows = conn.execute(
        select(table.c.id, table.c.position)
        .where(collection.parent_column == parent_id)
        .order_by(table.c.position)
    ).fetchall()
    return [(row.id, row.position) for row in rows]


class TestNextPosition:
    def test_empty_parent_appends_at_zero(self, db_connection, test_project):
        project_id, _, _ = test_project
        column_id = create_test_column(db_connection, project_id, name="Empty")

        assert next_position(db_connection, TASKS, column_id) == 0

    def test_counts_existing_siblings(self, db_connection, test_project, test_board):
        project_id, _, _ = test_project
        assert next_position(db_connection, COLUMNS, project_id) == 3

        for i in range(2):
            create_test_task(db_connection, test_board[0], title=f"T{i}")
        assert next_position(db_connection, TASKS, test_board[0]) == 2

    def test_lock_parents_runs_inside_transaction(self, db_connection, test_board):
        # FOR UPDATE is dropped on SQLite and taken on PostgreSQL; either way it must not fail
        lock_parents(db_connection, TASKS, test_board[2], test_board[0], test_board[0])
        assert next_position(db_connection, TASKS, test_board[0]) == 0


class TestRenumber:
    def test_closes_gaps_keeping_order(self, db_connection, test_board):
        column_id = test_board[0]
        ids = [create_test_task(db_connection, column_id, title=t, position=p)
               for t, p in (("a", 0), ("b", 4), ("c", 9))]

        count = renumber(db_connection, TASKS, column_id)

        assert count == 3
        assert positions(db_connection, TASKS, column_id) == list(zip(ids, [0, 1, 2]))

    def test_duplicate_positions_become_distinct(self, db_connection, test_board):
        column_id = test_board[1]
        for title in ("a", "b", "c"):
            create_test_task(db_connection, column_id, title=title, position=1)

        renumber(db_connection, TASKS, column_id)

        assert [p for _, p in positions(db_connection, TASKS, column_id)] == [0, 1, 2]

    def test_empty_parent(self, db_connection, test_board):
        assert renumber(db_connection, TASKS, test_board[2]) == 0


class TestMoveWithin:
    def test_moves_column_to_front(self, db_connection, test_project, test_board):
        project_id, _, _ = test_project
        todo, doing, done = test_board

        index = move_within(db_connection, COLUMNS, project_id, done, 0)

        assert index == 0
        assert positions(db_connection, COLUMNS, project_id) == [(done, 0), (todo, 1), (doing, 2)]

    def test_index_is_clamped(self, db_connection, test_project, test_board):
        project_id, _, _ = test_project
        todo, doing, done = test_board

        index = move_within(db_connection, COLUMNS, project_id, todo, 99)

        assert index == 2
        assert positions(db_connection, COLUMNS, project_id) == [(doing, 0), (done, 1), (todo, 2)]

    def test_same_index_is_a_no_op(self, db_connection, test_project, test_board):
        project_id, _, _ = test_project
        before = positions(db_connection, COLUMNS, project_id)

        move_within(db_connection, COLUMNS, project_id, test_board[1], 1)

        assert positions(db_connection, COLUMNS, project_id) == before


@pytest.mark.parametrize("seed", [1, 7, 42])
def test_random_create_delete_sequences_stay_dense(db_engine, test_project, seed):
    """Appending at count and renumbering after delete keeps positions 0..n-1."""
    project_id, _, _ = test_project
    rng = random.Random(seed)

    with get_connection(db_engine) as conn:
        column_id = create_test_column(conn, project_id, name="Scratch")

    for _ in range(25):
        with get_connection(db_engine) as conn:
            existing = [item_id for item_id, _ in positions(conn, TASKS, column_id)]
            if existing and rng.random() < 0.4:
                victim = rng.choice(existing)
                conn.execute(delete(tasks_table).where(tasks_table.c.id == victim))
                renumber(conn, TASKS, column_id)
            elif existing and rng.random() < 0.3:
                move_within(conn, TASKS, column_id, rng.choice(existing), rng.randint(0, 10))
            else:
                lock_parents(conn, TASKS, column_id)
                create_test_task(conn, column_id, position=next_position(conn, TASKS, column_id))

        with get_connection(db_engine) as conn:
            found = [p for _, p in positions(conn, TASKS, column_id)]
            assert found == list(range(len(found)))


def test_renumbering_columns_ignores_other_projects(db_connection, test_project):
    from tests.factories import create_test_project

    project_id, workspace_id, _ = test_project
    other_id, _, _ = create_test_project(db_connection, workspace_id=workspace_id, suffix="other")
    db_connection.execute(delete(columns_table).where(columns_table.c.position == 1))

    renumber(db_connection, COLUMNS, project_id)

    assert [p for _, p in positions(db_connection, COLUMNS, project_id)] == [0, 1]
    assert [p for _, p in positions(db_connection, COLUMNS, other_id)] == [0, 2]
