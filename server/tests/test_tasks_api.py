"""API tests for tasks, including the move flow end to end."""

from uuid import uuid4

import pytest


@pytest.fixture
def headers(test_profile, auth_headers):
    return auth_headers(test_profile)


def create_task(client, headers, column_id, title, **fields):
    response = client.post(
        "/api/tasks", json={"column_id": str(column_id), "title": title, **fields}, headers=headers
    )
    assert response.status_code == 201, response.text
    return response.json()


def column_tasks(client, headers, column_id):
    response = client.get(f"/api/columns/{column_id}/tasks", headers=headers)
    assert response.status_code == 200
    return [(t["title"], t["position"]) for t in response.json()]


@pytest.mark.integration
class TestTaskEndpoints:
    def test_move_between_columns(self, test_client, headers, test_workspace):
        """Workspace, project with default columns, two tasks, one moved to Done."""
        workspace_id, _ = test_workspace
        project = test_client.post(
            f"/api/workspaces/{workspace_id}/projects", json={"name": "Close"}, headers=headers
        ).json()
        todo, _, done = [
            c["id"]
            for c in test_client.get(f"/api/projects/{project['id']}/columns", headers=headers).json()
        ]
        t1 = create_task(test_client, headers, todo, "T1")
        t2 = create_task(test_client, headers, todo, "T2")
        assert (t1["position"], t2["position"]) == (0, 1)

        response = test_client.post(
            f"/api/tasks/{t1['id']}/move", json={"column_id": done}, headers=headers
        )

        assert response.status_code == 200
        assert response.json()["column_id"] == done
        assert response.json()["position"] == 0
        assert column_tasks(test_client, headers, done) == [("T1", 0)]
        assert column_tasks(test_client, headers, todo) == [("T2", 0)]

    def test_reorder_in_column(self, test_client, headers, test_board):
        todo = test_board[0]
        first = create_task(test_client, headers, todo, "first")
        create_task(test_client, headers, todo, "second")

        response = test_client.post(
            f"/api/tasks/{first['id']}/move",
            json={"column_id": str(todo), "position": 5},
            headers=headers,
        )

        assert response.status_code == 200
        assert response.json()["position"] == 1
        assert column_tasks(test_client, headers, todo) == [("second", 0), ("first", 1)]

    def test_move_to_missing_column(self, test_client, headers, test_board):
        task = create_task(test_client, headers, test_board[0], "t")

        response = test_client.post(
            f"/api/tasks/{task['id']}/move", json={"column_id": str(uuid4())}, headers=headers
        )

        assert response.status_code == 404

    def test_invalid_priority_rejected(self, test_client, headers, test_board):
        response = test_client.post(
            "/api/tasks",
            json={"column_id": str(test_board[0]), "title": "t", "priority": "critical"},
            headers=headers,
        )

        assert response.status_code == 400
        assert any(err["loc"] == ["priority"] for err in response.json()["errors"])

    def test_assignee_outside_workspace(self, test_client, headers, test_board, outsider):
        response = test_client.post(
            "/api/tasks",
            json={"column_id": str(test_board[0]), "title": "t", "assignee_id": str(outsider)},
            headers=headers,
        )

        assert response.status_code == 400

    def test_patch_only_sent_fields(self, test_client, headers, test_board):
        task = create_task(
            test_client, headers, test_board[0], "Vendor invoices", description="Batch 7", priority="high"
        )

        response = test_client.patch(
            f"/api/tasks/{task['id']}", json={"status": "review"}, headers=headers
        )

        body = response.json()
        assert response.status_code == 200
        assert body["status"] == "review"
        assert body["priority"] == "high"
        assert body["description"] == "Batch 7"

    def test_patch_cannot_null_title(self, test_client, headers, test_board):
        task = create_task(test_client, headers, test_board[0], "keep")

        response = test_client.patch(f"/api/tasks/{task['id']}", json={"title": None}, headers=headers)

        assert response.status_code == 400

    def test_delete_task(self, test_client, headers, test_board):
        first = create_task(test_client, headers, test_board[0], "a")
        create_task(test_client, headers, test_board[0], "b")

        response = test_client.delete(f"/api/tasks/{first['id']}", headers=headers)

        assert response.status_code == 204
        assert test_client.get(f"/api/tasks/{first['id']}", headers=headers).status_code == 404
        assert column_tasks(test_client, headers, test_board[0]) == [("b", 0)]

    def test_outsider_cannot_touch_tasks(self, test_client, headers, test_board, outsider, auth_headers):
        task = create_task(test_client, headers, test_board[0], "private")
        outsider_headers = auth_headers(outsider)

        assert test_client.get(f"/api/tasks/{task['id']}", headers=outsider_headers).status_code == 403
        assert (
            test_client.patch(
                f"/api/tasks/{task['id']}", json={"title": "mine"}, headers=outsider_headers
            ).status_code
            == 403
        )
        assert test_client.delete(f"/api/tasks/{task['id']}", headers=outsider_headers).status_code == 403


@pytest.mark.integration
def test_routes_with_overridden_auth(test_client, test_board, override_auth_dependencies):
    """Handlers see the overridden identity without any credential on the request."""
    response = test_client.get(f"/api/columns/{test_board[0]}/tasks")

    assert response.status_code == 200
    assert response.json() == []
