"""Tests for the task endpoints."""

import pytest
from fastapi.testclient import TestClient

from src.core.object_id import new_object_id


def _create(client: TestClient, **overrides) -> dict:
    payload = {"name": "A", "description": "d", "status": "pending", **overrides}
    response = client.post("/tasks", json=payload)
    assert response.status_code == 201
    return response.json()["task"]


@pytest.mark.unit
def test_create_task_returns_201(client: TestClient) -> None:
    """Test a complete payload is created and not deleted."""
    response = client.post("/tasks", json={"name": "A", "description": "d", "status": "pending"})

    assert response.status_code == 201
    data = response.json()
    assert data["message"] == "Create task successfully!"
    assert data["task"]["isDeleted"] is False
    assert data["task"]["status"] == "pending"


@pytest.mark.unit
def test_create_task_missing_data_returns_402(client: TestClient, patched_db) -> None:
    """Test missing required data uses the API's 402 status and error body."""
    response = client.post("/tasks", json={"name": "A", "status": "pending"})

    assert response.status_code == 402
    assert response.json() == {
        "success": False,
        "errors": {"message": "Error: Missing required data!"},
        "message": "Bad Request",
    }


@pytest.mark.unit
def test_create_task_invalid_status_returns_402(client: TestClient) -> None:
    """Test an unknown status is rejected."""
    response = client.post("/tasks", json={"name": "A", "description": "d", "status": "later"})

    assert response.status_code == 402
    assert response.json()["errors"]["message"] == "Task status is not valid!"


@pytest.mark.unit
def test_create_task_wrong_field_type_returns_400(client: TestClient) -> None:
    """Test a non-string field fails request validation."""
    response = client.post("/tasks", json={"name": ["A"], "description": "d", "status": "pending"})

    assert response.status_code == 400
    assert response.json()["message"] == "Validation Error"


@pytest.mark.unit
def test_get_tasks_paginates_by_slice(client: TestClient) -> None:
    """Test page 2 with limit 5 over 12 tasks."""
    created = [_create(client, name=f"Task {i}") for i in range(12)]

    response = client.get("/tasks", params={"page": 2, "limit": 5})

    assert response.status_code == 200
    data = response.json()
    assert [task["id"] for task in data["tasks"]] == [task["id"] for task in created[5:10]]
    assert data["total"] == 5
    assert data["page"] == 2
    assert data["message"] == "Get all tasks successfully!"


@pytest.mark.unit
def test_get_tasks_with_filter(client: TestClient) -> None:
    """Test the filter query parameter."""
    _create(client, name="A")
    review = _create(client, name="B", status="review")

    response = client.get("/tasks", params={"filter": 'status = "review"'})

    assert [task["id"] for task in response.json()["tasks"]] == [review["id"]]


@pytest.mark.unit
def test_get_tasks_rejects_zero_page(client: TestClient) -> None:
    """Test page must be at least 1."""
    response = client.get("/tasks", params={"page": 0})

    assert response.status_code == 400


@pytest.mark.unit
def test_get_single_task(client: TestClient) -> None:
    """Test fetching a task by id."""
    task = _create(client)

    response = client.get(f"/tasks/{task['id']}")

    assert response.status_code == 200
    assert response.json()["task"]["id"] == task["id"]


@pytest.mark.unit
def test_get_single_task_bad_id_returns_400(client: TestClient) -> None:
    """Test a malformed id."""
    response = client.get("/tasks/not-an-object-id")

    assert response.status_code == 400
    assert response.json()["errors"]["message"] == "Task id must be ObjectID!"


@pytest.mark.unit
def test_get_single_task_missing_returns_500(client: TestClient) -> None:
    """Test an unknown task uses the API's 500 status."""
    response = client.get(f"/tasks/{new_object_id()}")

    assert response.status_code == 500
    assert response.json()["errors"]["message"] == "Task does not exist!"


@pytest.mark.unit
def test_update_done_task_to_working_is_rejected(client: TestClient) -> None:
    """Test a done task cannot go back to working and stays unchanged."""
    task = _create(client, status="done")

    response = client.put(f"/tasks/{task['id']}", json={"status": "working"})

    assert response.status_code == 500
    assert response.json()["errors"]["message"] == "Completed tasks can only be archived"
    assert client.get(f"/tasks/{task['id']}").json()["task"]["status"] == "done"


@pytest.mark.unit
def test_update_task(client: TestClient) -> None:
    """Test a valid update."""
    task = _create(client)

    response = client.put(f"/tasks/{task['id']}", json={"status": "review", "name": "B"})

    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Update task successfully!"
    assert data["task"]["status"] == "review"
    assert data["task"]["name"] == "B"


@pytest.mark.unit
def test_update_with_null_name_keeps_tasks_listable(client: TestClient) -> None:
    """Test a null name in an update is ignored and listing still works."""
    task = _create(client)

    response = client.put(f"/tasks/{task['id']}", json={"status": "working", "name": None})

    assert response.status_code == 200
    assert response.json()["task"]["name"] == "A"
    listed = client.get("/tasks")
    assert listed.status_code == 200
    assert [t["name"] for t in listed.json()["tasks"]] == ["A"]
    assert client.get(f"/tasks/{task['id']}").status_code == 200


@pytest.mark.unit
def test_put_with_only_user_name_assigns(client: TestClient) -> None:
    """Test PUT /tasks/{id} with just user_name behaves as an assignment."""
    task = _create(client)
    user_id = new_object_id()

    response = client.put(f"/tasks/{task['id']}", json={"user_name": user_id})

    assert response.status_code == 200
    assert response.json()["message"] == "Assign task successfully!"
    assert response.json()["task"]["user_name"] == user_id


@pytest.mark.unit
def test_assign_endpoint(client: TestClient) -> None:
    """Test the explicit assignment endpoint."""
    task = _create(client)

    response = client.put(f"/tasks/{task['id']}/assign", json={"user_name": "bob"})

    assert response.status_code == 200
    assert response.json()["task"]["user_name"] == "bob"


@pytest.mark.unit
def test_delete_task_is_soft(client: TestClient, patched_db) -> None:
    """Test deletion flags the task and hides it from reads."""
    task = _create(client)

    response = client.delete(f"/tasks/{task['id']}")

    assert response.status_code == 200
    assert response.json()["task"]["isDeleted"] is True
    assert client.get(f"/tasks/{task['id']}").status_code == 500
    assert client.get("/tasks").json()["tasks"] == []
    assert len(patched_db._collections["tasks"]) == 1


@pytest.mark.unit
def test_health(client: TestClient) -> None:
    """Test the health endpoint reports the store."""
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "database": "ok"}
