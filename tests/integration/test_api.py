"""End-to-end API tests with the application lifespan and a real SQLite store."""

import pytest
from fastapi.testclient import TestClient

from src.main import app


@pytest.fixture
def live_client(sqlite_path):
    """Client that runs startup (schema init) and shutdown."""
    with TestClient(app) as client:
        yield client


@pytest.mark.integration
def test_task_lifecycle(live_client: TestClient) -> None:
    """Create, assign, move through the workflow, archive and soft-delete a task."""
    user = live_client.post("/users", json={"name": "Alice"}).json()["user"]

    created = live_client.post(
        "/tasks",
        json={"name": "A", "description": "d", "status": "pending", "user_name": user["id"]},
    )
    assert created.status_code == 201
    task = created.json()["task"]
    assert task["isDeleted"] is False
    assert live_client.get(f"/users/{user['id']}").json()["user"]["tasks"] == [task["id"]]

    for status in ["working", "review", "done"]:
        response = live_client.put(f"/tasks/{task['id']}", json={"status": status})
        assert response.status_code == 200

    rejected = live_client.put(f"/tasks/{task['id']}", json={"status": "working"})
    assert rejected.status_code == 500
    assert live_client.get(f"/tasks/{task['id']}").json()["task"]["status"] == "done"

    archived = live_client.put(f"/tasks/{task['id']}", json={"status": "archive"})
    assert archived.json()["task"]["status"] == "archive"

    deleted = live_client.delete(f"/tasks/{task['id']}")
    assert deleted.json()["task"]["isDeleted"] is True
    assert live_client.get(f"/tasks/{task['id']}").status_code == 500
    assert live_client.get("/tasks").json()["tasks"] == []


@pytest.mark.integration
def test_pagination_over_sqlite(live_client: TestClient) -> None:
    """Test page 2 with limit 5 over 12 stored tasks."""
    ids = [
        live_client.post("/tasks", json={"name": f"T{i}", "description": "d", "status": "pending"}).json()["task"]["id"]
        for i in range(12)
    ]

    data = live_client.get("/tasks", params={"page": 2, "limit": 5}).json()

    assert [task["id"] for task in data["tasks"]] == ids[5:10]
    assert data["total"] == 5


@pytest.mark.integration
def test_health_with_database(live_client: TestClient) -> None:
    response = live_client.get("/health")

    assert response.status_code == 200
    assert response.json()["database"] == "ok"


@pytest.mark.integration
def test_null_description_update_does_not_corrupt_store(live_client: TestClient) -> None:
    """Test a null description never reaches the stored document."""
    task = live_client.post("/tasks", json={"name": "A", "description": "d", "status": "pending"}).json()["task"]

    response = live_client.put(f"/tasks/{task['id']}", json={"status": "working", "description": None})

    assert response.status_code == 200
    listed = live_client.get("/tasks")
    assert listed.status_code == 200
    assert listed.json()["tasks"][0]["description"] == "d"


@pytest.mark.integration
def test_user_lookup_by_numeric_looking_name(live_client: TestClient) -> None:
    created = live_client.post("/users", json={"name": "007"}).json()["user"]

    response = live_client.get("/users/name/007")

    assert response.status_code == 200
    assert response.json()["user"]["id"] == created["id"]
