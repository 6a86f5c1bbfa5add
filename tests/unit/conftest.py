"""Pytest configuration and fixtures for unit tests."""

import pytest
from fastapi.testclient import TestClient

from src.main import app
from tests.unit.mocks import InMemoryDBClient


@pytest.fixture
def in_memory_db():
    """Provides a fresh InMemoryDBClient for each test."""
    return InMemoryDBClient()


@pytest.fixture
def patched_db(monkeypatch, in_memory_db):
    """Patches src.core.db_client functions to use InMemoryDBClient."""
    monkeypatch.setattr("src.core.db_client.create_record", in_memory_db.create_record)
    monkeypatch.setattr("src.core.db_client.get_record", in_memory_db.get_record)
    monkeypatch.setattr("src.core.db_client.update_record", in_memory_db.update_record)
    monkeypatch.setattr("src.core.db_client.add_to_set", in_memory_db.add_to_set)
    monkeypatch.setattr("src.core.db_client.delete_record", in_memory_db.delete_record)
    monkeypatch.setattr("src.core.db_client.get_full_list", in_memory_db.get_full_list)
    monkeypatch.setattr("src.core.db_client.get_first_record", in_memory_db.get_first_record)
    monkeypatch.setattr("src.core.db_client.ping", in_memory_db.ping)

    return in_memory_db


@pytest.fixture
def client(patched_db) -> TestClient:
    """Test client for the FastAPI app backed by the in-memory store.

    Not used as a context manager, so the lifespan (and the SQLite schema setup) is skipped.
    """
    return TestClient(app)


@pytest.fixture
def sample_task_data():
    """Returns sample task data for testing."""
    return {
        "name": "Write report",
        "description": "Quarterly numbers",
        "status": "pending",
    }
