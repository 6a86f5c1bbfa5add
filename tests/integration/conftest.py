"""Pytest configuration and fixtures for integration tests against a real SQLite store."""

import pytest

from src.core import db_client
from src.core.config import settings


@pytest.fixture
def sqlite_path(tmp_path, monkeypatch) -> str:
    """Point the store at a fresh database file for this test."""
    path = str(tmp_path / "taskdesk.db")
    monkeypatch.setattr(settings, "sqlite_db_path", path)
    return path


@pytest.fixture
async def sqlite_db(sqlite_path):
    """Initialized store; the connection is closed after the test."""
    await db_client.init_db()
    yield sqlite_path
    await db_client.close_connection()
