"""Pytest configuration and shared fixtures."""

import logfire
import pytest


@pytest.fixture(scope="session", autouse=True)
def _quiet_logfire() -> None:
    """Keep spans local and off the console during tests."""
    logfire.configure(send_to_logfire=False, console=False)
