"""Logging and observability configuration using Pydantic Logfire.

All modules should use Python's standard logging library (logging.getLogger(__name__)).
configure_logfire() attaches a Logfire handler to the root logger so those records
are captured and enriched.

Standard usage:
    import logging
    logger = logging.getLogger(__name__)
    logger.info("Message", extra={"key": "value"})
"""

import logging

import logfire
from fastapi import FastAPI

from src.core.config import settings


def configure_logfire() -> None:
    """Configure Pydantic Logfire with token from environment.

    Records are only shipped when LOGFIRE_TOKEN is set; standard logging is routed
    through Logfire either way.
    """
    logfire.configure(
        token=settings.logfire_token,
        service_name="taskdesk",
        service_version="0.1.0",
        environment=settings.environment,
        send_to_logfire="if-token-present",
    )

    root_logger = logging.getLogger()
    if not any(isinstance(handler, logfire.LogfireLoggingHandler) for handler in root_logger.handlers):
        root_logger.addHandler(logfire.LogfireLoggingHandler())
    root_logger.setLevel(logging.INFO)

    logger = logging.getLogger(__name__)
    logger.info("Logfire configured successfully")


def instrument_fastapi(app: FastAPI) -> None:
    """Add Logfire instrumentation to FastAPI application."""
    logfire.instrument_fastapi(app)
    logger = logging.getLogger(__name__)
    logger.info("FastAPI instrumentation configured")


def span(name: str) -> logfire.LogfireSpan:
    """Create a custom span for service layer functions.

    Usage:
        with span("task_service.create_task"):
            # Your service logic here
            pass
    """
    return logfire.span(name)
