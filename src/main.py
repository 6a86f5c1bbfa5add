"""taskdesk - task and user management API."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from src.core import db_client
from src.core.db_client import init_db
from src.core.logging import configure_logfire, instrument_fastapi
from src.interface.error_handlers import register_error_handlers
from src.interface.task_router import router as task_router
from src.interface.user_router import router as user_router


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan context manager."""
    # Startup
    # Configure logging first so startup logs are captured
    configure_logfire()

    # Initialize database
    await init_db()
    logger.info("Database initialized")

    yield
    # Shutdown
    await db_client.close_connection()


app = FastAPI(
    title="taskdesk",
    description="Task and user management API",
    version="0.1.0",
    lifespan=lifespan,
)

# Instrument FastAPI with Logfire
instrument_fastapi(app)

register_error_handlers(app)

# Register routers
app.include_router(task_router)
app.include_router(user_router)


@app.get("/health")
async def health_check() -> JSONResponse:
    """Health check endpoint."""
    if not await db_client.ping():
        return JSONResponse(content={"status": "unhealthy", "database": "unavailable"}, status_code=503)
    return JSONResponse(content={"status": "healthy", "database": "ok"}, status_code=200)
