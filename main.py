"""
A scorekeeping backend for the Wizard card game.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from wizard_scorer.api.router import include_routers
from wizard_scorer.core.config import settings
from wizard_scorer.core.exception_handlers import register_exception_handlers
from wizard_scorer.core.startup import initialize_database, shutdown_database

# Configure logging
logging.basicConfig(
    level=logging.INFO if not settings.DEBUG else logging.DEBUG,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


# Lifespan context manager for startup/shutdown events
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application lifecycle events."""
    # Startup
    logger.info("Starting Wizard scorer ...")
    initialize_database()

    yield

    # Shutdown
    logger.info("Shutting down Wizard scorer API...")
    shutdown_database()


# Create FastAPI application
app = FastAPI(
    title="Wizard Scorer",
    description="""
    Scorekeeping API for the Wizard card game: players, seating,
    per-round bids and tricks, running totals and final standings.
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan
)

# Register exception handlers
register_exception_handlers(app)


# Include routers
include_routers(app)

# CLI entry point
if __name__ == "__main__":
    import uvicorn

    # Development server configuration
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level="debug" if settings.DEBUG else "info",
        access_log=True
    )
