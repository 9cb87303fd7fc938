"""
Application startup and shutdown logic for the Wizard scorer API.
"""
import logging
from sqlalchemy import text

from wizard_scorer.core.database import engine, Base
# Register every table on Base.metadata before create_all
from wizard_scorer.models import bid, game, game_player, game_round, player  # noqa: F401

logger = logging.getLogger(__name__)


def initialize_database() -> None:
    """Initialize database tables and warm up connection pool."""
    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables created/verified")

        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        logger.info("Database connection pool initialized")

    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        raise


def shutdown_database() -> None:
    """Clean up database connections."""
    try:
        engine.dispose()
        logger.info("Database connections closed")
    except Exception as e:
        logger.error(f"Error during database shutdown: {e}")
        # Don't re-raise during shutdown
