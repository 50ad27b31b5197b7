"""Application setup and teardown for garden-xp"""
import logging
from typing import Optional

from garden_xp.config import LOG_LEVEL, validate_config
from garden_xp.db.connection import db
from garden_xp.observability.sentry_config import init_sentry, shutdown_sentry
from garden_xp.services.container import ServiceContainer, init_container

logger = logging.getLogger(__name__)


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging once"""
    logging.basicConfig(
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        level=getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO)
    )


async def init_app() -> ServiceContainer:
    """
    Prepare the engine for use

    - Configure logging
    - Validate configuration
    - Initialize Sentry (if enabled)
    - Open the database pool
    - Build the service container
    """
    configure_logging()

    validate_config()
    logger.info("Configuration validated")

    init_sentry()

    logger.info("Initializing database connection pool...")
    await db.init_pool()

    container = init_container()
    logger.info("garden-xp initialized")
    return container


async def shutdown_app() -> None:
    """Close the database pool and flush Sentry"""
    logger.info("Shutting down garden-xp...")
    await db.close_pool()
    shutdown_sentry()
    logger.info("Shutdown complete")
