"""
AppRunner entry point.

Hosts embed the engine through a lifespan: logging is configured on
startup, each command runs in its own database session, and the engine is
disposed on shutdown.

    async with lifespan() as runner:
        run = await runner.execute(CreateRun(...))
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from apprunner.config import Settings, get_settings
from apprunner.core.database import close_db, get_db
from apprunner.core.logging import configure_logging
from apprunner.handlers import HandlerContext, dispatch

logger = logging.getLogger(__name__)

db_session = asynccontextmanager(get_db)


class AppRunner:
    """Executes commands, one session (and transaction) per command."""

    def __init__(self, settings: Settings):
        self.settings = settings

    async def execute(self, command: Any) -> Any:
        async with db_session() as session:
            context = HandlerContext.from_session(session, self.settings)
            return await dispatch(context, command)


@asynccontextmanager
async def lifespan(settings: Settings | None = None) -> AsyncGenerator[AppRunner, None]:
    """Configure logging, yield a runner, and dispose of the engine on exit."""
    settings = settings or get_settings()
    configure_logging(settings)
    logger.info(f"Starting AppRunner ({settings.environment})")
    try:
        yield AppRunner(settings)
    finally:
        await close_db()
        logger.info("AppRunner stopped")
