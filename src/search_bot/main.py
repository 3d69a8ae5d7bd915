"""
Bot Server Application Entry Point

This module defines the FastAPI application instance, registers all routers,
configures global exception handling, and provides a test-friendly application
factory.

Design Goals
------------
- Deterministic startup
- Fail-fast configuration validation before the first request
- Centralized router registration
- Global exception safety net
- Test-friendly via create_app()
"""

from __future__ import annotations

import contextlib
import logging
from typing import AsyncIterator, Optional

from fastapi import FastAPI

from .bot.application import BotApplication
from .config import Settings
from .core.errors import (
    ChatModelError,
    RetrievalError,
    unhandled_exception_handler,
    upstream_error_handler,
)
from .core.logging import configure_logging
from .api import health_routes, message_routes
from .api.dependencies import build_bot_application


logger = logging.getLogger("search_bot.app")


# ---------------------------------------------------------------------
# Application Factory (Test-Friendly)
# ---------------------------------------------------------------------

def create_app(
    settings: Optional[Settings] = None,
    bot: Optional[BotApplication] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Parameters
    ----------
    settings : Optional[Settings]
        Settings to build the bot from. Read from the environment if omitted.

    bot : Optional[BotApplication]
        Prebuilt bot; skips building one from settings (used by tests).

    Returns
    -------
    FastAPI
        Fully configured FastAPI application.
    """
    settings = settings or Settings()
    configure_logging(settings.log_level)

    @contextlib.asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("Starting search-bot")
        if app.state.bot is None:
            # Raises ConfigurationError before any request is served
            app.state.bot = build_bot_application(settings)
        logger.info("Configuration validated successfully")
        yield
        logger.info("Shutting down search-bot")

    app = FastAPI(
        title="search-bot",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.bot = bot

    # --------------------------------------------------------------
    # Global Exception Handling
    # --------------------------------------------------------------

    app.add_exception_handler(RetrievalError, upstream_error_handler)
    app.add_exception_handler(ChatModelError, upstream_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # --------------------------------------------------------------
    # Router Registration
    # --------------------------------------------------------------

    app.include_router(health_routes.router)
    app.include_router(message_routes.router)

    return app


# ---------------------------------------------------------------------
# Default Application Instance (for Uvicorn)
# ---------------------------------------------------------------------

app = create_app()
