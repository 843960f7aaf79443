"""flexmap API — FastAPI application factory exposing Shell commands as JSON endpoints.

Invariants:
    - Routes registered explicitly from the `routes` mapping (no auto-discovery)
    - Global error handlers map FlexmapError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Logging configured on startup via lifespan context manager

Design Decisions:
    - Factory over module-level app: the Shell is supplied by the caller
    - Lifespan over @app.on_event: FastAPI recommended pattern
"""

import logging
from contextlib import asynccontextmanager
from typing import Mapping

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from flexmap import __version__
from flexmap.api.error_handlers import default_error_handler, register_error_handlers
from flexmap.api.json_handler import (
    DEFAULT_METHODS, ErrorHandler, JSONHandler, ParamsBuilder, query_and_json_params,
)
from flexmap.api.routes import commands, health
from flexmap.config import Settings, get_settings
from flexmap.infrastructure.observability import setup_logging
from flexmap.services.command_shell import Shell

logger = logging.getLogger(__name__)


def create_app(
    shell: Shell,
    routes: Mapping[str, str],
    *,
    error_handler: ErrorHandler = default_error_handler,
    params_builder: ParamsBuilder = query_and_json_params,
    settings: Settings | None = None,
) -> FastAPI:
    """Build the app. `routes` maps URL path (under settings.api_prefix) to command name."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup/shutdown lifecycle."""
        setup_logging(settings.log_level, settings.log_format)
        logger.info(f"flexmap API started with {len(shell.commands)} command(s)")
        yield
        logger.info("flexmap API shutting down")

    app = FastAPI(title="flexmap API", version=__version__, lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.build_router(settings.api_prefix))
    app.include_router(commands.build_router(shell, settings.api_prefix))

    for path, command_name in routes.items():
        shell.get(command_name)  # unknown names fail at startup
        JSONHandler(
            shell, command_name, error_handler, params_builder,
        ).mount(app, f"{settings.api_prefix}{path}", DEFAULT_METHODS)

    register_error_handlers(app)
    return app
