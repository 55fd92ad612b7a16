"""
Main Application Entry Point.

This module initializes the FastAPI application, configures middleware (CORS),
registers exception handlers and includes all API routers.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from venture_ai import __version__
from venture_ai.core.logging_config import get_logger, setup_logging
from venture_ai.core.monitoring import initialize_logfire

from .api.v1 import conversations, health, projects
from .core import constant
from .core.config import settings
from .core.database import engine, get_repositories, init_db
from .exception_handlers import setup_exception_handlers
from .services.wiring import build_server_components

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan events.

    Startup configures logging, creates the database tables and wires the
    conversation service onto ``app.state``. Shutdown closes the research
    client and disposes of the database engine.
    """
    setup_logging(
        log_level=settings.log_level,
        log_format=settings.log_format,
        enable_file=settings.enable_file_logging,
    )
    logger.info("Starting up Venture-AI Server...")
    try:
        await init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}", exc_info=True)
        raise

    components = build_server_components(settings, get_repositories())
    app.state.conversation_service = components.service
    initialize_logfire(app)

    yield

    logger.info("Shutting down Venture-AI Server...")
    await components.aclose()
    await engine.dispose()


app = FastAPI(
    title=constant.PROJECT_NAME,
    description="""
    Venture-AI Server API

    This API exposes a stateful, tool-calling conversational agent that helps a team
    plan, research, launch and manage business projects.
    """,
    version=__version__,
    openapi_url=f"{constant.API_V1_STR}/openapi.json",
    docs_url=f"{constant.API_V1_STR}/docs",
    redoc_url=f"{constant.API_V1_STR}/redoc",
    lifespan=lifespan,
)

cors = settings.cors
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors.origins,
    allow_credentials=cors.allow_credentials,
    allow_methods=cors.allow_methods,
    allow_headers=cors.allow_headers,
)

setup_exception_handlers(app)

app.include_router(health.router, tags=["health"])
app.include_router(conversations.router, prefix=f"{constant.API_V1_STR}/conversations", tags=["conversations"])
app.include_router(projects.router, prefix=f"{constant.API_V1_STR}/projects", tags=["projects"])
