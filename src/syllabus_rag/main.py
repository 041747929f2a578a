"""
Application Entry Point

This module defines the FastAPI application instance, registers all routers,
configures error handling and logging, and provides a test-friendly
application factory.

Design Goals
------------
- Deterministic startup
- Centralized router registration
- Domain errors rendered as precise JSON responses
- Global exception safety net
- Test-friendly via create_app()
"""

from __future__ import annotations

import contextlib
import logging
from typing import AsyncIterator

from fastapi import FastAPI

from .config import settings
from .core.errors import (
    SyllabusRAGError,
    service_error_handler,
    unhandled_exception_handler,
)

from .api import (
    content_routes,
    health_routes,
    rag_routes,
    syllabus_routes,
)


logger = logging.getLogger("srag.app")


def _configure_logging() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)-8s %(name)s - %(message)s",
    )


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    logger.info("Starting syllabus-rag-server")

    if settings.embeddings_enabled:
        logger.info("Embeddings enabled (model=%s)", settings.embedding_model)
    else:
        logger.warning(
            "OPENAI_API_KEY not set: semantic search disabled, lexical search only"
        )

    if settings.data_root_path:
        logger.info("Persisting syllabus and content under %s", settings.data_root_path)

    yield

    logger.info("Shutting down syllabus-rag-server")


# ---------------------------------------------------------------------
# Application Factory (Test-Friendly)
# ---------------------------------------------------------------------

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns
    -------
    FastAPI
        Fully configured FastAPI application.
    """
    _configure_logging()

    app = FastAPI(
        title="syllabus-rag-server",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # --------------------------------------------------------------
    # Error Handling
    # --------------------------------------------------------------

    app.add_exception_handler(SyllabusRAGError, service_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # --------------------------------------------------------------
    # Router Registration
    # --------------------------------------------------------------

    app.include_router(health_routes.router)
    app.include_router(rag_routes.router)
    app.include_router(content_routes.router)
    app.include_router(syllabus_routes.router)

    return app


# ---------------------------------------------------------------------
# Default Application Instance (for Uvicorn/Gunicorn)
# ---------------------------------------------------------------------

app = create_app()
