"""
FastAPI application with assembled routers.

Initializes FastAPI app with the knowledge base and health routers and
configures the uvicorn server.

Dependencies: fastapi, knowledge_backend.api.routers, uvicorn
System role: API entry point with router assembly and server launch
"""

from contextlib import asynccontextmanager
import logging

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from knowledge_backend import __version__
from knowledge_backend.api.deps.dependencies import get_service_cache
from knowledge_backend.core.exceptions import NotConfiguredError
from knowledge_backend.observability import configure_logging
from knowledge_backend.observability.middleware import (
    CorrelationMiddleware,
    RequestLoggingMiddleware,
)
from .routers import health_router, knowledge_base_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Pre-warms the service cache on startup. Missing embedding or index
    credentials and invalid backend settings are logged, not fatal, so
    /kb/diag stays reachable.
    """
    cache = get_service_cache()
    configure_logging(cache.settings.log_level)

    # Startup
    logger.info("Pre-warming service cache...")
    _ = cache.blob_client
    _ = cache.crawler
    try:
        _ = cache.pipeline
        _ = cache.retriever
        logger.info("Service cache pre-warmed")
    except NotConfiguredError as e:
        logger.warning(f"Indexing services unavailable until configured: {e}")
    except ValueError as e:
        logger.error(f"Indexing services misconfigured: {e}")

    yield

    # Shutdown
    cache.clear()
    logger.info("Service cache cleared")


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application with routers.

    Returns:
        FastAPI: Configured application instance with all routers registered
    """
    app = FastAPI(
        title="Knowledge Base API",
        description="Ingestion and scoped vector retrieval for the knowledge base",
        version=__version__,
        lifespan=lifespan,
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add observability middleware; the last added runs first
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CorrelationMiddleware)

    # Register all routers with /api/v1 prefix for versioning
    app.include_router(health_router, prefix="/api/v1")
    app.include_router(knowledge_base_router, prefix="/api/v1")

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "knowledge_backend.api.main:app",
        host="0.0.0.0",
        port=8000,
    )
