"""
FastAPI application with assembled routers.

Initializes FastAPI app with all API routers and configures uvicorn server.

Dependencies: fastapi, csv_splitter.api.routers, uvicorn
System role: API entry point with router assembly and server launch
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from csv_splitter.boundary.storage.chunk_store import ChunkStore
from csv_splitter.configs import get_settings
from csv_splitter.observability.logger import configure_logging
from csv_splitter.observability.middleware import CorrelationMiddleware, RequestLoggingMiddleware
from .routers import (
    csv_splitter_router,
    health_router,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Handles startup and shutdown events.
    """
    logger = logging.getLogger("uvicorn")
    settings = get_settings()

    # Startup
    settings.splitter.chunks_dir.mkdir(parents=True, exist_ok=True)
    removed = ChunkStore(settings.splitter.chunks_dir).cleanup_expired(
        settings.splitter.retention_hours
    )
    logger.info(
        "Chunk storage ready at %s (%d expired chunks removed)",
        settings.splitter.chunks_dir,
        removed,
    )

    yield

    # Shutdown
    logger.info("CSV splitter shutting down")


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application with routers.

    Returns:
        FastAPI: Configured application instance with all routers registered
    """
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="CSV Splitter API",
        description="Split large CSV files into header-preserving chunks",
        version="0.1.0",
        debug=settings.debug,
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

    # Add observability middleware
    if settings.observability.log_requests:
        app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CorrelationMiddleware,
        header_name=settings.observability.correlation_header,
    )

    # Register all routers with /api/v1 prefix for versioning
    app.include_router(health_router, prefix="/api/v1")
    app.include_router(csv_splitter_router, prefix="/api/v1")

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "csv_splitter.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=get_settings().debug,
    )
