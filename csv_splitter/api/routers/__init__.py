"""API routers."""

from .csv_splitter import router as csv_splitter_router
from .health import router as health_router

__all__ = [
    "csv_splitter_router",
    "health_router",
]
