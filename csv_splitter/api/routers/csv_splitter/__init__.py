"""
CSV splitter router package.

Exports the router for chunk split, listing, viewing and download endpoints.
"""

from .csv_splitter_router import router

__all__ = ["router"]
