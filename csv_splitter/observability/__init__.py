"""
Observability module.

Provides logging configuration, correlation ID tracking and request
middleware.
"""

from csv_splitter.observability.correlation import get_correlation_id, set_correlation_id
from csv_splitter.observability.logger import configure_logging, get_logger

__all__ = ["configure_logging", "get_correlation_id", "get_logger", "set_correlation_id"]
