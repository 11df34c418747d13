"""Structured logging setup and request tracking."""

from tbsa.core.logging.middleware import RequestLoggingMiddleware, get_client_ip
from tbsa.core.logging.setup import configure_logging


__all__ = [
    "RequestLoggingMiddleware",
    "configure_logging",
    "get_client_ip",
]
