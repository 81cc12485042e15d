"""Middleware for the Hiring Pipeline API."""

from .auth import AuthMiddleware
from .error_handler import setup_exception_handlers
from .logging import LoggingMiddleware, configure_logging

__all__ = ["AuthMiddleware", "setup_exception_handlers", "LoggingMiddleware", "configure_logging"]
