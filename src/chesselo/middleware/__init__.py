# src/chesselo/middleware/__init__.py

"""Middleware components for the chesselo API."""

from .logging import RequestLoggingMiddleware

__all__ = ["RequestLoggingMiddleware"]
