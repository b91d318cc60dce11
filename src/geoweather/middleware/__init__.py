"""
=============================================================================
MIDDLEWARE MODULE
=============================================================================

Chain of responsibility around the router:

    pipeline = MiddlewarePipeline().add(LoggingMiddleware())
    handler = pipeline.wrap(router.handle)

=============================================================================
"""

from .base import Middleware, MiddlewarePipeline, NextHandler
from .logging import LoggingMiddleware, RequestLog

__all__ = [
    "Middleware",
    "MiddlewarePipeline",
    "NextHandler",
    "LoggingMiddleware",
    "RequestLog",
]
