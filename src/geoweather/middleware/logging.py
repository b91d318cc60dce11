"""
=============================================================================
ACCESS LOGGING MIDDLEWARE
=============================================================================

One line per dispatched request on the "geoweather.access" logger.

    text:  127.0.0.1 - - [18/Oct/2026:12:00:00 +0000] "GET /api/v1/geo?city=Malmo" 200 63 0.21ms
    json:  {"method": "GET", "path": "/api/v1/geo", "query": "city=Malmo", ...}

The access logger is separate from the module loggers so it can be routed
or silenced on its own:

    logging.getLogger("geoweather.access").setLevel(logging.WARNING)

=============================================================================
"""

from dataclasses import dataclass, asdict
from typing import Iterable, Optional
import json
import logging
import time

from .base import Middleware, NextHandler
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


logger = logging.getLogger("geoweather.access")

LOG_FORMATS = ("text", "json")


@dataclass
class RequestLog:
    """Structured access log entry."""

    method: str
    path: str
    query: str
    client_ip: str
    status_code: int
    content_length: int
    duration_ms: float
    timestamp: str

    def to_dict(self) -> dict:
        entry = asdict(self)
        entry["duration_ms"] = round(self.duration_ms, 2)
        return entry

    def to_text(self) -> str:
        """Apache-style access line."""
        target = f"{self.path}?{self.query}" if self.query else self.path
        return (
            f'{self.client_ip or "-"} - - [{self.timestamp}] '
            f'"{self.method} {target}" {self.status_code} '
            f'{self.content_length} {self.duration_ms:.2f}ms'
        )


class LoggingMiddleware(Middleware):
    """
    Request logging middleware. Add it first so its timing covers the
    whole dispatch.

    Args:
        log_format: "text" (Apache style) or "json".
        log_level: Level the access lines are emitted at.
        skip_paths: Exact paths that are not logged.
    """

    def __init__(
        self,
        log_format: str = "text",
        log_level: int = logging.INFO,
        skip_paths: Optional[Iterable[str]] = None,
    ):
        if log_format not in LOG_FORMATS:
            raise ValueError(f"log_format must be one of {LOG_FORMATS}, got {log_format!r}")
        self.log_format = log_format
        self.log_level = log_level
        self.skip_paths = set(skip_paths or [])

    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        start_time = time.perf_counter()

        try:
            response = next(request)
        except Exception as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                f"Request failed: {request.method} {request.path} "
                f"- {type(e).__name__}: {e} ({duration_ms:.2f}ms)"
            )
            raise

        duration_ms = (time.perf_counter() - start_time) * 1000

        if request.path in self.skip_paths:
            return response

        log_entry = RequestLog(
            method=request.method,
            path=request.path,
            query=request.query or "",
            client_ip=request.client_address[0],
            status_code=int(response.status),
            content_length=len(response.body),
            duration_ms=duration_ms,
            timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
        )

        if self.log_format == "json":
            logger.log(self.log_level, json.dumps(log_entry.to_dict()))
        else:
            logger.log(self.log_level, log_entry.to_text())

        return response
