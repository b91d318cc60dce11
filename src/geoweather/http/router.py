"""
=============================================================================
ROUTE DISPATCHER
=============================================================================

Maps (method, path) to a handler.

=============================================================================
DISPATCH ORDER
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        DISPATCH FLOW                                │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   method == OPTIONS ?  ── yes ──▶  204, empty body (any path)       │
    │        │ no                                                          │
    │        ▼                                                             │
    │   method == GET ?      ── no ───▶  405 method not allowed           │
    │        │ yes                                                         │
    │        ▼                                                             │
    │   ┌─────────────────────────────────────────────────────────────┐   │
    │   │  ROUTE TABLE (tested in order, prefix match)                │   │
    │   │                                                             │   │
    │   │    /api/v1/geo      → GeoHandler                            │   │
    │   │    /api/v1/weather  → WeatherHandler                        │   │
    │   └─────────────────────────────────────────────────────────────┘   │
    │        │ no match                                                    │
    │        ▼                                                             │
    │   404 not found                                                      │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PREFIX MATCHING
=============================================================================

Routes match when the path STARTS WITH the route prefix:

    /api/v1/geo          → geo
    /api/v1/geo/         → geo
    /api/v1/geography    → geo   (!)
    /api/v1              → 404

Existing clients depend on this, so it stays.

=============================================================================
"""

from dataclasses import dataclass
from typing import Callable, List, Optional
import logging

from .request import HTTPRequest
from .response import APIError, HTTPResponse, error_response, no_content
from .status_codes import HTTPStatus


logger = logging.getLogger(__name__)

# A handler takes a request and returns a response (or raises APIError)
Handler = Callable[[HTTPRequest], HTTPResponse]


@dataclass(frozen=True)
class Route:
    """A path prefix bound to a handler."""

    prefix: str
    handler: Handler
    name: Optional[str] = None

    def matches(self, path: str) -> bool:
        return path.startswith(self.prefix)


class Router:
    """
    Ordered prefix-match router.

        router = Router()
        router.add_route("/api/v1/geo", GeoHandler(), name="geo")
        router.add_route("/api/v1/weather", WeatherHandler(), name="weather")

        response = router.handle(request)

    First registered, first matched.
    """

    def __init__(self):
        self._routes: List[Route] = []

    def add_route(self, prefix: str, handler: Handler, name: Optional[str] = None) -> Route:
        """Append a route to the end of the table."""
        route = Route(prefix=prefix, handler=handler, name=name)
        self._routes.append(route)
        return route

    def route(self, prefix: str, name: Optional[str] = None) -> Callable[[Handler], Handler]:
        """
        Decorator form of add_route().

            @router.route("/api/v1/ping")
            def ping(request):
                return json_response({"ok": True})
        """
        def decorator(handler: Handler) -> Handler:
            self.add_route(prefix, handler, name)
            return handler
        return decorator

    def match(self, path: str) -> Optional[Route]:
        """Return the first route whose prefix starts `path`, or None."""
        for route in self._routes:
            if route.matches(path):
                return route
        return None

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """
        Dispatch a request.

        APIError raised by a handler becomes its structured error response.
        Other exceptions propagate to the caller.
        """
        if request.method == "OPTIONS":
            return no_content()

        if request.method != "GET":
            return error_response(HTTPStatus.METHOD_NOT_ALLOWED, "method not allowed")

        route = self.match(request.path)
        if route is None:
            return error_response(HTTPStatus.NOT_FOUND, "not found")

        try:
            return route.handler(request)
        except APIError as e:
            logger.debug(f"{route.name or route.prefix}: {int(e.status)} {e.message}")
            return e.to_response()

    def routes(self) -> List[Route]:
        return list(self._routes)
