"""
=============================================================================
MIDDLEWARE BASE
=============================================================================

Middleware wraps the router so cross-cutting work (access logging) runs
around every dispatched request without the handlers knowing about it.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     REQUEST / RESPONSE FLOW                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   HTTPRequest                                                        │
    │        │                                                             │
    │        ▼                                                             │
    │   ┌──────────────────────────────────────────────┐                   │
    │   │  LoggingMiddleware     (start timer)         │                   │
    │   │   ┌──────────────────────────────────────┐   │                   │
    │   │   │  router.handle(request)              │   │                   │
    │   │   └──────────────────────────────────────┘   │                   │
    │   │                        (log status, size)    │                   │
    │   └──────────────────────────────────────────────┘                   │
    │        │                                                             │
    │        ▼                                                             │
    │   HTTPResponse                                                       │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

A middleware must not change the status, body or header block of the
response it receives from the inner handler.

=============================================================================
"""

from abc import ABC, abstractmethod
from typing import Callable, Iterator, List
import logging

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


logger = logging.getLogger(__name__)


# The next middleware or the final handler in the chain.
NextHandler = Callable[[HTTPRequest], HTTPResponse]


class Middleware(ABC):
    """
    Abstract base class for middleware.

        class Timing(Middleware):
            def __call__(self, request, next):
                started = time.monotonic()
                response = next(request)
                record(time.monotonic() - started)
                return response
    """

    @abstractmethod
    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        """Process the request; call next(request) to continue the chain."""

    @property
    def name(self) -> str:
        return self.__class__.__name__


class MiddlewarePipeline:
    """
    Chains middleware around a final handler.

    First added is outermost:

        pipeline = MiddlewarePipeline()
        pipeline.add(LoggingMiddleware())
        handler = pipeline.wrap(router.handle)

    An empty pipeline returns the handler unchanged.
    """

    def __init__(self):
        self._middleware: List[Middleware] = []

    def add(self, middleware: Middleware) -> "MiddlewarePipeline":
        self._middleware.append(middleware)
        logger.debug(f"Added middleware: {middleware.name}")
        return self

    def use(self, *middleware: Middleware) -> "MiddlewarePipeline":
        for mw in middleware:
            self.add(mw)
        return self

    def wrap(self, handler: NextHandler) -> NextHandler:
        """
        Wrap a handler with every middleware in the pipeline.

        Given [MW1, MW2] the result calls MW1 → MW2 → handler, so we wrap
        in reverse.
        """
        current = handler
        for middleware in reversed(self._middleware):
            current = self._create_wrapped_handler(middleware, current)
        return current

    def _create_wrapped_handler(
        self,
        middleware: Middleware,
        next_handler: NextHandler
    ) -> NextHandler:
        def wrapped(request: HTTPRequest) -> HTTPResponse:
            return middleware(request, next_handler)

        return wrapped

    def __len__(self) -> int:
        return len(self._middleware)

    def __iter__(self) -> Iterator[Middleware]:
        return iter(self._middleware)
