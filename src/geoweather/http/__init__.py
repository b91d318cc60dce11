"""
=============================================================================
HTTP PROTOCOL LAYER
=============================================================================

Everything between raw request bytes and raw response bytes.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    HTTP Request-Response Cycle                       │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   b"GET /api/v1/geo?city=Malmo HTTP/1.1\r\n..."                      │
    │        │                                                             │
    │        ▼                                                             │
    │   RequestParser (request.py)   → HTTPRequest(method, path, query)   │
    │        │                                                             │
    │        ▼                                                             │
    │   Router (router.py)           → OPTIONS / 405 / prefix table / 404 │
    │        │                                                             │
    │        ▼                                                             │
    │   Handler + codec (codec.py)   → parse_query_param("city")          │
    │        │                                                             │
    │        ▼                                                             │
    │   HTTPResponse (response.py)   → b"HTTP/1.1 200 OK\r\n..."          │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .codec import decode_percent_encoded, iter_query_pairs, parse_query_param
from .request import HTTPRequest, RequestParser, HTTPParseError, parse_request
from .response import (
    HTTPResponse,
    ResponseBuilder,
    APIError,
    json_error,
    error_response,
    json_response,
    no_content,
)
from .router import Router, Route
from .status_codes import HTTPStatus

__all__ = [
    # Codec
    "decode_percent_encoded",
    "iter_query_pairs",
    "parse_query_param",

    # Request parsing
    "HTTPRequest",
    "RequestParser",
    "HTTPParseError",
    "parse_request",

    # Response writing
    "HTTPResponse",
    "ResponseBuilder",
    "APIError",
    "json_error",
    "error_response",
    "json_response",
    "no_content",

    # Routing
    "Router",
    "Route",

    # Status codes
    "HTTPStatus",
]
