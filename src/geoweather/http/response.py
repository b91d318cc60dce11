"""
=============================================================================
HTTP RESPONSE WRITER
=============================================================================

Builds HTTP/1.1 responses and serializes them to wire bytes.

=============================================================================
WIRE FORMAT
=============================================================================

Every response uses the same fixed header block, in this order:

    ┌─────────────────────────────────────────────────────────────────────┐
    │  HTTP/1.1 200 OK\r\n                          ← status line         │
    │  Content-Type: application/json\r\n                                 │
    │  Content-Length: 60\r\n                       ← always len(body)    │
    │  Access-Control-Allow-Origin: *\r\n           ┐                     │
    │  Access-Control-Allow-Methods: GET, OPTIONS\r\n├ CORS, every reply  │
    │  Access-Control-Allow-Headers: Content-Type\r\n┘                    │
    │  Connection: close\r\n                        ← one request/conn.   │
    │  \r\n                                                               │
    │  {"city":"Malmo","country":"SE","lat":55.6050,"lon":13.0038}       │
    └─────────────────────────────────────────────────────────────────────┘

The whole response is materialized before it is sent. There is no
chunking and no streaming; an empty body simply has Content-Length: 0.

=============================================================================
ERROR PAYLOAD
=============================================================================

All errors share one JSON shape, rendered without whitespace:

    {"error":{"code":404,"message":"city not found"}}

json_error() builds a new string on every call, so concurrent or nested
error formatting can never clobber another caller's message.

=============================================================================
"""

from dataclasses import dataclass
from typing import Any, Union
import json

from .status_codes import HTTPStatus


JSON_CONTENT_TYPE = "application/json"
TEXT_CONTENT_TYPE = "text/plain"

# Sent on every response, including errors and preflight answers.
CORS_HEADERS = (
    ("Access-Control-Allow-Origin", "*"),
    ("Access-Control-Allow-Methods", "GET, OPTIONS"),
    ("Access-Control-Allow-Headers", "Content-Type"),
)


@dataclass
class HTTPResponse:
    """
    A response ready to be serialized.

        Handler returns          to_bytes()              Collaborator
        HTTPResponse    ─────►   serializes    ─────►    sends bytes
    """

    status: HTTPStatus = HTTPStatus.OK
    content_type: str = JSON_CONTENT_TYPE
    body: bytes = b""
    version: str = "HTTP/1.1"

    def __post_init__(self):
        # HTTPResponse(status=404) works like HTTPResponse(status=HTTPStatus.NOT_FOUND)
        self.status = HTTPStatus(self.status)

    @property
    def status_line(self) -> str:
        """Example: "HTTP/1.1 200 OK"."""
        return f"{self.version} {int(self.status)} {self.status.phrase}"

    @property
    def headers(self) -> list[tuple[str, str]]:
        """
        The complete header block, in wire order.

        Content-Length is derived from the body here and nowhere else, so it
        cannot drift from the bytes actually sent.
        """
        return [
            ("Content-Type", self.content_type),
            ("Content-Length", str(len(self.body))),
            *CORS_HEADERS,
            ("Connection", "close"),
        ]

    def to_bytes(self) -> bytes:
        """
        Serialize status line, headers, blank line and body.

        Returns:
            Complete HTTP response bytes, ready for sendall().
        """
        lines = [self.status_line]
        for name, value in self.headers:
            lines.append(f"{name}: {value}")
        lines.append("")
        header_bytes = "\r\n".join(lines).encode("utf-8") + b"\r\n"
        return header_bytes + self.body


class ResponseBuilder:
    """
    Fluent builder for HTTPResponse.

        response = (ResponseBuilder()
            .status(HTTPStatus.NOT_FOUND)
            .json({"error": {"code": 404, "message": "not found"}})
            .build())

    Every method except build() and to_bytes() returns self.
    """

    def __init__(self):
        self._status = HTTPStatus.OK
        self._content_type = JSON_CONTENT_TYPE
        self._body = b""

    def status(self, status: HTTPStatus) -> "ResponseBuilder":
        """Set the status code."""
        self._status = HTTPStatus(status)
        return self

    def content_type(self, content_type: str) -> "ResponseBuilder":
        """Set the Content-Type header value."""
        self._content_type = content_type
        return self

    def body(self, body: Union[str, bytes]) -> "ResponseBuilder":
        """Set a raw body; strings are encoded as UTF-8."""
        self._body = body.encode("utf-8") if isinstance(body, str) else body
        return self

    def json(self, data: Any) -> "ResponseBuilder":
        """
        Serialize data as compact JSON.

        Uses separators=(",", ":") so the output has no whitespace, matching
        the wire format clients already parse.
        """
        self._body = json.dumps(data, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
        self._content_type = JSON_CONTENT_TYPE
        return self

    def raw_json(self, text: str) -> "ResponseBuilder":
        """
        Use an already-rendered JSON document as the body.

        Needed where numbers must keep a fixed number of decimals
        (json.dumps would print 55.605 for 55.6050).
        """
        self._body = text.encode("utf-8")
        self._content_type = JSON_CONTENT_TYPE
        return self

    def build(self) -> HTTPResponse:
        return HTTPResponse(
            status=self._status,
            content_type=self._content_type,
            body=self._body,
        )

    def to_bytes(self) -> bytes:
        """Build and serialize in one step."""
        return self.build().to_bytes()


# =============================================================================
# ERRORS
# =============================================================================

def json_error(code: int, message: str) -> str:
    """
    Render the structured error payload.

        >>> json_error(400, "missing query param: city")
        '{"error":{"code":400,"message":"missing query param: city"}}'
    """
    return json.dumps(
        {"error": {"code": int(code), "message": message}},
        separators=(",", ":"),
        ensure_ascii=False,
    )


class APIError(Exception):
    """
    Raised by handlers to answer with a structured error.

    The router catches it and turns it into a response, so handlers can
    bail out from any depth with a single raise:

        if city is None:
            raise APIError(HTTPStatus.BAD_REQUEST, "missing query param: city")
    """

    def __init__(self, status: HTTPStatus, message: str):
        super().__init__(message)
        self.status = HTTPStatus(status)
        self.message = message

    def to_response(self) -> HTTPResponse:
        return error_response(self.status, self.message)


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def error_response(status: HTTPStatus, message: str) -> HTTPResponse:
    """Build an error response whose body code matches the status line."""
    status = HTTPStatus(status)
    return ResponseBuilder().status(status).raw_json(json_error(status, message)).build()


def json_response(body: Union[str, dict], status: HTTPStatus = HTTPStatus.OK) -> HTTPResponse:
    """
    Build a JSON response.

    Args:
        body: A pre-rendered JSON string, or a dict to serialize compactly.
        status: Status code (200 by default).
    """
    builder = ResponseBuilder().status(status)
    if isinstance(body, str):
        builder.raw_json(body)
    else:
        builder.json(body)
    return builder.build()


def no_content() -> HTTPResponse:
    """204 No Content with an empty text/plain body (CORS preflight answer)."""
    return (ResponseBuilder()
        .status(HTTPStatus.NO_CONTENT)
        .content_type(TEXT_CONTENT_TYPE)
        .build())
