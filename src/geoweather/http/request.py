"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Turns the raw bytes read from a connection into a structured HTTPRequest.
Only the REQUEST LINE is consumed; headers and body are ignored.

=============================================================================
WHAT WE PARSE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     RAW REQUEST BUFFER                              │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  ┌─ REQUEST LINE (parsed) ────────────────────────────────────────┐ │
    │  │                                                                 │ │
    │  │    GET /api/v1/geo?city=Malmo HTTP/1.1\r\n                     │ │
    │  │    ─┬─ ───────┬───────────── ────┬────                         │ │
    │  │     │         │                  │                              │ │
    │  │   Method   Target            Version (not validated)            │ │
    │  │               │                                                 │ │
    │  │      ┌────────┴────────┐                                        │ │
    │  │      │                 │                                        │ │
    │  │    Path              Query                                      │ │
    │  │  /api/v1/geo       city=Malmo                                   │ │
    │  │                                                                 │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ EVERYTHING ELSE (ignored) ────────────────────────────────────┐ │
    │  │    Host: localhost:8080\r\n                                     │ │
    │  │    User-Agent: curl/8.4.0\r\n                                   │ │
    │  │    \r\n                                                         │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
FAILURE RULES
=============================================================================

    "GET /x HTTP/1.1"        no CRLF             → HTTPParseError (400)
    "GET\r\n"                no space after GET  → HTTPParseError (400)
    "GET /x\r\n"             no second space     → HTTPParseError (400)
    "GET /x HTTP/1.1\r\n"    ok                  → method=GET path=/x
    "GET /x? HTTP/1.1\r\n"   ok                  → query="" (not None!)

=============================================================================
OVERLONG INPUT
=============================================================================

The parser is permissive: a method or request target longer than the
configured maximum is TRUNCATED, not rejected. The target is truncated
before the "?" split, so a very long query may lose its tail.

=============================================================================
"""

from dataclasses import dataclass
from typing import Optional


class HTTPParseError(Exception):
    """
    Raised when the request line cannot be parsed.

    Carries the HTTP status code to answer with (always 400 here, but the
    attribute keeps the error usable by generic error handling).
    """

    def __init__(self, message: str = "invalid request line", status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class HTTPRequest:
    """
    A parsed request line.

    Attributes:
        method: Request method exactly as sent ("GET", "OPTIONS", ...).
        path:   Request path without the query string.
        query:  Raw query string after "?", "" for a bare "?", or None
                when the target has no "?" at all.
        client_address: (ip, port) of the peer, for logging only.
    """

    method: str
    path: str
    query: Optional[str] = None
    client_address: tuple[str, int] = ("", 0)

    @property
    def target(self) -> str:
        """The request target as it appeared on the wire (after truncation)."""
        if self.query is None:
            return self.path
        return f"{self.path}?{self.query}"


class RequestParser:
    """
    Parses raw request bytes into HTTPRequest objects.

        Raw bytes
            │
            ▼
        1. Decode as UTF-8 (undecodable bytes are replaced)
            │
            ▼
        2. Find the first CRLF         ── missing? → HTTPParseError
            │
            ▼
        3. Split "METHOD SP TARGET SP VERSION"
            │                           ── fewer than 3 parts? → HTTPParseError
            ▼
        4. Truncate method/target to their maxima
            │
            ▼
        5. Split target on first "?" → (path, query)
            │
            ▼
        HTTPRequest
    """

    def __init__(self, max_method_length: int = 15, max_target_length: int = 255):
        """
        Args:
            max_method_length: Longest method kept; longer ones are cut.
            max_target_length: Longest request target (path + query) kept.
        """
        self.max_method_length = max_method_length
        self.max_target_length = max_target_length

    def parse(
        self,
        data: bytes,
        client_address: tuple[str, int] = ("", 0),
    ) -> HTTPRequest:
        """
        Parse the request line of a raw request.

        Args:
            data: Raw bytes read from the connection.
            client_address: Peer (ip, port) for logging.

        Returns:
            Parsed HTTPRequest.

        Raises:
            HTTPParseError: If the request line is malformed.
        """
        text = data.decode("utf-8", errors="replace")

        line_end = text.find("\r\n")
        if line_end == -1:
            raise HTTPParseError()

        # "GET /x HTTP/1.1".split(" ", 2) → ["GET", "/x", "HTTP/1.1"]
        # The version token is whatever follows the second space.
        parts = text[:line_end].split(" ", 2)
        if len(parts) < 3:
            raise HTTPParseError()

        method = parts[0][:self.max_method_length]
        target = parts[1][:self.max_target_length]

        path, sep, query = target.partition("?")
        return HTTPRequest(
            method=method,
            path=path,
            query=query if sep else None,
            client_address=client_address,
        )


def parse_request(
    data: bytes,
    client_address: tuple[str, int] = ("", 0),
    max_method_length: int = 15,
    max_target_length: int = 255,
) -> HTTPRequest:
    """
    Convenience function to parse a request in one call.

    Use RequestParser directly when parsing many requests with the same
    limits.
    """
    parser = RequestParser(
        max_method_length=max_method_length,
        max_target_length=max_target_length,
    )
    return parser.parse(data, client_address)
