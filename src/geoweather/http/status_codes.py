"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The status codes this server can answer with, and their reason phrases.

    ┌────────┬──────────────────────────┬────────────────────────────────┐
    │  Code  │  Phrase                  │  When                          │
    ├────────┼──────────────────────────┼────────────────────────────────┤
    │  200   │  OK                      │  Successful lookup             │
    │  204   │  No Content              │  OPTIONS (CORS preflight)      │
    │  400   │  Bad Request             │  Bad/missing params, bad line  │
    │  404   │  Not Found               │  Unknown city or route         │
    │  405   │  Method Not Allowed      │  Anything but GET/OPTIONS      │
    │  500   │  Internal Server Error   │  Unexpected handler failure    │
    └────────┴──────────────────────────┴────────────────────────────────┘

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes with reason phrases.

    Being an IntEnum, members compare equal to plain integers:

        >>> HTTPStatus.NOT_FOUND == 404
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not Found'
    """

    OK = 200                       # Successful lookup
    NO_CONTENT = 204               # Preflight answer, empty body

    BAD_REQUEST = 400              # Client input or framing error
    NOT_FOUND = 404                # Unknown city or unmatched route
    METHOD_NOT_ALLOWED = 405       # Only GET and OPTIONS are served

    INTERNAL_SERVER_ERROR = 500    # Handler raised something unexpected

    @property
    def phrase(self) -> str:
        """
        Reason phrase for the status line.

            HTTP/1.1 404 Not Found
                     ─── ─────────
                      │      └── phrase
                      └───────── code
        """
        return _STATUS_PHRASES[self]

    @property
    def is_error(self) -> bool:
        """True for 4xx and 5xx codes."""
        return self >= 400


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.NO_CONTENT: "No Content",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.METHOD_NOT_ALLOWED: "Method Not Allowed",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
}
