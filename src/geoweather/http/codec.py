"""
=============================================================================
QUERY STRING CODEC
=============================================================================

Percent-decoding and query-parameter extraction for request targets.

=============================================================================
QUERY STRING ANATOMY
=============================================================================

    /api/v1/weather?lat=55.6050&lon=13.0038
                    ─────┬───── ─────┬─────
                         │           │
                       pair        pair
                    key = value   key = value

    - Pairs are separated by "&"
    - Each pair is split on the FIRST "=" (values may contain "=")
    - Keys are compared exactly (case-sensitive)
    - Values are percent-decoded only when they are looked up

=============================================================================
PERCENT-ENCODING (RFC 3986 + HTML forms)
=============================================================================

    ┌──────────────┬──────────────┬────────────────────────────────────┐
    │  Encoded     │  Decoded     │  Rule                              │
    ├──────────────┼──────────────┼────────────────────────────────────┤
    │  %20         │  " "         │  %XX → byte 0xXX                   │
    │  +           │  " "         │  form encoding: plus is a space    │
    │  %C3%B6      │  "ö"         │  bytes are interpreted as UTF-8    │
    │  %zz         │  "%zz"       │  malformed: copied through as-is   │
    │  %4          │  "%4"        │  truncated: copied through as-is   │
    └──────────────┴──────────────┴────────────────────────────────────┘

Decoding never fails. A client that sends a broken escape gets its text
back literally, and the handler decides whether the value is acceptable.

=============================================================================
"""

from typing import Iterator, Optional, Tuple
from urllib.parse import unquote_plus


def decode_percent_encoded(value: str) -> str:
    """
    Decode a percent-encoded query component.

    "%XX" becomes the byte 0xXX, "+" becomes a space, and anything else
    (including malformed escapes) passes through unchanged. Decoded bytes
    are read as UTF-8; invalid sequences are replaced rather than raised.

    Example:
        >>> decode_percent_encoded("Malmo%20City")
        'Malmo City'
        >>> decode_percent_encoded("100%+sure")
        '100% sure'
    """
    return unquote_plus(value, encoding="utf-8", errors="replace")


def iter_query_pairs(query: Optional[str]) -> Iterator[Tuple[str, str]]:
    """
    Yield the raw (key, value) pairs of a query string in order.

    Pairs without "=" carry no value and are skipped. Nothing is decoded
    here; see parse_query_param().
    """
    if not query:
        return
    for pair in query.split("&"):
        key, sep, value = pair.partition("=")
        if sep:
            yield key, value


def parse_query_param(
    query: Optional[str],
    key: str,
    max_length: Optional[int] = None,
) -> Optional[str]:
    """
    Look up a query parameter by exact key.

    Args:
        query: Raw query string (the part after "?"), or None.
        key: Parameter name, compared case-sensitively.
        max_length: If given, the raw value is truncated to this many
                    characters before decoding. Overlong values are
                    shortened, never rejected; callers that want to
                    reject long input must check the result themselves.

    Returns:
        The decoded value of the FIRST matching pair, or None if the key is
        absent or the query is empty. Duplicate keys are not merged.
    """
    for name, raw_value in iter_query_pairs(query):
        if name != key:
            continue
        if max_length is not None:
            raw_value = raw_value[:max_length]
        return decode_percent_encoded(raw_value)
    return None
