"""
=============================================================================
CORE MODULE - TCP layer
=============================================================================

    SocketServer   binds, listens, accepts one client at a time
    Connection     reads the request line, writes the response, closes

Nothing here knows about HTTP. The server hands each Connection's
read_request/send_response to GeoWeatherServer.exchange().

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState


__all__ = [
    "SocketServer",
    "Connection",
    "ConnectionState",
]
