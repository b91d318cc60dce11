"""
=============================================================================
CLIENT CONNECTION
=============================================================================

Wraps one accepted client socket for exactly one request/response.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     CONNECTION LIFECYCLE                            │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    NEW ──► READING ──► PROCESSING ──► WRITING ──► CLOSED            │
    │               │                                                      │
    │               └── zero bytes / read failure ──► DROPPED             │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Only the request line is needed, so reading stops at the first CRLF.
Whatever arrives after it (headers, body) is never looked at.

=============================================================================
"""

import socket
import time
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional
import uuid


logger = logging.getLogger(__name__)

# Total time close() spends discarding unread client data.
DRAIN_TIMEOUT = 0.5

# Most unread bytes close() will discard.
DRAIN_MAX_BYTES = 64 * 1024


class ConnectionState(Enum):
    """Connection lifecycle states."""
    NEW = "new"                # Just accepted
    READING = "reading"        # Reading the request
    PROCESSING = "processing"  # Request parsed, dispatching
    WRITING = "writing"        # Sending the response
    DROPPED = "dropped"        # Nothing readable arrived, nothing was sent
    CLOSED = "closed"          # Socket released


@dataclass
class Connection:
    """
    A client connection.

    Usage:
        with Connection(client_socket, address, timeout=30.0) as conn:
            data = conn.read_request()
            conn.send_response(response_bytes)

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short identifier used in log lines.
        state: Current connection state.
    """

    socket: socket.socket
    address: tuple[str, int]

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)

    buffer_size: int = 8192
    timeout: Optional[float] = 30.0

    def __post_init__(self):
        self.socket.setblocking(True)
        if self.timeout:
            self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def age(self) -> float:
        return time.time() - self.created_at

    def read_request(self) -> bytes:
        """
        Read up to the end of the request line.

        Stops at the first CRLF, at EOF, after buffer_size bytes or once
        `timeout` seconds have passed in total, and returns whatever was
        read. An empty result means the client sent nothing usable.

            b"GET /api/v1/geo?city=Malmo HTTP/1.1\\r\\nHost: x\\r\\n..."
                                                  ▲
                                            stop here (or later)
        """
        self.state = ConnectionState.READING
        buffer = b""
        deadline = time.monotonic() + self.timeout if self.timeout else None

        try:
            while b"\r\n" not in buffer and len(buffer) < self.buffer_size:
                if deadline is not None:
                    remaining = deadline - time.monotonic()
                    if remaining <= 0:
                        logger.debug(f"[{self.id}] Read deadline passed after {len(buffer)} bytes")
                        break
                    self.socket.settimeout(remaining)
                chunk = self.socket.recv(self.buffer_size - len(buffer))
                if not chunk:
                    break
                buffer += chunk
        except socket.timeout:
            logger.debug(f"[{self.id}] Read timed out after {len(buffer)} bytes")
        except (ConnectionResetError, BrokenPipeError) as e:
            logger.debug(f"[{self.id}] Read failed: {e}")

        return buffer

    def send_response(self, data: bytes) -> None:
        """Send the full response with sendall(). Socket errors propagate."""
        self.state = ConnectionState.WRITING
        self.socket.sendall(data)

    def close(self):
        """
        Close gracefully. Safe to call twice.

        1. shutdown(SHUT_WR)   send FIN; the client sees end of response
        2. drain               discard unread headers/body so close()
                               does not turn into a RST that could
                               destroy the response in flight; bounded
                               by DRAIN_TIMEOUT overall and
                               DRAIN_MAX_BYTES
        3. close()             release the descriptor
        """
        if self.state == ConnectionState.CLOSED:
            return

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # peer already gone

        self._drain()

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age * 1000:.2f}ms")

    def _drain(self):
        deadline = time.monotonic() + DRAIN_TIMEOUT
        drained = 0
        try:
            while drained < DRAIN_MAX_BYTES:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                self.socket.settimeout(remaining)
                chunk = self.socket.recv(1024)
                if not chunk:
                    break
                drained += len(chunk)
        except OSError:
            pass  # includes socket.timeout
        if drained:
            logger.debug(f"[{self.id}] Discarded {drained} unread bytes")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
