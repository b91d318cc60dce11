"""
pytest configuration and fixtures.
"""

import socket
import threading
import time
from datetime import datetime, timezone
from typing import Generator, Optional
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from geoweather import GeoWeatherServer, ServerConfig


FIXED_MOMENT = datetime(2026, 10, 18, 12, 30, 45, tzinfo=timezone.utc)


@pytest.fixture
def geo_request() -> bytes:
    """Raw geo lookup request."""
    return (
        b"GET /api/v1/geo?city=Malmo HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"User-Agent: pytest\r\n"
        b"\r\n"
    )


@pytest.fixture
def weather_request() -> bytes:
    """Raw weather lookup request at Malmo's coordinates."""
    return (
        b"GET /api/v1/weather?lat=55.6050&lon=13.0038 HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"\r\n"
    )


@pytest.fixture
def options_request() -> bytes:
    """Raw CORS preflight request."""
    return (
        b"OPTIONS /anything HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"Access-Control-Request-Method: GET\r\n"
        b"\r\n"
    )


@pytest.fixture
def fixed_clock():
    """Clock that always returns FIXED_MOMENT."""
    return lambda: FIXED_MOMENT


@pytest.fixture
def config() -> ServerConfig:
    """Default test server configuration."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        timeout=5.0,
        log_level="WARNING",
    )


@pytest.fixture
def server(config: ServerConfig, fixed_clock) -> GeoWeatherServer:
    """Server with the default dataset and a pinned clock (no socket)."""
    return GeoWeatherServer(config, clock=fixed_clock)


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


class TestServer:
    """Test server helper that runs in a background thread."""

    __test__ = False  # not a test class

    def __init__(self, server: GeoWeatherServer, port: int):
        self.server = server
        self.port = port
        self._thread: Optional[threading.Thread] = None

    def start(self):
        """Start server in background thread."""
        self._thread = threading.Thread(
            target=self.server.run,
            kwargs={"port": self.port},
            daemon=True
        )
        self._thread.start()

        if not self.server.socket_server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def request(self, raw: bytes, timeout: float = 5.0) -> bytes:
        """Send raw bytes and read until the server closes the connection."""
        with socket.create_connection(("127.0.0.1", self.port), timeout=timeout) as s:
            if raw:
                s.sendall(raw)
            s.shutdown(socket.SHUT_WR)
            chunks = []
            while True:
                chunk = s.recv(4096)
                if not chunk:
                    break
                chunks.append(chunk)
        return b"".join(chunks)

    def stop(self):
        """Stop the server."""
        self.server.shutdown()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)


@pytest.fixture
def test_server(free_port: int, fixed_clock) -> Generator[TestServer, None, None]:
    """Run a real server on a free port."""
    server = GeoWeatherServer(
        ServerConfig(
            host="127.0.0.1",
            port=free_port,
            timeout=2.0,
            log_level="WARNING",
        ),
        clock=fixed_clock,
    )

    test_srv = TestServer(server, free_port)
    test_srv.start()

    yield test_srv

    test_srv.stop()
    # Give the accept loop time to release the port
    time.sleep(0.05)
