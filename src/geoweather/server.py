"""
=============================================================================
GEO/WEATHER SERVER
=============================================================================

Ties the pieces together: the TCP layer reads bytes, the exchange turns
them into exactly one response, and the connection is closed.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        ONE EXCHANGE                                 │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   receive() ──► b""  ───────────────────────────────► DROPPED       │
    │       │                                                (no reply)    │
    │       ▼                                                              │
    │   RequestParser.parse ── HTTPParseError ──► 400 invalid request line │
    │       │                                                              │
    │       ▼                                                              │
    │   LoggingMiddleware ─► Router.handle ─► Geo/WeatherHandler           │
    │       │                         unexpected exception ──► 500         │
    │       ▼                                                              │
    │   send(response.to_bytes()) ─────────────────────────► CLOSED       │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

exchange() only sees two callables, receive() -> bytes and send(bytes),
so it can be driven without a socket:

    server = GeoWeatherServer()
    sent = []
    state = server.exchange(lambda: b"GET /api/v1/geo?city=Malmo HTTP/1.1\\r\\n\\r\\n",
                            sent.append)

=============================================================================
"""

import logging
from typing import Callable, Optional, Tuple

from .config import ServerConfig
from .core import SocketServer, Connection, ConnectionState
from .handlers import GeoHandler, WeatherHandler
from .handlers.weather import Clock, utc_now
from .http import (
    HTTPParseError,
    HTTPResponse,
    HTTPStatus,
    RequestParser,
    Router,
    error_response,
)
from .locations import DEFAULT_LOCATIONS, Locations, load_locations
from .middleware import LoggingMiddleware, Middleware, MiddlewarePipeline


logger = logging.getLogger(__name__)

GEO_PREFIX = "/api/v1/geo"
WEATHER_PREFIX = "/api/v1/weather"

Receive = Callable[[], bytes]
Send = Callable[[bytes], None]


def build_router(locations: Locations = DEFAULT_LOCATIONS, clock: Clock = utc_now) -> Router:
    """The route table of the service, in match order."""
    router = Router()
    router.add_route(GEO_PREFIX, GeoHandler(locations), name="geo")
    router.add_route(WEATHER_PREFIX, WeatherHandler(locations, clock), name="weather")
    return router


class GeoWeatherServer:
    """
    The geo/weather HTTP service.

    =========================================================================
    USAGE
    =========================================================================

        server = GeoWeatherServer(ServerConfig(port=8080))
        server.run()                      # blocks until SIGINT/SIGTERM

        # Tests pin the clock and dataset:
        server = GeoWeatherServer(locations=my_locations, clock=lambda: moment)

    =========================================================================
    """

    def __init__(
        self,
        config: Optional[ServerConfig] = None,
        locations: Optional[Locations] = None,
        clock: Clock = utc_now,
    ):
        self.config = config or ServerConfig()
        self.config.validate()

        if locations is None:
            if self.config.dataset_path:
                locations = load_locations(self.config.dataset_path)
            else:
                locations = DEFAULT_LOCATIONS
        self.locations = locations

        self._parser = RequestParser(
            max_method_length=self.config.max_method_length,
            max_target_length=self.config.max_target_length,
        )
        self._router = build_router(self.locations, clock)
        self._middleware = MiddlewarePipeline()
        self._middleware.add(LoggingMiddleware(log_format=self.config.log_format))
        self._handler = self._middleware.wrap(self._router.handle)

        self._socket_server = SocketServer(self.config)

    @property
    def router(self) -> Router:
        return self._router

    @property
    def socket_server(self) -> SocketServer:
        return self._socket_server

    def use(self, middleware: Middleware) -> "GeoWeatherServer":
        """Append middleware inside the access logger."""
        self._middleware.add(middleware)
        self._handler = self._middleware.wrap(self._router.handle)
        return self

    # ─────────────────────────────────────────────────────────────────────
    # REQUEST PROCESSING
    # ─────────────────────────────────────────────────────────────────────

    def respond(self, raw_request: bytes, client_address: Tuple[str, int] = ("", 0)) -> HTTPResponse:
        """
        Build the response for one raw request. Never raises.

        Args:
            raw_request: Bytes read from the client (non-empty).
            client_address: Used only for access logging.
        """
        try:
            request = self._parser.parse(raw_request, client_address)
        except HTTPParseError as e:
            logger.info(f"Rejected request from {client_address[0] or '-'}: {e}")
            return error_response(HTTPStatus(e.status_code), str(e))

        try:
            return self._handler(request)
        except Exception:
            logger.exception(f"Unhandled error for {request.method} {request.path}")
            return error_response(HTTPStatus.INTERNAL_SERVER_ERROR, "internal server error")

    def exchange(
        self,
        receive: Receive,
        send: Send,
        client_address: Tuple[str, int] = ("", 0),
    ) -> ConnectionState:
        """
        Run one request/response exchange and return its terminal state.

        Returns:
            ConnectionState.DROPPED if nothing was read or the reply could
            not be sent, otherwise ConnectionState.CLOSED.
        """
        try:
            raw_request = receive()
        except OSError as e:
            logger.debug(f"Read failed from {client_address[0] or '-'}: {e}")
            return ConnectionState.DROPPED

        if not raw_request:
            logger.debug(f"Empty read from {client_address[0] or '-'}, dropping")
            return ConnectionState.DROPPED

        response = self.respond(raw_request, client_address)

        try:
            send(response.to_bytes())
        except OSError as e:
            logger.warning(f"Send failed to {client_address[0] or '-'}: {e}")
            return ConnectionState.DROPPED

        return ConnectionState.CLOSED

    def _handle_connection(self, conn: Connection):
        """SocketServer callback; the socket server closes the connection."""
        def receive() -> bytes:
            data = conn.read_request()
            conn.state = ConnectionState.PROCESSING
            return data

        state = self.exchange(receive, conn.send_response, conn.address)
        if state is ConnectionState.DROPPED:
            conn.state = ConnectionState.DROPPED
        logger.debug(f"[{conn.id}] Exchange finished: {state.value}")

    # ─────────────────────────────────────────────────────────────────────
    # LIFECYCLE
    # ─────────────────────────────────────────────────────────────────────

    def run(self, host: Optional[str] = None, port: Optional[int] = None):
        """Serve until shutdown(), SIGINT or SIGTERM. Blocks."""
        if host:
            self.config.host = host
        if port is not None:
            self.config.port = port

        self._setup_logging()
        logger.info(
            f"Starting geo/weather server on {self.config.host}:{self.config.port} "
            f"({len(self.locations)} locations)"
        )

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            logger.info("Server stopped")

    def shutdown(self):
        self._socket_server.shutdown()

    def _setup_logging(self):
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)
        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("geoweather").setLevel(level)


def create_app(
    config: Optional[ServerConfig] = None,
    locations: Optional[Locations] = None,
    clock: Clock = utc_now,
) -> GeoWeatherServer:
    """Factory for a configured server."""
    return GeoWeatherServer(config, locations=locations, clock=clock)
