"""
Unit tests for the request/response exchange (no sockets).
"""

import json
import logging

import pytest

from geoweather import GeoWeatherServer, ServerConfig, create_app
from geoweather.core import ConnectionState
from geoweather.http import HTTPStatus
from geoweather.locations import Location
from geoweather.server import build_router


def run_exchange(server: GeoWeatherServer, raw: bytes):
    """Drive one exchange; returns (state, list of sent payloads)."""
    sent = []
    state = server.exchange(lambda: raw, sent.append, ("127.0.0.1", 40000))
    return state, sent


def split_response(data: bytes):
    head, _, body = data.partition(b"\r\n\r\n")
    lines = head.decode("utf-8").split("\r\n")
    return lines[0], lines[1:], body


class TestExchange:
    """Tests for GeoWeatherServer.exchange()."""

    def test_geo(self, server: GeoWeatherServer, geo_request: bytes):
        """Test a geo lookup end to end."""
        state, sent = run_exchange(server, geo_request)

        assert state is ConnectionState.CLOSED
        [data] = sent
        status_line, headers, body = split_response(data)
        assert status_line == "HTTP/1.1 200 OK"
        assert headers == [
            "Content-Type: application/json",
            f"Content-Length: {len(body)}",
            "Access-Control-Allow-Origin: *",
            "Access-Control-Allow-Methods: GET, OPTIONS",
            "Access-Control-Allow-Headers: Content-Type",
            "Connection: close",
        ]
        assert body == b'{"city":"Malmo","country":"SE","lat":55.6050,"lon":13.0038}'

    def test_weather(self, server: GeoWeatherServer, weather_request: bytes):
        """Test a weather lookup end to end."""
        _, [data] = run_exchange(server, weather_request)

        assert split_response(data)[2] == (
            b'{"tempC":10.5,"description":"Sunny","updatedAt":"2026-10-18T12:30:45Z"}'
        )

    def test_options(self, server: GeoWeatherServer, options_request: bytes):
        """Test the CORS preflight answer."""
        _, [data] = run_exchange(server, options_request)

        status_line, headers, body = split_response(data)
        assert status_line == "HTTP/1.1 204 No Content"
        assert "Content-Type: text/plain" in headers
        assert "Content-Length: 0" in headers
        assert "Access-Control-Allow-Origin: *" in headers
        assert "Access-Control-Allow-Methods: GET, OPTIONS" in headers
        assert "Access-Control-Allow-Headers: Content-Type" in headers
        assert body == b""

    def test_missing_city_exact_response(self, server: GeoWeatherServer):
        """Test the exact bytes of a 400."""
        _, [data] = run_exchange(server, b"GET /api/v1/geo HTTP/1.1\r\n\r\n")

        body = b'{"error":{"code":400,"message":"missing query param: city"}}'
        assert data == (
            b"HTTP/1.1 400 Bad Request\r\n"
            b"Content-Type: application/json\r\n"
            b"Content-Length: " + str(len(body)).encode() + b"\r\n"
            b"Access-Control-Allow-Origin: *\r\n"
            b"Access-Control-Allow-Methods: GET, OPTIONS\r\n"
            b"Access-Control-Allow-Headers: Content-Type\r\n"
            b"Connection: close\r\n"
            b"\r\n" + body
        )

    @pytest.mark.parametrize("raw,status,message", [
        (b"POST /api/v1/geo HTTP/1.1\r\n\r\n", 405, "method not allowed"),
        (b"GET /unknown HTTP/1.1\r\n\r\n", 404, "not found"),
        (b"GET /api/v1/geo?city=Narnia HTTP/1.1\r\n\r\n", 404, "city not found"),
        (b"GET /api/v1/weather?lat=1 HTTP/1.1\r\n\r\n", 400, "missing query params: lat, lon"),
        (b"GET /api/v1/weather?lat=-95&lon=0 HTTP/1.1\r\n\r\n", 400, "lat out of range [-90, 90]"),
        (b"GET /api/v1/weather?lat=0&lon=181 HTTP/1.1\r\n\r\n", 400, "lon out of range [-180, 180]"),
        (b"GET /api/v1/geo\r\n\r\n", 400, "invalid request line"),
        (b"GET /api/v1/geo HTTP/1.1", 400, "invalid request line"),
    ])
    def test_errors(self, server: GeoWeatherServer, raw, status, message):
        """Test each error path gives its code and message."""
        state, [data] = run_exchange(server, raw)

        assert state is ConnectionState.CLOSED
        status_line, _, body = split_response(data)
        assert status_line.startswith(f"HTTP/1.1 {status} ")
        assert json.loads(body) == {"error": {"code": status, "message": message}}

    def test_empty_read_is_dropped(self, server: GeoWeatherServer):
        """Test nothing is sent when nothing was read."""
        state, sent = run_exchange(server, b"")

        assert state is ConnectionState.DROPPED
        assert sent == []

    def test_read_failure_is_dropped(self, server: GeoWeatherServer):
        """Test a reset during the read."""
        def receive():
            raise ConnectionResetError("reset by peer")

        sent = []
        assert server.exchange(receive, sent.append) is ConnectionState.DROPPED
        assert sent == []

    def test_send_failure_is_dropped(self, server: GeoWeatherServer, geo_request: bytes):
        """Test a broken pipe during the send."""
        def send(data):
            raise BrokenPipeError("gone")

        assert server.exchange(lambda: geo_request, send) is ConnectionState.DROPPED

    def test_unexpected_error_is_500(self, server: GeoWeatherServer, caplog):
        """Test handler crashes become a logged 500."""
        @server.router.route("/boom")
        def boom(request):
            raise RuntimeError("kaboom")

        with caplog.at_level(logging.ERROR):
            state, [data] = run_exchange(server, b"GET /boom HTTP/1.1\r\n\r\n")

        assert state is ConnectionState.CLOSED
        status_line, _, body = split_response(data)
        assert status_line == "HTTP/1.1 500 Internal Server Error"
        assert body == b'{"error":{"code":500,"message":"internal server error"}}'
        assert any(r.exc_info for r in caplog.records)

    def test_long_target_is_truncated_not_rejected(self, server: GeoWeatherServer):
        """Test an overlong target reaches the handler truncated."""
        raw = b"GET /api/v1/geo?city=" + b"a" * 400 + b" HTTP/1.1\r\n\r\n"
        _, [data] = run_exchange(server, raw)

        assert json.loads(split_response(data)[2])["error"]["message"] == "city name too long"


class TestServerSetup:
    """Tests for construction and wiring."""

    def test_route_table(self):
        """Test the registered routes."""
        router = build_router()
        assert [(r.prefix, r.name) for r in router.routes()] == [
            ("/api/v1/geo", "geo"),
            ("/api/v1/weather", "weather"),
        ]

    def test_invalid_config_fails_fast(self):
        """Test a bad config raises at construction."""
        with pytest.raises(ValueError):
            GeoWeatherServer(ServerConfig(port=-5))

    def test_injected_locations(self, config, fixed_clock):
        """Test a dataset passed to create_app."""
        locations = (Location("Kiruna", "SE", 67.8558, 20.2253),)
        server = create_app(config, locations=locations, clock=fixed_clock)

        _, [found] = run_exchange(server, b"GET /api/v1/geo?city=Kiruna HTTP/1.1\r\n\r\n")
        _, [missing] = run_exchange(server, b"GET /api/v1/geo?city=Malmo HTTP/1.1\r\n\r\n")

        assert split_response(found)[0] == "HTTP/1.1 200 OK"
        assert split_response(missing)[0] == "HTTP/1.1 404 Not Found"

    def test_dataset_path(self, tmp_path, fixed_clock):
        """Test a dataset loaded from a file."""
        path = tmp_path / "cities.json"
        path.write_text(
            '[{"name": "Lund", "country": "SE", "lat": 55.7047, "lon": 13.1910}]',
            encoding="utf-8",
        )
        server = GeoWeatherServer(ServerConfig(dataset_path=str(path)), clock=fixed_clock)

        assert [loc.name for loc in server.locations] == ["Lund"]

    def test_respond(self, server: GeoWeatherServer):
        """Test respond() on raw bytes."""
        response = server.respond(b"OPTIONS / HTTP/1.1\r\n")
        assert response.status == HTTPStatus.NO_CONTENT
