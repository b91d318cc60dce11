"""
Unit tests for the middleware pipeline and access logging.
"""

import json
import logging

import pytest

from geoweather.http.request import HTTPRequest
from geoweather.http.response import HTTPResponse, ResponseBuilder
from geoweather.http.status_codes import HTTPStatus
from geoweather.middleware import (
    LoggingMiddleware,
    Middleware,
    MiddlewarePipeline,
    RequestLog,
)


def ok_handler(request: HTTPRequest) -> HTTPResponse:
    return ResponseBuilder().json({"ok": True}).build()


class Recorder(Middleware):
    """Appends its tag before and after calling next."""

    def __init__(self, tag: str, calls: list):
        self.tag = tag
        self.calls = calls

    def __call__(self, request, next):
        self.calls.append(f"{self.tag}:before")
        response = next(request)
        self.calls.append(f"{self.tag}:after")
        return response


class TestMiddlewarePipeline:
    """Tests for MiddlewarePipeline."""

    def test_empty_pipeline_returns_handler(self):
        """Test an empty pipeline adds nothing."""
        assert MiddlewarePipeline().wrap(ok_handler) is ok_handler

    def test_first_added_is_outermost(self):
        """Test middleware run in the order added."""
        calls = []
        pipeline = MiddlewarePipeline().use(Recorder("a", calls), Recorder("b", calls))

        pipeline.wrap(ok_handler)(HTTPRequest(method="GET", path="/"))

        assert calls == ["a:before", "b:before", "b:after", "a:after"]

    def test_len_and_iter(self):
        """Test len() and iteration."""
        first, second = Recorder("a", []), Recorder("b", [])
        pipeline = MiddlewarePipeline().add(first).add(second)

        assert len(pipeline) == 2
        assert list(pipeline) == [first, second]
        assert first.name == "Recorder"

    def test_short_circuit(self):
        """Test middleware can answer without calling next."""
        class Deny(Middleware):
            def __call__(self, request, next):
                return ResponseBuilder().status(HTTPStatus.NOT_FOUND).build()

        handler = MiddlewarePipeline().add(Deny()).wrap(ok_handler)
        assert handler(HTTPRequest(method="GET", path="/")).status == HTTPStatus.NOT_FOUND


class TestLoggingMiddleware:
    """Tests for LoggingMiddleware."""

    def request(self) -> HTTPRequest:
        return HTTPRequest(
            method="GET",
            path="/api/v1/geo",
            query="city=Malmo",
            client_address=("10.0.0.1", 5555),
        )

    def test_text_line(self, caplog):
        """Test the text access log line."""
        caplog.set_level(logging.INFO, logger="geoweather.access")

        response = LoggingMiddleware()(self.request(), ok_handler)

        assert response.status == HTTPStatus.OK
        [record] = [r for r in caplog.records if r.name == "geoweather.access"]
        assert record.getMessage().startswith("10.0.0.1 - - [")
        assert '"GET /api/v1/geo?city=Malmo" 200 11 ' in record.getMessage()

    def test_json_line(self, caplog):
        """Test the JSON access log line."""
        caplog.set_level(logging.INFO, logger="geoweather.access")

        LoggingMiddleware(log_format="json")(self.request(), ok_handler)

        [record] = [r for r in caplog.records if r.name == "geoweather.access"]
        entry = json.loads(record.getMessage())
        assert entry["method"] == "GET"
        assert entry["path"] == "/api/v1/geo"
        assert entry["query"] == "city=Malmo"
        assert entry["client_ip"] == "10.0.0.1"
        assert entry["status_code"] == 200
        assert entry["content_length"] == 11

    def test_response_untouched(self):
        """Test logging does not change the response."""
        expected = ok_handler(self.request())
        assert LoggingMiddleware()(self.request(), ok_handler) == expected

    def test_skip_paths(self, caplog):
        """Test skipped paths are not logged."""
        caplog.set_level(logging.INFO, logger="geoweather.access")

        LoggingMiddleware(skip_paths=["/api/v1/geo"])(self.request(), ok_handler)

        assert not [r for r in caplog.records if r.name == "geoweather.access"]

    def test_failure_logged_and_reraised(self, caplog):
        """Test handler failures are logged and re-raised."""
        def broken(request):
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            LoggingMiddleware()(self.request(), broken)

        assert any("Request failed" in r.getMessage() for r in caplog.records)

    def test_invalid_format(self):
        """Test an unknown log format."""
        with pytest.raises(ValueError):
            LoggingMiddleware(log_format="xml")


class TestRequestLog:
    """Tests for RequestLog formatting."""

    def test_to_text_without_query_or_ip(self):
        """Test blanks are written as '-'."""
        entry = RequestLog(
            method="OPTIONS", path="/x", query="", client_ip="",
            status_code=204, content_length=0, duration_ms=0.123,
            timestamp="18/Oct/2026:12:00:00 +0000",
        )
        assert entry.to_text() == '- - - [18/Oct/2026:12:00:00 +0000] "OPTIONS /x" 204 0 0.12ms'

    def test_to_dict_rounds_duration(self):
        """Test duration is rounded to two decimals."""
        entry = RequestLog(
            method="GET", path="/", query="", client_ip="1.2.3.4",
            status_code=404, content_length=44, duration_ms=1.23456,
            timestamp="t",
        )
        assert entry.to_dict()["duration_ms"] == 1.23
