"""
=============================================================================
HANDLERS MODULE
=============================================================================

The two endpoint behaviours of the service.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    REQUEST → HANDLER → RESPONSE                     │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   GET /api/v1/geo?city=Malmo          ──▶ GeoHandler                │
    │       validate city, exact name lookup, coordinates as JSON         │
    │                                                                      │
    │   GET /api/v1/weather?lat=..&lon=..   ──▶ WeatherHandler            │
    │       validate ranges, proximity lookup, canned reading + time      │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Handlers are callable classes: configuration (the dataset, the clock) is
passed to __init__, and __call__(request) returns an HTTPResponse or
raises APIError for the router to turn into an error response.

=============================================================================
"""

from .geo import GeoHandler
from .weather import WeatherHandler

__all__ = [
    "GeoHandler",
    "WeatherHandler",
]
