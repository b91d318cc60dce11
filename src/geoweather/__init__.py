"""
=============================================================================
GEOWEATHER - City coordinates and weather over plain HTTP/1.1
=============================================================================

A small raw-socket HTTP service with two read-only JSON endpoints backed
by a fixed, in-memory set of Swedish cities.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                       PACKAGE LAYOUT                                │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   core/         SocketServer, Connection (TCP, no HTTP knowledge)   │
    │   http/         codec, request parser, response writer, router      │
    │   middleware/   pipeline + access logging                           │
    │   handlers/     GeoHandler, WeatherHandler                          │
    │   locations.py  the dataset and its lookups                         │
    │   config.py     ServerConfig                                        │
    │   server.py     GeoWeatherServer: one exchange per connection       │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

    GET /api/v1/geo?city=Stockholm
    GET /api/v1/weather?lat=55.6050&lon=13.0038

=============================================================================
"""

__version__ = "1.0.0"

from .server import GeoWeatherServer, create_app
from .config import ServerConfig

__all__ = ["GeoWeatherServer", "ServerConfig", "create_app", "__version__"]
