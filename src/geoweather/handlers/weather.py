"""
=============================================================================
WEATHER LOOKUP HANDLER
=============================================================================

    GET /api/v1/weather?lat=55.6050&lon=13.0038

    200  {"tempC":10.5,"description":"Sunny","updatedAt":"2026-10-18T12:00:00Z"}
    400  missing query params: lat, lon
    400  lat out of range [-90, 90]
    400  lon out of range [-180, 180]

=============================================================================
HOW A READING IS CHOSEN
=============================================================================

    lat, lon
       │
       ▼
    find_near(locations, lat, lon)       first city within 0.01° on both axes
       │
       ├── Malmo       → 10.5 °C  Sunny
       ├── Gothenburg  →  8.2 °C  Windy
       ├── Orebro      →  6.3 °C  Overcast
       └── other/none  →  7.0 °C  Cloudy

The readings are canned demo values. Only "updatedAt" changes between
calls: it is the current UTC time at one-second resolution.

=============================================================================
NUMBER PARSING
=============================================================================

Coordinates are read the way C's atof() reads them: the longest leading
decimal number is used and the rest is ignored. There is no format error.

    "55.6050"     → 55.605
    "  12.5abc"   → 12.5
    "abc"         → 0.0
    ""            → 0.0

=============================================================================
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict
import json
import logging
import re

from ..http.codec import parse_query_param
from ..http.request import HTTPRequest
from ..http.response import APIError, HTTPResponse, json_response
from ..http.status_codes import HTTPStatus
from ..locations import DEFAULT_LOCATIONS, Locations, find_near


logger = logging.getLogger(__name__)

COORDINATE_PARAM_MAX_LENGTH = 63

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

Clock = Callable[[], datetime]

_LEADING_FLOAT = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


@dataclass(frozen=True)
class Conditions:
    temp_c: float
    description: str


DEFAULT_CONDITIONS = Conditions(7.0, "Cloudy")

CONDITIONS_BY_CITY: Dict[str, Conditions] = {
    "Malmo": Conditions(10.5, "Sunny"),
    "Gothenburg": Conditions(8.2, "Windy"),
    "Orebro": Conditions(6.3, "Overcast"),
}


def parse_coordinate(text: str) -> float:
    """Parse a leading decimal number, atof-style. Non-numeric gives 0.0."""
    match = _LEADING_FLOAT.match(text)
    if not match:
        return 0.0
    return float(match.group(1))


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(moment: datetime) -> str:
    """Format as YYYY-MM-DDTHH:MM:SSZ in UTC; naive datetimes are taken as UTC."""
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.strftime(TIMESTAMP_FORMAT)


class WeatherHandler:
    """
    Coordinates → canned weather reading.

    Args:
        locations: Dataset used for the proximity match.
        clock: Returns the current time; injectable so tests can pin
               "updatedAt".
    """

    def __init__(self, locations: Locations = DEFAULT_LOCATIONS, clock: Clock = utc_now):
        self.locations = locations
        self.clock = clock

    def __call__(self, request: HTTPRequest) -> HTTPResponse:
        lat_text = parse_query_param(request.query, "lat", max_length=COORDINATE_PARAM_MAX_LENGTH)
        lon_text = parse_query_param(request.query, "lon", max_length=COORDINATE_PARAM_MAX_LENGTH)
        if lat_text is None or lon_text is None:
            raise APIError(HTTPStatus.BAD_REQUEST, "missing query params: lat, lon")

        lat = parse_coordinate(lat_text)
        lon = parse_coordinate(lon_text)

        if not -90.0 <= lat <= 90.0:
            raise APIError(HTTPStatus.BAD_REQUEST, "lat out of range [-90, 90]")
        if not -180.0 <= lon <= 180.0:
            raise APIError(HTTPStatus.BAD_REQUEST, "lon out of range [-180, 180]")

        conditions = self.conditions_at(lat, lon)
        body = (
            f'{{"tempC":{conditions.temp_c:.1f},'
            f'"description":{json.dumps(conditions.description)},'
            f'"updatedAt":"{format_timestamp(self.clock())}"}}'
        )
        return json_response(body)

    def conditions_at(self, lat: float, lon: float) -> Conditions:
        location = find_near(self.locations, lat, lon)
        if location is None:
            return DEFAULT_CONDITIONS
        logger.debug(f"({lat}, {lon}) matched {location.name}")
        return CONDITIONS_BY_CITY.get(location.name, DEFAULT_CONDITIONS)
