"""
=============================================================================
GEO LOOKUP HANDLER
=============================================================================

    GET /api/v1/geo?city=Malmo

    200  {"city":"Malmo","country":"SE","lat":55.6050,"lon":13.0038}
    400  {"error":{"code":400,"message":"missing query param: city"}}
    400  {"error":{"code":400,"message":"city name too long"}}
    404  {"error":{"code":404,"message":"city not found"}}

Names are matched exactly: "malmo" and "MALMO" are 404s.

=============================================================================
"""

import json
import logging

from ..http.codec import parse_query_param
from ..http.request import HTTPRequest
from ..http.response import APIError, HTTPResponse, json_response
from ..http.status_codes import HTTPStatus
from ..locations import DEFAULT_LOCATIONS, Location, Locations, find_by_name


logger = logging.getLogger(__name__)

# Raw query values are cut to this many characters before decoding.
CITY_PARAM_MAX_LENGTH = 127

# Decoded names longer than this are rejected outright.
MAX_CITY_NAME_LENGTH = 100


def render_location(location: Location) -> str:
    """
    Render a location as JSON with coordinates fixed at 4 decimals.

    The string fields go through json.dumps for escaping; the numbers are
    formatted by hand because json.dumps would drop trailing zeros.
    """
    return (
        f'{{"city":{json.dumps(location.name, ensure_ascii=False)},'
        f'"country":{json.dumps(location.country, ensure_ascii=False)},'
        f'"lat":{location.lat:.4f},"lon":{location.lon:.4f}}}'
    )


class GeoHandler:
    """
    City name → coordinates.

    Usage:
        geo = GeoHandler(locations)
        router.add_route("/api/v1/geo", geo)
    """

    def __init__(self, locations: Locations = DEFAULT_LOCATIONS):
        self.locations = locations

    def __call__(self, request: HTTPRequest) -> HTTPResponse:
        city = parse_query_param(request.query, "city", max_length=CITY_PARAM_MAX_LENGTH)
        if city is None:
            raise APIError(HTTPStatus.BAD_REQUEST, "missing query param: city")

        if len(city) > MAX_CITY_NAME_LENGTH:
            raise APIError(HTTPStatus.BAD_REQUEST, "city name too long")

        location = find_by_name(self.locations, city)
        if location is None:
            logger.debug(f"No location named {city!r}")
            raise APIError(HTTPStatus.NOT_FOUND, "city not found")

        return json_response(render_location(location))
