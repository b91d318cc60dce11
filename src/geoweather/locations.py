"""
=============================================================================
LOCATION DATASET
=============================================================================

The small, read-only set of cities behind both endpoints.

The dataset is a tuple of frozen dataclasses. It is built once at startup
and handed to the handlers; nothing ever mutates it, so it is shared
across requests without locking. Tests (or a deployment) can pass any
other tuple, or load one from a JSON file with load_locations().

    [
        {"name": "Stockholm", "country": "SE", "lat": 59.3293, "lon": 18.0686},
        ...
    ]

=============================================================================
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Tuple, Union
import json
import logging


logger = logging.getLogger(__name__)

# Degrees. A coordinate query matches a city when BOTH axes are closer
# than this (strictly).
PROXIMITY_TOLERANCE = 0.01


@dataclass(frozen=True)
class Location:
    """A named city with its ISO country code and coordinates."""

    name: str
    country: str
    lat: float
    lon: float


Locations = Tuple[Location, ...]


DEFAULT_LOCATIONS: Locations = (
    Location("Stockholm", "SE", 59.3293, 18.0686),
    Location("Orebro", "SE", 59.2741, 15.2066),
    Location("Malmo", "SE", 55.6050, 13.0038),
    Location("Gothenburg", "SE", 57.7089, 11.9746),
    Location("Uppsala", "SE", 59.8586, 17.6389),
)


def find_by_name(locations: Iterable[Location], name: str) -> Optional[Location]:
    """Exact, case-sensitive name lookup. "malmo" does not find "Malmo"."""
    for location in locations:
        if location.name == name:
            return location
    return None


def find_near(
    locations: Iterable[Location],
    lat: float,
    lon: float,
    tolerance: float = PROXIMITY_TOLERANCE,
) -> Optional[Location]:
    """
    Proximity lookup.

    Returns the FIRST location (in dataset order) whose latitude and
    longitude are both within `tolerance` degrees of the query, or None.
    """
    for location in locations:
        if abs(location.lat - lat) < tolerance and abs(location.lon - lon) < tolerance:
            return location
    return None


def load_locations(path: Union[str, Path]) -> Locations:
    """
    Load a dataset from a JSON array of location objects.

    Args:
        path: File containing [{"name", "country", "lat", "lon"}, ...].

    Returns:
        The locations as an immutable tuple, in file order.

    Raises:
        ValueError: If the document is not a list, an entry is missing a
                    field, the country code is not two letters, or a
                    coordinate is out of range.
    """
    with open(path, encoding="utf-8") as f:
        raw = json.load(f)

    if not isinstance(raw, list):
        raise ValueError(f"{path}: expected a JSON array of locations")

    locations = []
    for index, entry in enumerate(raw):
        try:
            location = Location(
                name=str(entry["name"]),
                country=str(entry["country"]),
                lat=float(entry["lat"]),
                lon=float(entry["lon"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"{path}: invalid location at index {index}: {e}") from e

        if len(location.country) != 2:
            raise ValueError(f"{path}: country code must be 2 letters: {location.country!r}")
        if not -90.0 <= location.lat <= 90.0:
            raise ValueError(f"{path}: latitude out of range for {location.name}: {location.lat}")
        if not -180.0 <= location.lon <= 180.0:
            raise ValueError(f"{path}: longitude out of range for {location.name}: {location.lon}")
        locations.append(location)

    logger.info(f"Loaded {len(locations)} locations from {path}")
    return tuple(locations)
