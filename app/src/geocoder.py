"""
Geocoding adapter.

Resolves free-text addresses to coordinates through a Nominatim compatible
search endpoint. Its sole responsibility is talking HTTP and normalizing the
reply; it knows nothing about drivers or fares.
"""

import requests

from app.src import exceptions
from app.src.constants import (
    GEOCODER_URL,
    GEOCODER_USER_AGENT,
    LOCATION_SERVICE_TIMEOUT,
)
from app.src.schemas import Coordinate


def geocode(address: str, timeout: float = LOCATION_SERVICE_TIMEOUT) -> Coordinate | None:
    """
    Resolve an address to the coordinate of its best match.

    Args:
        address (str): Free-text address, e.g. "123 Main St, Springfield".
        timeout (float): Seconds to wait for the geocoding service.

    Returns:
        Coordinate | None: The best match, or None when the service knows no
        place for the address.

    Raises:
        exceptions.LocationServiceUnavailable: If the service cannot be reached,
            times out, or answers with something that is not a search result.
    """
    try:
        response = requests.get(
            GEOCODER_URL,
            params={"q": address, "format": "json", "limit": 1},
            headers={"User-Agent": GEOCODER_USER_AGENT},
            timeout=timeout,
        )
        response.raise_for_status()
        places = response.json()
        if not places:
            return None
        return Coordinate(
            latitude=float(places[0]["lat"]), longitude=float(places[0]["lon"])
        )
    except requests.RequestException as e:
        raise exceptions.LocationServiceUnavailable(f"Geocoding failed: {e}")
    except (ValueError, KeyError, IndexError, TypeError) as e:
        raise exceptions.LocationServiceUnavailable(
            f"Unexpected geocoding response: {e}"
        )
