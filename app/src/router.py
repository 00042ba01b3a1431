"""
Road distance adapter.

Talks to an OSRM server and returns the driving distance between two
coordinates. OSRM expects coordinates as `lon,lat`; the conversion from the
internal `Coordinate` happens here and nowhere else.
"""

import requests

from app.src import exceptions
from app.src.constants import LOCATION_SERVICE_TIMEOUT, OSRM_PROFILE, OSRM_URL
from app.src.schemas import Coordinate


def formatCoordinates(*coordinates: Coordinate) -> str:
    """Convert coordinates to the OSRM path format 'lon,lat;lon,lat'."""
    return ";".join(f"{c.longitude},{c.latitude}" for c in coordinates)


def roadDistanceKm(
    start: Coordinate, end: Coordinate, timeout: float = LOCATION_SERVICE_TIMEOUT
) -> float:
    """
    Compute the road distance between two coordinates in kilometres.

    Raises:
        exceptions.LocationNotFound: If OSRM finds no road connecting the points.
        exceptions.LocationServiceUnavailable: If OSRM cannot be reached, times
            out, or answers with an error.
    """
    url = f"{OSRM_URL}/route/v1/{OSRM_PROFILE}/{formatCoordinates(start, end)}"
    try:
        response = requests.get(url, params={"overview": "false"}, timeout=timeout)
        data = response.json()
    except requests.RequestException as e:
        raise exceptions.LocationServiceUnavailable(f"Routing failed: {e}")
    except ValueError as e:
        raise exceptions.LocationServiceUnavailable(f"Unexpected routing response: {e}")

    if not isinstance(data, dict):
        raise exceptions.LocationServiceUnavailable("Unexpected routing response")
    code = data.get("code")
    if code == "NoRoute":
        raise exceptions.LocationNotFound()
    if code != "Ok" or not data.get("routes"):
        raise exceptions.LocationServiceUnavailable(
            f"Routing error: {data.get('message', code)}"
        )
    # OSRM distances are in metres
    return data["routes"][0]["distance"] / 1000
