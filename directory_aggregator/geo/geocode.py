"""
Google Geocoding API Integration

Resolves a free-text location (e.g. "Manchester, UK") to coordinates.
"""

from dataclasses import dataclass

import httpx

from ..config import GEOCODE_URL
from ..exceptions import GeocodeNotFound


@dataclass
class Coordinates:
    """A resolved latitude/longitude pair."""
    lat: float
    lng: float

    def as_param(self) -> str:
        """Format as the "lat,lng" string the Places API expects."""
        return f"{self.lat},{self.lng}"


async def geocode_location(client: httpx.AsyncClient, location_name: str, api_key: str) -> Coordinates:
    """
    Geocode a location name with the Google Geocoding API.

    Args:
        client: Open HTTP client
        location_name: Name of the location to resolve
        api_key: Google Maps Platform key

    Returns:
        Coordinates of the first result

    Raises:
        GeocodeNotFound: If the API returns no results
        httpx.HTTPError: On transport errors or non-2xx responses
    """
    params = {
        "address": location_name,
        "key": api_key,
    }

    response = await client.get(GEOCODE_URL, params=params)
    response.raise_for_status()
    data = response.json()

    results = data.get("results") if isinstance(data, dict) else None
    if not results:
        raise GeocodeNotFound(f"Could not geocode location: {location_name}")

    location = results[0]["geometry"]["location"]
    return Coordinates(lat=float(location["lat"]), lng=float(location["lng"]))
