"""
Places Search

Geocode -> text search -> place details against the Google Maps Platform,
normalizing each result as a "google" record.

Failure policy is all-or-nothing: if any call fails, the whole search fails.
"""

import asyncio
import logging
from typing import Dict, List, Optional

import httpx

from ..config import (
    DEFAULT_SEARCH_RADIUS,
    GOOGLE_API_KEY,
    PLACE_DETAILS_FIELDS,
    PLACE_DETAILS_URL,
    REQUEST_TIMEOUT,
    TEXT_SEARCH_URL,
    get_proxy_url,
)
from ..exceptions import ConfigurationError, InvalidRequest, UpstreamError
from ..geo import Coordinates, geocode_location
from ..parsers import NormalizedRecord, Source, normalize

logger = logging.getLogger(__name__)


async def text_search(
    client: httpx.AsyncClient,
    keyword: str,
    coords: Coordinates,
    api_key: str,
    radius: int = DEFAULT_SEARCH_RADIUS,
) -> List[Dict]:
    """Run a Places text search around coords. Returns the list of place stubs."""
    params = {
        "query": keyword,
        "location": coords.as_param(),
        "radius": radius,
        "key": api_key,
    }
    response = await client.get(TEXT_SEARCH_URL, params=params)
    response.raise_for_status()
    return response.json().get("results") or []


async def fetch_place_details(client: httpx.AsyncClient, place_id: str, api_key: str) -> Dict:
    """Fetch name, address, phone and website for a place."""
    params = {
        "place_id": place_id,
        "fields": PLACE_DETAILS_FIELDS,
        "key": api_key,
    }
    response = await client.get(PLACE_DETAILS_URL, params=params)
    response.raise_for_status()
    return response.json().get("result") or {}


async def _detailed_record(client: httpx.AsyncClient, place: Dict, api_key: str) -> NormalizedRecord:
    details = await fetch_place_details(client, place.get("place_id"), api_key)
    return normalize({**place, **details}, Source.GOOGLE)


async def search_places(
    keyword: str,
    location_name: str,
    api_key: Optional[str] = None,
    radius: int = DEFAULT_SEARCH_RADIUS,
    client: Optional[httpx.AsyncClient] = None,
) -> List[NormalizedRecord]:
    """
    Search Google Places for businesses near a named location.

    Args:
        keyword: What to search for (e.g., "air conditioning engineers")
        location_name: Where to search (e.g., "Leeds, UK")
        api_key: Google Maps Platform key (defaults to GOOGLE_API_KEY)
        radius: Search radius in meters
        client: Optional open HTTP client; one is created if omitted

    Returns:
        Normalized records in text-search order

    Raises:
        InvalidRequest: If keyword or location_name is missing
        GeocodeNotFound: If the location cannot be geocoded
        UpstreamError: If any API call fails
    """
    if not keyword or not location_name:
        raise InvalidRequest("Missing keyword or location in body.")

    key = api_key if api_key is not None else GOOGLE_API_KEY
    if not key:
        raise ConfigurationError("GOOGLE_API_KEY is not set")

    if client is None:
        async with httpx.AsyncClient(timeout=REQUEST_TIMEOUT, proxy=get_proxy_url()) as own_client:
            return await search_places(keyword, location_name, key, radius, own_client)

    try:
        coords = await geocode_location(client, location_name, key)
        places = await text_search(client, keyword, coords, key, radius)
        logger.info("Found %d places for %r near %s", len(places), keyword, location_name)

        # gather() preserves input order
        return list(await asyncio.gather(
            *(_detailed_record(client, place, key) for place in places)
        ))
    except (httpx.HTTPError, ValueError, KeyError) as e:
        raise UpstreamError(f"Places search failed: {e}") from e
