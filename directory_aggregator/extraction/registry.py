"""
REFCOM Registry Search

Queries the REFCOM public company API by name, certificate code and
postcode, deduplicating entries by companyId across queries.

Queries run one after another in a fixed order (name, code, postcode).
A failing query is logged and skipped; the others still contribute.
"""

import logging
from typing import Any, Dict, List, Optional, Set

import httpx

from ..config import (
    REFCOM_BASE_URL,
    REFCOM_POSTCODE_RADIUS,
    REFCOM_SCHEME,
    REQUEST_TIMEOUT,
    get_proxy_url,
)
from ..exceptions import InvalidRequest
from ..parsers import NormalizedRecord, Source, dedupe_key, normalize

logger = logging.getLogger(__name__)


def build_queries(company_name: str = "", postcode: str = "", registration_number: str = "") -> List[tuple]:
    """
    Build the (url, params) pairs to run, in execution order.

    Only inputs that are non-empty produce a query.
    """
    queries = []

    if company_name:
        queries.append((f"{REFCOM_BASE_URL}/GetByName", {
            "companyName": company_name,
            "certificateCode": "",
            "scheme": REFCOM_SCHEME,
        }))

    if registration_number:
        queries.append((f"{REFCOM_BASE_URL}/GetByName", {
            "certificateCode": registration_number,
            "companyName": "",
            "scheme": REFCOM_SCHEME,
        }))

    if postcode:
        queries.append((f"{REFCOM_BASE_URL}/GetByPostcode", {
            "postcode": postcode,
            "radius": REFCOM_POSTCODE_RADIUS,
            "scheme": REFCOM_SCHEME,
        }))

    return queries


def as_entry_list(data: Any) -> List[Any]:
    """The API answers with either one object or a list of them."""
    return data if isinstance(data, list) else [data]


async def run_query(client: httpx.AsyncClient, url: str, params: Dict) -> List[Any]:
    """Run one registry query. Raises on transport errors and non-2xx responses."""
    response = await client.get(url, params=params)
    response.raise_for_status()
    return as_entry_list(response.json())


async def search_registry(
    company_name: str = "",
    postcode: str = "",
    registration_number: str = "",
    client: Optional[httpx.AsyncClient] = None,
) -> Dict[str, Any]:
    """
    Search the REFCOM registry.

    Args:
        company_name: Company name to look up
        postcode: UK postcode; searched with a fixed radius
        registration_number: REFCOM certificate code
        client: Optional open HTTP client; one is created if omitted

    Returns:
        {"source": "refcom", "normalized": [NormalizedRecord, ...]}

    Raises:
        InvalidRequest: If all three inputs are empty
    """
    if not company_name and not postcode and not registration_number:
        raise InvalidRequest("Provide at least one of: companyName, postcode, registrationNumber")

    if client is None:
        async with httpx.AsyncClient(timeout=REQUEST_TIMEOUT, proxy=get_proxy_url()) as own_client:
            return await search_registry(company_name, postcode, registration_number, own_client)

    seen: Set[Any] = set()
    normalized: List[NormalizedRecord] = []

    for url, params in build_queries(company_name, postcode, registration_number):
        try:
            entries = await run_query(client, url, params)
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Failed query for %s with %s: %s", url, params, e)
            continue

        for entry in entries:
            if not entry or not isinstance(entry, dict):
                continue
            company_id = dedupe_key(entry.get("companyId"))
            if company_id in seen:
                continue
            seen.add(company_id)
            normalized.append(normalize(entry, Source.REFCOM))

    logger.info("REFCOM search returned %d companies", len(normalized))
    return {"source": Source.REFCOM.value, "normalized": normalized}
