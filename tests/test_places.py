"""Tests for the Google Places client."""

import asyncio

import httpx
import pytest

from directory_aggregator.config import GEOCODE_URL, PLACE_DETAILS_URL, TEXT_SEARCH_URL
from directory_aggregator.exceptions import GeocodeNotFound, InvalidRequest, UpstreamError
from directory_aggregator.extraction.places import search_places

GEOCODE = {"results": [{"geometry": {"location": {"lat": 53.8, "lng": -1.55}}}]}
SEARCH = {
    "results": [
        {"place_id": "p1", "name": "First HVAC", "types": ["hvac_contractor"]},
        {"place_id": "p2", "name": "Second HVAC", "types": ["plumber", "store"]},
    ]
}
DETAILS = {
    "p1": {"name": "First HVAC Ltd", "formatted_address": "1 A St, Leeds", "formatted_phone_number": "0113 1"},
    "p2": {"name": "Second HVAC Ltd", "formatted_address": "2 B St, Leeds", "formatted_phone_number": "0113 2"},
}


def _url(request: httpx.Request) -> str:
    return f"{request.url.scheme}://{request.url.host}{request.url.path}"


def make_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def google_handler(geocode=GEOCODE, search=SEARCH, details=DETAILS, calls=None):
    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        url = _url(request)
        if url == GEOCODE_URL:
            return httpx.Response(200, json=geocode)
        if url == TEXT_SEARCH_URL:
            return httpx.Response(200, json=search)
        if url == PLACE_DETAILS_URL:
            place_id = request.url.params["place_id"]
            if place_id not in details:
                return httpx.Response(500, json={"status": "UNKNOWN_ERROR"})
            return httpx.Response(200, json={"result": details[place_id]})
        return httpx.Response(404)
    return handler


@pytest.mark.asyncio
async def test_search_places_merges_details_in_search_order():
    calls = []
    async with make_client(google_handler(calls=calls)) as client:
        records = await search_places("hvac", "Leeds, UK", api_key="test-key", client=client)

    names = [r.company_name for r in records]
    assert names == ["First HVAC Ltd", "Second HVAC Ltd"]
    assert records[0].address == "1 A St, Leeds"
    assert records[0].phone_number == "0113 1"
    assert records[1].services_offered == "plumber, store"

    search_call = next(c for c in calls if _url(c) == TEXT_SEARCH_URL)
    assert search_call.url.params["query"] == "hvac"
    assert search_call.url.params["location"] == "53.8,-1.55"
    assert search_call.url.params["radius"] == "50000"
    assert search_call.url.params["key"] == "test-key"

    detail_calls = [c for c in calls if _url(c) == PLACE_DETAILS_URL]
    assert {c.url.params["place_id"] for c in detail_calls} == {"p1", "p2"}
    assert detail_calls[0].url.params["fields"] == "name,formatted_address,formatted_phone_number,website"


@pytest.mark.asyncio
async def test_detail_fetches_run_concurrently_and_keep_order():
    in_flight = 0
    peak = 0

    async def handler(request: httpx.Request) -> httpx.Response:
        nonlocal in_flight, peak
        url = _url(request)
        if url == GEOCODE_URL:
            return httpx.Response(200, json=GEOCODE)
        if url == TEXT_SEARCH_URL:
            return httpx.Response(200, json=SEARCH)
        in_flight += 1
        peak = max(peak, in_flight)
        # the first place answers last
        await asyncio.sleep(0.05 if request.url.params["place_id"] == "p1" else 0.01)
        in_flight -= 1
        return httpx.Response(200, json={"result": DETAILS[request.url.params["place_id"]]})

    async with make_client(handler) as client:
        records = await search_places("hvac", "Leeds", api_key="k", client=client)

    assert peak == 2
    assert [r.company_name for r in records] == ["First HVAC Ltd", "Second HVAC Ltd"]


@pytest.mark.asyncio
@pytest.mark.parametrize("keyword,location", [("", "Leeds"), ("hvac", ""), (None, "Leeds"), ("hvac", None)])
async def test_missing_inputs_rejected_before_any_call(keyword, location):
    calls = []
    async with make_client(google_handler(calls=calls)) as client:
        with pytest.raises(InvalidRequest):
            await search_places(keyword, location, api_key="k", client=client)
    assert calls == []


@pytest.mark.asyncio
async def test_geocode_without_results_fails():
    async with make_client(google_handler(geocode={"results": [], "status": "ZERO_RESULTS"})) as client:
        with pytest.raises(GeocodeNotFound):
            await search_places("hvac", "Nowhere", api_key="k", client=client)


@pytest.mark.asyncio
async def test_no_places_found_returns_empty_list():
    async with make_client(google_handler(search={"results": []})) as client:
        records = await search_places("hvac", "Leeds", api_key="k", client=client)
    assert records == []


@pytest.mark.asyncio
async def test_single_detail_failure_fails_whole_search():
    details = {"p1": DETAILS["p1"]}
    async with make_client(google_handler(details=details)) as client:
        with pytest.raises(UpstreamError):
            await search_places("hvac", "Leeds", api_key="k", client=client)
