import asyncio
import json

import httpx
import pytest

from bizdir.core.exceptions.errors import UpstreamError
from bizdir.db.schemas.place import Location
from bizdir.services.places_client import PlacesClient


def make_client(handler, **kwargs) -> PlacesClient:
    return PlacesClient(
        api_key="secret",
        base_url="https://places.test/v1",
        legacy_base_url="https://maps.test/place",
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


async def test_text_search_sends_key_field_mask_and_rectangle():
    seen = []

    def handler(request: httpx.Request):
        seen.append(request)
        return httpx.Response(200, json={"places": [{"id": "p1"}]})

    client = make_client(handler, page_size=5, search_rectangle=(-1.98, 30.03, -1.9, 30.12))
    places = await client.text_search("cafe")
    await client.close()

    assert places == [{"id": "p1"}]
    request = seen[0]
    assert request.method == "POST"
    assert str(request.url) == "https://places.test/v1/places:searchText"
    assert request.headers["X-Goog-Api-Key"] == "secret"
    assert "places.displayName" in request.headers["X-Goog-FieldMask"]
    body = json.loads(request.content)
    assert body["textQuery"] == "cafe"
    assert body["pageSize"] == 5
    assert body["locationRestriction"]["rectangle"]["low"] == {
        "latitude": -1.98,
        "longitude": 30.03,
    }


async def test_text_search_without_places_key_returns_empty_list():
    client = make_client(lambda request: httpx.Response(200, json={}))

    assert await client.text_search("nothing here") == []


async def test_non_2xx_becomes_upstream_error_with_provider_message():
    def handler(request):
        return httpx.Response(
            403, json={"error": {"code": 403, "message": "API key not valid"}}
        )

    client = make_client(handler)

    with pytest.raises(UpstreamError) as exc_info:
        await client.place_details("p1")

    assert exc_info.value.detail == "HTTP 403: API key not valid"


async def test_timeout_becomes_upstream_error():
    def handler(request):
        raise httpx.ConnectTimeout("timed out", request=request)

    client = make_client(handler)

    with pytest.raises(UpstreamError) as exc_info:
        await client.text_search("cafe")

    assert "timed out" in exc_info.value.detail


async def test_invalid_json_becomes_upstream_error():
    client = make_client(lambda request: httpx.Response(200, text="<html>oops</html>"))

    with pytest.raises(UpstreamError):
        await client.place_details("p1")


async def test_identical_concurrent_calls_share_one_request():
    calls = 0

    async def handler(request):
        nonlocal calls
        calls += 1
        await asyncio.sleep(0.01)
        return httpx.Response(200, json={"places": [{"id": "p1"}]})

    client = make_client(handler)

    first, second = await asyncio.gather(client.text_search("cafe"), client.text_search("cafe"))

    assert calls == 1
    assert first == second == [{"id": "p1"}]
    assert client._inflight == {}

    await client.text_search("cafe")
    assert calls == 2


async def test_different_calls_are_not_shared():
    calls = 0

    async def handler(request):
        nonlocal calls
        calls += 1
        return httpx.Response(200, json={"places": []})

    client = make_client(handler)
    await asyncio.gather(client.text_search("cafe"), client.text_search("bakery"))

    assert calls == 2


async def test_nearby_search_uses_legacy_params():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"status": "OK", "results": [{"place_id": "n1"}]})

    client = make_client(handler)
    results = await client.nearby_search(Location(lat=-1.94, lng=30.06), 1000, "cafe", "")

    assert results == [{"place_id": "n1"}]
    params = seen[0].url.params
    assert seen[0].url.path == "/place/nearbysearch/json"
    assert params["location"] == "-1.94,30.06"
    assert params["radius"] == "1000"
    assert params["type"] == "cafe"
    assert params["key"] == "secret"


async def test_legacy_error_status_becomes_upstream_error():
    def handler(request):
        return httpx.Response(
            200,
            json={"status": "REQUEST_DENIED", "error_message": "The provided API key is invalid."},
        )

    client = make_client(handler)

    with pytest.raises(UpstreamError) as exc_info:
        await client.legacy_place_details("n1")

    assert exc_info.value.detail == "The provided API key is invalid."


async def test_legacy_zero_results_is_not_an_error():
    client = make_client(
        lambda request: httpx.Response(200, json={"status": "ZERO_RESULTS", "results": []})
    )

    assert await client.nearby_search(Location(lat=0, lng=0), 500, "establishment", "") == []


def test_photo_url():
    client = make_client(lambda request: httpx.Response(200))

    assert client.photo_url("places/p1/photos/abc") == (
        "https://places.test/v1/places/p1/photos/abc/media?key=secret"
        "&maxHeightPx=400&maxWidthPx=400"
    )
