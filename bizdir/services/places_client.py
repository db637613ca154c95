"""
Places client -- async HTTP client for the Google Places APIs.

Covers the v1 text-search and details endpoints and the legacy
nearby-search/details pair used for bulk imports. Every failure (network,
timeout, non-2xx, unusable body) surfaces as ``UpstreamError``; nothing is
retried.

Identical concurrent requests share one in-flight call.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, Dict, List, Optional

import httpx

from bizdir.core.exceptions.errors import UpstreamError
from bizdir.db.schemas.place import Location
from bizdir.utils.logging import get_logger

logger = get_logger()

SEARCH_FIELD_MASK = (
    "places.id,places.displayName,places.formattedAddress,places.location,"
    "places.types,places.priceLevel,places.websiteUri"
)
SUGGESTION_FIELD_MASK = "places.id,places.displayName,places.formattedAddress,places.types"
DETAILS_FIELD_MASK = (
    "id,displayName,formattedAddress,location,websiteUri,types,priceLevel,rating,"
    "userRatingCount,photos,internationalPhoneNumber,regularOpeningHours,"
    "primaryType,editorialSummary,reviews"
)
LEGACY_DETAILS_FIELDS = "name,formatted_address,formatted_phone_number,website,opening_hours"
LEGACY_OK_STATUSES = {"OK", "ZERO_RESULTS"}
PHOTO_MAX_PX = 400


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return f"HTTP {response.status_code}: {response.text[:200]}"
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return f"HTTP {response.status_code}: {error['message']}"
    return f"HTTP {response.status_code}"


class PlacesClient:
    """Async client for the places provider."""

    def __init__(
        self,
        api_key: str,
        base_url: str,
        legacy_base_url: str,
        timeout: float = 8.0,
        page_size: int = 10,
        search_rectangle: tuple[float, float, float, float] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.legacy_base_url = legacy_base_url.rstrip("/")
        self.timeout = timeout
        self.page_size = page_size
        self.search_rectangle = search_rectangle
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._inflight: Dict[str, asyncio.Future] = {}

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            )
        return self._client

    async def close(self):
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    def _v1_headers(self, field_mask: str) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "X-Goog-Api-Key": self.api_key,
            "X-Goog-FieldMask": field_mask,
        }

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def _request(
        self,
        method: str,
        url: str,
        *,
        params: Dict[str, Any] | None = None,
        json_body: Dict[str, Any] | None = None,
        headers: Dict[str, str] | None = None,
    ) -> Any:
        call_key = json.dumps([method, url, params, json_body], sort_keys=True, default=str)
        pending = self._inflight.get(call_key)
        if pending is None:
            pending = asyncio.ensure_future(
                self._send(method, url, params=params, json_body=json_body, headers=headers)
            )
            self._inflight[call_key] = pending
            pending.add_done_callback(lambda _: self._inflight.pop(call_key, None))
        else:
            logger.debug(f"Joining in-flight {method} {url}")
        return await asyncio.shield(pending)

    async def _send(self, method, url, *, params=None, json_body=None, headers=None) -> Any:
        client = await self._get_client()
        try:
            resp = await client.request(
                method, url, params=params, json=json_body, headers=headers
            )
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPStatusError as e:
            detail = _error_detail(e.response)
            logger.error(f"Places API error for {method} {url}: {detail}")
            raise UpstreamError(detail=detail) from e
        except httpx.HTTPError as e:
            detail = str(e) or e.__class__.__name__
            logger.error(f"Places API call failed for {method} {url}: {detail}")
            raise UpstreamError(detail=detail) from e
        except ValueError as e:
            logger.error(f"Places API returned an unreadable body for {method} {url}")
            raise UpstreamError(detail=f"Invalid JSON from places provider: {e}") from e

    def _check_legacy_status(self, data: Any):
        if not isinstance(data, dict):
            raise UpstreamError(detail="Unexpected payload from places legacy API")
        status = data.get("status", "OK")
        if status not in LEGACY_OK_STATUSES:
            detail = data.get("error_message") or status
            logger.error(f"Places legacy API returned status {status}: {detail}")
            raise UpstreamError(detail=detail)

    # ------------------------------------------------------------------
    # v1 API
    # ------------------------------------------------------------------

    async def text_search(self, query: str) -> List[Dict[str, Any]]:
        """Text search restricted to the configured rectangle."""
        body: Dict[str, Any] = {"textQuery": query, "pageSize": self.page_size}
        if self.search_rectangle:
            low_lat, low_lng, high_lat, high_lng = self.search_rectangle
            body["locationRestriction"] = {
                "rectangle": {
                    "low": {"latitude": low_lat, "longitude": low_lng},
                    "high": {"latitude": high_lat, "longitude": high_lng},
                }
            }
        data = await self._request(
            "POST",
            f"{self.base_url}/places:searchText",
            json_body=body,
            headers=self._v1_headers(SEARCH_FIELD_MASK),
        )
        places = data.get("places") if isinstance(data, dict) else None
        return places if isinstance(places, list) else []

    async def suggestions(self, text: str, location: str | None = None) -> List[Dict[str, Any]]:
        text_query = f"{text} near {location}" if location else text
        data = await self._request(
            "POST",
            f"{self.base_url}/places:searchText",
            json_body={"textQuery": text_query, "languageCode": "en"},
            headers=self._v1_headers(SUGGESTION_FIELD_MASK),
        )
        places = data.get("places") if isinstance(data, dict) else None
        return places if isinstance(places, list) else []

    async def place_details(self, place_id: str) -> Dict[str, Any]:
        data = await self._request(
            "GET",
            f"{self.base_url}/places/{place_id}",
            headers=self._v1_headers(DETAILS_FIELD_MASK),
        )
        if not isinstance(data, dict):
            raise UpstreamError(detail="Unexpected place details payload")
        return data

    def photo_url(self, photo_name: str) -> str:
        return (
            f"{self.base_url}/{photo_name}/media?key={self.api_key}"
            f"&maxHeightPx={PHOTO_MAX_PX}&maxWidthPx={PHOTO_MAX_PX}"
        )

    # ------------------------------------------------------------------
    # Legacy API
    # ------------------------------------------------------------------

    async def nearby_search(
        self, location: Location, radius: int, place_type: str, keyword: str
    ) -> List[Dict[str, Any]]:
        data = await self._request(
            "GET",
            f"{self.legacy_base_url}/nearbysearch/json",
            params={
                "location": location.as_param(),
                "radius": radius,
                "type": place_type,
                "keyword": keyword,
                "key": self.api_key,
            },
        )
        self._check_legacy_status(data)
        return data.get("results") or []

    async def legacy_place_details(self, place_id: str) -> Dict[str, Any]:
        data = await self._request(
            "GET",
            f"{self.legacy_base_url}/details/json",
            params={"place_id": place_id, "fields": LEGACY_DETAILS_FIELDS, "key": self.api_key},
        )
        self._check_legacy_status(data)
        return data.get("result") or {}
