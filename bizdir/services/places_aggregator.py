"""Merge local business records with places-provider results.

Every provider response that feeds a result is cached, so repeated calls
within the cache TTL cost at most one upstream request per key.

Cache keys:

* ``place_search_<query>``                      text search results
* ``place_suggestions_<text>_<location>``       autocomplete suggestions
* ``details:<place_id>``                        full place details
* ``place_details_<place_id>``                  legacy details used by imports
* ``places_import_<loc>_<radius>_<type>_<kw>``  import results

An import result is served from cache for the whole TTL, even if the store
has changed since it was computed.
"""

import re
from typing import Any, Dict, List, Optional

from bizdir.core.config import settings
from bizdir.core.exceptions.errors import DetailsFetchError, UpstreamError, ValidationError
from bizdir.db.schemas.business import BusinessFilter, BusinessResponse
from bizdir.db.schemas.place import Location
from bizdir.services.business_store import BusinessStore
from bizdir.services.place_mappers import (
    build_imported_business,
    map_place_details,
    map_suggestion,
    map_text_search_place,
)
from bizdir.services.places_client import PlacesClient
from bizdir.utils.caching import Cache
from bizdir.utils.logging import get_logger

logger = get_logger()

CLEARABLE_PREFIXES = ("place_", "places_")

_WHITESPACE = re.compile(r"\s+")


def normalize_query(query: str) -> str:
    return _WHITESPACE.sub(" ", query.strip().lower())


def search_cache_key(query: str) -> str:
    return f"place_search_{normalize_query(query)}"


def details_cache_key(place_id: str) -> str:
    return f"details:{place_id}"


def legacy_details_cache_key(place_id: str) -> str:
    return f"place_details_{place_id}"


def suggestions_cache_key(text: str, location: str | None) -> str:
    return f"place_suggestions_{text}_{location or ''}"


def import_cache_key(location: Location, radius: int, place_type: str, keyword: str) -> str:
    return f"places_import_{location.as_param()}_{radius}_{place_type}_{keyword}"


class PlacesAggregator:
    def __init__(self, store: BusinessStore, cache: Cache, places: PlacesClient):
        self.store = store
        self.cache = cache
        self.places = places

    async def search(
        self, search_term: str | None, category_id: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        """Local matches first, then external matches not already present locally.

        The provider is only queried when there is a search term.
        """
        term = (search_term or "").strip()
        local = await self.store.find_matching(
            BusinessFilter(search_term=term or None, category_id=category_id)
        )
        results = [BusinessResponse.model_validate(b).model_dump(mode="json") for b in local]
        if not term:
            return results

        local_names = {r["business_name"].lower() for r in results}
        external = await self.lookup_external(term)
        results.extend(
            place
            for place in external
            if (place.get("business_name") or "").lower() not in local_names
        )
        return results

    async def lookup_external(self, query: str) -> List[Dict[str, Any]]:
        key = search_cache_key(query)
        cached = await self.cache.get(key)
        if cached is not None:
            logger.debug(f"Cache hit for {key}")
            return cached

        try:
            places = await self.places.text_search(query)
        except UpstreamError as e:
            # Local results still get served; the external part is just empty.
            logger.warning(f"External lookup for '{query}' failed: {e.detail}")
            return []

        results = [map_text_search_place(p).model_dump(mode="json") for p in places]
        await self.cache.set(key, results)
        return results

    async def get_details(self, place_id: str) -> Dict[str, Any]:
        if not place_id or not place_id.strip():
            raise ValidationError("Place ID is required")

        key = details_cache_key(place_id)
        cached = await self.cache.get(key)
        if cached is not None:
            logger.debug(f"Cache hit for {key}")
            return cached

        logger.info(f"Fetching details for place ID: {place_id}")
        try:
            details = await self.places.place_details(place_id)
        except UpstreamError as e:
            raise DetailsFetchError(detail=e.detail) from e

        result = map_place_details(details, place_id, self.places.photo_url).model_dump(
            mode="json"
        )
        await self.cache.set(key, result)
        return result

    async def suggest(self, text: str, location: str | None = None) -> List[Dict[str, Any]]:
        if not text or not text.strip():
            raise ValidationError("Input is required")

        key = suggestions_cache_key(text, location)
        cached = await self.cache.get(key)
        if cached is not None:
            return cached

        try:
            places = await self.places.suggestions(text, location)
        except UpstreamError as e:
            raise UpstreamError("Failed to get suggestions", detail=e.detail) from e

        results = [map_suggestion(p).model_dump(mode="json") for p in places]
        await self.cache.set(key, results)
        return results

    async def import_nearby(
        self,
        location: Location,
        radius: Optional[int] = None,
        place_type: Optional[str] = None,
        keyword: Optional[str] = None,
    ) -> Dict[str, Any]:
        radius = radius or settings.IMPORT_DEFAULT_RADIUS
        place_type = place_type or settings.IMPORT_DEFAULT_TYPE
        keyword = keyword or ""

        key = import_cache_key(location, radius, place_type, keyword)
        cached = await self.cache.get(key)
        if cached is not None:
            logger.info(f"Returning cached import results for {key}")
            return cached

        try:
            places = await self.places.nearby_search(location, radius, place_type, keyword)
            imported = []
            for place in places:
                coords = (place.get("geometry") or {}).get("location") or {}
                if not (place.get("name") and place.get("place_id")) or None in (
                    coords.get("lat"),
                    coords.get("lng"),
                ):
                    logger.warning(f"Skipping malformed nearby result: {place.get('place_id')}")
                    continue
                existing = await self.store.find_by_name_and_location(
                    place["name"], coords["lat"], coords["lng"]
                )
                if existing:
                    continue
                details = await self._legacy_details(place["place_id"])
                business = await self.store.create(
                    build_imported_business(
                        place, details, settings.IMPORT_DEFAULT_CATEGORY_ID
                    )
                )
                imported.append(
                    BusinessResponse.model_validate(business).model_dump(mode="json")
                )
        except UpstreamError as e:
            raise UpstreamError("Failed to import businesses", detail=e.detail) from e

        result = {"imported_count": len(imported), "businesses": imported}
        logger.info(f"Imported {len(imported)} businesses near {location.as_param()}")
        await self.cache.set(key, result)
        return result

    async def _legacy_details(self, place_id: str) -> Dict[str, Any]:
        key = legacy_details_cache_key(place_id)
        cached = await self.cache.get(key)
        if cached is not None:
            return cached
        details = await self.places.legacy_place_details(place_id)
        await self.cache.set(key, details)
        return details

    async def clear_cache(self, key: Optional[str] = None) -> Dict[str, Any]:
        if key:
            deleted = await self.cache.delete(key)
            logger.info(f"Cleared cache key {key} (existed: {deleted})")
            return {"key": key, "deleted": deleted}

        deleted = 0
        for cache_key in await self.cache.keys():
            if cache_key.startswith(CLEARABLE_PREFIXES) and await self.cache.delete(cache_key):
                deleted += 1
        logger.info(f"Cleared {deleted} places cache entries")
        return {"deleted": deleted}
