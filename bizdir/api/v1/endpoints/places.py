from typing import Optional

from fastapi import APIRouter, Query

from bizdir.core.dependencies import AggregatorDependency
from bizdir.core.exceptions.errors import ValidationError
from bizdir.core.responses import send_success
from bizdir.db.schemas.place import Location

router = APIRouter(prefix="/places", tags=["places"])


@router.get("/search")
async def search_places(aggregator: AggregatorDependency, q: Optional[str] = Query(None)):
    if not q or not q.strip():
        raise ValidationError("Query is required")
    return send_success(data=await aggregator.lookup_external(q))


@router.get("/suggestions")
async def place_suggestions(
    aggregator: AggregatorDependency,
    text: Optional[str] = Query(None, alias="input"),
    location: Optional[str] = Query(None),
):
    return send_success(data=await aggregator.suggest(text or "", location))


@router.post("/import")
async def import_places(
    aggregator: AggregatorDependency,
    location: Optional[str] = Query(None, description="lat,lng"),
    radius: Optional[int] = Query(None, gt=0, le=50000),
    place_type: Optional[str] = Query(None, alias="type"),
    keyword: Optional[str] = Query(None),
):
    result = await aggregator.import_nearby(Location.parse(location), radius, place_type, keyword)
    return send_success(
        message=f"Imported {result['imported_count']} businesses", data=result
    )


@router.delete("/cache")
async def clear_places_cache(aggregator: AggregatorDependency, key: Optional[str] = Query(None)):
    result = await aggregator.clear_cache(key)
    message = f"Cleared cache for key: {key}" if key else "Cleared all places cache entries"
    return send_success(message=message, data=result)


@router.get("/{place_id}")
async def place_details(place_id: str, aggregator: AggregatorDependency):
    return send_success(data=await aggregator.get_details(place_id))
