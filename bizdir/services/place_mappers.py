"""Mappers from provider payloads to the canonical place shapes.

One function per provider response version, so field drift in one API
version stays contained:

* ``map_text_search_place``   - v1 ``places:searchText`` entries
* ``map_place_details``       - v1 ``places/{id}`` responses
* ``map_suggestion``          - v1 ``places:searchText`` entries, autocomplete shape
* ``build_imported_business`` - legacy nearby-search entry + legacy details
"""

from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from bizdir.db.schemas.place import (
    ExternalPlace,
    PlaceCategory,
    PlacePhoto,
    PlaceReview,
    PlaceSuggestion,
    StructuredFormatting,
)

# Later matches take precedence.
PLACE_TYPE_CATEGORY_IDS: Tuple[Tuple[str, int], ...] = (
    ("restaurant", 2),
    ("health", 3),
)

IMPORTED_DESCRIPTION = "Business imported from Google Places"


def format_place_type(place_type: str | None) -> str:
    """``"coffee_shop"`` -> ``"Coffee Shop"``."""
    if not place_type:
        return "Uncategorized"
    return place_type.replace("_", " ").title()


def _display_name(place: Dict[str, Any]) -> Optional[str]:
    return (place.get("displayName") or {}).get("text")


def _weekday_hours(hours: List[str]) -> Tuple[str, str]:
    opening = hours[0] if hours else ""
    closing = hours[6] if len(hours) > 6 else ""
    return opening, closing


def map_text_search_place(place: Dict[str, Any]) -> ExternalPlace:
    place_id = place.get("id") or ""
    location = place.get("location") or {}
    types = place.get("types") or []
    return ExternalPlace(
        id=f"place_{place_id}",
        place_id=place_id,
        business_name=_display_name(place) or "Unnamed Business",
        description=place.get("formattedAddress") or "",
        address=place.get("formattedAddress") or "",
        category=PlaceCategory(name=format_place_type(types[0] if types else None)),
        latitude=location.get("latitude"),
        longitude=location.get("longitude"),
        website=place.get("websiteUri") or "",
        price_level=place.get("priceLevel"),
    )


def map_place_details(
    details: Dict[str, Any],
    place_id: str,
    photo_url: Callable[[str], str],
) -> ExternalPlace:
    location = details.get("location") or {}
    types = details.get("types") or []
    hours = (details.get("regularOpeningHours") or {}).get("weekdayDescriptions") or []
    opening, closing = _weekday_hours(hours)
    address = details.get("formattedAddress") or ""

    return ExternalPlace(
        id=f"place_{place_id}",
        place_id=place_id,
        business_name=_display_name(details) or "Unknown Business",
        description=(details.get("editorialSummary") or {}).get("text") or address,
        address=address,
        category=PlaceCategory(
            name=details.get("primaryType") or (types[0] if types else "Uncategorized")
        ),
        latitude=location.get("latitude"),
        longitude=location.get("longitude"),
        contact_number=details.get("internationalPhoneNumber") or "",
        website=details.get("websiteUri") or "",
        opening_hours=opening,
        closing_hours=closing,
        price_level=details.get("priceLevel"),
        rating=details.get("rating"),
        total_ratings=details.get("userRatingCount"),
        photos=[
            PlacePhoto(url=photo_url(photo["name"]))
            for photo in details.get("photos") or []
            if photo.get("name")
        ],
        reviews=[
            PlaceReview(
                author=(review.get("authorAttribution") or {}).get("displayName")
                or "Anonymous",
                rating=review.get("rating"),
                text=(review.get("text") or {}).get("text") or "",
                time=review.get("publishTime"),
            )
            for review in details.get("reviews") or []
        ],
        regular_hours=hours,
    )


def map_suggestion(place: Dict[str, Any]) -> PlaceSuggestion:
    address = place.get("formattedAddress") or ""
    return PlaceSuggestion(
        place_id=place.get("id") or "",
        description=address,
        structured_formatting=StructuredFormatting(
            main_text=_display_name(place) or "", secondary_text=address
        ),
        types=place.get("types") or [],
    )


def category_for_types(types: Iterable[str], default: int) -> int:
    types = set(types or [])
    category_id = default
    for place_type, mapped_id in PLACE_TYPE_CATEGORY_IDS:
        if place_type in types:
            category_id = mapped_id
    return category_id


def build_imported_business(
    place: Dict[str, Any], details: Dict[str, Any], default_category_id: int
) -> Dict[str, Any]:
    """Fields for a new local business from a legacy nearby result and its details."""
    location = place["geometry"]["location"]
    hours = (details.get("opening_hours") or {}).get("weekday_text") or []
    opening, closing = _weekday_hours(hours)
    return {
        "business_name": place["name"],
        "description": IMPORTED_DESCRIPTION,
        "category_id": category_for_types(place.get("types"), default_category_id),
        "contact_number": details.get("formatted_phone_number") or "",
        "email": "",
        "website": details.get("website") or "",
        "latitude": location["lat"],
        "longitude": location["lng"],
        "opening_hours": opening,
        "closing_hours": closing,
    }
