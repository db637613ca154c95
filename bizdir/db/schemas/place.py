from typing import List, Literal, Optional

from pydantic import BaseModel, Field as PydanticField

from bizdir.core.exceptions.errors import ValidationError


class Location(BaseModel):
    lat: float = PydanticField(..., ge=-90, le=90)
    lng: float = PydanticField(..., ge=-180, le=180)

    @classmethod
    def parse(cls, value: str | None) -> "Location":
        """Parse a ``"lat,lng"`` query value."""
        if not value or not value.strip():
            raise ValidationError("Location is required")
        parts = value.split(",")
        if len(parts) != 2:
            raise ValidationError("Location must be formatted as 'lat,lng'")
        try:
            return cls(lat=float(parts[0]), lng=float(parts[1]))
        except ValueError as e:
            raise ValidationError(
                "Location must be formatted as 'lat,lng'", detail=str(e)
            ) from e

    def as_param(self) -> str:
        return f"{self.lat},{self.lng}"


class PlaceCategory(BaseModel):
    id: int = 1
    name: str = "Uncategorized"


class PlacePhoto(BaseModel):
    url: str


class PlaceReview(BaseModel):
    author: str = "Anonymous"
    rating: Optional[float] = None
    text: str = ""
    time: Optional[str] = None


class ExternalPlace(BaseModel):
    """A place sourced live from the provider. Never persisted."""

    id: str
    place_id: str
    business_name: str
    description: str = ""
    address: str = ""
    category_id: int = 1
    category: PlaceCategory = PydanticField(default_factory=PlaceCategory)
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    contact_number: str = ""
    email: str = ""
    website: str = ""
    opening_hours: str = ""
    closing_hours: str = ""
    price_level: Optional[str] = None
    rating: Optional[float] = None
    total_ratings: Optional[int] = None
    photos: List[PlacePhoto] = PydanticField(default_factory=list)
    reviews: List[PlaceReview] = PydanticField(default_factory=list)
    regular_hours: List[str] = PydanticField(default_factory=list)
    external: Literal[True] = True


class StructuredFormatting(BaseModel):
    main_text: str
    secondary_text: str = ""


class PlaceSuggestion(BaseModel):
    place_id: str
    description: str = ""
    structured_formatting: StructuredFormatting
    types: List[str] = PydanticField(default_factory=list)
