from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field as PydanticField


class BusinessBase(BaseModel):
    business_name: str = PydanticField(..., min_length=1, max_length=255)
    description: Optional[str] = None
    category_id: Optional[int] = None
    contact_number: str = ""
    email: str = ""
    website: str = ""
    latitude: Optional[float] = PydanticField(None, ge=-90, le=90)
    longitude: Optional[float] = PydanticField(None, ge=-180, le=180)
    opening_hours: str = ""
    closing_hours: str = ""


class BusinessCreate(BusinessBase):
    pass


class BusinessUpdate(BaseModel):
    business_name: Optional[str] = PydanticField(None, min_length=1, max_length=255)
    description: Optional[str] = None
    category_id: Optional[int] = None
    contact_number: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    latitude: Optional[float] = PydanticField(None, ge=-90, le=90)
    longitude: Optional[float] = PydanticField(None, ge=-180, le=180)
    opening_hours: Optional[str] = None
    closing_hours: Optional[str] = None


class BusinessResponse(BusinessBase):
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    external: bool = False

    model_config = ConfigDict(from_attributes=True)


class BusinessFilter(BaseModel):
    """Local search criteria: substring on name/description, exact category."""

    search_term: Optional[str] = None
    category_id: Optional[int] = None


class PageMeta(BaseModel):
    total: int
    page: int
    limit: int
    total_pages: int


class SearchPage(BaseModel):
    data: List[dict]
    meta: PageMeta
