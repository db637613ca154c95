import math
from typing import Optional

from fastapi import APIRouter, Query, status
from sqlalchemy import delete, select

from bizdir.core.dependencies import AggregatorDependency, DBDependency
from bizdir.core.exceptions.errors import NotFoundError, ValidationError
from bizdir.core.responses import send_success
from bizdir.db.models.business import Business
from bizdir.db.models.feedback import Feedback
from bizdir.db.schemas.business import (
    BusinessCreate,
    BusinessResponse,
    BusinessUpdate,
    PageMeta,
    SearchPage,
)

router = APIRouter(prefix="/businesses", tags=["businesses"])


async def get_business_or_404(db, business_id: int) -> Business:
    business = await db.get(Business, business_id)
    if not business:
        raise NotFoundError("Business not found")
    return business


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_business(business_data: BusinessCreate, db: DBDependency):
    business = Business(**business_data.model_dump())
    db.add(business)
    await db.commit()
    await db.refresh(business)
    return send_success(
        message="Business created",
        data=BusinessResponse.model_validate(business),
        status_code=status.HTTP_201_CREATED,
    )


@router.get("")
async def list_businesses(db: DBDependency):
    result = await db.execute(select(Business).order_by(Business.id))
    businesses = [BusinessResponse.model_validate(b) for b in result.scalars().all()]
    return send_success(data=businesses)


@router.get("/search")
async def search_businesses(
    aggregator: AggregatorDependency,
    search_term: Optional[str] = Query(None, alias="searchTerm"),
    category: Optional[int] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(9, ge=1, le=100),
):
    """Local matches followed by places results not already listed locally."""
    if not (search_term and search_term.strip()) and category is None:
        raise ValidationError("searchTerm or category is required")

    results = await aggregator.search(search_term, category)
    total = len(results)
    start = (page - 1) * limit
    page_data = SearchPage(
        data=results[start : start + limit],
        meta=PageMeta(
            total=total,
            page=page,
            limit=limit,
            total_pages=math.ceil(total / limit),
        ),
    )
    return send_success(data=page_data)


@router.get("/{business_id}")
async def get_business(business_id: int, db: DBDependency):
    business = await get_business_or_404(db, business_id)
    return send_success(data=BusinessResponse.model_validate(business))


@router.put("/{business_id}")
async def update_business(business_id: int, business_data: BusinessUpdate, db: DBDependency):
    business = await get_business_or_404(db, business_id)
    for field, value in business_data.model_dump(exclude_unset=True).items():
        setattr(business, field, value)
    await db.commit()
    await db.refresh(business)
    return send_success(
        message="Business updated", data=BusinessResponse.model_validate(business)
    )


@router.delete("/{business_id}")
async def delete_business(business_id: int, db: DBDependency):
    business = await get_business_or_404(db, business_id)
    deleted = BusinessResponse.model_validate(business)
    await db.execute(delete(Feedback).where(Feedback.business_id == business_id))
    await db.delete(business)
    await db.commit()
    return send_success(message="Business deleted", data=deleted)
