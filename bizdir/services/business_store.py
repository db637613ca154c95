from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from bizdir.core.exceptions.errors import StoreError
from bizdir.db.models.business import Business
from bizdir.db.schemas.business import BusinessFilter
from bizdir.utils.logging import get_logger

logger = get_logger()


class BusinessStore:
    """Business lookups and inserts used by the places aggregator.

    SQLAlchemy failures are logged and re-raised as ``StoreError``.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_matching(self, criteria: BusinessFilter) -> List[Business]:
        query = select(Business)
        if criteria.search_term:
            query = query.where(
                Business.business_name.icontains(criteria.search_term, autoescape=True)
                | Business.description.icontains(criteria.search_term, autoescape=True)
            )
        if criteria.category_id is not None:
            query = query.where(Business.category_id == criteria.category_id)
        try:
            result = await self.db.execute(query.order_by(Business.id))
        except SQLAlchemyError as e:
            logger.error(f"Business search failed for {criteria}: {e}")
            raise StoreError(detail=str(e)) from e
        return list(result.scalars().all())

    async def find_by_name_and_location(
        self, name: str, latitude: float, longitude: float
    ) -> Optional[Business]:
        try:
            result = await self.db.execute(
                select(Business)
                .where(
                    Business.business_name == name,
                    Business.latitude == latitude,
                    Business.longitude == longitude,
                )
                .limit(1)
            )
        except SQLAlchemyError as e:
            logger.error(f"Business lookup failed for '{name}': {e}")
            raise StoreError(detail=str(e)) from e
        return result.scalar_one_or_none()

    async def create(self, fields: Dict[str, Any]) -> Business:
        business = Business(**fields)
        try:
            self.db.add(business)
            await self.db.commit()
            await self.db.refresh(business)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to create business '{fields.get('business_name')}': {e}")
            raise StoreError(detail=str(e)) from e
        return business
