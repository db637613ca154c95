from typing import Annotated, AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from bizdir.db.session import SessionLocal
from bizdir.services.business_store import BusinessStore
from bizdir.services.places_aggregator import PlacesAggregator
from bizdir.services.places_client import PlacesClient
from bizdir.utils.caching import Cache
from bizdir.utils.logging import get_logger


logger = get_logger()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with SessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception as e:
            await session.rollback()
            logger.warning(f"Database transaction rolled back: {e!r}")
            raise
        finally:
            await session.close()


DBDependency = Annotated[AsyncSession, Depends(get_db)]


def get_cache(request: Request) -> Cache:
    return request.app.state.cache


def get_places_client(request: Request) -> PlacesClient:
    return request.app.state.places_client


CacheDependency = Annotated[Cache, Depends(get_cache)]
PlacesClientDependency = Annotated[PlacesClient, Depends(get_places_client)]


async def get_places_aggregator(
    db: DBDependency, cache: CacheDependency, places: PlacesClientDependency
) -> PlacesAggregator:
    return PlacesAggregator(store=BusinessStore(db), cache=cache, places=places)


AggregatorDependency = Annotated[PlacesAggregator, Depends(get_places_aggregator)]
