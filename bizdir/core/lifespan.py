from contextlib import asynccontextmanager
from fastapi import FastAPI
from bizdir.core.config import settings
from bizdir.db.session import close_db, init_db
from bizdir.services.places_client import PlacesClient
from bizdir.utils.caching import Cache
from bizdir.utils.logging import get_startup_logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger = get_startup_logger()
    await init_db()

    app.state.cache = Cache(
        cache_type=settings.CACHE_TYPE,
        default_ttl=settings.PLACES_CACHE_DURATION,
        redis_url=settings.REDIS_URL,
    )
    await app.state.cache.init_redis()

    app.state.places_client = PlacesClient(
        api_key=settings.GOOGLE_PLACES_API_KEY,
        base_url=settings.PLACES_API_BASE_URL,
        legacy_base_url=settings.PLACES_LEGACY_BASE_URL,
        timeout=settings.PLACES_HTTP_TIMEOUT,
        page_size=settings.PLACES_SEARCH_PAGE_SIZE,
        search_rectangle=settings.search_rectangle,
    )
    if not settings.GOOGLE_PLACES_API_KEY:
        logger.warning("GOOGLE_PLACES_API_KEY is not set; external lookups will fail")

    logger.info(
        f"Startup: {app.title} v{app.version} starting "
        f"(cache={settings.CACHE_TYPE}, ttl={settings.PLACES_CACHE_DURATION}s)..."
    )
    yield
    # Shutdown
    await app.state.places_client.close()
    await app.state.cache.close()
    await close_db()
    logger.info("Shutdown: App shutting down...")
