from fastapi import APIRouter

from bizdir.api.v1.endpoints.businesses import router as businesses_router
from bizdir.api.v1.endpoints.categories import router as categories_router
from bizdir.api.v1.endpoints.feedback import router as feedback_router
from bizdir.api.v1.endpoints.places import router as places_router

router = APIRouter(prefix="/api/v1")
router.include_router(businesses_router)
router.include_router(categories_router)
router.include_router(feedback_router)
router.include_router(places_router)
