from fastapi import APIRouter

from allocation.api.v1.endpoints.health import router as health_router
from allocation.api.v1.endpoints.listings import router as listings_router
from allocation.api.v1.endpoints.applicants import router as applicants_router
from allocation.api.v1.endpoints.offers import router as offers_router


router = APIRouter(prefix="/v1")
router.include_router(health_router, tags=["health"])
router.include_router(listings_router, tags=["listings"])
router.include_router(applicants_router, tags=["applicants"])
router.include_router(offers_router, tags=["offers"])
