"""API v1 router aggregation."""

from fastapi import APIRouter

from .health import router as health_router
from .policies import router as policies_router
from .quotes import router as quotes_router
from .rating import router as rating_router

router = APIRouter(prefix="/api/v1")

router.include_router(health_router)
router.include_router(rating_router)
router.include_router(quotes_router)
router.include_router(policies_router)
