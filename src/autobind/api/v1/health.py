"""Health check endpoint."""

from datetime import datetime

from beartype import beartype
from fastapi import APIRouter, Depends

from ...schemas.common import HealthResponse
from ..dependencies import ServiceContainer, get_container, get_now

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
@beartype
async def health_check(
    container: ServiceContainer = Depends(get_container),
    now: datetime = Depends(get_now),
) -> HealthResponse:
    return HealthResponse(
        status="healthy",
        timestamp=now,
        quotes_stored=len(container.quotes),
        policies_stored=len(container.policies),
        lookup_cache_entries=len(container.cache),
    )
