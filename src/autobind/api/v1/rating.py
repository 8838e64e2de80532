"""Rating endpoint: price a request without creating a quote."""

from datetime import datetime

from beartype import beartype
from fastapi import APIRouter, Depends

from ...models.premium import PremiumBreakdown
from ...models.quote import RateRequest
from ...services.quote_service import QuoteService
from ..dependencies import get_now, get_quote_service
from ..errors import raise_domain_error

router = APIRouter(prefix="/rating", tags=["rating"])


@router.post("/calculate", response_model=PremiumBreakdown)
@beartype
async def calculate_premium(
    rate_request: RateRequest,
    quote_service: QuoteService = Depends(get_quote_service),
    now: datetime = Depends(get_now),
) -> PremiumBreakdown:
    """Calculate a premium breakdown."""
    result = await quote_service.rate(rate_request, now)
    if result.is_err():
        raise_domain_error(result.unwrap_err())
    return result.unwrap()
