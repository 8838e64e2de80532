"""Quote API endpoints."""

from datetime import datetime

from beartype import beartype
from fastapi import APIRouter, Depends, status

from ...core.config import Settings
from ...models.quote import Quote, RateRequest
from ...schemas.policy import PolicySummary
from ...schemas.quote import BindRequest, CoverageUpdateRequest, QuoteResponse
from ...services.binding import BindingService
from ...services.quote_expiration import expiration_status
from ...services.quote_service import QuoteService
from ..dependencies import get_app_settings, get_binding_service, get_now, get_quote_service
from ..errors import raise_domain_error

router = APIRouter(prefix="/quotes", tags=["quotes"])


def _respond(quote: Quote, now: datetime, settings: Settings) -> QuoteResponse:
    expiration = expiration_status(
        quote,
        now,
        warning_days=settings.warning_threshold_days,
        urgent_days=settings.urgent_threshold_days,
    )
    return QuoteResponse.from_quote(quote, expiration)


@router.post("", response_model=QuoteResponse, status_code=status.HTTP_201_CREATED)
@beartype
async def create_quote(
    rate_request: RateRequest,
    quote_service: QuoteService = Depends(get_quote_service),
    now: datetime = Depends(get_now),
    settings: Settings = Depends(get_app_settings),
) -> QuoteResponse:
    """Create a new insurance quote."""
    result = await quote_service.create_quote(rate_request, now)
    if result.is_err():
        raise_domain_error(result.unwrap_err())
    return _respond(result.unwrap(), now, settings)


@router.get("/{reference}", response_model=QuoteResponse)
@beartype
async def get_quote(
    reference: str,
    quote_service: QuoteService = Depends(get_quote_service),
    now: datetime = Depends(get_now),
    settings: Settings = Depends(get_app_settings),
) -> QuoteResponse:
    """Get a quote with its expiration view computed for this request."""
    result = await quote_service.get_quote(reference)
    if result.is_err():
        raise_domain_error(result.unwrap_err())
    return _respond(result.unwrap(), now, settings)


@router.put("/{reference}/coverages", response_model=QuoteResponse)
@beartype
async def update_coverages(
    reference: str,
    update: CoverageUpdateRequest,
    quote_service: QuoteService = Depends(get_quote_service),
    now: datetime = Depends(get_now),
    settings: Settings = Depends(get_app_settings),
) -> QuoteResponse:
    """Change coverages and re-rate."""
    result = await quote_service.update_coverages(reference, update.coverages, now)
    if result.is_err():
        raise_domain_error(result.unwrap_err())
    return _respond(result.unwrap(), now, settings)


@router.post(
    "/{reference}/requote", response_model=QuoteResponse, status_code=status.HTTP_201_CREATED
)
@beartype
async def requote(
    reference: str,
    quote_service: QuoteService = Depends(get_quote_service),
    now: datetime = Depends(get_now),
    settings: Settings = Depends(get_app_settings),
) -> QuoteResponse:
    """Replace an expired quote with a freshly rated one."""
    result = await quote_service.requote(reference, now)
    if result.is_err():
        raise_domain_error(result.unwrap_err())
    return _respond(result.unwrap(), now, settings)


@router.post(
    "/{reference}/bind", response_model=PolicySummary, status_code=status.HTTP_201_CREATED
)
@beartype
async def bind_quote(
    reference: str,
    bind_request: BindRequest,
    binding_service: BindingService = Depends(get_binding_service),
    now: datetime = Depends(get_now),
) -> PolicySummary:
    """Bind a quote into a policy."""
    result = await binding_service.bind(reference, bind_request.payment, now)
    if result.is_err():
        raise_domain_error(result.unwrap_err())
    return PolicySummary.from_policy(result.unwrap())
