"""Policy API endpoints."""

from datetime import datetime

from beartype import beartype
from fastapi import APIRouter, Depends

from ...schemas.policy import CancelPolicyRequest, PolicySummary
from ...services.quote_lifecycle import QuoteLifecycleManager
from ..dependencies import get_lifecycle, get_now
from ..errors import raise_domain_error

router = APIRouter(prefix="/policies", tags=["policies"])


@router.get("/{policy_number}", response_model=PolicySummary)
@beartype
async def get_policy(
    policy_number: str,
    lifecycle: QuoteLifecycleManager = Depends(get_lifecycle),
) -> PolicySummary:
    result = await lifecycle.get_policy(policy_number)
    if result.is_err():
        raise_domain_error(result.unwrap_err())
    return PolicySummary.from_policy(result.unwrap())


@router.post("/{policy_number}/activate", response_model=PolicySummary)
@beartype
async def activate_policy(
    policy_number: str,
    lifecycle: QuoteLifecycleManager = Depends(get_lifecycle),
    now: datetime = Depends(get_now),
) -> PolicySummary:
    """Put a bound policy in force once its effective date has arrived."""
    result = await lifecycle.activate_policy(policy_number, now)
    if result.is_err():
        raise_domain_error(result.unwrap_err())
    return PolicySummary.from_policy(result.unwrap())


@router.post("/{policy_number}/cancel", response_model=PolicySummary)
@beartype
async def cancel_policy(
    policy_number: str,
    cancel_request: CancelPolicyRequest,
    lifecycle: QuoteLifecycleManager = Depends(get_lifecycle),
    now: datetime = Depends(get_now),
) -> PolicySummary:
    result = await lifecycle.cancel_policy(policy_number, cancel_request.reason, now)
    if result.is_err():
        raise_domain_error(result.unwrap_err())
    return PolicySummary.from_policy(result.unwrap())
