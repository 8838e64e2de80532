"""Quote API schemas for request/response models."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from beartype import beartype
from pydantic import BaseModel, ConfigDict, Field

from ..models.payment import PaymentInput
from ..models.premium import PremiumBreakdown
from ..models.quote import CoverageSelection, Quote, QuoteStatus, RateRequest
from ..services.quote_expiration import ExpirationStatus

_CONFIG = ConfigDict(
    frozen=True,
    extra="forbid",
    validate_assignment=True,
    str_strip_whitespace=True,
    validate_default=True,
)


# Request schemas


class CoverageUpdateRequest(BaseModel):
    model_config = _CONFIG

    coverages: list[CoverageSelection] = Field(..., min_length=1)


class BindRequest(BaseModel):
    """Payment for a bind; the quote comes from the path."""

    model_config = _CONFIG

    payment: PaymentInput


# Response schemas


class QuoteResponse(BaseModel):
    model_config = _CONFIG

    id: UUID
    reference_number: str
    status: QuoteStatus
    version: int
    request: RateRequest
    breakdown: PremiumBreakdown
    final_total: Decimal
    created_at: datetime
    expires_at: datetime
    expiration: ExpirationStatus
    supersedes: str | None = None
    superseded_by: str | None = None
    policy_number: str | None = None

    @classmethod
    @beartype
    def from_quote(cls, quote: Quote, expiration: ExpirationStatus) -> "QuoteResponse":
        return cls(
            id=quote.id,
            reference_number=quote.reference_number,
            status=quote.status,
            version=quote.version,
            request=quote.request,
            breakdown=quote.breakdown,
            final_total=quote.breakdown.final_total,
            created_at=quote.created_at,
            expires_at=quote.expires_at,
            expiration=expiration,
            supersedes=quote.supersedes,
            superseded_by=quote.superseded_by,
            policy_number=quote.policy_number,
        )
