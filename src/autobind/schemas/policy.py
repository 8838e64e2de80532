"""Policy API schemas."""

from datetime import date, datetime
from decimal import Decimal

from beartype import beartype
from pydantic import BaseModel, ConfigDict, Field

from ..models.policy import PaymentReference, Policy, PolicyStatus

_CONFIG = ConfigDict(frozen=True, extra="forbid", str_strip_whitespace=True)


class CancelPolicyRequest(BaseModel):
    model_config = _CONFIG

    reason: str = Field(..., min_length=1, max_length=500)


class PolicySummary(BaseModel):
    """What a bind returns: number, status and term."""

    model_config = _CONFIG

    policy_number: str
    quote_reference: str
    status: PolicyStatus
    effective_date: date
    expiration_date: date
    final_total: Decimal
    payment: PaymentReference
    bound_at: datetime
    activated_at: datetime | None = None
    cancelled_at: datetime | None = None

    @classmethod
    @beartype
    def from_policy(cls, policy: Policy) -> "PolicySummary":
        return cls(
            policy_number=policy.policy_number,
            quote_reference=policy.quote_reference,
            status=policy.status,
            effective_date=policy.effective_date,
            expiration_date=policy.expiration_date,
            final_total=policy.breakdown.final_total,
            payment=policy.payment,
            bound_at=policy.bound_at,
            activated_at=policy.activated_at,
            cancelled_at=policy.cancelled_at,
        )
