"""Policy domain models."""

from datetime import date, datetime
from enum import Enum

from beartype import beartype
from pydantic import Field, model_validator

from .base import BaseModelConfig, IdentifiableModel
from .premium import PremiumBreakdown


class PolicyStatus(str, Enum):
    """Policy lifecycle states."""

    BOUND = "bound"
    IN_FORCE = "in_force"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


class PaymentMethod(str, Enum):
    CREDIT_CARD = "credit_card"
    BANK_ACCOUNT = "bank_account"


@beartype
class PaymentReference(BaseModelConfig):
    """Tokenized payment derivative kept on the policy.

    Never holds a full card number, CVV or account number.
    """

    method: PaymentMethod
    token: str = Field(..., min_length=1)
    last4: str = Field(..., pattern=r"^\d{4}$")
    brand: str | None = None
    account_type: str | None = None


@beartype
class Policy(IdentifiableModel):
    """A bound contract created from a quote."""

    policy_number: str = Field(..., pattern=r"^PL[A-Z2-9]{8}$")
    quote_reference: str = Field(..., pattern=r"^DZ[A-Z2-9]{8}$")
    status: PolicyStatus = PolicyStatus.BOUND
    breakdown: PremiumBreakdown
    payment: PaymentReference
    effective_date: date
    expiration_date: date
    bound_at: datetime
    activated_at: datetime | None = None
    cancelled_at: datetime | None = None
    cancellation_reason: str | None = Field(default=None, max_length=500)

    @model_validator(mode="after")
    def validate_policy_dates(self) -> "Policy":
        if self.expiration_date <= self.effective_date:
            raise ValueError("expiration_date must be after effective_date")
        if self.status == PolicyStatus.CANCELLED and self.cancelled_at is None:
            raise ValueError("cancelled policies must carry cancelled_at")
        if self.status != PolicyStatus.CANCELLED and self.cancelled_at is not None:
            raise ValueError("only cancelled policies may carry cancelled_at")
        return self
