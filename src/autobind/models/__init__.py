"""Domain models package.

All models are frozen Pydantic models with strict validation.
"""

from .base import BaseModelConfig, IdentifiableModel
from .lookups import SafetyRatingResult, ValuationResult, VinDecodeResult
from .payment import (
    AchPaymentInput,
    CardPaymentInput,
    PaymentAuthorization,
    PaymentInput,
)
from .policy import PaymentMethod, PaymentReference, Policy, PolicyStatus
from .premium import (
    AdjustmentKind,
    AdjustmentType,
    AppliedAdjustment,
    FactorSet,
    PremiumBreakdown,
)
from .quote import (
    CoverageSelection,
    CoverageType,
    DriverInfo,
    LocationInfo,
    Quote,
    QuoteStatus,
    RateRequest,
    UsageType,
    VehicleInfo,
)

__all__ = [
    "AchPaymentInput",
    "AdjustmentKind",
    "AdjustmentType",
    "AppliedAdjustment",
    "BaseModelConfig",
    "CardPaymentInput",
    "CoverageSelection",
    "CoverageType",
    "DriverInfo",
    "FactorSet",
    "IdentifiableModel",
    "LocationInfo",
    "PaymentAuthorization",
    "PaymentInput",
    "PaymentMethod",
    "PaymentReference",
    "Policy",
    "PolicyStatus",
    "PremiumBreakdown",
    "Quote",
    "QuoteStatus",
    "RateRequest",
    "SafetyRatingResult",
    "UsageType",
    "ValuationResult",
    "VehicleInfo",
    "VinDecodeResult",
]
