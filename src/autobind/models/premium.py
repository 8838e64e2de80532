"""Rating output models: factor sets, adjustments and the premium breakdown."""

from decimal import Decimal
from enum import Enum

from beartype import beartype
from pydantic import Field, field_validator, model_validator

from .base import BaseModelConfig

FACTOR_CATEGORIES = ("vehicle", "driver", "location", "coverage")


class AdjustmentKind(str, Enum):
    DISCOUNT = "discount"
    SURCHARGE = "surcharge"


class AdjustmentType(str, Enum):
    PERCENTAGE = "percentage"
    FLAT = "flat"


@beartype
class FactorSet(BaseModelConfig):
    """Output of one factor resolver.

    ``defaults_used`` names every sub-factor that fell back to the neutral
    1.0 instead of being computed from data.
    """

    factors: dict[str, float] = Field(default_factory=dict)
    defaults_used: list[str] = Field(default_factory=list)
    total: float = Field(..., gt=0)

    @field_validator("factors")
    @classmethod
    @beartype
    def validate_positive_factors(cls, v: dict[str, float]) -> dict[str, float]:
        for name, value in v.items():
            if value <= 0:
                raise ValueError(f"Factor {name} must be positive, got {value}")
        return v


@beartype
class AppliedAdjustment(BaseModelConfig):
    """One discount or surcharge that applied to the quote.

    ``value`` is a percentage for percentage adjustments and a dollar amount
    for flat ones. ``amount`` is the resulting dollar effect, unrounded.
    """

    code: str = Field(..., min_length=1)
    kind: AdjustmentKind
    type: AdjustmentType
    value: Decimal = Field(..., ge=0)
    amount: Decimal = Field(..., ge=0)
    description: str = ""


@beartype
class PremiumBreakdown(BaseModelConfig):
    """Complete premium computation for one rate request.

    final_total = ((base x factors) - discounts + surcharges) x (1 + tax%) + fees,
    rounded to cents only at the end.
    """

    state: str = Field(..., pattern=r"^[A-Z]{2}$")
    base_premium: Decimal = Field(..., gt=0)
    vehicle_factors: dict[str, float] = Field(default_factory=dict)
    driver_factors: dict[str, float] = Field(default_factory=dict)
    location_factors: dict[str, float] = Field(default_factory=dict)
    coverage_factors: dict[str, float] = Field(default_factory=dict)
    category_totals: dict[str, float] = Field(default_factory=dict)
    total_factor_multiplier: float = Field(..., gt=0)
    defaults_used: list[str] = Field(default_factory=list)

    subtotal: Decimal = Field(..., gt=0, description="Base times all factors")
    discounts: list[AppliedAdjustment] = Field(default_factory=list)
    surcharges: list[AppliedAdjustment] = Field(default_factory=list)
    total_discount: Decimal = Field(default=Decimal("0"), ge=0)
    total_surcharge: Decimal = Field(default=Decimal("0"), ge=0)

    taxable_amount: Decimal
    tax_rate_percent: Decimal = Field(..., ge=0)
    tax_amount: Decimal
    policy_fee: Decimal = Field(..., ge=0)
    dmv_fee: Decimal = Field(..., ge=0)
    fees_total: Decimal = Field(..., ge=0)
    final_total: Decimal

    @model_validator(mode="after")
    def validate_adjustment_kinds(self) -> "PremiumBreakdown":
        if any(d.kind != AdjustmentKind.DISCOUNT for d in self.discounts):
            raise ValueError("discounts may only hold discount adjustments")
        if any(s.kind != AdjustmentKind.SURCHARGE for s in self.surcharges):
            raise ValueError("surcharges may only hold surcharge adjustments")
        return self

    @property
    def adjustment_codes(self) -> list[str]:
        return [a.code for a in (*self.discounts, *self.surcharges)]
