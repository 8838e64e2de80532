"""Quote domain models: rating inputs and the quote entity."""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from beartype import beartype
from pydantic import Field, field_validator, model_validator

from .base import BaseModelConfig, IdentifiableModel
from .premium import PremiumBreakdown

MINIMUM_DRIVING_AGE = 16


class CoverageType(str, Enum):
    """Coverages a personal auto quote can carry."""

    LIABILITY = "liability"
    COLLISION = "collision"
    COMPREHENSIVE = "comprehensive"
    UNINSURED_MOTORIST = "uninsured_motorist"
    PIP = "pip"
    RENTAL = "rental"
    ROADSIDE = "roadside"


DEDUCTIBLE_COVERAGES = frozenset({CoverageType.COLLISION, CoverageType.COMPREHENSIVE})


class UsageType(str, Enum):
    COMMUTE = "commute"
    PLEASURE = "pleasure"
    BUSINESS = "business"


class QuoteStatus(str, Enum):
    """Quote lifecycle states."""

    QUOTED = "quoted"
    BINDING = "binding"
    BOUND = "bound"
    IN_FORCE = "in_force"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


@beartype
class DriverInfo(BaseModelConfig):
    """Driver snapshot used for rating."""

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    birth_date: date
    years_licensed: int = Field(..., ge=0, le=90)
    violations: int = Field(default=0, ge=0, le=50, description="Moving violations, 3 years")
    speeding_violations: int = Field(
        default=0, ge=0, le=50, description="Subset of violations that were speeding"
    )
    accidents: int = Field(default=0, ge=0, le=50, description="At-fault accidents, 3 years")
    dui_convictions: int = Field(default=0, ge=0, le=10)
    sr22_required: bool = False
    continuous_coverage: bool = Field(
        default=True, description="No lapse in prior insurance coverage"
    )
    defensive_driving_course: bool = False
    credit_score: int | None = Field(default=None, ge=300, le=850)

    @model_validator(mode="after")
    def validate_violation_breakdown(self) -> "DriverInfo":
        if self.speeding_violations > self.violations:
            raise ValueError("speeding_violations cannot exceed violations")
        return self

    @beartype
    def age_on(self, as_of: date) -> int:
        """Age in whole years on ``as_of``."""
        had_birthday = (as_of.month, as_of.day) >= (
            self.birth_date.month,
            self.birth_date.day,
        )
        return as_of.year - self.birth_date.year - (0 if had_birthday else 1)

    @property
    def has_clean_record(self) -> bool:
        return self.violations == 0 and self.accidents == 0 and self.dui_convictions == 0


@beartype
class VehicleInfo(BaseModelConfig):
    """Vehicle snapshot used for rating.

    ``market_value``, ``safety_rating`` and ``vehicle_class`` are normally
    filled in from lookup collaborators before rating.
    """

    vin: str | None = Field(default=None, description="Vehicle identification number")
    year: int = Field(..., ge=1981, le=2100)
    make: str = Field(..., min_length=1, max_length=50)
    model: str = Field(..., min_length=1, max_length=50)
    annual_mileage: int = Field(default=12000, ge=0, le=200000)
    usage: UsageType = UsageType.COMMUTE
    anti_theft: bool = False
    market_value: Decimal | None = Field(default=None, ge=0)
    safety_rating: int | None = Field(default=None, ge=1, le=5)
    vehicle_class: str | None = Field(
        default=None, description="Performance class from VIN decode: sports, luxury"
    )

    @field_validator("vin")
    @classmethod
    @beartype
    def normalize_vin(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip().upper()
        return v or None

    @beartype
    def age_on(self, as_of: date) -> int:
        """Vehicle age in model years, never negative for next-year models."""
        return max(0, as_of.year - self.year)


@beartype
class LocationInfo(BaseModelConfig):
    state: str = Field(..., pattern=r"^[A-Z]{2}$", description="Two-letter state code")
    zip_code: str = Field(..., pattern=r"^\d{5}$")

    @field_validator("state", mode="before")
    @classmethod
    def uppercase_state(cls, v: object) -> object:
        return v.strip().upper() if isinstance(v, str) else v


@beartype
class CoverageSelection(BaseModelConfig):
    """Coverage selection with limits and deductibles."""

    coverage_type: CoverageType
    limit: Decimal | None = Field(default=None, ge=0, decimal_places=2)
    deductible: Decimal | None = Field(default=None, ge=0, decimal_places=2)
    selected: bool = True

    @model_validator(mode="after")
    def validate_coverage_amounts(self) -> "CoverageSelection":
        if (
            self.selected
            and self.coverage_type in DEDUCTIBLE_COVERAGES
            and self.deductible is None
        ):
            raise ValueError(f"{self.coverage_type.value} coverage requires a deductible")
        if (
            self.selected
            and self.coverage_type == CoverageType.LIABILITY
            and self.limit is None
        ):
            raise ValueError("liability coverage requires a limit")
        return self


@beartype
class RateRequest(BaseModelConfig):
    """Everything needed to price a quote."""

    driver: DriverInfo
    vehicles: list[VehicleInfo] = Field(..., min_length=1, max_length=10)
    location: LocationInfo
    coverages: list[CoverageSelection] = Field(..., min_length=1)
    effective_date: date
    bundled: bool = Field(default=False, description="Customer holds another policy with us")

    @field_validator("coverages")
    @classmethod
    @beartype
    def validate_unique_coverages(
        cls, v: list[CoverageSelection]
    ) -> list[CoverageSelection]:
        types = [c.coverage_type for c in v]
        if len(types) != len(set(types)):
            raise ValueError("Each coverage type may only be selected once")
        return v

    @property
    def selected_coverages(self) -> list[CoverageSelection]:
        return [c for c in self.coverages if c.selected]

    @beartype
    def coverage(self, coverage_type: CoverageType) -> CoverageSelection | None:
        for selection in self.selected_coverages:
            if selection.coverage_type == coverage_type:
                return selection
        return None


@beartype
class Quote(IdentifiableModel):
    """A priced, time-limited offer.

    Only the lifecycle manager changes ``status``; re-rating replaces
    ``breakdown`` and bumps ``version``.
    """

    reference_number: str = Field(..., pattern=r"^DZ[A-Z2-9]{8}$")
    status: QuoteStatus = QuoteStatus.QUOTED
    request: RateRequest
    breakdown: PremiumBreakdown
    created_at: datetime
    expires_at: datetime
    updated_at: datetime
    version: int = Field(default=1, ge=1)
    supersedes: str | None = Field(
        default=None, description="Reference of the expired quote this one replaced"
    )
    superseded_by: str | None = None
    policy_number: str | None = None

    @model_validator(mode="after")
    def validate_dates(self) -> "Quote":
        if self.expires_at <= self.created_at:
            raise ValueError("expires_at must be after created_at")
        if self.updated_at < self.created_at:
            raise ValueError("updated_at cannot precede created_at")
        return self
