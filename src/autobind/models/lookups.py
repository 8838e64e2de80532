"""Results returned by the vehicle lookup collaborators."""

from decimal import Decimal

from beartype import beartype
from pydantic import Field

from .base import BaseModelConfig


@beartype
class VinDecodeResult(BaseModelConfig):
    vin: str = Field(..., min_length=17, max_length=17)
    year: int
    make: str
    model: str
    vehicle_class: str | None = None


@beartype
class ValuationResult(BaseModelConfig):
    market_value: Decimal = Field(..., ge=0)
    source: str = "valuation"


@beartype
class SafetyRatingResult(BaseModelConfig):
    overall_rating: int = Field(..., ge=1, le=5)
