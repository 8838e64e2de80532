"""Rating engine: VIN validation, factor resolution, adjustments and tax."""

from .adjustment_catalog import DEFAULT_CATALOG
from .adjustments import AdjustmentContext, AdjustmentRule, evaluate_adjustments
from .factor_resolvers import (
    FactorResolvers,
    resolve_coverage_factors,
    resolve_driver_factors,
    resolve_location_factors,
    resolve_vehicle_factors,
)
from .rating_engine import PremiumCalculator
from .state_rules import validate_state_minimums
from .tax_fee_calculator import apply_tax_and_fees
from .vin import is_valid_vin, validate_vin

__all__ = [
    "DEFAULT_CATALOG",
    "AdjustmentContext",
    "AdjustmentRule",
    "FactorResolvers",
    "PremiumCalculator",
    "apply_tax_and_fees",
    "evaluate_adjustments",
    "is_valid_vin",
    "resolve_coverage_factors",
    "resolve_driver_factors",
    "resolve_location_factors",
    "resolve_vehicle_factors",
    "validate_state_minimums",
    "validate_vin",
]
