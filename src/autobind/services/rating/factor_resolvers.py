"""Rating factor resolvers.

Each resolver maps a rate request to a :class:`FactorSet` for one risk
dimension. Sub-factors multiply into the category total. Resolvers share no
state and never do I/O, so the four of them can run concurrently.

Whenever a sub-factor cannot be computed from data it takes the neutral
1.0 and its name is recorded in ``defaults_used``.
"""

import math
from collections.abc import Callable, Iterable, Sequence
from decimal import Decimal

from attrs import frozen
from beartype import beartype

from ...core.logging_utils import get_logger
from ...models.premium import FactorSet
from ...models.quote import (
    DEDUCTIBLE_COVERAGES,
    MINIMUM_DRIVING_AGE,
    CoverageType,
    DriverInfo,
    RateRequest,
    VehicleInfo,
)
from . import rate_tables as tables

logger = get_logger(__name__)

Resolver = Callable[[RateRequest], FactorSet]


def _tier(value: float | int | Decimal, tiers: Iterable[tuple], top: float, *, inclusive: bool) -> float:
    for bound, factor in tiers:
        if (value <= bound) if inclusive else (value < bound):
            return factor
    return top


def _product(values: Iterable[float]) -> float:
    return math.prod(values)


@beartype
def vehicle_sub_factors(
    vehicle: VehicleInfo, request: RateRequest
) -> tuple[dict[str, float], list[str]]:
    """Sub-factors for a single vehicle and the names that took defaults."""
    factors: dict[str, float] = {}
    defaults: list[str] = []

    factors["age"] = _tier(
        vehicle.age_on(request.effective_date),
        tables.VEHICLE_AGE_TIERS,
        tables.VEHICLE_AGE_OLDEST,
        inclusive=True,
    )
    factors["usage"] = tables.USAGE_FACTORS[vehicle.usage]

    make = vehicle.make.strip().lower()
    model = vehicle.model.strip().lower()
    if make in tables.LUXURY_MAKES:
        factors["make_model"] = tables.LUXURY_MAKE_FACTOR
    elif make in tables.ECONOMY_MAKES:
        factors["make_model"] = (
            tables.HIGH_THEFT_MODEL_FACTOR
            if model in tables.HIGH_THEFT_MODELS
            else tables.ECONOMY_MAKE_FACTOR
        )
    elif model in tables.HIGH_THEFT_MODELS:
        factors["make_model"] = tables.HIGH_THEFT_MODEL_FACTOR
    elif make in tables.STANDARD_MAKES:
        factors["make_model"] = tables.NEUTRAL_FACTOR
    else:
        logger.info(
            "Unknown make/model %s %s; using neutral factor", vehicle.make, vehicle.model
        )
        factors["make_model"] = tables.NEUTRAL_FACTOR
        defaults.append("make_model")

    if vehicle.market_value is None:
        factors["market_value"] = tables.NEUTRAL_FACTOR
        defaults.append("market_value")
    else:
        factors["market_value"] = _tier(
            vehicle.market_value,
            tables.MARKET_VALUE_TIERS,
            tables.MARKET_VALUE_TOP,
            inclusive=False,
        )
    return factors, defaults


@beartype
def resolve_vehicle_factors(request: RateRequest) -> FactorSet:
    """Vehicle factor; with several vehicles the total is their mean.

    Factor names are prefixed with the vehicle's position, e.g. ``0.age``.
    """
    factors: dict[str, float] = {}
    defaults: list[str] = []
    totals: list[float] = []
    for index, vehicle in enumerate(request.vehicles):
        sub, used = vehicle_sub_factors(vehicle, request)
        factors.update({f"{index}.{name}": value for name, value in sub.items()})
        defaults.extend(f"{index}.{name}" for name in used)
        totals.append(_product(sub.values()))
    return FactorSet(factors=factors, defaults_used=defaults, total=sum(totals) / len(totals))


@beartype
def effective_experience(driver: DriverInfo, age: int) -> int:
    """Years licensed, capped at the years since the minimum driving age."""
    return max(0, min(driver.years_licensed, age - MINIMUM_DRIVING_AGE))


@beartype
def resolve_driver_factors(request: RateRequest) -> FactorSet:
    """Driver factor from age, experience, violations and accidents.

    Age 16 is the discontinuity: below it there is no factor at all and the
    request must be rejected before rating.
    """
    driver = request.driver
    age = driver.age_on(request.effective_date)
    if age < MINIMUM_DRIVING_AGE:
        raise ValueError(f"Driver age {age} is below the minimum driving age")

    experience = effective_experience(driver, age)
    factors = {
        "age": _tier(age, tables.DRIVER_AGE_BANDS, tables.DRIVER_AGE_SENIOR, inclusive=False),
        "experience": _tier(
            experience, tables.EXPERIENCE_TIERS, tables.EXPERIENCE_VETERAN, inclusive=False
        ),
        "violations": min(tables.VIOLATION_STEP**driver.violations, tables.VIOLATION_CAP),
        "accidents": min(1.0 + tables.ACCIDENT_STEP * driver.accidents, tables.ACCIDENT_CAP),
    }
    return FactorSet(factors=factors, total=_product(factors.values()))


@beartype
def resolve_location_factors(request: RateRequest) -> FactorSet:
    """State multiplier times zip territory; an unknown zip leaves the state factor."""
    state = request.location.state
    zip_code = request.location.zip_code
    defaults: list[str] = []

    state_factor = tables.STATE_FACTORS.get(state)
    if state_factor is None:
        logger.info("No location factor for state %s; using neutral factor", state)
        state_factor = tables.NEUTRAL_FACTOR
        defaults.append("state")

    territory = tables.lookup_territory(state, zip_code)
    if territory is None:
        logger.debug("Zip %s not rated in %s; using state-level factor", zip_code, state)
        territory_factor = tables.NEUTRAL_FACTOR
        defaults.append("territory")
    else:
        territory_factor = territory.factor

    factors = {"state": state_factor, "territory": territory_factor}
    return FactorSet(factors=factors, defaults_used=defaults, total=state_factor * territory_factor)


@beartype
def deductible_factor(deductible: Decimal) -> float:
    if deductible <= 250:
        return 1.15
    if deductible == 500:
        return 1.0
    if deductible == 1000:
        return 0.85
    if deductible >= 2000:
        return 0.7
    return 1.0


@beartype
def resolve_coverage_factors(request: RateRequest) -> FactorSet:
    """Liability limit tier times collision and comprehensive deductible tiers."""
    factors: dict[str, float] = {}
    for selection in request.selected_coverages:
        name = selection.coverage_type.value
        if selection.coverage_type == CoverageType.LIABILITY and selection.limit is not None:
            factors[f"{name}_limit"] = _tier(
                selection.limit,
                tables.LIABILITY_LIMIT_TIERS,
                tables.LIABILITY_LIMIT_TOP,
                inclusive=True,
            )
        if selection.coverage_type in DEDUCTIBLE_COVERAGES and selection.deductible is not None:
            factors[f"{name}_deductible"] = deductible_factor(selection.deductible)
        elif selection.coverage_type != CoverageType.LIABILITY:
            factors[f"{name}_deductible"] = tables.NEUTRAL_FACTOR
    return FactorSet(factors=factors, total=_product(factors.values()))


@frozen
class FactorResolvers:
    """The four resolvers the premium calculator composes, in join order."""

    vehicle: Resolver = resolve_vehicle_factors
    driver: Resolver = resolve_driver_factors
    location: Resolver = resolve_location_factors
    coverage: Resolver = resolve_coverage_factors

    def as_pairs(self) -> Sequence[tuple[str, Resolver]]:
        return (
            ("vehicle", self.vehicle),
            ("driver", self.driver),
            ("location", self.location),
            ("coverage", self.coverage),
        )
