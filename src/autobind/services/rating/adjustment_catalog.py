# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Discount and surcharge catalog.

Predicates are evaluated independently. The only documented exclusivity is
by age partition: young-driver (under 25) and mature-driver (30 to 69)
cannot both apply.
"""

from decimal import Decimal
from typing import Final

from ...models.premium import AdjustmentKind, AdjustmentType
from .adjustments import AdjustmentContext, AdjustmentRule, RuleOutcome
from .factor_resolvers import effective_experience

GOOD_DRIVER_MIN_YEARS: Final = 5
MATURE_DRIVER_AGES: Final = (30, 70)
ANTI_THEFT_CREDIT: Final = Decimal("25")
SR22_FILING_FEE: Final = Decimal("25")

SPORTS_NAMES: Final = frozenset(
    {"ferrari", "lamborghini", "porsche", "corvette", "mustang", "camaro"}
)
LUXURY_NAMES: Final = frozenset(
    {"bmw", "mercedes-benz", "mercedes", "audi", "lexus", "tesla", "cadillac"}
)


def _pct(value: str | int) -> RuleOutcome:
    return RuleOutcome(type=AdjustmentType.PERCENTAGE, value=Decimal(value))


def _flat(value: Decimal) -> RuleOutcome:
    return RuleOutcome(type=AdjustmentType.FLAT, value=value)


def _first_band(value: int, bands: tuple[tuple[int, str], ...]) -> RuleOutcome | None:
    for bound, percent in bands:
        if value < bound:
            return _pct(percent)
    return None


# Discounts


def good_driver(ctx: AdjustmentContext) -> RuleOutcome | None:
    driver = ctx.request.driver
    experience = effective_experience(driver, ctx.driver_age)
    if driver.has_clean_record and experience >= GOOD_DRIVER_MIN_YEARS:
        return _pct(20)
    return None


def mature_driver(ctx: AdjustmentContext) -> RuleOutcome | None:
    low, high = MATURE_DRIVER_AGES
    return _pct(5) if low <= ctx.driver_age < high else None


def multi_car(ctx: AdjustmentContext) -> RuleOutcome | None:
    return _pct(15) if len(ctx.request.vehicles) >= 2 else None


def low_mileage(ctx: AdjustmentContext) -> RuleOutcome | None:
    mileage = max(v.annual_mileage for v in ctx.request.vehicles)
    return _first_band(mileage, ((5000, "15"), (7500, "10"), (10000, "5")))


def anti_theft(ctx: AdjustmentContext) -> RuleOutcome | None:
    equipped = sum(1 for v in ctx.request.vehicles if v.anti_theft)
    return _flat(ANTI_THEFT_CREDIT * equipped) if equipped else None


def safety_features(ctx: AdjustmentContext) -> RuleOutcome | None:
    ratings = [v.safety_rating for v in ctx.request.vehicles]
    if any(r is None for r in ratings):
        return None
    lowest = min(ratings)  # type: ignore[type-var]
    if lowest == 5:
        return _pct(10)
    if lowest == 4:
        return _pct(5)
    return None


def defensive_driving(ctx: AdjustmentContext) -> RuleOutcome | None:
    return _pct(8) if ctx.request.driver.defensive_driving_course else None


def bundled(ctx: AdjustmentContext) -> RuleOutcome | None:
    return _pct(10) if ctx.request.bundled else None


# Surcharges


def young_driver(ctx: AdjustmentContext) -> RuleOutcome | None:
    return _first_band(ctx.driver_age, ((18, "50"), (21, "40"), (25, "30")))


def dui(ctx: AdjustmentContext) -> RuleOutcome | None:
    count = ctx.request.driver.dui_convictions
    if count == 0:
        return None
    return _pct(50) if count == 1 else _pct(100)


def sr22_filing(ctx: AdjustmentContext) -> RuleOutcome | None:
    return _flat(SR22_FILING_FEE) if ctx.request.driver.sr22_required else None


def high_performance_vehicle(ctx: AdjustmentContext) -> RuleOutcome | None:
    best: int | None = None
    for vehicle in ctx.request.vehicles:
        names = {vehicle.make.strip().lower(), vehicle.model.strip().lower()}
        vehicle_class = (vehicle.vehicle_class or "").lower()
        if vehicle_class == "sports" or names & SPORTS_NAMES:
            best = max(best or 0, 40)
        elif vehicle_class == "luxury" or names & LUXURY_NAMES:
            best = max(best or 0, 25)
    return _pct(best) if best else None


def at_fault_accident(ctx: AdjustmentContext) -> RuleOutcome | None:
    accidents = ctx.request.driver.accidents
    return _pct(30 * accidents) if accidents else None


def speeding(ctx: AdjustmentContext) -> RuleOutcome | None:
    tickets = ctx.request.driver.speeding_violations
    return _pct(15 * tickets) if tickets else None


def lapsed_coverage(ctx: AdjustmentContext) -> RuleOutcome | None:
    return None if ctx.request.driver.continuous_coverage else _pct(15)


def high_risk_zip(ctx: AdjustmentContext) -> RuleOutcome | None:
    return _pct(10) if ctx.high_risk_zip else None


def poor_credit(ctx: AdjustmentContext) -> RuleOutcome | None:
    score = ctx.request.driver.credit_score
    if score is None:
        return None
    return _first_band(score, ((500, "30"), (600, "20"), (700, "10")))


DISCOUNT = AdjustmentKind.DISCOUNT
SURCHARGE = AdjustmentKind.SURCHARGE

DEFAULT_CATALOG: Final[tuple[AdjustmentRule, ...]] = (
    AdjustmentRule("GOOD_DRIVER", DISCOUNT, "Clean record, 5+ years licensed", good_driver),
    AdjustmentRule("MATURE_DRIVER", DISCOUNT, "Driver aged 30 to 69", mature_driver),
    AdjustmentRule("MULTI_CAR", DISCOUNT, "Two or more vehicles", multi_car),
    AdjustmentRule("LOW_MILEAGE", DISCOUNT, "Low annual mileage", low_mileage),
    AdjustmentRule("ANTI_THEFT", DISCOUNT, "Anti-theft device credit", anti_theft),
    AdjustmentRule("SAFETY_FEATURES", DISCOUNT, "High safety rating", safety_features),
    AdjustmentRule("DEFENSIVE_DRIVING", DISCOUNT, "Defensive driving course", defensive_driving),
    AdjustmentRule("BUNDLED", DISCOUNT, "Multi-policy bundle", bundled),
    AdjustmentRule("YOUNG_DRIVER", SURCHARGE, "Driver under 25", young_driver),
    AdjustmentRule("DUI", SURCHARGE, "DUI conviction", dui),
    AdjustmentRule("SR22_FILING", SURCHARGE, "SR-22 filing fee", sr22_filing),
    AdjustmentRule(
        "HIGH_PERFORMANCE_VEHICLE", SURCHARGE, "High performance vehicle", high_performance_vehicle
    ),
    AdjustmentRule("AT_FAULT_ACCIDENT", SURCHARGE, "At-fault accidents", at_fault_accident),
    AdjustmentRule("SPEEDING", SURCHARGE, "Speeding violations", speeding),
    AdjustmentRule("LAPSED_COVERAGE", SURCHARGE, "Lapse in prior coverage", lapsed_coverage),
    AdjustmentRule("HIGH_RISK_ZIP", SURCHARGE, "High risk territory", high_risk_zip),
    AdjustmentRule("POOR_CREDIT", SURCHARGE, "Insurance score below 700", poor_credit),
)
