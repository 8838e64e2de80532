"""Rate tables consumed by the factor resolvers.

Tier tables are ordered ``(upper_bound, factor)`` pairs; a value takes the
factor of the first tier whose bound it does not exceed (or is below, for
exclusive tables). Values here are placeholders, not calibrated rates.
"""

from decimal import Decimal
from typing import Final, NamedTuple

from ...models.quote import CoverageType, UsageType

COVERAGE_BASE_RATES: Final[dict[CoverageType, Decimal]] = {
    CoverageType.LIABILITY: Decimal("600"),
    CoverageType.COLLISION: Decimal("400"),
    CoverageType.COMPREHENSIVE: Decimal("250"),
    CoverageType.UNINSURED_MOTORIST: Decimal("100"),
    CoverageType.PIP: Decimal("150"),
    CoverageType.RENTAL: Decimal("30"),
    CoverageType.ROADSIDE: Decimal("20"),
}

NEUTRAL_FACTOR: Final = 1.0

# Vehicle
VEHICLE_AGE_TIERS: Final = ((1, 1.0), (5, 1.05), (10, 1.2), (15, 1.3))
VEHICLE_AGE_OLDEST: Final = 1.4

USAGE_FACTORS: Final[dict[UsageType, float]] = {
    UsageType.COMMUTE: 1.0,
    UsageType.PLEASURE: 0.9,
    UsageType.BUSINESS: 1.2,
}

LUXURY_MAKES: Final = frozenset(
    {"bmw", "mercedes", "mercedes-benz", "audi", "lexus", "porsche", "tesla"}
)
ECONOMY_MAKES: Final = frozenset({"toyota", "honda", "hyundai", "kia", "mazda"})
STANDARD_MAKES: Final = frozenset(
    {
        "ford",
        "chevrolet",
        "dodge",
        "jeep",
        "ram",
        "gmc",
        "nissan",
        "subaru",
        "volkswagen",
        "buick",
        "chrysler",
        "cadillac",
        "lincoln",
        "acura",
        "infiniti",
        "volvo",
        "mitsubishi",
    }
)
HIGH_THEFT_MODELS: Final = frozenset({"civic", "accord", "camry", "corolla", "altima"})
LUXURY_MAKE_FACTOR: Final = 1.3
ECONOMY_MAKE_FACTOR: Final = 0.9
HIGH_THEFT_MODEL_FACTOR: Final = 1.15

# Exclusive upper bounds.
MARKET_VALUE_TIERS: Final = (
    (Decimal("10000"), 0.9),
    (Decimal("30000"), 1.0),
    (Decimal("60000"), 1.15),
)
MARKET_VALUE_TOP: Final = 1.3

# Driver, exclusive upper bounds on age.
DRIVER_AGE_BANDS: Final = ((18, 2.5), (21, 2.0), (25, 1.5), (30, 1.2), (65, 0.9), (75, 1.0))
DRIVER_AGE_SENIOR: Final = 1.2
EXPERIENCE_TIERS: Final = ((1, 1.4), (3, 1.3), (5, 1.15), (10, 1.0))
EXPERIENCE_VETERAN: Final = 0.9
VIOLATION_STEP: Final = 1.15
VIOLATION_CAP: Final = 2.5
ACCIDENT_STEP: Final = 0.25
ACCIDENT_CAP: Final = 3.0

# Location
STATE_FACTORS: Final[dict[str, float]] = {
    "MI": 1.35,
    "LA": 1.30,
    "FL": 1.25,
    "NY": 1.25,
    "CA": 1.20,
    "NJ": 1.20,
    "TX": 1.10,
    "IL": 1.10,
    "GA": 1.05,
    "PA": 1.05,
    "OH": 1.00,
    "NC": 1.00,
    "IA": 0.90,
    "WI": 0.90,
    "ID": 0.85,
    "ND": 0.85,
    "ME": 0.85,
    "VT": 0.85,
}


class Territory(NamedTuple):
    factor: float
    high_risk: bool = False


TERRITORIES: Final[dict[str, dict[str, Territory]]] = {
    "CA": {
        "90001": Territory(1.30, high_risk=True),
        "90210": Territory(1.15),
        "94105": Territory(1.10),
        "95814": Territory(0.95),
        "92101": Territory(1.05),
    },
    "TX": {
        "77001": Territory(1.20, high_risk=True),
        "78701": Territory(1.05),
        "75201": Territory(1.10),
    },
    "NY": {
        "10001": Territory(1.35, high_risk=True),
        "11201": Territory(1.30, high_risk=True),
        "12207": Territory(1.00),
    },
    "FL": {
        "33101": Territory(1.30, high_risk=True),
        "32801": Territory(1.10),
    },
}

# Coverage, inclusive upper bounds.
LIABILITY_LIMIT_TIERS: Final = (
    (Decimal("50000"), 0.7),
    (Decimal("100000"), 0.85),
    (Decimal("300000"), 1.0),
    (Decimal("500000"), 1.3),
    (Decimal("1000000"), 1.6),
)
LIABILITY_LIMIT_TOP: Final = 2.0


def lookup_territory(state: str, zip_code: str) -> Territory | None:
    return TERRITORIES.get(state, {}).get(zip_code)


def is_high_risk_zip(state: str, zip_code: str) -> bool:
    territory = lookup_territory(state, zip_code)
    return territory is not None and territory.high_risk
