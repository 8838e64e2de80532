"""Unit tests for the rating factor resolvers."""

from collections.abc import Callable
from datetime import date
from decimal import Decimal

import pytest

from autobind.models.quote import (
    CoverageSelection,
    CoverageType,
    DriverInfo,
    LocationInfo,
    RateRequest,
    UsageType,
    VehicleInfo,
)
from autobind.services.rating.factor_resolvers import (
    deductible_factor,
    resolve_coverage_factors,
    resolve_driver_factors,
    resolve_location_factors,
    resolve_vehicle_factors,
)


def _vehicle(**overrides) -> VehicleInfo:
    data = {
        "year": 2025,
        "make": "Toyota",
        "model": "RAV4",
        "market_value": Decimal("28000"),
    }
    data.update(overrides)
    return VehicleInfo(**data)


class TestVehicleFactors:
    @pytest.mark.parametrize(
        ("year", "expected"),
        [(2026, 1.0), (2025, 1.0), (2023, 1.05), (2018, 1.2), (2013, 1.3), (2005, 1.4)],
    )
    def test_age_tiers(
        self, make_request: Callable[..., RateRequest], year: int, expected: float
    ) -> None:
        result = resolve_vehicle_factors(make_request(vehicles=[_vehicle(year=year)]))
        assert result.factors["0.age"] == expected

    @pytest.mark.parametrize(
        ("usage", "expected"),
        [(UsageType.COMMUTE, 1.0), (UsageType.PLEASURE, 0.9), (UsageType.BUSINESS, 1.2)],
    )
    def test_usage(self, make_request, usage: UsageType, expected: float) -> None:
        result = resolve_vehicle_factors(make_request(vehicles=[_vehicle(usage=usage)]))
        assert result.factors["0.usage"] == expected

    def test_make_model_classes(self, make_request) -> None:
        luxury = resolve_vehicle_factors(make_request(vehicles=[_vehicle(make="BMW", model="X5")]))
        economy = resolve_vehicle_factors(make_request(vehicles=[_vehicle()]))
        theft = resolve_vehicle_factors(
            make_request(vehicles=[_vehicle(make="Honda", model="Civic")])
        )
        standard = resolve_vehicle_factors(
            make_request(vehicles=[_vehicle(make="Ford", model="Escape")])
        )
        assert luxury.factors["0.make_model"] == 1.3
        assert economy.factors["0.make_model"] == 0.9
        assert theft.factors["0.make_model"] == 1.15
        assert standard.factors["0.make_model"] == 1.0
        assert standard.defaults_used == []

    def test_unknown_make_model_uses_flagged_default(self, make_request) -> None:
        result = resolve_vehicle_factors(
            make_request(vehicles=[_vehicle(make="Zastava", model="Yugo")])
        )
        assert result.factors["0.make_model"] == 1.0
        assert "0.make_model" in result.defaults_used

    def test_missing_market_value_uses_flagged_default(self, make_request) -> None:
        result = resolve_vehicle_factors(make_request(vehicles=[_vehicle(market_value=None)]))
        assert result.factors["0.market_value"] == 1.0
        assert result.defaults_used == ["0.market_value"]

    @pytest.mark.parametrize(
        ("value", "expected"),
        [("9999", 0.9), ("10000", 1.0), ("29999", 1.0), ("30000", 1.15), ("60000", 1.3)],
    )
    def test_market_value_tiers(self, make_request, value: str, expected: float) -> None:
        result = resolve_vehicle_factors(
            make_request(vehicles=[_vehicle(market_value=Decimal(value))])
        )
        assert result.factors["0.market_value"] == expected

    def test_multiple_vehicles_average_their_totals(self, make_request) -> None:
        first = _vehicle()  # 1.0 * 1.0 * 0.9 * 1.0
        second = _vehicle(
            make="BMW", model="X5", usage=UsageType.BUSINESS, market_value=Decimal("65000")
        )  # 1.0 * 1.2 * 1.3 * 1.3
        result = resolve_vehicle_factors(make_request(vehicles=[first, second]))
        assert result.total == pytest.approx((0.9 + 2.028) / 2)
        assert "1.usage" in result.factors


class TestDriverFactors:
    def _driver(self, birth_date: date, **overrides) -> DriverInfo:
        data = {
            "first_name": "Sam",
            "last_name": "Lee",
            "birth_date": birth_date,
            "years_licensed": 0,
        }
        data.update(overrides)
        return DriverInfo(**data)

    @pytest.mark.parametrize(
        ("birth_date", "expected"),
        [
            (date(2010, 3, 2), 2.5),  # 16 today
            (date(2008, 1, 1), 2.0),  # 18
            (date(2005, 1, 1), 1.5),  # 21
            (date(2000, 1, 1), 1.2),  # 26
            (date(1981, 1, 1), 0.9),  # 45
            (date(1956, 1, 1), 1.0),  # 70
            (date(1946, 1, 1), 1.2),  # 80
        ],
    )
    def test_age_bands(self, make_request, birth_date: date, expected: float) -> None:
        request = make_request(driver=self._driver(birth_date))
        assert resolve_driver_factors(request).factors["age"] == expected

    def test_below_minimum_age_is_rejected(self, make_request) -> None:
        request = make_request(driver=self._driver(date(2010, 3, 3)))  # 15, one day short
        with pytest.raises(ValueError, match="minimum driving age"):
            resolve_driver_factors(request)

    def test_experience_is_capped_by_age(self, make_request) -> None:
        request = make_request(driver=self._driver(date(2008, 1, 1), years_licensed=5))
        # 18 years old: at most 2 years of experience are possible
        assert resolve_driver_factors(request).factors["experience"] == 1.3

    def test_violation_and_accident_caps(self, make_request) -> None:
        request = make_request(
            driver=self._driver(date(1981, 1, 1), years_licensed=20, violations=10, accidents=12)
        )
        factors = resolve_driver_factors(request).factors
        assert factors["violations"] == 2.5
        assert factors["accidents"] == 3.0

    def test_sub_factors_multiply(self, make_request, driver: DriverInfo) -> None:
        request = make_request(driver=driver.model_copy(update={"violations": 1, "accidents": 1}))
        result = resolve_driver_factors(request)
        assert result.total == pytest.approx(0.9 * 0.9 * 1.15 * 1.25)


class TestLocationFactors:
    def test_known_territory(self, make_request) -> None:
        result = resolve_location_factors(
            make_request(location=LocationInfo(state="CA", zip_code="90001"))
        )
        assert result.total == pytest.approx(1.2 * 1.3)
        assert result.defaults_used == []

    def test_unknown_zip_falls_back_to_state_factor(self, make_request) -> None:
        result = resolve_location_factors(
            make_request(location=LocationInfo(state="CA", zip_code="96161"))
        )
        assert result.total == pytest.approx(1.2)
        assert result.defaults_used == ["territory"]

    def test_unknown_state_is_neutral_and_flagged(self, make_request) -> None:
        result = resolve_location_factors(
            make_request(location=LocationInfo(state="wy", zip_code="82001"))
        )
        assert result.total == 1.0
        assert result.defaults_used == ["state", "territory"]


class TestCoverageFactors:
    @pytest.mark.parametrize(
        ("limit", "expected"),
        [
            ("50000", 0.7),
            ("100000", 0.85),
            ("300000", 1.0),
            ("500000", 1.3),
            ("1000000", 1.6),
            ("2000000", 2.0),
        ],
    )
    def test_liability_limit_tiers(self, make_request, limit: str, expected: float) -> None:
        request = make_request(
            coverages=[CoverageSelection(coverage_type=CoverageType.LIABILITY, limit=Decimal(limit))]
        )
        assert resolve_coverage_factors(request).factors["liability_limit"] == expected

    @pytest.mark.parametrize(
        ("deductible", "expected"),
        [("100", 1.15), ("250", 1.15), ("500", 1.0), ("750", 1.0), ("1000", 0.85), ("2500", 0.7)],
    )
    def test_deductible_tiers(self, deductible: str, expected: float) -> None:
        assert deductible_factor(Decimal(deductible)) == expected

    def test_only_collision_and_comprehensive_use_deductibles(self, make_request) -> None:
        request = make_request(
            coverages=[
                CoverageSelection(coverage_type=CoverageType.LIABILITY, limit=Decimal("300000")),
                CoverageSelection(coverage_type=CoverageType.COLLISION, deductible=Decimal("250")),
                CoverageSelection(
                    coverage_type=CoverageType.COMPREHENSIVE, deductible=Decimal("1000")
                ),
                CoverageSelection(
                    coverage_type=CoverageType.RENTAL,
                    limit=Decimal("1500"),
                    deductible=Decimal("100"),
                ),
            ]
        )
        result = resolve_coverage_factors(request)
        assert result.factors["collision_deductible"] == 1.15
        assert result.factors["comprehensive_deductible"] == 0.85
        assert result.factors["rental_deductible"] == 1.0
        assert result.total == pytest.approx(1.0 * 1.15 * 0.85 * 1.0)
