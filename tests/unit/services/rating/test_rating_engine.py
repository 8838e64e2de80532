"""Unit tests for the premium calculator."""

from concurrent.futures import ThreadPoolExecutor
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

import pytest

from autobind.core.config import Settings
from autobind.core.errors import ErrorCode, PremiumInvariantError
from autobind.models.premium import AdjustmentKind, AdjustmentType, FactorSet
from autobind.models.quote import CoverageSelection, CoverageType, DriverInfo, LocationInfo
from autobind.services.rating.adjustments import AdjustmentRule, RuleOutcome
from autobind.services.rating.factor_resolvers import FactorResolvers
from autobind.services.rating.rating_engine import PremiumCalculator
from autobind.services.rating.tax_fee_calculator import apply_tax_and_fees


def _neutral(request) -> FactorSet:
    return FactorSet(factors={"neutral": 1.0}, total=1.0)


NEUTRAL = FactorResolvers(vehicle=_neutral, driver=_neutral, location=_neutral, coverage=_neutral)


@pytest.fixture
def base_1000_request(make_request):
    """Liability 600 + collision 400 on one vehicle."""
    return make_request(
        coverages=[
            CoverageSelection(coverage_type=CoverageType.LIABILITY, limit=Decimal("100000")),
            CoverageSelection(coverage_type=CoverageType.COLLISION, deductible=Decimal("500")),
        ]
    )


class TestPremiumCalculator:
    def test_multiplicative_identity(self, settings: Settings, base_1000_request) -> None:
        """With every factor at 1.0 and no adjustments, only tax and fees remain."""
        calculator = PremiumCalculator(resolvers=NEUTRAL, catalog=(), settings=settings)
        breakdown = calculator.calculate(base_1000_request).unwrap()

        tax = apply_tax_and_fees(Decimal("1"), "CA")
        expected = breakdown.base_premium * (1 + tax.rate_percent / 100) + tax.fees_total
        assert breakdown.base_premium == Decimal("1000")
        assert breakdown.final_total == expected
        assert breakdown.final_total == Decimal("1063.50")
        assert breakdown.total_factor_multiplier == 1.0

    def test_final_total_composition(self, calculator: PremiumCalculator, rate_request) -> None:
        b = calculator.calculate(rate_request).unwrap()
        recomputed = (
            (b.subtotal - b.total_discount + b.total_surcharge)
            * (1 + b.tax_rate_percent / 100)
            + b.policy_fee
            + b.dmv_fee
        ).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
        assert b.final_total == recomputed
        assert b.taxable_amount == b.subtotal - b.total_discount + b.total_surcharge

    def test_rounding_happens_only_at_the_end(self, calculator, rate_request) -> None:
        b = calculator.calculate(rate_request).unwrap()
        assert b.final_total.as_tuple().exponent == -2
        # Intermediate amounts keep full precision
        assert b.subtotal.as_tuple().exponent < -2

    def test_subtotal_is_base_times_category_totals(self, calculator, rate_request) -> None:
        b = calculator.calculate(rate_request).unwrap()
        product = 1.0
        for value in b.category_totals.values():
            product *= value
        assert float(b.subtotal) == pytest.approx(float(b.base_premium) * product)
        assert set(b.category_totals) == {"vehicle", "driver", "location", "coverage"}

    def test_deterministic(self, calculator, rate_request) -> None:
        first = calculator.calculate(rate_request).unwrap()
        second = calculator.calculate(rate_request).unwrap()
        assert first == second
        assert first.model_dump() == second.model_dump()

    def test_parallel_resolution_matches_inline(self, settings, calculator, rate_request) -> None:
        with ThreadPoolExecutor(max_workers=4) as executor:
            parallel = PremiumCalculator(executor=executor, settings=settings)
            assert parallel.calculate(rate_request).unwrap() == calculator.calculate(
                rate_request
            ).unwrap()

    def test_base_scales_with_vehicle_count(self, calculator, make_request, vehicle) -> None:
        request = make_request(vehicles=[vehicle, vehicle])
        assert calculator.base_premium(request) == Decimal("2500")

    def test_defaults_are_reported_by_category(self, calculator, make_request, vehicle) -> None:
        request = make_request(
            vehicles=[vehicle.model_copy(update={"market_value": None})],
            location=LocationInfo(state="CA", zip_code="96161"),
        )
        b = calculator.calculate(request).unwrap()
        assert "vehicle.0.market_value" in b.defaults_used
        assert "location.territory" in b.defaults_used

    def test_unknown_tax_state_is_flagged(self, calculator, make_request) -> None:
        request = make_request(location=LocationInfo(state="PR", zip_code="00901"))
        assert "tax.schedule" in calculator.calculate(request).unwrap().defaults_used


class TestValidation:
    def test_state_minimum_failure(self, calculator, make_request) -> None:
        request = make_request(
            coverages=[CoverageSelection(coverage_type=CoverageType.LIABILITY, limit=Decimal("10000"))]
        )
        error = calculator.calculate(request).unwrap_err()
        assert error.code == ErrorCode.COVERAGE_BELOW_STATE_MINIMUM

    def test_invalid_vin(self, calculator, make_request, vehicle) -> None:
        request = make_request(
            vehicles=[vehicle, vehicle.model_copy(update={"vin": "1HGCM82633A004353"})]
        )
        error = calculator.calculate(request).unwrap_err()
        assert error.code == ErrorCode.CHECKSUM_MISMATCH
        assert error.fields == ["vehicles[1].vin"]

    def test_underage_driver(self, calculator, make_request, driver: DriverInfo) -> None:
        request = make_request(driver=driver.model_copy(update={"birth_date": date(2011, 1, 1)}))
        error = calculator.calculate(request).unwrap_err()
        assert error.code == ErrorCode.INVALID_DRIVER
        assert error.fields == ["driver.birth_date"]

    def test_experience_longer_than_driving_age(self, calculator, make_request, driver) -> None:
        twenty = driver.model_copy(update={"birth_date": date(2005, 6, 1), "years_licensed": 10})
        error = calculator.calculate(make_request(driver=twenty)).unwrap_err()
        assert error.code == ErrorCode.INVALID_DRIVER
        assert error.fields == ["driver.years_licensed"]

    def test_experience_up_to_driving_age_is_accepted(
        self, calculator, make_request, driver
    ) -> None:
        twenty = driver.model_copy(update={"birth_date": date(2005, 6, 1), "years_licensed": 4})
        assert calculator.calculate(make_request(driver=twenty)).is_ok()


class TestSanityBand:
    def test_negative_premium_raises(self, settings, base_1000_request) -> None:
        huge_credit = AdjustmentRule(
            "HUGE",
            AdjustmentKind.DISCOUNT,
            "credit",
            lambda ctx: RuleOutcome(type=AdjustmentType.FLAT, value=Decimal("5000")),
        )
        calculator = PremiumCalculator(resolvers=NEUTRAL, catalog=(huge_credit,), settings=settings)
        with pytest.raises(PremiumInvariantError):
            calculator.calculate(base_1000_request)

    def test_out_of_band_high_premium_raises(self, base_1000_request) -> None:
        tight = Settings(api_env="test", premium_ceiling_multiple=Decimal("0.5"))
        calculator = PremiumCalculator(resolvers=NEUTRAL, catalog=(), settings=tight)
        with pytest.raises(PremiumInvariantError):
            calculator.calculate(base_1000_request)


class TestScenarios:
    def test_young_driver_in_california(self, calculator, make_request, driver, vehicle) -> None:
        young = driver.model_copy(update={"birth_date": date(2004, 1, 10), "years_licensed": 4})
        request = make_request(
            driver=young, vehicles=[vehicle.model_copy(update={"annual_mileage": 12000})]
        )
        b = calculator.calculate(request).unwrap()

        assert "YOUNG_DRIVER" in [s.code for s in b.surcharges]
        assert "GOOD_DRIVER" not in [d.code for d in b.discounts]
        assert Decimal("0") < b.final_total <= b.base_premium * 100 + b.fees_total

    def test_mature_low_mileage_driver(self, calculator, rate_request) -> None:
        b = calculator.calculate(rate_request).unwrap()

        codes = [d.code for d in b.discounts]
        assert {"MATURE_DRIVER", "GOOD_DRIVER", "LOW_MILEAGE"} <= set(codes)
        tax = apply_tax_and_fees(Decimal("1"), "CA")
        all_factors_neutral = b.base_premium * (1 + tax.rate_percent / 100) + tax.fees_total
        assert b.final_total < all_factors_neutral
