"""Unit tests for state coverage minimums."""

from decimal import Decimal

from autobind.core.errors import ErrorCode
from autobind.models.quote import CoverageSelection, CoverageType, LocationInfo
from autobind.services.rating.state_rules import validate_state_minimums


def _liability(limit: str) -> CoverageSelection:
    return CoverageSelection(coverage_type=CoverageType.LIABILITY, limit=Decimal(limit))


class TestStateMinimums:
    def test_meets_minimum(self, make_request) -> None:
        assert validate_state_minimums(make_request(coverages=[_liability("30000")])).is_ok()

    def test_below_minimum(self, make_request) -> None:
        result = validate_state_minimums(make_request(coverages=[_liability("25000")]))
        error = result.unwrap_err()
        assert error.code == ErrorCode.COVERAGE_BELOW_STATE_MINIMUM
        assert error.fields == ["coverages.liability.limit"]
        assert error.violations[0]["minimum_limit"] == "30000"
        assert error.violations[0]["selected_limit"] == "25000"

    def test_liability_is_mandatory(self, make_request) -> None:
        request = make_request(
            coverages=[
                CoverageSelection(coverage_type=CoverageType.COLLISION, deductible=Decimal("500"))
            ]
        )
        error = validate_state_minimums(request).unwrap_err()
        assert error.violations[0]["reason"] == "required"
        assert error.fields == ["coverages.liability"]

    def test_unselected_liability_counts_as_missing(self, make_request) -> None:
        request = make_request(
            coverages=[
                CoverageSelection(
                    coverage_type=CoverageType.LIABILITY, limit=Decimal("100000"), selected=False
                )
            ]
        )
        assert validate_state_minimums(request).is_err()

    def test_every_violation_is_listed(self, make_request) -> None:
        request = make_request(
            location=LocationInfo(state="NY", zip_code="12207"),
            coverages=[
                _liability("25000"),
                CoverageSelection(
                    coverage_type=CoverageType.UNINSURED_MOTORIST, limit=Decimal("25000")
                ),
            ],
        )
        error = validate_state_minimums(request).unwrap_err()
        assert [v["coverage"] for v in error.violations] == [
            "liability",
            "uninsured_motorist",
            "pip",
        ]
        assert len(error.fields) == 3

    def test_default_minimum_for_other_states(self, make_request) -> None:
        request = make_request(
            location=LocationInfo(state="OH", zip_code="43004"),
            coverages=[_liability("40000")],
        )
        error = validate_state_minimums(request).unwrap_err()
        assert error.violations[0]["minimum_limit"] == "50000"
