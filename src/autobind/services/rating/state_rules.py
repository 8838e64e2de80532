"""State minimum coverage rules.

Minimums are placeholders for the states we write, not a compliance table.
"""

from decimal import Decimal
from typing import Any, Final

from attrs import field, frozen
from beartype import beartype

from ...core.errors import DomainError, ErrorCode
from ...core.result_types import Err, Ok
from ...models.quote import CoverageType, RateRequest

DEFAULT_LIABILITY_MINIMUM: Final = Decimal("50000")


@frozen
class StateRules:
    """Required coverages and their minimum limits for one state."""

    state: str
    minimum_limits: dict[CoverageType, Decimal] = field(factory=dict)

    @beartype
    def violations(self, request: RateRequest) -> list[dict[str, Any]]:
        """Every unmet minimum, liability first."""
        found: list[dict[str, Any]] = []
        for coverage_type, minimum in self.minimum_limits.items():
            selection = request.coverage(coverage_type)
            if selection is None:
                found.append(
                    {
                        "coverage": coverage_type.value,
                        "field": f"coverages.{coverage_type.value}",
                        "reason": "required",
                        "minimum_limit": str(minimum),
                        "selected_limit": None,
                    }
                )
            elif selection.limit is None or selection.limit < minimum:
                found.append(
                    {
                        "coverage": coverage_type.value,
                        "field": f"coverages.{coverage_type.value}.limit",
                        "reason": "below_minimum",
                        "minimum_limit": str(minimum),
                        "selected_limit": (
                            None if selection.limit is None else str(selection.limit)
                        ),
                    }
                )
        return found


STATE_RULES: Final[dict[str, StateRules]] = {
    "CA": StateRules("CA", {CoverageType.LIABILITY: Decimal("30000")}),
    "TX": StateRules("TX", {CoverageType.LIABILITY: Decimal("60000")}),
    "FL": StateRules("FL", {CoverageType.LIABILITY: Decimal("20000")}),
    "NY": StateRules(
        "NY",
        {
            CoverageType.LIABILITY: Decimal("50000"),
            CoverageType.UNINSURED_MOTORIST: Decimal("50000"),
            CoverageType.PIP: Decimal("50000"),
        },
    ),
    "NJ": StateRules(
        "NJ",
        {
            CoverageType.LIABILITY: DEFAULT_LIABILITY_MINIMUM,
            CoverageType.PIP: Decimal("15000"),
        },
    ),
}


@beartype
def get_state_rules(state: str) -> StateRules:
    return STATE_RULES.get(
        state, StateRules(state, {CoverageType.LIABILITY: DEFAULT_LIABILITY_MINIMUM})
    )


@beartype
def validate_state_minimums(request: RateRequest) -> Ok[None] | Err[DomainError]:
    """Check every minimum and report all violations together."""
    state = request.location.state
    violations = get_state_rules(state).violations(request)
    if not violations:
        return Ok(None)
    return Err(
        DomainError.validation(
            ErrorCode.COVERAGE_BELOW_STATE_MINIMUM,
            f"{len(violations)} coverage minimum(s) not met for {state}",
            fields=[v["field"] for v in violations],
            violations=violations,
        )
    )
