# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Premium calculator orchestrating factor resolution, adjustments and tax.

``calculate`` is deterministic and side-effect free: identical requests give
identical breakdowns, which makes re-rating on coverage change idempotent.
Nothing is rounded until the final total.
"""

import math
from concurrent.futures import Executor
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from beartype import beartype

from ...core.config import Settings, get_settings
from ...core.errors import DomainError, ErrorCode, PremiumInvariantError
from ...core.logging_utils import get_logger
from ...core.performance import performance_monitor
from ...core.result_types import Err, Ok
from ...models.premium import FactorSet, PremiumBreakdown
from ...models.quote import MINIMUM_DRIVING_AGE, RateRequest
from .adjustment_catalog import DEFAULT_CATALOG
from .adjustments import AdjustmentContext, AdjustmentRule, evaluate_adjustments
from .factor_resolvers import FactorResolvers
from .rate_tables import COVERAGE_BASE_RATES, is_high_risk_zip
from .state_rules import validate_state_minimums
from .tax_fee_calculator import apply_tax_and_fees
from .vin import validate_vin

logger = get_logger(__name__)

CENT = Decimal("0.01")


@beartype
def to_decimal(value: float) -> Decimal:
    """Decimal of a float's shortest repr, so 1.15 stays 1.15."""
    return Decimal(str(value))


class PremiumCalculator:
    """Turn a rate request into a :class:`PremiumBreakdown`.

    Resolvers run on ``executor`` when one is given (fork-join, results
    joined in vehicle, driver, location, coverage order) and inline
    otherwise. Both paths produce the same breakdown.

    ``calculate`` is synchronous, so async callers wait on the join. The
    resolvers are pure Python, which means a thread pool only pays off
    once they front real I/O; it stays off unless
    ``parallel_factor_resolution`` is set.
    """

    def __init__(
        self,
        *,
        resolvers: FactorResolvers | None = None,
        catalog: tuple[AdjustmentRule, ...] = DEFAULT_CATALOG,
        executor: Executor | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._resolvers = resolvers or FactorResolvers()
        self._catalog = catalog
        self._executor = executor
        self._settings = settings or get_settings()

    @beartype
    def validate_request(self, request: RateRequest) -> Ok[None] | Err[DomainError]:
        """Checks that must pass before any factor is computed."""
        age = request.driver.age_on(request.effective_date)
        if age < MINIMUM_DRIVING_AGE:
            return Err(
                DomainError.validation(
                    ErrorCode.INVALID_DRIVER,
                    f"Driver is {age}; the minimum driving age is {MINIMUM_DRIVING_AGE}",
                    fields=["driver.birth_date"],
                )
            )
        if request.driver.years_licensed > age - MINIMUM_DRIVING_AGE:
            return Err(
                DomainError.validation(
                    ErrorCode.INVALID_DRIVER,
                    f"A driver aged {age} cannot have been licensed for "
                    f"{request.driver.years_licensed} years",
                    fields=["driver.years_licensed"],
                )
            )

        for index, vehicle in enumerate(request.vehicles):
            if vehicle.vin is None:
                continue
            result = validate_vin(vehicle.vin, field=f"vehicles[{index}].vin")
            if result.is_err():
                return result

        return validate_state_minimums(request)

    @beartype
    def base_premium(self, request: RateRequest) -> Decimal:
        per_vehicle = sum(
            (COVERAGE_BASE_RATES[c.coverage_type] for c in request.selected_coverages),
            Decimal("0"),
        )
        return per_vehicle * len(request.vehicles)

    @beartype
    def resolve_factors(self, request: RateRequest) -> dict[str, FactorSet]:
        pairs = self._resolvers.as_pairs()
        if self._executor is None:
            return {name: resolver(request) for name, resolver in pairs}
        futures = [(name, self._executor.submit(resolver, request)) for name, resolver in pairs]
        return {name: future.result() for name, future in futures}

    @performance_monitor("calculate_premium", max_duration_ms=500)
    @beartype
    def calculate(self, request: RateRequest) -> Ok[PremiumBreakdown] | Err[DomainError]:
        """Price a request.

        Returns ``Err`` for caller-fixable input problems. Raises
        :class:`PremiumInvariantError` if the result leaves the sanity band.
        """
        validation = self.validate_request(request)
        if validation.is_err():
            return validation

        base = self.base_premium(request)
        factor_sets = self.resolve_factors(request)
        totals = {name: fs.total for name, fs in factor_sets.items()}
        multiplier = math.prod(to_decimal(t) for t in totals.values())
        subtotal = base * multiplier

        context = AdjustmentContext(
            request=request,
            driver_age=request.driver.age_on(request.effective_date),
            high_risk_zip=is_high_risk_zip(request.location.state, request.location.zip_code),
        )
        adjustments = evaluate_adjustments(
            context,
            subtotal,
            self._catalog,
            max_total_discount_percent=self._settings.max_total_discount_percent,
            flat_adjustments_in_percentage_base=self._settings.flat_adjustments_in_percentage_base,
        )

        taxable = subtotal - adjustments.total_discount + adjustments.total_surcharge
        tax = apply_tax_and_fees(taxable, request.location.state)
        final_total = tax.total.quantize(CENT, rounding=ROUND_HALF_UP)
        self._check_sanity_band(final_total, base, tax.fees_total)

        defaults_used = [
            f"{name}.{factor}" for name, fs in factor_sets.items() for factor in fs.defaults_used
        ]
        if tax.used_default:
            defaults_used.append("tax.schedule")

        breakdown = PremiumBreakdown(
            state=request.location.state,
            base_premium=base,
            vehicle_factors=factor_sets["vehicle"].factors,
            driver_factors=factor_sets["driver"].factors,
            location_factors=factor_sets["location"].factors,
            coverage_factors=factor_sets["coverage"].factors,
            category_totals=totals,
            total_factor_multiplier=float(multiplier),
            defaults_used=defaults_used,
            subtotal=subtotal,
            discounts=list(adjustments.discounts),
            surcharges=list(adjustments.surcharges),
            total_discount=adjustments.total_discount,
            total_surcharge=adjustments.total_surcharge,
            taxable_amount=taxable,
            tax_rate_percent=tax.rate_percent,
            tax_amount=tax.tax_amount,
            policy_fee=tax.policy_fee,
            dmv_fee=tax.dmv_fee,
            fees_total=tax.fees_total,
            final_total=final_total,
        )
        logger.debug(
            "Rated %s: base=%s multiplier=%s final=%s",
            request.location.state,
            base,
            multiplier,
            final_total,
        )
        return Ok(breakdown)

    def _check_sanity_band(self, final_total: Decimal, base: Decimal, fees: Decimal) -> None:
        ceiling = base * self._settings.premium_ceiling_multiple + fees
        if final_total <= 0 or final_total > ceiling:
            logger.error(
                "Premium %s outside sanity band (0, %s] for base %s", final_total, ceiling, base
            )
            raise PremiumInvariantError(
                f"Final premium {final_total} outside (0, {ceiling}]",
                final_total=final_total,
                base_premium=base,
            )


def breakdown_summary(breakdown: PremiumBreakdown) -> dict[str, Any]:
    """Compact view used in logs and API summaries."""
    return {
        "base_premium": str(breakdown.base_premium),
        "total_factor_multiplier": breakdown.total_factor_multiplier,
        "discounts": [d.code for d in breakdown.discounts],
        "surcharges": [s.code for s in breakdown.surcharges],
        "final_total": str(breakdown.final_total),
    }
