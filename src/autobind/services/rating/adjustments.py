"""Discount and surcharge evaluation.

Each catalog rule is an independent eligibility predicate over the quote
snapshot. Percentage adjustments are computed against the pre-discount
subtotal and summed, never compounded:

    total_discount = base x sum(discount %) / 100 + sum(flat discounts)

Surcharges use the same pool shape and are added, not multiplied, onto the
discounted amount. Whether flat amounts join the percentage base is a
configuration choice (off by default: the base is the subtotal alone).
"""

from collections.abc import Callable, Sequence
from decimal import Decimal

from attrs import field, frozen
from beartype import beartype

from ...core.logging_utils import get_logger
from ...models.premium import AdjustmentKind, AdjustmentType, AppliedAdjustment
from ...models.quote import RateRequest

logger = get_logger(__name__)

HUNDRED = Decimal("100")


@frozen
class AdjustmentContext:
    """Derived facts the predicates read besides the request itself."""

    request: RateRequest
    driver_age: int
    high_risk_zip: bool = False


@frozen
class RuleOutcome:
    type: AdjustmentType
    value: Decimal


Predicate = Callable[[AdjustmentContext], RuleOutcome | None]


@frozen
class AdjustmentRule:
    """A catalog entry: a code plus the predicate that decides eligibility."""

    code: str
    kind: AdjustmentKind
    description: str
    evaluate: Predicate


@frozen
class AdjustmentOutcome:
    discounts: tuple[AppliedAdjustment, ...] = field(factory=tuple)
    surcharges: tuple[AppliedAdjustment, ...] = field(factory=tuple)
    total_discount: Decimal = Decimal("0")
    total_surcharge: Decimal = Decimal("0")


def _percentage_amounts(
    entries: list[tuple[AdjustmentRule, RuleOutcome]],
    base: Decimal,
    cap: Decimal | None,
) -> list[tuple[AdjustmentRule, Decimal, Decimal]]:
    """Resolve (rule, effective value, amount) for each entry."""
    percentages = [
        (rule, outcome.value) for rule, outcome in entries
        if outcome.type == AdjustmentType.PERCENTAGE
    ]
    total_percent = sum((value for _, value in percentages), Decimal("0"))
    scale = Decimal("1")
    if cap is not None and total_percent > cap:
        scale = cap / total_percent
        logger.info(
            "Percentage discounts total %s%%; scaling to cap of %s%%", total_percent, cap
        )

    resolved = []
    for rule, outcome in entries:
        if outcome.type == AdjustmentType.PERCENTAGE:
            value = outcome.value * scale
            resolved.append((rule, value, base * value / HUNDRED))
        else:
            resolved.append((rule, outcome.value, outcome.value))
    return resolved


@beartype
def evaluate_adjustments(
    context: AdjustmentContext,
    subtotal: Decimal,
    rules: Sequence[AdjustmentRule],
    *,
    max_total_discount_percent: Decimal | None = None,
    flat_adjustments_in_percentage_base: bool = False,
) -> AdjustmentOutcome:
    """Run every rule against the snapshot and price the ones that apply.

    Rules keep their catalog order in the output so the breakdown is stable.
    """
    discounts: list[tuple[AdjustmentRule, RuleOutcome]] = []
    surcharges: list[tuple[AdjustmentRule, RuleOutcome]] = []
    for rule in rules:
        outcome = rule.evaluate(context)
        if outcome is None:
            continue
        target = discounts if rule.kind == AdjustmentKind.DISCOUNT else surcharges
        target.append((rule, outcome))

    base = subtotal
    if flat_adjustments_in_percentage_base:
        flat_discounts = sum(
            (o.value for _, o in discounts if o.type == AdjustmentType.FLAT), Decimal("0")
        )
        flat_surcharges = sum(
            (o.value for _, o in surcharges if o.type == AdjustmentType.FLAT), Decimal("0")
        )
        base = subtotal - flat_discounts + flat_surcharges

    applied_discounts = _to_applied(
        _percentage_amounts(discounts, base, max_total_discount_percent), discounts
    )
    applied_surcharges = _to_applied(_percentage_amounts(surcharges, base, None), surcharges)

    return AdjustmentOutcome(
        discounts=applied_discounts,
        surcharges=applied_surcharges,
        total_discount=sum((a.amount for a in applied_discounts), Decimal("0")),
        total_surcharge=sum((a.amount for a in applied_surcharges), Decimal("0")),
    )


def _to_applied(
    resolved: list[tuple[AdjustmentRule, Decimal, Decimal]],
    entries: list[tuple[AdjustmentRule, RuleOutcome]],
) -> tuple[AppliedAdjustment, ...]:
    return tuple(
        AppliedAdjustment(
            code=rule.code,
            kind=rule.kind,
            type=outcome.type,
            value=value,
            amount=amount,
            description=rule.description,
        )
        for (rule, value, amount), (_, outcome) in zip(resolved, entries, strict=True)
    )
