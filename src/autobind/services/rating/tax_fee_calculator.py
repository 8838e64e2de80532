"""State premium tax and fixed fees.

Tax applies to the adjusted premium only. Policy and DMV fees are added
after tax and are never taxed.
"""

from decimal import Decimal
from typing import Final, NamedTuple

from attrs import frozen
from beartype import beartype

from ...core.logging_utils import get_logger

logger = get_logger(__name__)


class TaxSchedule(NamedTuple):
    rate_percent: Decimal
    policy_fee: Decimal
    dmv_fee: Decimal


def _s(rate: str, policy_fee: int, dmv_fee: int) -> TaxSchedule:
    return TaxSchedule(Decimal(rate), Decimal(policy_fee), Decimal(dmv_fee))


DEFAULT_SCHEDULE: Final = _s("2.00", 14, 21)

TAX_SCHEDULES: Final[dict[str, TaxSchedule]] = {
    "CA": _s("2.35", 15, 25),
    "TX": _s("1.75", 12, 20),
    "FL": _s("1.75", 14, 22),
    "NY": _s("2.50", 18, 30),
    "PA": _s("2.00", 13, 24),
    "IL": _s("2.25", 16, 23),
    "OH": _s("1.40", 11, 18),
    "GA": _s("2.50", 14, 21),
    "NC": _s("1.90", 13, 19),
    "MI": _s("1.25", 15, 26),
    "NJ": _s("2.10", 17, 28),
    "VA": _s("2.25", 14, 22),
    "WA": _s("2.00", 15, 24),
    "AZ": _s("2.00", 12, 20),
    "MA": _s("2.28", 16, 27),
    "TN": _s("1.75", 12, 19),
    "IN": _s("1.30", 11, 17),
    "MO": _s("2.00", 13, 20),
    "MD": _s("2.00", 15, 25),
    "WI": _s("2.00", 13, 21),
    "CO": _s("2.00", 14, 22),
    "MN": _s("2.00", 14, 23),
    "SC": _s("1.25", 12, 18),
    "AL": _s("2.45", 13, 19),
    "LA": _s("2.25", 14, 21),
    "KY": _s("1.90", 12, 18),
    "OR": _s("2.30", 15, 23),
    "OK": _s("2.25", 12, 19),
    "CT": _s("1.75", 16, 26),
    "UT": _s("2.25", 13, 20),
    "NV": _s("3.50", 14, 22),
    "AR": _s("2.50", 12, 18),
    "MS": _s("3.00", 11, 17),
    "KS": _s("2.00", 12, 19),
    "NM": _s("3.00", 13, 20),
    "NE": _s("1.00", 12, 18),
    "WV": _s("3.00", 12, 17),
    "ID": _s("1.50", 11, 16),
    "HI": _s("4.265", 18, 30),
    "NH": _s("1.25", 15, 24),
    "ME": _s("2.00", 14, 22),
    "RI": _s("2.00", 16, 25),
    "MT": _s("2.75", 12, 18),
    "DE": _s("2.00", 15, 23),
    "SD": _s("2.50", 11, 17),
    "ND": _s("2.00", 11, 16),
    "AK": _s("2.70", 17, 27),
    "VT": _s("2.00", 14, 22),
    "WY": _s("0.75", 10, 15),
}


@frozen
class TaxFeeResult:
    taxable_amount: Decimal
    rate_percent: Decimal
    tax_amount: Decimal
    policy_fee: Decimal
    dmv_fee: Decimal
    used_default: bool = False

    @property
    def fees_total(self) -> Decimal:
        return self.policy_fee + self.dmv_fee

    @property
    def total(self) -> Decimal:
        return self.taxable_amount + self.tax_amount + self.fees_total


@beartype
def get_tax_schedule(state: str) -> tuple[TaxSchedule, bool]:
    """Schedule for ``state`` and whether the default had to be used."""
    schedule = TAX_SCHEDULES.get(state.upper())
    if schedule is None:
        logger.warning(
            "No tax schedule for state %s; using default %s%%",
            state,
            DEFAULT_SCHEDULE.rate_percent,
        )
        return DEFAULT_SCHEDULE, True
    return schedule, False


@beartype
def apply_tax_and_fees(taxable_amount: Decimal, state: str) -> TaxFeeResult:
    """Tax the adjusted premium and add untaxed fees. Nothing is rounded here."""
    schedule, used_default = get_tax_schedule(state)
    return TaxFeeResult(
        taxable_amount=taxable_amount,
        rate_percent=schedule.rate_percent,
        tax_amount=taxable_amount * schedule.rate_percent / Decimal("100"),
        policy_fee=schedule.policy_fee,
        dmv_fee=schedule.dmv_fee,
        used_default=used_default,
    )
