"""Payment input validation.

Every field problem is collected before failing, so the caller can show
them all at once. Nothing here logs or returns credential values.
"""

import re
from datetime import datetime
from typing import Final

from attrs import frozen
from beartype import beartype

from ..core.errors import DomainError, ErrorCode
from ..core.result_types import Err, Ok
from ..models.payment import AchPaymentInput, CardPaymentInput
from ..models.policy import PaymentMethod

EXPIRY_PATTERN: Final = re.compile(r"^(0[1-9]|1[0-2])/(\d{2})$")
CVV_PATTERN: Final = re.compile(r"^\d{3,4}$")
ROUTING_PATTERN: Final = re.compile(r"^\d{9}$")
ACCOUNT_PATTERN: Final = re.compile(r"^\d{4,17}$")
ACCOUNT_TYPES: Final = frozenset({"checking", "savings"})
ABA_WEIGHTS: Final = (3, 7, 1, 3, 7, 1, 3, 7, 1)


@frozen
class ValidatedPayment:
    """Non-sensitive facts about a payment that passed validation."""

    method: PaymentMethod
    last4: str
    brand: str | None = None
    account_type: str | None = None


@beartype
def luhn_valid(digits: str) -> bool:
    if not digits.isdigit():
        return False
    total = 0
    for index, char in enumerate(reversed(digits)):
        value = int(char)
        if index % 2 == 1:
            value *= 2
            if value > 9:
                value -= 9
        total += value
    return total % 10 == 0


@beartype
def detect_card_brand(digits: str) -> str:
    if digits.startswith("4"):
        return "visa"
    if digits[:2] in {"34", "37"}:
        return "amex"
    if digits[:2] in {"51", "52", "53", "54", "55"} or (
        len(digits) >= 4 and 2221 <= int(digits[:4]) <= 2720
    ):
        return "mastercard"
    if digits.startswith("6011") or digits.startswith("65"):
        return "discover"
    return "unknown"


@beartype
def aba_routing_valid(routing: str) -> bool:
    if not ROUTING_PATTERN.match(routing):
        return False
    return sum(int(d) * w for d, w in zip(routing, ABA_WEIGHTS, strict=True)) % 10 == 0


@beartype
def card_expired(month: int, year: int, now: datetime) -> bool:
    """Cards are valid through the last day of their printed month."""
    return (year, month) < (now.year, now.month)


@beartype
def validate_card(
    payment: CardPaymentInput, now: datetime
) -> Ok[ValidatedPayment] | Err[DomainError]:
    problems: list[dict[str, str]] = []
    raw = payment.number.get_secret_value()
    digits = re.sub(r"[\s-]", "", raw)

    brand = "unknown"
    if not digits.isdigit() or not 13 <= len(digits) <= 19:
        problems.append({"field": "number", "reason": "must be 13 to 19 digits"})
    elif not luhn_valid(digits):
        problems.append({"field": "number", "reason": "failed checksum"})
    else:
        brand = detect_card_brand(digits)

    match = EXPIRY_PATTERN.match(payment.expiry.strip())
    if match is None:
        problems.append({"field": "expiry", "reason": "must be MM/YY"})
    elif card_expired(int(match.group(1)), 2000 + int(match.group(2)), now):
        problems.append({"field": "expiry", "reason": "card has expired"})

    cvv = payment.cvv.get_secret_value().strip()
    if not CVV_PATTERN.match(cvv):
        problems.append({"field": "cvv", "reason": "must be 3 or 4 digits"})
    elif brand == "amex" and len(cvv) != 4:
        problems.append({"field": "cvv", "reason": "American Express requires 4 digits"})
    elif brand not in {"amex", "unknown"} and len(cvv) != 3:
        problems.append({"field": "cvv", "reason": "must be 3 digits"})

    if problems:
        return Err(_invalid(problems))
    return Ok(ValidatedPayment(method=PaymentMethod.CREDIT_CARD, last4=digits[-4:], brand=brand))


@beartype
def validate_ach(payment: AchPaymentInput) -> Ok[ValidatedPayment] | Err[DomainError]:
    problems: list[dict[str, str]] = []
    routing = payment.routing_number.strip()
    if not ROUTING_PATTERN.match(routing):
        problems.append({"field": "routing_number", "reason": "must be 9 digits"})
    elif not aba_routing_valid(routing):
        problems.append({"field": "routing_number", "reason": "failed checksum"})

    account = payment.account_number.get_secret_value().strip()
    if not ACCOUNT_PATTERN.match(account):
        problems.append({"field": "account_number", "reason": "must be 4 to 17 digits"})

    account_type = payment.account_type.strip().lower()
    if account_type not in ACCOUNT_TYPES:
        problems.append({"field": "account_type", "reason": "must be checking or savings"})

    if problems:
        return Err(_invalid(problems))
    return Ok(
        ValidatedPayment(
            method=PaymentMethod.BANK_ACCOUNT, last4=account[-4:], account_type=account_type
        )
    )


@beartype
def validate_payment(
    payment: CardPaymentInput | AchPaymentInput, now: datetime
) -> Ok[ValidatedPayment] | Err[DomainError]:
    if isinstance(payment, CardPaymentInput):
        return validate_card(payment, now)
    return validate_ach(payment)


def _invalid(problems: list[dict[str, str]]) -> DomainError:
    fields = [f"payment.{p['field']}" for p in problems]
    return DomainError.validation(
        ErrorCode.INVALID_PAYMENT_DETAILS,
        "; ".join(f"{p['field']} {p['reason']}" for p in problems),
        fields=fields,
        violations=problems,
    )
