# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Binding orchestrator: payment validation, authorization and policy creation.

The bound price is the last quoted price. Nothing is re-rated at bind time;
the quote's breakdown is copied onto the policy as-is.
"""

import calendar
from datetime import date, datetime

from beartype import beartype

from ..core.config import Settings, get_settings
from ..core.errors import DomainError
from ..core.logging_utils import get_logger
from ..core.performance import performance_monitor
from ..core.result_types import Err, Ok
from ..models.payment import AchPaymentInput, CardPaymentInput, PaymentAuthorization
from ..models.policy import PaymentReference, Policy
from ..models.quote import Quote
from .payment_gateway import PaymentGateway
from .payment_validation import ValidatedPayment, validate_payment
from .quote_lifecycle import QuoteLifecycleManager
from .reference_numbers import (
    POLICY_PREFIX,
    ReferenceGenerator,
    generate_reference,
    insert_with_unique_reference,
)

logger = get_logger(__name__)


@beartype
def add_months(start: date, months: int) -> date:
    """Same day ``months`` later, clamped to the end of shorter months."""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


@beartype
def authorization_key(quote: Quote, validated: ValidatedPayment) -> str:
    """Idempotency key for one payment instrument against one quote version."""
    instrument = validated.brand or validated.account_type or "account"
    return (
        f"{quote.reference_number}:v{quote.version}:"
        f"{validated.method.value}:{instrument}:{validated.last4}"
    )


class BindingService:
    """Turns a QUOTED quote into a BOUND policy."""

    def __init__(
        self,
        lifecycle: QuoteLifecycleManager,
        gateway: PaymentGateway,
        *,
        settings: Settings | None = None,
        reference_generator: ReferenceGenerator = generate_reference,
    ) -> None:
        self._lifecycle = lifecycle
        self._gateway = gateway
        self._settings = settings or get_settings()
        self._generate_reference = reference_generator

    @performance_monitor("bind_quote")
    @beartype
    async def bind(
        self,
        quote_reference: str,
        payment: CardPaymentInput | AchPaymentInput,
        now: datetime,
    ) -> Ok[Policy] | Err[DomainError]:
        """Bind a quote.

        Payment details are checked before the quote is touched. After
        ``QUOTED -> BINDING`` succeeds, any failure puts the quote back in
        QUOTED so the customer can retry without re-rating.
        """
        validation = validate_payment(payment, now)
        if validation.is_err():
            logger.info(
                "Bind rejected for %s: invalid %s fields %s",
                quote_reference,
                payment.method,
                validation.unwrap_err().fields,
            )
            return validation
        validated = validation.unwrap()

        begun = await self._lifecycle.begin_binding(quote_reference, now)
        if begun.is_err():
            return begun
        quote = begun.unwrap()

        idempotency_key = authorization_key(quote, validated)
        try:
            authorization = await self._gateway.authorize(
                payment,
                validated,
                quote.breakdown.final_total,
                idempotency_key,
                now,
            )
        except Exception:
            logger.exception("Payment gateway raised while binding %s", quote_reference)
            await self._lifecycle.revert_binding(quote_reference, now)
            raise

        if authorization.is_err():
            logger.info(
                "Authorization failed for %s (%s ending %s): %s",
                quote_reference,
                validated.brand or validated.method.value,
                validated.last4,
                authorization.unwrap_err().code.value,
            )
            await self._lifecycle.revert_binding(quote_reference, now)
            return authorization

        created = await self._create_policy(quote, validated, authorization.unwrap(), now)
        if created.is_err():
            await self._gateway.void(idempotency_key)
            await self._lifecycle.revert_binding(quote_reference, now)
            return created
        policy = created.unwrap()

        completed = await self._lifecycle.complete_binding(
            quote_reference, policy.policy_number, now
        )
        if completed.is_err():
            logger.error(
                "Policy %s created but quote %s could not be marked bound; rolling back",
                policy.policy_number,
                quote_reference,
            )
            await self._lifecycle.discard_policy(policy.policy_number)
            await self._gateway.void(idempotency_key)
            await self._lifecycle.revert_binding(quote_reference, now)
            return completed

        logger.info(
            "Bound quote %s as policy %s for %s",
            quote_reference,
            policy.policy_number,
            policy.breakdown.final_total,
        )

        if self._settings.activate_on_bind and now.date() >= policy.effective_date:
            return await self._lifecycle.activate_policy(policy.policy_number, now)
        return Ok(policy)

    async def _create_policy(
        self,
        quote: Quote,
        validated: ValidatedPayment,
        authorization: PaymentAuthorization,
        now: datetime,
    ) -> Ok[Policy] | Err[DomainError]:
        effective = max(quote.request.effective_date, now.date())
        expiration = add_months(effective, self._settings.policy_term_months)
        payment_reference = PaymentReference(
            method=validated.method,
            token=authorization.token,
            last4=authorization.last4,
            brand=authorization.brand,
            account_type=validated.account_type,
        )
        created: list[Policy] = []

        async def insert(policy_number: str) -> bool:
            policy = Policy(
                policy_number=policy_number,
                quote_reference=quote.reference_number,
                breakdown=quote.breakdown,
                payment=payment_reference,
                effective_date=effective,
                expiration_date=expiration,
                bound_at=now,
            )
            if await self._lifecycle.register_policy(policy):
                created.append(policy)
                return True
            return False

        result = await insert_with_unique_reference(
            POLICY_PREFIX,
            insert,
            max_attempts=self._settings.max_reference_attempts,
            generator=self._generate_reference,
        )
        if result.is_err():
            return result
        return Ok(created[-1])
