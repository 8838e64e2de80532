"""Payment gateway contract and a mock implementation.

The engine only needs ``authorize``: a tokenized authorization on success,
or a typed failure. Retrying belongs to the gateway, not the binding flow.
"""

import secrets
from datetime import datetime
from decimal import Decimal
from typing import Final, Protocol, runtime_checkable

from beartype import beartype

from ..core.errors import DomainError, ErrorCategory, ErrorCode
from ..core.logging_utils import get_logger
from ..core.result_types import Err, Ok
from ..models.payment import AchPaymentInput, CardPaymentInput, PaymentAuthorization
from .payment_validation import ValidatedPayment

logger = get_logger(__name__)

DECLINED_TEST_CARD: Final = "4000000000000002"


@runtime_checkable
class PaymentGateway(Protocol):
    async def authorize(
        self,
        payment: CardPaymentInput | AchPaymentInput,
        validated: ValidatedPayment,
        amount: Decimal,
        idempotency_key: str,
        now: datetime,
    ) -> Ok[PaymentAuthorization] | Err[DomainError]: ...

    async def void(self, idempotency_key: str) -> bool:
        """Release an authorization that will not be captured."""
        ...


class MockPaymentGateway:
    """Approves everything except the well-known decline card.

    Set ``available`` to False to simulate an outage.
    """

    def __init__(self, *, available: bool = True) -> None:
        self.available = available
        self.authorizations: dict[str, PaymentAuthorization] = {}

    @beartype
    async def authorize(
        self,
        payment: CardPaymentInput | AchPaymentInput,
        validated: ValidatedPayment,
        amount: Decimal,
        idempotency_key: str,
        now: datetime,
    ) -> Ok[PaymentAuthorization] | Err[DomainError]:
        if not self.available:
            return Err(DomainError.dependency("Payment gateway unavailable", fields=["payment"]))

        if idempotency_key in self.authorizations:
            return Ok(self.authorizations[idempotency_key])

        if isinstance(payment, CardPaymentInput) and payment.digits == DECLINED_TEST_CARD:
            logger.info("Mock gateway declined %s ending %s", validated.brand, validated.last4)
            return Err(
                DomainError(
                    code=ErrorCode.PAYMENT_DECLINED,
                    category=ErrorCategory.STATE,
                    message="Payment was declined by the issuer",
                    fields=["payment"],
                )
            )

        authorization = PaymentAuthorization(
            token=f"tok_{secrets.token_hex(12)}",
            last4=validated.last4,
            brand=validated.brand,
            amount=amount,
            authorized_at=now,
        )
        self.authorizations[idempotency_key] = authorization
        return Ok(authorization)

    @beartype
    async def void(self, idempotency_key: str) -> bool:
        authorization = self.authorizations.pop(idempotency_key, None)
        if authorization is None:
            return False
        logger.info("Mock gateway voided authorization %s", authorization.token)
        return True
