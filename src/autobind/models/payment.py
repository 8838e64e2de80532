"""Payment inputs accepted at bind time and the gateway's authorization.

Card numbers, CVVs and account numbers are ``SecretStr`` so they never leak
through ``repr``, ``str`` or log formatting.
"""

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Literal

from beartype import beartype
from pydantic import Field, SecretStr

from .base import BaseModelConfig


@beartype
class CardPaymentInput(BaseModelConfig):
    method: Literal["credit_card"] = "credit_card"
    number: SecretStr
    expiry: str = Field(..., description="MM/YY")
    cvv: SecretStr
    cardholder_name: str | None = None

    @property
    def digits(self) -> str:
        return "".join(ch for ch in self.number.get_secret_value() if ch.isdigit())


@beartype
class AchPaymentInput(BaseModelConfig):
    method: Literal["bank_account"] = "bank_account"
    routing_number: str
    account_number: SecretStr
    account_type: str = Field(..., description="checking or savings")


PaymentInput = Annotated[
    CardPaymentInput | AchPaymentInput, Field(discriminator="method")
]


@beartype
class PaymentAuthorization(BaseModelConfig):
    """Tokenized result of a successful authorization."""

    token: str = Field(..., min_length=1)
    last4: str = Field(..., pattern=r"^\d{4}$")
    brand: str | None = None
    amount: Decimal = Field(..., gt=0)
    authorized_at: datetime
