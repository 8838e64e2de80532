"""Quote expiration, computed from ``created_at`` on every read."""

from datetime import datetime, timedelta
from enum import Enum

from beartype import beartype
from pydantic import Field

from ..models.base import BaseModelConfig
from ..models.quote import Quote

QUOTE_VALIDITY_DAYS = 30
WARNING_THRESHOLD_DAYS = 7
URGENT_THRESHOLD_DAYS = 3


class ExpirationUrgency(str, Enum):
    NORMAL = "normal"
    WARNING = "warning"
    URGENT = "urgent"
    EXPIRED = "expired"


@beartype
class ExpirationStatus(BaseModelConfig):
    """Derived view; never stored on the quote."""

    expires_at: datetime
    is_expired: bool
    days_remaining: int = Field(..., ge=0)
    hours_remaining: int = Field(..., ge=0)
    urgency: ExpirationUrgency
    message: str


@beartype
def expiration_for(created_at: datetime, validity_days: int = QUOTE_VALIDITY_DAYS) -> datetime:
    return created_at + timedelta(days=validity_days)


@beartype
def is_expired(quote: Quote, now: datetime) -> bool:
    """A quote is expired from the instant ``now`` reaches ``expires_at``."""
    return now >= quote.expires_at


@beartype
def urgency_for(
    days_remaining: int,
    expired: bool,
    *,
    warning_days: int = WARNING_THRESHOLD_DAYS,
    urgent_days: int = URGENT_THRESHOLD_DAYS,
) -> ExpirationUrgency:
    if expired:
        return ExpirationUrgency.EXPIRED
    if days_remaining <= urgent_days:
        return ExpirationUrgency.URGENT
    if days_remaining <= warning_days:
        return ExpirationUrgency.WARNING
    return ExpirationUrgency.NORMAL


def _message(urgency: ExpirationUrgency, days: int, hours: int) -> str:
    if urgency == ExpirationUrgency.EXPIRED:
        return "This quote has expired. Request a new quote to continue."
    if days == 0:
        return f"This quote expires in {hours} hour{'s' if hours != 1 else ''}."
    return f"This quote expires in {days} day{'s' if days != 1 else ''}."


@beartype
def expiration_status(
    quote: Quote,
    now: datetime,
    *,
    warning_days: int = WARNING_THRESHOLD_DAYS,
    urgent_days: int = URGENT_THRESHOLD_DAYS,
) -> ExpirationStatus:
    expired = is_expired(quote, now)
    remaining = max(quote.expires_at - now, timedelta(0))
    days = remaining.days
    hours = int(remaining.total_seconds() // 3600)
    urgency = urgency_for(days, expired, warning_days=warning_days, urgent_days=urgent_days)
    return ExpirationStatus(
        expires_at=quote.expires_at,
        is_expired=expired,
        days_remaining=days,
        hours_remaining=hours,
        urgency=urgency,
        message=_message(urgency, days, hours),
    )
