# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Quote and policy lifecycle state machine.

Legal moves are the explicit tables below. Every status change is persisted
with a compare-and-set on the current status, so two callers racing on the
same quote cannot both win. Expiration is pulled, not pushed: operations
that care check it themselves against the ``now`` they are given.
"""

from datetime import datetime
from typing import Any, Final

from beartype import beartype

from ..core.errors import DomainError, ErrorCode
from ..core.logging_utils import get_logger
from ..core.record_store import RecordStore
from ..core.result_types import Err, Ok
from ..models.policy import Policy, PolicyStatus
from ..models.premium import PremiumBreakdown
from ..models.quote import Quote, QuoteStatus, RateRequest
from .quote_expiration import is_expired

logger = get_logger(__name__)

QUOTE_TRANSITIONS: Final[dict[QuoteStatus, frozenset[QuoteStatus]]] = {
    QuoteStatus.QUOTED: frozenset({QuoteStatus.BINDING, QuoteStatus.EXPIRED}),
    QuoteStatus.BINDING: frozenset({QuoteStatus.BOUND, QuoteStatus.QUOTED}),
    QuoteStatus.BOUND: frozenset({QuoteStatus.IN_FORCE}),
    QuoteStatus.IN_FORCE: frozenset({QuoteStatus.CANCELLED}),
    QuoteStatus.EXPIRED: frozenset(),
    QuoteStatus.CANCELLED: frozenset(),
}

POLICY_TRANSITIONS: Final[dict[PolicyStatus, frozenset[PolicyStatus]]] = {
    PolicyStatus.BOUND: frozenset({PolicyStatus.IN_FORCE}),
    PolicyStatus.IN_FORCE: frozenset({PolicyStatus.CANCELLED, PolicyStatus.EXPIRED}),
    PolicyStatus.CANCELLED: frozenset(),
    PolicyStatus.EXPIRED: frozenset(),
}


@beartype
def can_transition(current: QuoteStatus, target: QuoteStatus) -> bool:
    return target in QUOTE_TRANSITIONS[current]


@beartype
def can_transition_policy(current: PolicyStatus, target: PolicyStatus) -> bool:
    return target in POLICY_TRANSITIONS[current]


def invalid_transition(kind: str, current: Any, target: Any) -> DomainError:
    return DomainError.state(
        ErrorCode.INVALID_STATE_TRANSITION,
        f"Cannot move {kind} from {current.value} to {target.value}",
        current_state=current.value,
        attempted_state=target.value,
    )


def bind_conflict(current: QuoteStatus) -> DomainError:
    """Error for a bind attempt that found the quote no longer QUOTED."""
    attempted = QuoteStatus.BINDING.value
    if current == QuoteStatus.BINDING:
        return DomainError.state(
            ErrorCode.BIND_ALREADY_IN_PROGRESS,
            "Another bind for this quote is in progress",
            current_state=current.value,
            attempted_state=attempted,
        )
    if current in (QuoteStatus.BOUND, QuoteStatus.IN_FORCE):
        return DomainError.state(
            ErrorCode.ALREADY_BOUND,
            "This quote has already been bound",
            current_state=current.value,
            attempted_state=attempted,
        )
    if current == QuoteStatus.EXPIRED:
        return quote_expired()
    return invalid_transition("quote", current, QuoteStatus.BINDING)


def quote_expired() -> DomainError:
    return DomainError.state(
        ErrorCode.QUOTE_EXPIRED,
        "Quote has expired; re-rate to obtain a new quote",
        current_state=QuoteStatus.EXPIRED.value,
        attempted_state=QuoteStatus.BINDING.value,
    )


class QuoteLifecycleManager:
    """Sole owner of quote and policy status changes."""

    def __init__(self, quotes: RecordStore, policies: RecordStore) -> None:
        self._quotes = quotes
        self._policies = policies

    # Reads

    @beartype
    async def get_quote(self, reference: str) -> Ok[Quote] | Err[DomainError]:
        quote = await self._quotes.get(reference)
        if quote is None:
            return Err(
                DomainError.not_found(
                    ErrorCode.QUOTE_NOT_FOUND,
                    f"Quote {reference} not found",
                    field="reference_number",
                )
            )
        return Ok(quote)

    @beartype
    async def get_policy(self, policy_number: str) -> Ok[Policy] | Err[DomainError]:
        policy = await self._policies.get(policy_number)
        if policy is None:
            return Err(
                DomainError.not_found(
                    ErrorCode.POLICY_NOT_FOUND,
                    f"Policy {policy_number} not found",
                    field="policy_number",
                )
            )
        return Ok(policy)

    # Creation

    @beartype
    async def register_quote(self, quote: Quote) -> bool:
        """Persist a new QUOTED quote; False when its reference is taken."""
        if quote.status != QuoteStatus.QUOTED:
            raise ValueError("New quotes must start in QUOTED")
        return await self._quotes.insert(quote.reference_number, quote)

    @beartype
    async def register_policy(self, policy: Policy) -> bool:
        if policy.status != PolicyStatus.BOUND:
            raise ValueError("New policies must start in BOUND")
        return await self._policies.insert(policy.policy_number, policy)

    @beartype
    async def discard_policy(self, policy_number: str) -> bool:
        """Remove a BOUND policy whose quote never reached BOUND."""
        policy = await self._policies.get(policy_number)
        if policy is None or policy.status != PolicyStatus.BOUND:
            return False
        logger.warning("Discarding orphaned policy %s", policy_number)
        return await self._policies.delete(policy_number)

    # Quote transitions

    @beartype
    async def transition(
        self, reference: str, target: QuoteStatus, now: datetime, **changes: Any
    ) -> Ok[Quote] | Err[DomainError]:
        """Move a quote to ``target`` if the table allows it from its current state."""
        result = await self.get_quote(reference)
        if result.is_err():
            return result
        quote = result.unwrap()

        if not can_transition(quote.status, target):
            return Err(invalid_transition("quote", quote.status, target))

        updated = quote.model_copy(update={"status": target, "updated_at": now, **changes})
        if not await self._quotes.compare_and_set(reference, quote.status, updated):
            current = await self._quotes.get(reference)
            return Err(invalid_transition("quote", current.status, target))

        logger.info(
            "Quote %s moved %s -> %s", reference, quote.status.value, target.value
        )
        return Ok(updated)

    @beartype
    async def begin_binding(self, reference: str, now: datetime) -> Ok[Quote] | Err[DomainError]:
        """QUOTED -> BINDING as a single compare-and-set.

        An expired quote is marked EXPIRED and the caller must re-rate.
        """
        result = await self.get_quote(reference)
        if result.is_err():
            return result
        quote = result.unwrap()

        if quote.status == QuoteStatus.QUOTED and is_expired(quote, now):
            await self.expire_quote(reference, now)
            return Err(quote_expired())
        if quote.status != QuoteStatus.QUOTED:
            return Err(bind_conflict(quote.status))

        updated = quote.model_copy(update={"status": QuoteStatus.BINDING, "updated_at": now})
        if not await self._quotes.compare_and_set(reference, QuoteStatus.QUOTED, updated):
            current = await self._quotes.get(reference)
            logger.info("Bind race lost on quote %s (now %s)", reference, current.status.value)
            return Err(bind_conflict(current.status))

        logger.info("Quote %s entered BINDING", reference)
        return Ok(updated)

    @beartype
    async def revert_binding(self, reference: str, now: datetime) -> Ok[Quote] | Err[DomainError]:
        """BINDING -> QUOTED after a failed payment so the customer can retry."""
        return await self.transition(reference, QuoteStatus.QUOTED, now)

    @beartype
    async def complete_binding(
        self, reference: str, policy_number: str, now: datetime
    ) -> Ok[Quote] | Err[DomainError]:
        return await self.transition(
            reference, QuoteStatus.BOUND, now, policy_number=policy_number
        )

    @beartype
    async def expire_quote(self, reference: str, now: datetime) -> Ok[Quote] | Err[DomainError]:
        """QUOTED -> EXPIRED, only once the validity window has passed."""
        result = await self.get_quote(reference)
        if result.is_err():
            return result
        quote = result.unwrap()
        if quote.status == QuoteStatus.QUOTED and not is_expired(quote, now):
            return Err(
                DomainError.state(
                    ErrorCode.INVALID_STATE_TRANSITION,
                    f"Quote {reference} is still valid until {quote.expires_at.isoformat()}",
                    current_state=quote.status.value,
                    attempted_state=QuoteStatus.EXPIRED.value,
                )
            )
        return await self.transition(reference, QuoteStatus.EXPIRED, now)

    @beartype
    async def mark_superseded(
        self, reference: str, superseded_by: str, now: datetime
    ) -> Ok[Quote] | Err[DomainError]:
        """Record the replacement on an EXPIRED quote; status is unchanged."""
        result = await self.get_quote(reference)
        if result.is_err():
            return result
        quote = result.unwrap()
        if quote.status != QuoteStatus.EXPIRED:
            return Err(invalid_transition("quote", quote.status, QuoteStatus.EXPIRED))
        updated = quote.model_copy(update={"superseded_by": superseded_by, "updated_at": now})
        if not await self._quotes.compare_and_set(reference, QuoteStatus.EXPIRED, updated):
            current = await self._quotes.get(reference)
            return Err(invalid_transition("quote", current.status, QuoteStatus.EXPIRED))
        return Ok(updated)

    @beartype
    async def apply_rerate(
        self,
        reference: str,
        request: RateRequest,
        breakdown: PremiumBreakdown,
        now: datetime,
    ) -> Ok[Quote] | Err[DomainError]:
        """Replace the breakdown of a non-expired QUOTED quote."""
        result = await self.get_quote(reference)
        if result.is_err():
            return result
        quote = result.unwrap()
        if quote.status == QuoteStatus.QUOTED and is_expired(quote, now):
            await self.expire_quote(reference, now)
            return Err(quote_expired())
        if quote.status != QuoteStatus.QUOTED:
            return Err(
                DomainError.state(
                    ErrorCode.INVALID_STATE_TRANSITION,
                    f"Only quoted quotes can be re-rated; {reference} is {quote.status.value}",
                    current_state=quote.status.value,
                    attempted_state=QuoteStatus.QUOTED.value,
                )
            )
        updated = quote.model_copy(
            update={
                "request": request,
                "breakdown": breakdown,
                "version": quote.version + 1,
                "updated_at": now,
            }
        )
        if not await self._quotes.compare_and_set(reference, QuoteStatus.QUOTED, updated):
            current = await self._quotes.get(reference)
            return Err(bind_conflict(current.status))
        return Ok(updated)

    # Policy transitions

    async def _transition_policy(
        self, policy_number: str, target: PolicyStatus, now: datetime, **changes: Any
    ) -> Ok[Policy] | Err[DomainError]:
        result = await self.get_policy(policy_number)
        if result.is_err():
            return result
        policy = result.unwrap()
        if not can_transition_policy(policy.status, target):
            return Err(invalid_transition("policy", policy.status, target))
        updated = policy.model_copy(update={"status": target, **changes})
        if not await self._policies.compare_and_set(policy_number, policy.status, updated):
            current = await self._policies.get(policy_number)
            return Err(invalid_transition("policy", current.status, target))
        logger.info(
            "Policy %s moved %s -> %s", policy_number, policy.status.value, target.value
        )
        return Ok(updated)

    @beartype
    async def activate_policy(
        self, policy_number: str, now: datetime
    ) -> Ok[Policy] | Err[DomainError]:
        """BOUND -> IN_FORCE on or after the effective date, for policy and quote."""
        result = await self.get_policy(policy_number)
        if result.is_err():
            return result
        policy = result.unwrap()
        if policy.status == PolicyStatus.BOUND and now.date() < policy.effective_date:
            return Err(
                DomainError.state(
                    ErrorCode.POLICY_NOT_YET_EFFECTIVE,
                    f"Policy {policy_number} takes effect on {policy.effective_date.isoformat()}",
                    current_state=policy.status.value,
                    attempted_state=PolicyStatus.IN_FORCE.value,
                )
            )

        activated = await self._transition_policy(
            policy_number, PolicyStatus.IN_FORCE, now, activated_at=now
        )
        if activated.is_err():
            return activated
        quote_result = await self.transition(
            policy.quote_reference, QuoteStatus.IN_FORCE, now
        )
        if quote_result.is_err():
            logger.error(
                "Policy %s active but quote %s did not follow: %s",
                policy_number,
                policy.quote_reference,
                quote_result.unwrap_err().message,
            )
        return activated

    @beartype
    async def cancel_policy(
        self, policy_number: str, reason: str, now: datetime
    ) -> Ok[Policy] | Err[DomainError]:
        cancelled = await self._transition_policy(
            policy_number,
            PolicyStatus.CANCELLED,
            now,
            cancelled_at=now,
            cancellation_reason=reason,
        )
        if cancelled.is_err():
            return cancelled
        policy = cancelled.unwrap()
        quote_result = await self.transition(policy.quote_reference, QuoteStatus.CANCELLED, now)
        if quote_result.is_err():
            logger.error(
                "Policy %s cancelled but quote %s did not follow: %s",
                policy_number,
                policy.quote_reference,
                quote_result.unwrap_err().message,
            )
        return cancelled

    @beartype
    async def expire_policy_term(
        self, policy_number: str, now: datetime
    ) -> Ok[Policy] | Err[DomainError]:
        """IN_FORCE -> EXPIRED once the term has run out."""
        result = await self.get_policy(policy_number)
        if result.is_err():
            return result
        policy = result.unwrap()
        if policy.status == PolicyStatus.IN_FORCE and now.date() < policy.expiration_date:
            return Err(
                DomainError.state(
                    ErrorCode.INVALID_STATE_TRANSITION,
                    f"Policy {policy_number} runs until {policy.expiration_date.isoformat()}",
                    current_state=policy.status.value,
                    attempted_state=PolicyStatus.EXPIRED.value,
                )
            )
        return await self._transition_policy(policy_number, PolicyStatus.EXPIRED, now)
