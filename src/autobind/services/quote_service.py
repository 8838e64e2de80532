# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Quote service: create, re-rate and requote.

Rating is pure; this layer does the I/O around it (lookups before rating,
persistence after) and hands every status change to the lifecycle manager.
"""

from datetime import datetime

from beartype import beartype
from pydantic import ValidationError

from ..core.config import Settings, get_settings
from ..core.errors import DomainError, ErrorCode
from ..core.logging_utils import get_logger
from ..core.performance import performance_monitor
from ..core.result_types import Err, Ok
from ..models.premium import PremiumBreakdown
from ..models.quote import CoverageSelection, Quote, QuoteStatus, RateRequest
from .quote_expiration import expiration_for, is_expired
from .quote_lifecycle import QuoteLifecycleManager, invalid_transition
from .rating.rating_engine import PremiumCalculator, breakdown_summary
from .reference_numbers import (
    QUOTE_PREFIX,
    ReferenceGenerator,
    generate_reference,
    insert_with_unique_reference,
)
from .vehicle_data import VehicleEnricher

logger = get_logger(__name__)


class QuoteService:
    """Quote creation and re-rating."""

    def __init__(
        self,
        calculator: PremiumCalculator,
        lifecycle: QuoteLifecycleManager,
        enricher: VehicleEnricher | None = None,
        *,
        settings: Settings | None = None,
        reference_generator: ReferenceGenerator = generate_reference,
    ) -> None:
        self._calculator = calculator
        self._lifecycle = lifecycle
        self._enricher = enricher
        self._settings = settings or get_settings()
        self._generate_reference = reference_generator

    @beartype
    async def prepare_request(
        self, request: RateRequest, now: datetime
    ) -> tuple[RateRequest, list[str]]:
        """Fill vehicle gaps from lookups; returns the request and any fallbacks."""
        if self._enricher is None:
            return request, []
        vehicles = []
        fallbacks: list[str] = []
        for index, vehicle in enumerate(request.vehicles):
            enriched, missed = await self._enricher.enrich(vehicle, now)
            vehicles.append(enriched)
            fallbacks.extend(f"{name}[{index}]" for name in missed)
        return request.model_copy(update={"vehicles": vehicles}), fallbacks

    @beartype
    async def rate(
        self, request: RateRequest, now: datetime
    ) -> Ok[PremiumBreakdown] | Err[DomainError]:
        """Enrich and price a request without persisting anything."""
        validation = self._calculator.validate_request(request)
        if validation.is_err():
            return validation

        prepared, fallbacks = await self.prepare_request(request, now)
        result = self._calculator.calculate(prepared)
        if result.is_err() or not fallbacks:
            return result
        breakdown = result.unwrap()
        return Ok(
            breakdown.model_copy(
                update={"defaults_used": [*breakdown.defaults_used, *fallbacks]}
            )
        )

    @performance_monitor("create_quote")
    @beartype
    async def create_quote(
        self, request: RateRequest, now: datetime, *, supersedes: str | None = None
    ) -> Ok[Quote] | Err[DomainError]:
        """Rate a request and persist it as a QUOTED quote valid for 30 days."""
        rated = await self.rate(request, now)
        if rated.is_err():
            return rated
        breakdown = rated.unwrap()

        created: list[Quote] = []

        async def insert(reference: str) -> bool:
            quote = Quote(
                reference_number=reference,
                status=QuoteStatus.QUOTED,
                request=request,
                breakdown=breakdown,
                created_at=now,
                expires_at=expiration_for(now, self._settings.quote_validity_days),
                updated_at=now,
                supersedes=supersedes,
            )
            if await self._lifecycle.register_quote(quote):
                created.append(quote)
                return True
            return False

        allocated = await insert_with_unique_reference(
            QUOTE_PREFIX,
            insert,
            max_attempts=self._settings.max_reference_attempts,
            generator=self._generate_reference,
        )
        if allocated.is_err():
            return allocated

        quote = created[-1]
        logger.info("Created quote %s: %s", quote.reference_number, breakdown_summary(breakdown))
        return Ok(quote)

    @beartype
    async def get_quote(self, reference: str) -> Ok[Quote] | Err[DomainError]:
        return await self._lifecycle.get_quote(reference)

    @beartype
    async def update_coverages(
        self, reference: str, coverages: list[CoverageSelection], now: datetime
    ) -> Ok[Quote] | Err[DomainError]:
        """Re-rate a QUOTED quote with new coverages and replace its breakdown."""
        current = await self._lifecycle.get_quote(reference)
        if current.is_err():
            return current
        quote = current.unwrap()
        if quote.status != QuoteStatus.QUOTED:
            return Err(invalid_transition("quote", quote.status, QuoteStatus.QUOTED))

        try:
            request = RateRequest.model_validate(
                {
                    **quote.request.model_dump(),
                    "coverages": [c.model_dump() for c in coverages],
                }
            )
        except ValidationError as exc:
            return Err(
                DomainError.validation(
                    ErrorCode.INVALID_FORMAT,
                    "Coverage selection is invalid",
                    fields=[".".join(str(p) for p in e["loc"]) for e in exc.errors()],
                )
            )
        return await self._rerate(reference, request, now)

    async def _rerate(
        self, reference: str, request: RateRequest, now: datetime
    ) -> Ok[Quote] | Err[DomainError]:
        rated = await self.rate(request, now)
        if rated.is_err():
            return rated
        updated = await self._lifecycle.apply_rerate(reference, request, rated.unwrap(), now)
        if updated.is_ok():
            quote = updated.unwrap()
            logger.info(
                "Re-rated quote %s to version %d: %s",
                reference,
                quote.version,
                breakdown_summary(quote.breakdown),
            )
        return updated

    @beartype
    async def requote(self, reference: str, now: datetime) -> Ok[Quote] | Err[DomainError]:
        """Price an expired quote's request again as a new quote that supersedes it."""
        current = await self._lifecycle.get_quote(reference)
        if current.is_err():
            return current
        quote = current.unwrap()

        if quote.status == QuoteStatus.QUOTED:
            if not is_expired(quote, now):
                return Err(invalid_transition("quote", quote.status, QuoteStatus.EXPIRED))
            expired = await self._lifecycle.expire_quote(reference, now)
            if expired.is_err():
                return expired
        elif quote.status != QuoteStatus.EXPIRED:
            return Err(invalid_transition("quote", quote.status, QuoteStatus.EXPIRED))
        elif quote.superseded_by is not None:
            return await self._lifecycle.get_quote(quote.superseded_by)

        request = quote.request
        if request.effective_date < now.date():
            request = request.model_copy(update={"effective_date": now.date()})

        replacement = await self.create_quote(request, now, supersedes=reference)
        if replacement.is_err():
            return replacement
        new_quote = replacement.unwrap()
        marked = await self._lifecycle.mark_superseded(reference, new_quote.reference_number, now)
        if marked.is_err():
            logger.warning(
                "Quote %s replaced by %s but could not be marked superseded",
                reference,
                new_quote.reference_number,
            )
        return replacement
