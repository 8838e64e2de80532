"""FastAPI dependency providers.

Services live on a :class:`ServiceContainer` attached to ``app.state`` at
startup. The request clock is a dependency too, which is the one place the
wall clock is read; tests override it.
"""

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone

from attrs import define
from beartype import beartype
from fastapi import Request

from ..core.cache import Cache
from ..core.config import Settings
from ..core.record_store import InMemoryRecordStore
from ..services.binding import BindingService
from ..services.payment_gateway import MockPaymentGateway, PaymentGateway
from ..services.quote_lifecycle import QuoteLifecycleManager
from ..services.quote_service import QuoteService
from ..services.rating.rating_engine import PremiumCalculator
from ..services.vehicle_data import (
    MockSafetyRatingProvider,
    MockValuationProvider,
    MockVinDecoder,
    VehicleEnricher,
)


@define
class ServiceContainer:
    """Everything the routers need, wired once per application."""

    settings: Settings
    quotes: InMemoryRecordStore
    policies: InMemoryRecordStore
    cache: Cache
    calculator: PremiumCalculator
    lifecycle: QuoteLifecycleManager
    quote_service: QuoteService
    binding_service: BindingService
    executor: ThreadPoolExecutor | None = None

    def close(self) -> None:
        if self.executor is not None:
            self.executor.shutdown(wait=False)


@beartype
def build_container(
    settings: Settings,
    *,
    gateway: PaymentGateway | None = None,
    reference_year: int | None = None,
) -> ServiceContainer:
    """Wire in-memory stores and the mock collaborators."""
    executor = (
        ThreadPoolExecutor(max_workers=4, thread_name_prefix="rating")
        if settings.parallel_factor_resolution
        else None
    )
    quotes = InMemoryRecordStore("quotes")
    policies = InMemoryRecordStore("policies")
    cache = Cache(default_ttl_seconds=settings.lookup_cache_ttl_seconds)
    calculator = PremiumCalculator(executor=executor, settings=settings)
    lifecycle = QuoteLifecycleManager(quotes, policies)
    enricher = VehicleEnricher(
        MockVinDecoder(),
        MockValuationProvider(reference_year or datetime.now(timezone.utc).year),
        MockSafetyRatingProvider(),
        cache,
    )
    return ServiceContainer(
        settings=settings,
        quotes=quotes,
        policies=policies,
        cache=cache,
        calculator=calculator,
        lifecycle=lifecycle,
        quote_service=QuoteService(calculator, lifecycle, enricher, settings=settings),
        binding_service=BindingService(
            lifecycle, gateway or MockPaymentGateway(), settings=settings
        ),
        executor=executor,
    )


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


def get_app_settings(request: Request) -> Settings:
    return get_container(request).settings


def get_now() -> datetime:
    """Current time in UTC."""
    return datetime.now(timezone.utc)


def get_quote_service(request: Request) -> QuoteService:
    return get_container(request).quote_service


def get_binding_service(request: Request) -> BindingService:
    return get_container(request).binding_service


def get_lifecycle(request: Request) -> QuoteLifecycleManager:
    return get_container(request).lifecycle
