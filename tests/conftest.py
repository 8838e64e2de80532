"""Shared fixtures.

Time is always injected: every test works against the fixed ``now`` below
instead of the wall clock.
"""

from collections.abc import Callable, Generator
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any

import pytest
from fastapi.testclient import TestClient

from autobind.api.dependencies import ServiceContainer, build_container, get_now
from autobind.core.config import Settings, clear_settings_cache
from autobind.core.record_store import InMemoryRecordStore
from autobind.main import create_app
from autobind.models.payment import AchPaymentInput, CardPaymentInput
from autobind.models.quote import (
    CoverageSelection,
    CoverageType,
    DriverInfo,
    LocationInfo,
    RateRequest,
    UsageType,
    VehicleInfo,
)
from autobind.services.binding import BindingService
from autobind.services.payment_gateway import MockPaymentGateway
from autobind.services.quote_lifecycle import QuoteLifecycleManager
from autobind.services.quote_service import QuoteService
from autobind.services.rating.rating_engine import PremiumCalculator

NOW = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def reset_settings() -> Generator[None, None, None]:
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def settings() -> Settings:
    return Settings(api_env="test", parallel_factor_resolution=False)


@pytest.fixture
def driver() -> DriverInfo:
    """45 years old on the test date, 25 years licensed, clean record."""
    return DriverInfo(
        first_name="Dana",
        last_name="Reyes",
        birth_date=date(1981, 1, 15),
        years_licensed=25,
    )


@pytest.fixture
def vehicle() -> VehicleInfo:
    return VehicleInfo(
        vin="1HGCM82633A004352",
        year=2025,
        make="Toyota",
        model="RAV4",
        annual_mileage=5000,
        usage=UsageType.COMMUTE,
        market_value=Decimal("28000"),
    )


@pytest.fixture
def location() -> LocationInfo:
    return LocationInfo(state="CA", zip_code="95814")


@pytest.fixture
def coverages() -> list[CoverageSelection]:
    return [
        CoverageSelection(coverage_type=CoverageType.LIABILITY, limit=Decimal("100000")),
        CoverageSelection(coverage_type=CoverageType.COLLISION, deductible=Decimal("500")),
        CoverageSelection(coverage_type=CoverageType.COMPREHENSIVE, deductible=Decimal("500")),
    ]


@pytest.fixture
def make_request(
    driver: DriverInfo,
    vehicle: VehicleInfo,
    location: LocationInfo,
    coverages: list[CoverageSelection],
) -> Callable[..., RateRequest]:
    """Build a rate request, overriding any top-level field."""

    def _make(**overrides: Any) -> RateRequest:
        data: dict[str, Any] = {
            "driver": driver,
            "vehicles": [vehicle],
            "location": location,
            "coverages": coverages,
            "effective_date": NOW.date(),
        }
        data.update(overrides)
        return RateRequest(**data)

    return _make


@pytest.fixture
def rate_request(make_request: Callable[..., RateRequest]) -> RateRequest:
    return make_request()


@pytest.fixture
def calculator(settings: Settings) -> PremiumCalculator:
    return PremiumCalculator(settings=settings)


@pytest.fixture
def quote_store() -> InMemoryRecordStore:
    return InMemoryRecordStore("quotes")


@pytest.fixture
def policy_store() -> InMemoryRecordStore:
    return InMemoryRecordStore("policies")


@pytest.fixture
def lifecycle(
    quote_store: InMemoryRecordStore, policy_store: InMemoryRecordStore
) -> QuoteLifecycleManager:
    return QuoteLifecycleManager(quote_store, policy_store)


@pytest.fixture
def quote_service(
    calculator: PremiumCalculator, lifecycle: QuoteLifecycleManager, settings: Settings
) -> QuoteService:
    return QuoteService(calculator, lifecycle, settings=settings)


@pytest.fixture
def gateway() -> MockPaymentGateway:
    return MockPaymentGateway()


@pytest.fixture
def binding_service(
    lifecycle: QuoteLifecycleManager, gateway: MockPaymentGateway, settings: Settings
) -> BindingService:
    return BindingService(lifecycle, gateway, settings=settings)


@pytest.fixture
def card() -> CardPaymentInput:
    return CardPaymentInput(
        number="4111 1111 1111 1111", expiry="12/29", cvv="123", cardholder_name="Dana Reyes"
    )


@pytest.fixture
def ach() -> AchPaymentInput:
    return AchPaymentInput(
        routing_number="021000021", account_number="000123456789", account_type="checking"
    )


@pytest.fixture
def container(settings: Settings) -> ServiceContainer:
    return build_container(settings, reference_year=2026)


@pytest.fixture
def test_client(settings: Settings, container: ServiceContainer) -> Generator[TestClient, None, None]:
    """Test client with the request clock pinned to ``NOW``."""
    app = create_app(settings, container)
    app.dependency_overrides[get_now] = lambda: NOW
    with TestClient(app) as client:
        yield client
