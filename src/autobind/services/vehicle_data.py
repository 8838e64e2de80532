"""Vehicle lookup collaborators and the enrichment step that calls them.

Lookups run before rating, never during it. Results are cached by key for
the configured staleness window. A lookup that is down does not block
quoting: the vehicle keeps its missing value, the resolver applies its
neutral default, and the fallback is recorded.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Final, Protocol, runtime_checkable

from beartype import beartype

from ..core.cache import Cache
from ..core.errors import DomainError
from ..core.logging_utils import get_logger
from ..core.result_types import Err, Ok
from ..models.lookups import SafetyRatingResult, ValuationResult, VinDecodeResult
from ..models.quote import VehicleInfo

logger = get_logger(__name__)


@runtime_checkable
class VinDecoder(Protocol):
    async def decode(self, vin: str) -> Ok[VinDecodeResult | None] | Err[DomainError]: ...


@runtime_checkable
class ValuationProvider(Protocol):
    async def estimate(
        self, make: str, model: str, year: int
    ) -> Ok[ValuationResult | None] | Err[DomainError]: ...


@runtime_checkable
class SafetyRatingProvider(Protocol):
    async def rating(
        self, make: str, model: str, year: int
    ) -> Ok[SafetyRatingResult | None] | Err[DomainError]: ...


class _Switchable:
    def __init__(self, *, available: bool = True) -> None:
        self.available = available
        self.calls = 0

    def _outage(self, name: str) -> Err[DomainError]:
        return Err(DomainError.dependency(f"{name} lookup unavailable", fields=[name]))


class MockVinDecoder(_Switchable):
    KNOWN: Final[dict[str, VinDecodeResult]] = {
        "1HGCM82633A004352": VinDecodeResult(
            vin="1HGCM82633A004352", year=2003, make="Honda", model="Accord"
        ),
        "1HGBH41JXMN109186": VinDecodeResult(
            vin="1HGBH41JXMN109186", year=2021, make="Honda", model="Civic"
        ),
        "1M8GDM9AXKP042788": VinDecodeResult(
            vin="1M8GDM9AXKP042788", year=2019, make="Ford", model="Mustang",
            vehicle_class="sports",
        ),
    }

    @beartype
    async def decode(self, vin: str) -> Ok[VinDecodeResult | None] | Err[DomainError]:
        self.calls += 1
        if not self.available:
            return self._outage("vin_decode")
        return Ok(self.KNOWN.get(vin))


class MockValuationProvider(_Switchable):
    """Straight-line depreciation from a list price by make segment."""

    LIST_PRICES: Final[dict[str, Decimal]] = {
        "bmw": Decimal("55000"),
        "mercedes-benz": Decimal("58000"),
        "audi": Decimal("50000"),
        "lexus": Decimal("48000"),
        "porsche": Decimal("95000"),
        "tesla": Decimal("52000"),
        "toyota": Decimal("30000"),
        "honda": Decimal("28000"),
        "ford": Decimal("34000"),
        "chevrolet": Decimal("33000"),
    }
    ANNUAL_DEPRECIATION: Final = Decimal("0.12")
    FLOOR: Final = Decimal("2000")

    def __init__(self, reference_year: int, *, available: bool = True) -> None:
        super().__init__(available=available)
        self.reference_year = reference_year

    @beartype
    async def estimate(
        self, make: str, model: str, year: int
    ) -> Ok[ValuationResult | None] | Err[DomainError]:
        self.calls += 1
        if not self.available:
            return self._outage("valuation")
        price = self.LIST_PRICES.get(make.strip().lower())
        if price is None:
            return Ok(None)
        age = max(0, self.reference_year - year)
        value = max(self.FLOOR, price * (1 - self.ANNUAL_DEPRECIATION) ** age)
        return Ok(ValuationResult(market_value=value.quantize(Decimal("1"))))


class MockSafetyRatingProvider(_Switchable):
    RATINGS: Final[dict[str, int]] = {
        "toyota": 5,
        "honda": 5,
        "subaru": 5,
        "volvo": 5,
        "tesla": 5,
        "ford": 4,
        "chevrolet": 4,
        "hyundai": 4,
        "kia": 4,
    }

    @beartype
    async def rating(
        self, make: str, model: str, year: int
    ) -> Ok[SafetyRatingResult | None] | Err[DomainError]:
        self.calls += 1
        if not self.available:
            return self._outage("safety_rating")
        score = self.RATINGS.get(make.strip().lower())
        return Ok(None if score is None else SafetyRatingResult(overall_rating=score))


class VehicleEnricher:
    """Fills vehicle gaps from the lookup collaborators, through the cache."""

    def __init__(
        self,
        decoder: VinDecoder,
        valuation: ValuationProvider,
        safety: SafetyRatingProvider,
        cache: Cache,
    ) -> None:
        self._decoder = decoder
        self._valuation = valuation
        self._safety = safety
        self._cache = cache

    async def _cached(self, key: str, fetch: Any, now: datetime) -> Ok[Any] | Err[DomainError]:
        hit = await self._cache.get(key, now=now)
        if hit is not None:
            return Ok(hit[0])
        result = await fetch()
        if result.is_ok():
            # Wrapped so a cached "not found" is distinguishable from a miss.
            await self._cache.set(key, (result.unwrap(),), now=now)
        return result

    @beartype
    async def enrich(self, vehicle: VehicleInfo, now: datetime) -> tuple[VehicleInfo, list[str]]:
        """Return the enriched vehicle and the lookups that fell back."""
        updates: dict[str, Any] = {}
        fallbacks: list[str] = []
        make_model_year = f"{vehicle.make.lower()}:{vehicle.model.lower()}:{vehicle.year}"

        if vehicle.vin is not None and vehicle.vehicle_class is None:
            decoded = await self._cached(
                f"vin:{vehicle.vin}", lambda: self._decoder.decode(vehicle.vin), now
            )
            if decoded.is_err():
                fallbacks.append("lookup.vin_decode")
            elif decoded.unwrap() is not None and decoded.unwrap().vehicle_class:
                updates["vehicle_class"] = decoded.unwrap().vehicle_class

        if vehicle.market_value is None:
            valued = await self._cached(
                f"value:{make_model_year}",
                lambda: self._valuation.estimate(vehicle.make, vehicle.model, vehicle.year),
                now,
            )
            if valued.is_err():
                fallbacks.append("lookup.valuation")
            elif valued.unwrap() is not None:
                updates["market_value"] = valued.unwrap().market_value

        if vehicle.safety_rating is None:
            rated = await self._cached(
                f"safety:{make_model_year}",
                lambda: self._safety.rating(vehicle.make, vehicle.model, vehicle.year),
                now,
            )
            if rated.is_err():
                fallbacks.append("lookup.safety_rating")
            elif rated.unwrap() is not None:
                updates["safety_rating"] = rated.unwrap().overall_rating

        if fallbacks:
            logger.warning(
                "Lookups unavailable for %s %s %s: %s; rating with defaults",
                vehicle.year,
                vehicle.make,
                vehicle.model,
                ", ".join(fallbacks),
            )
        enriched = vehicle.model_copy(update=updates) if updates else vehicle
        return enriched, fallbacks
