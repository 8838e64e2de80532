"""Unit tests for computed quote expiration."""

from datetime import timedelta

import pytest

from autobind.services.quote_expiration import (
    ExpirationUrgency,
    expiration_status,
    is_expired,
    urgency_for,
)


class TestQuoteExpiration:
    async def test_thirty_day_boundary(self, quote_service, rate_request, now) -> None:
        quote = (await quote_service.create_quote(rate_request, now)).unwrap()

        assert quote.expires_at == now + timedelta(days=30)
        assert not is_expired(quote, now + timedelta(days=29, hours=23))
        assert is_expired(quote, now + timedelta(days=30))
        assert is_expired(quote, now + timedelta(days=45))

    async def test_status_is_recomputed_per_read(self, quote_service, rate_request, now) -> None:
        quote = (await quote_service.create_quote(rate_request, now)).unwrap()

        fresh = expiration_status(quote, now)
        later = expiration_status(quote, now + timedelta(days=25))
        gone = expiration_status(quote, now + timedelta(days=31))

        assert (fresh.days_remaining, fresh.urgency) == (30, ExpirationUrgency.NORMAL)
        assert (later.days_remaining, later.urgency) == (5, ExpirationUrgency.WARNING)
        assert gone.is_expired
        assert gone.days_remaining == 0
        assert gone.urgency == ExpirationUrgency.EXPIRED
        assert "expired" in gone.message

    async def test_last_hours_message(self, quote_service, rate_request, now) -> None:
        quote = (await quote_service.create_quote(rate_request, now)).unwrap()
        status = expiration_status(quote, now + timedelta(days=29, hours=22))
        assert status.hours_remaining == 2
        assert status.urgency == ExpirationUrgency.URGENT
        assert status.message == "This quote expires in 2 hours."

    @pytest.mark.parametrize(
        ("days", "expired", "expected"),
        [
            (30, False, ExpirationUrgency.NORMAL),
            (8, False, ExpirationUrgency.NORMAL),
            (7, False, ExpirationUrgency.WARNING),
            (4, False, ExpirationUrgency.WARNING),
            (3, False, ExpirationUrgency.URGENT),
            (0, False, ExpirationUrgency.URGENT),
            (0, True, ExpirationUrgency.EXPIRED),
        ],
    )
    def test_urgency_tiers(self, days: int, expired: bool, expected: ExpirationUrgency) -> None:
        assert urgency_for(days, expired) == expected
