"""End-to-end API tests: rate, quote, bind and policy lifecycle over HTTP."""

from datetime import timedelta
from decimal import Decimal
from typing import Any

import pytest
from fastapi.testclient import TestClient

from autobind.api.dependencies import build_container, get_now
from autobind.main import create_app
from autobind.services.payment_gateway import DECLINED_TEST_CARD, MockPaymentGateway


@pytest.fixture
def quote_body() -> dict[str, Any]:
    return {
        "driver": {
            "first_name": "Dana",
            "last_name": "Reyes",
            "birth_date": "1981-01-15",
            "years_licensed": 25,
        },
        "vehicles": [
            {
                "vin": "1HGCM82633A004352",
                "year": 2025,
                "make": "Toyota",
                "model": "RAV4",
                "annual_mileage": 5000,
                "market_value": "28000",
            }
        ],
        "location": {"state": "CA", "zip_code": "95814"},
        "coverages": [
            {"coverage_type": "liability", "limit": "100000"},
            {"coverage_type": "collision", "deductible": "500"},
            {"coverage_type": "comprehensive", "deductible": "500"},
        ],
        "effective_date": "2026-03-02",
    }


def _card(number: str = "4111111111111111") -> dict[str, Any]:
    return {
        "payment": {"method": "credit_card", "number": number, "expiry": "12/29", "cvv": "123"}
    }


def _create(client: TestClient, body: dict[str, Any]) -> dict[str, Any]:
    response = client.post("/api/v1/quotes", json=body)
    assert response.status_code == 201, response.text
    return response.json()


class TestServiceEndpoints:
    def test_root(self, test_client: TestClient) -> None:
        data = test_client.get("/").json()
        assert data["name"] == "autobind"
        assert data["environment"] == "test"

    def test_health(self, test_client: TestClient) -> None:
        response = test_client.get("/api/v1/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["quotes_stored"] == 0


class TestRating:
    def test_calculate_does_not_store_a_quote(self, test_client, quote_body) -> None:
        response = test_client.post("/api/v1/rating/calculate", json=quote_body)

        assert response.status_code == 200
        breakdown = response.json()
        assert Decimal(breakdown["final_total"]) > 0
        assert breakdown["state"] == "CA"
        assert test_client.get("/api/v1/health").json()["quotes_stored"] == 0

    def test_invalid_vin_is_422(self, test_client, quote_body) -> None:
        quote_body["vehicles"][0]["vin"] = "1HGCM82633A004353"
        response = test_client.post("/api/v1/rating/calculate", json=quote_body)

        assert response.status_code == 422
        detail = response.json()["detail"]
        assert detail["code"] == "CHECKSUM_MISMATCH"
        assert detail["fields"] == ["vehicles[0].vin"]

    def test_malformed_body_is_422(self, test_client, quote_body) -> None:
        quote_body["location"]["zip_code"] = "ABCDE"
        response = test_client.post("/api/v1/rating/calculate", json=quote_body)
        assert response.status_code == 422


class TestQuoteFlow:
    def test_create_and_fetch(self, test_client, quote_body) -> None:
        created = _create(test_client, quote_body)

        assert created["status"] == "quoted"
        assert created["reference_number"].startswith("DZ")
        assert created["expiration"]["urgency"] == "normal"
        assert created["expiration"]["days_remaining"] == 30

        fetched = test_client.get(f"/api/v1/quotes/{created['reference_number']}")
        assert fetched.status_code == 200
        assert fetched.json()["final_total"] == created["final_total"]

    def test_unknown_quote_is_404(self, test_client) -> None:
        response = test_client.get("/api/v1/quotes/DZAAAAAAAA")
        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "QUOTE_NOT_FOUND"

    def test_update_coverages(self, test_client, quote_body) -> None:
        created = _create(test_client, quote_body)
        coverages = quote_body["coverages"][:1] + [
            {"coverage_type": "collision", "deductible": "1000"},
            {"coverage_type": "comprehensive", "deductible": "1000"},
        ]

        response = test_client.put(
            f"/api/v1/quotes/{created['reference_number']}/coverages",
            json={"coverages": coverages},
        )

        assert response.status_code == 200
        assert response.json()["version"] == 2
        assert Decimal(response.json()["final_total"]) < Decimal(created["final_total"])

    def test_expired_quote_requote(self, test_client, quote_body, now) -> None:
        created = _create(test_client, quote_body)
        reference = created["reference_number"]
        later = now + timedelta(days=31)
        test_client.app.dependency_overrides[get_now] = lambda: later

        fetched = test_client.get(f"/api/v1/quotes/{reference}").json()
        assert fetched["expiration"]["is_expired"] is True
        assert fetched["expiration"]["urgency"] == "expired"

        bind = test_client.post(f"/api/v1/quotes/{reference}/bind", json=_card())
        assert bind.status_code == 409
        assert bind.json()["detail"]["code"] == "QUOTE_EXPIRED"

        requoted = test_client.post(f"/api/v1/quotes/{reference}/requote")
        assert requoted.status_code == 201
        assert requoted.json()["supersedes"] == reference
        assert requoted.json()["status"] == "quoted"


class TestBindFlow:
    def test_bind_activate_cancel(self, test_client, quote_body) -> None:
        reference = _create(test_client, quote_body)["reference_number"]

        bound = test_client.post(f"/api/v1/quotes/{reference}/bind", json=_card())
        assert bound.status_code == 201
        policy = bound.json()
        assert policy["status"] == "bound"
        assert policy["payment"]["last4"] == "1111"
        assert "4111111111111111" not in bound.text

        again = test_client.post(f"/api/v1/quotes/{reference}/bind", json=_card())
        assert again.status_code == 409
        assert again.json()["detail"]["code"] == "ALREADY_BOUND"

        number = policy["policy_number"]
        active = test_client.post(f"/api/v1/policies/{number}/activate")
        assert active.status_code == 200
        assert active.json()["status"] == "in_force"
        assert test_client.get(f"/api/v1/quotes/{reference}").json()["status"] == "in_force"

        cancelled = test_client.post(
            f"/api/v1/policies/{number}/cancel", json={"reason": "Sold the vehicle"}
        )
        assert cancelled.status_code == 200
        assert cancelled.json()["status"] == "cancelled"

    def test_invalid_payment_is_422(self, test_client, quote_body) -> None:
        reference = _create(test_client, quote_body)["reference_number"]
        response = test_client.post(
            f"/api/v1/quotes/{reference}/bind", json=_card("4111111111111112")
        )
        assert response.status_code == 422
        assert response.json()["detail"]["fields"] == ["payment.number"]

    def test_declined_payment_is_402(self, test_client, quote_body) -> None:
        reference = _create(test_client, quote_body)["reference_number"]
        response = test_client.post(
            f"/api/v1/quotes/{reference}/bind", json=_card(DECLINED_TEST_CARD)
        )

        assert response.status_code == 402
        assert response.json()["detail"]["code"] == "PAYMENT_DECLINED"
        assert test_client.get(f"/api/v1/quotes/{reference}").json()["status"] == "quoted"

    def test_unknown_policy_is_404(self, test_client) -> None:
        assert test_client.get("/api/v1/policies/PLAAAAAAAA").status_code == 404


def test_gateway_outage_is_503(settings, quote_body, now) -> None:
    container = build_container(
        settings, gateway=MockPaymentGateway(available=False), reference_year=2026
    )
    app = create_app(settings, container)
    app.dependency_overrides[get_now] = lambda: now

    with TestClient(app) as client:
        reference = _create(client, quote_body)["reference_number"]
        response = client.post(f"/api/v1/quotes/{reference}/bind", json=_card())

    assert response.status_code == 503
    assert response.json()["detail"]["code"] == "DEPENDENCY_UNAVAILABLE"
