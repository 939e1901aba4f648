from datetime import datetime
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from api.dependencies import get_rate_repository
from api.main import app
from domain.models.currency import Currency, CurrencyPair


@pytest.fixture
def client(rate_store):
    rate_store.seed(CurrencyPair(Currency.SEK, Currency.EUR), "0.09150000", datetime(2025, 11, 3, 10, 0, 0))
    # Override the real repository with the in-memory store
    app.dependency_overrides[get_rate_repository] = lambda: rate_store
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


def test_convert_currency_success(client):
    response = client.get("/api/convert", params={"amount": "100", "from": "SEK", "to": "EUR"})

    assert response.status_code == 200
    data = response.json()

    assert Decimal(data["originalAmount"]) == Decimal("100")
    assert Decimal(data["convertedAmount"]) == Decimal("9.15")
    assert Decimal(data["rate"]) == Decimal("0.0915")
    assert data["fromCurrency"] == "SEK"
    assert data["toCurrency"] == "EUR"


def test_convert_lowercase_codes(client):
    response = client.get("/api/convert", params={"amount": "10", "from": "sek", "to": "eur"})

    assert response.status_code == 200
    assert Decimal(response.json()["convertedAmount"]) == Decimal("0.92")


def test_convert_same_currency(client, rate_store):
    response = client.get("/api/convert", params={"amount": "12.34", "from": "USD", "to": "USD"})

    assert response.status_code == 200
    data = response.json()
    assert Decimal(data["convertedAmount"]) == Decimal("12.34")
    assert Decimal(data["rate"]) == Decimal("1")
    assert "find" not in rate_store.calls


@pytest.mark.parametrize("amount", ["0", "-10"])
def test_convert_non_positive_amount(client, amount):
    response = client.get("/api/convert", params={"amount": amount, "from": "SEK", "to": "EUR"})

    assert response.status_code == 400
    data = response.json()
    assert data["status"] == 400
    assert data["error"] == "Invalid amount"
    assert data["message"] == "Amount must be greater than zero"
    assert "timestamp" in data


def test_convert_amount_above_limit(client):
    response = client.get("/api/convert", params={"amount": "1e45", "from": "SEK", "to": "EUR"})

    assert response.status_code == 400
    data = response.json()
    assert data["error"] == "Invalid amount"
    assert data["message"] == "Amount must not exceed 1000000000000000"


def test_convert_unsupported_currency(client):
    response = client.get("/api/convert", params={"amount": "100", "from": "SEK", "to": "GBP"})

    assert response.status_code == 400
    assert "GBP" in response.json()["message"]


def test_convert_rate_not_found(client):
    response = client.get("/api/convert", params={"amount": "100", "from": "EUR", "to": "USD"})

    assert response.status_code == 404
    data = response.json()
    assert data["error"] == "Exchange rate not found"
    assert data["message"] == "Exchange rate not found for EUR to USD"


@pytest.mark.parametrize("params", [
    {"from": "SEK", "to": "EUR"},
    {"amount": "abc", "from": "SEK", "to": "EUR"},
    {"amount": "100", "to": "EUR"},
])
def test_convert_missing_or_malformed_params(client, params):
    response = client.get("/api/convert", params=params)

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid request"


def test_supported_currencies(client):
    response = client.get("/api/currencies")

    assert response.status_code == 200
    assert response.json() == {"currencies": ["SEK", "EUR", "USD"]}
