from datetime import datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from api.dependencies import get_rate_repository, get_rate_service, get_rate_source
from api.main import app
from domain.calculations.rate_set import EUR_SEK, USD_SEK


STORED_AT = datetime(2025, 11, 3, 10, 0, 0)


@pytest.fixture
def client(rate_store, make_source):
    source = make_source({EUR_SEK: Decimal("11.0"), USD_SEK: Decimal("10.0")})
    app.dependency_overrides[get_rate_repository] = lambda: rate_store
    app.dependency_overrides[get_rate_source] = lambda: source
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


def test_get_latest_rates_empty(client):
    response = client.get("/api/rates/latest")

    assert response.status_code == 200
    assert response.json() == {"rates": [], "lastUpdated": None}


def test_get_latest_rates(client, rate_store):
    rate_store.seed(EUR_SEK, "10.93500000", STORED_AT)

    response = client.get("/api/rates/latest")

    assert response.status_code == 200
    data = response.json()
    assert data["lastUpdated"] == "2025-11-03T10:00:00"
    assert len(data["rates"]) == 1
    rate = data["rates"][0]
    assert rate["fromCurrency"] == "EUR"
    assert rate["toCurrency"] == "SEK"
    assert Decimal(rate["rate"]) == Decimal("10.935")
    assert rate["lastUpdated"] == "2025-11-03T10:00:00"


def test_refresh_rates_stores_all_pairs(client, rate_store):
    response = client.post("/api/rates/refresh")

    assert response.status_code == 200
    data = response.json()
    rates = {f"{r['fromCurrency']}/{r['toCurrency']}": Decimal(r["rate"]) for r in data["rates"]}
    assert rates == {
        "EUR/SEK": Decimal("11"),
        "SEK/EUR": Decimal("0.09090909"),
        "USD/SEK": Decimal("10"),
        "SEK/USD": Decimal("0.1"),
        "EUR/USD": Decimal("0.90909091"),
        "USD/EUR": Decimal("1.1"),
    }
    assert data["lastUpdated"] is not None
    assert len(rate_store.rows) == 6


def test_refresh_rates_source_down(client, make_source):
    app.dependency_overrides[get_rate_source] = lambda: make_source({})

    response = client.post("/api/rates/refresh")

    assert response.status_code == 503
    data = response.json()
    assert data["status"] == 503
    assert data["error"] == "Failed to fetch exchange rates from Riksbank"


def test_get_single_rate(client, rate_store):
    rate_store.seed(EUR_SEK, "10.93500000", STORED_AT)

    response = client.get("/api/rates/eur/sek")

    assert response.status_code == 200
    data = response.json()
    assert data["fromCurrency"] == "EUR"
    assert data["toCurrency"] == "SEK"
    assert Decimal(data["rate"]) == Decimal("10.935")


def test_get_single_rate_same_currency(client):
    response = client.get("/api/rates/SEK/SEK")

    assert response.status_code == 200
    assert Decimal(response.json()["rate"]) == Decimal("1")


def test_get_single_rate_not_found(client):
    response = client.get("/api/rates/EUR/USD")

    assert response.status_code == 404
    assert response.json()["message"] == "Exchange rate not found for EUR to USD"


@pytest.mark.parametrize("path", ["/api/rates/GBP/SEK", "/api/rates/TOOLONG/SEK"])
def test_get_single_rate_bad_currency(client, path):
    response = client.get(path)

    assert response.status_code == 400


def test_delete_rate(client, rate_store):
    rate_store.seed(EUR_SEK, "10.93500000", STORED_AT)

    response = client.delete("/api/rates/EUR/SEK")

    assert response.status_code == 204
    assert response.content == b""
    assert EUR_SEK not in rate_store.rows


def test_delete_rate_not_found(client):
    response = client.delete("/api/rates/EUR/SEK")

    assert response.status_code == 404


def test_delete_same_currency_rate(client):
    response = client.delete("/api/rates/EUR/EUR")

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid currency"


def test_unexpected_error_returns_500():
    mock_service = MagicMock()
    mock_service.get_latest_rates = AsyncMock(side_effect=RuntimeError("database is locked"))
    app.dependency_overrides[get_rate_service] = lambda: mock_service

    try:
        client = TestClient(app, raise_server_exceptions=False)
        response = client.get("/api/rates/latest")
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 500
    data = response.json()
    assert data["error"] == "An unexpected error occurred"
    assert data["message"] == "database is locked"
