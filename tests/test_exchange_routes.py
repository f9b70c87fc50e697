"""Integration tests for the exchange-rate API over a mocked rate provider."""
import pytest


def test_quote_defaults_amount_to_one(client, dummy_fx_service):
    response = client.get("/api/exchange-rates", params={"from": "usd", "to": "eur"})

    assert response.status_code == 200
    payload = response.json()
    assert payload["amount"] == 1.0
    assert payload["convertedAmount"] == pytest.approx(0.9)
    assert payload["from"] == "USD"
    assert payload["to"] == "EUR"
    assert payload["base"] == "USD"
    assert payload["cacheAge"] == "just now"


def test_quote_with_amount(client, dummy_fx_service):
    response = client.get("/api/exchange-rates", params={"from": "EUR", "to": "GBP", "amount": "9"})

    assert response.status_code == 200
    assert response.json()["convertedAmount"] == pytest.approx(8.0)


@pytest.mark.parametrize(
    "params",
    [
        {"to": "EUR"},
        {"from": "USD"},
        {"from": "USD", "to": "EUR", "amount": "0"},
        {"from": "USD", "to": "EUR", "amount": "-5"},
        {"from": "USD", "to": "EUR", "amount": "abc"},
        {"from": "USD", "to": "EUR", "amount": "nan"},
    ],
)
def test_invalid_quote_requests_are_rejected(client, dummy_fx_service, params):
    response = client.get("/api/exchange-rates", params=params)

    assert response.status_code == 400
    assert "error" in response.json()


def test_unknown_currency_is_500(client, dummy_fx_service):
    response = client.get("/api/exchange-rates", params={"from": "USD", "to": "XYZ"})

    assert response.status_code == 500
    assert "XYZ" in response.json()["error"]


def test_provider_failure_without_cache_is_500(client, dummy_fx_service, rates_upstream):
    rates_upstream.status_code = 429

    response = client.get("/api/exchange-rates", params={"from": "USD", "to": "EUR"})

    assert response.status_code == 500
    assert "Rate limit exceeded" in response.json()["error"]


def test_rate_table_dump(client, dummy_fx_service, fake_clock):
    client.post("/api/exchange-rates")
    fake_clock.advance(5 * 60)

    response = client.post("/api/exchange-rates")

    assert response.status_code == 200
    payload = response.json()
    assert payload["base"] == "USD"
    assert payload["rates"] == {"EUR": 0.9, "GBP": 0.8, "JPY": 150.0}
    assert payload["timestamp"] == 1_700_000_000_000
    assert payload["cacheAge"] == "5 minutes ago"
