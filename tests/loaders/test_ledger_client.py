"""Unit tests for the hosted ledger store client."""

from datetime import date, datetime
from unittest.mock import Mock

import pytest
import requests

from tracky.core.config import LedgerConfig
from tracky.core.exceptions import ConfigurationError, LedgerFetchError
from tracky.loaders.ledger_client import LedgerClient, LedgerLoader


@pytest.fixture
def client():
    return LedgerClient(base_url="https://ledger.example.com", api_key="secret-key")


def make_response(status_code=200, payload=None, text=""):
    response = Mock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.text = text
    response.json.return_value = payload
    return response


class TestFromConfig:
    """Test building the client from configuration."""

    def test_configured(self):
        client = LedgerClient.from_config(
            LedgerConfig(url="https://ledger.example.com/", api_key="k", table="trades", timeout=5)
        )

        assert client.base_url == "https://ledger.example.com"
        assert client.transactions_url == "https://ledger.example.com/rest/v1/trades"
        assert client.timeout == 5

    @pytest.mark.parametrize(
        "config",
        [LedgerConfig(), LedgerConfig(url="https://ledger.example.com"), LedgerConfig(api_key="k")],
    )
    def test_not_configured(self, config):
        with pytest.raises(ConfigurationError):
            LedgerClient.from_config(config)

    def test_headers(self, client):
        assert client.headers["apikey"] == "secret-key"
        assert client.headers["Authorization"] == "Bearer secret-key"


class TestFetch:
    """Test fetching rows over HTTP."""

    def test_fetch_transactions(self, mocker, client):
        rows = [
            {
                "symbol": "ASML:XAMS",
                "asset_type": "stock",
                "transaction_type": "buy",
                "quantity": 10,
                "price_per_unit": 100.5,
                "currency": "EUR",
                "transaction_date": "2023-01-10T00:00:00+00:00",
            },
            {"symbol": "broken row without date"},
        ]
        mock_get = mocker.patch("requests.get", return_value=make_response(payload=rows))

        records = client.fetch_transactions()

        assert len(records) == 1
        assert records[0].price_per_unit == 100.5
        assert records[0].transaction_date == date(2023, 1, 10)
        mock_get.assert_called_once_with(
            "https://ledger.example.com/rest/v1/transactions",
            headers=client.headers,
            params={"select": "*", "order": "transaction_date.asc"},
            timeout=30.0,
        )

    def test_http_error(self, mocker, client):
        mocker.patch("requests.get", return_value=make_response(401, text="bad key"))

        with pytest.raises(LedgerFetchError, match="401"):
            client.fetch_rows()

    def test_invalid_json(self, mocker, client):
        response = make_response()
        response.json.side_effect = ValueError("not json")
        mocker.patch("requests.get", return_value=response)

        with pytest.raises(LedgerFetchError, match="invalid JSON"):
            client.fetch_rows()

    def test_payload_not_a_list(self, mocker, client):
        mocker.patch("requests.get", return_value=make_response(payload={"message": "oops"}))

        with pytest.raises(LedgerFetchError, match="expected a list"):
            client.fetch_rows()

    @pytest.mark.parametrize("error", [requests.ConnectionError("down"), requests.Timeout("slow")])
    def test_unreachable(self, mocker, client, error):
        mocker.patch("requests.get", side_effect=error)

        with pytest.raises(ConfigurationError, match="unreachable"):
            client.fetch_rows()

    def test_other_request_error(self, mocker, client):
        mocker.patch("requests.get", side_effect=requests.RequestException("boom"))

        with pytest.raises(LedgerFetchError):
            client.fetch_rows()


class TestLedgerLoader:
    """Test the loader adapter."""

    def test_load_delegates_to_client(self, mocker):
        client = mocker.Mock(spec=LedgerClient)
        client.fetch_rows.return_value = []

        loader = LedgerLoader(client)

        assert loader.load() == []
        assert loader.source_name == "ledger_store"
        assert loader.dropped_rows == 0
        client.fetch_rows.assert_called_once()

    def test_load_counts_undated_rows(self, mocker):
        client = mocker.Mock(spec=LedgerClient)
        client.fetch_rows.return_value = [
            {"symbol": "A", "transaction_date": "2023-01-10 09:15:00.5+00"},
            {"symbol": "B", "transaction_date": None},
            {"symbol": "C"},
        ]

        loader = LedgerLoader(client)
        records = loader.load()

        assert [r.symbol for r in records] == ["A"]
        assert records[0].timestamp == datetime(2023, 1, 10, 9, 15, 0, 500000)
        assert loader.dropped_rows == 2
