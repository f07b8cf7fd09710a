"""Unit tests for field alias resolution in tracky/loaders/base.py."""

from datetime import date, datetime

import pytest

from tracky.loaders.base import convert_rows, record_from_row, records_from_rows, resolve_aliases


class TestResolveAliases:
    """Test mapping source columns onto canonical fields."""

    def test_canonical_names(self):
        resolved = resolve_aliases(
            {
                "symbol": "ASML:XAMS",
                "asset_type": "stock",
                "transaction_type": "buy",
                "quantity": "10",
                "price_per_unit": "100",
                "currency": "EUR",
                "transaction_date": "2023-01-10",
            }
        )

        assert resolved["symbol"] == "ASML:XAMS"
        assert resolved["price_per_unit"] == "100"
        assert resolved["transaction_date"] == "2023-01-10"

    def test_alternate_names(self):
        resolved = resolve_aliases(
            {"price": "12.5", "type": "etf", "side": "sell", "date": "2023-01-10", "ccy": "usd"}
        )

        assert resolved["price_per_unit"] == "12.5"
        assert resolved["asset_type"] == "etf"
        assert resolved["transaction_type"] == "sell"
        assert resolved["transaction_date"] == "2023-01-10"
        assert resolved["currency"] == "usd"

    def test_keys_are_case_insensitive(self):
        resolved = resolve_aliases({" Symbol ": "AAPL", "PRICE": "1"})

        assert resolved["symbol"] == "AAPL"
        assert resolved["price_per_unit"] == "1"

    def test_first_non_empty_alias_wins(self):
        resolved = resolve_aliases({"price_per_unit": "", "price": "9.99"})
        assert resolved["price_per_unit"] == "9.99"

        resolved = resolve_aliases({"price_per_unit": "5", "price": "9.99"})
        assert resolved["price_per_unit"] == "5"

    def test_absent_fields_are_none(self):
        resolved = resolve_aliases({})
        assert all(value is None for value in resolved.values())


class TestRecordFromRow:
    """Test building typed records from rows."""

    def test_typed_record(self):
        record = record_from_row(
            {
                "symbol": " ASML:XAMS ",
                "type": "Stock",
                "action": "Buy",
                "quantity": "10",
                "price": "1,050.50",
                "currency": "eur",
                "date": "10/01/2023",
            },
            index=4,
        )

        assert record.symbol == "ASML:XAMS"
        assert record.asset_type == "Stock"
        assert record.transaction_type == "Buy"
        assert record.quantity == 10.0
        assert record.price_per_unit == pytest.approx(1050.50)
        assert record.currency == "EUR"
        assert record.transaction_date == date(2023, 1, 10)
        assert record.row_index == 4

    def test_missing_currency_defaults_to_eur(self):
        record = record_from_row({"symbol": "X", "date": "2023-01-10"})

        assert record.currency == "EUR"
        assert record.quantity == 0.0
        assert record.price_per_unit == 0.0

    def test_numeric_values_pass_through(self):
        record = record_from_row({"quantity": -2.5, "price_per_unit": 40, "date": "2023-01-10"})

        assert record.quantity == -2.5
        assert record.price_per_unit == 40.0

    def test_row_without_date_is_dropped(self, caplog):
        assert record_from_row({"symbol": "X", "date": "soon"}) is None
        assert "no parseable transaction date" in caplog.text

    def test_records_from_rows_keeps_source_index(self):
        records = records_from_rows(
            [
                {"symbol": "A", "date": "2023-01-10"},
                {"symbol": "B"},
                {"symbol": "C", "date": "2023-01-11"},
            ]
        )

        assert [r.symbol for r in records] == ["A", "C"]
        assert [r.row_index for r in records] == [0, 2]

    def test_convert_rows_counts_dropped(self, caplog):
        records, dropped = convert_rows(
            [
                {"symbol": "A", "date": "2023-01-10 16:20:05.1+00"},
                {"symbol": "B", "date": ""},
                {"symbol": "C", "date": "never"},
            ]
        )

        assert [r.symbol for r in records] == ["A"]
        assert records[0].timestamp == datetime(2023, 1, 10, 16, 20, 5, 100000)
        assert records[0].transaction_date == date(2023, 1, 10)
        assert dropped == 2
        assert "Dropped 2 ledger rows" in caplog.text
