"""Integration tests for tracky/analysis/pipeline.py."""

import pytest

from tracky.analysis.pipeline import analyze_ledger, apply_quotes, refresh
from tracky.analysis.prices import Quote, StaticPriceProvider
from tracky.core.exceptions import LedgerFetchError
from tracky.analysis.models import HoldingTerm
from tracky.loaders.base import BaseLoader, records_from_rows
from tests.fixtures.test_data import TEST_AS_OF, TEST_SYMBOL_1


class StubLoader(BaseLoader):
    source_name = "stub"

    def __init__(self, records, dropped_rows=0):
        self.records = records
        self.dropped_rows = dropped_rows
        self.calls = 0

    def load(self):
        self.calls += 1
        return list(self.records)


class FailingLoader(BaseLoader):
    def load(self):
        raise LedgerFetchError("ledger unavailable")


class TestAnalyzeLedger:
    """Test the pure ledger-to-portfolio computation."""

    def test_sample_ledger(self, sample_records, normalizer):
        result = analyze_ledger(
            sample_records,
            {TEST_SYMBOL_1: Quote(price=130.0, source="static")},
            normalizer,
            TEST_AS_OF,
        )

        assert result.record_count == 7
        assert result.reporting_currency == "EUR"
        assert len(result.trades) == 3
        assert len(result.fees) == 2
        assert len(result.dividends) == 1

        [position] = result.positions
        assert position.symbol == TEST_SYMBOL_1
        assert position.share_count == pytest.approx(5)
        assert position.average_cost == pytest.approx(110)
        assert position.current_price == 130.0
        assert position.price_source == "static"
        assert position.price_currency == "EUR"

        assert result.gains.realized == pytest.approx(650)
        assert result.gains.unrealized == pytest.approx(50)

    def test_without_quotes_marks_at_cost(self, sample_records, normalizer):
        result = analyze_ledger(sample_records, None, normalizer, TEST_AS_OF)

        [position] = result.positions
        assert position.current_price is None
        assert position.market_price == pytest.approx(110)
        assert result.gains.unrealized == pytest.approx(5 * (110 - 120))

    def test_recompute_is_idempotent(self, sample_records, normalizer):
        first = analyze_ledger(sample_records, None, normalizer, TEST_AS_OF)
        second = analyze_ledger(sample_records, None, normalizer, TEST_AS_OF)

        assert first == second

    def test_input_order_does_not_matter(self, sample_records, normalizer):
        forward = analyze_ledger(sample_records, None, normalizer, TEST_AS_OF)
        backward = analyze_ledger(list(reversed(sample_records)), None, normalizer, TEST_AS_OF)

        assert forward.gains.to_dict() == backward.gains.to_dict()
        assert forward.positions == backward.positions

    def test_closed_positions_kept_separately(self, sample_records, normalizer):
        result = analyze_ledger(sample_records, None, normalizer, TEST_AS_OF)

        assert set(result.all_positions) == {TEST_SYMBOL_1}
        assert result.stats.sells == 1

    def test_empty_ledger(self, normalizer):
        result = analyze_ledger([], None, normalizer, TEST_AS_OF)

        assert result.positions == []
        assert result.gains.total == 0

    def test_timestamps_decide_holding_term(self, normalizer):
        records = records_from_rows(
            [
                {
                    "symbol": "ASML:XAMS", "asset_type": "stock", "transaction_type": "buy",
                    "quantity": "1", "price_per_unit": "100", "currency": "EUR",
                    "transaction_date": "2023-01-01T09:00:00+00:00",
                },
                {
                    "symbol": "ASML:XAMS", "asset_type": "stock", "transaction_type": "sell",
                    "quantity": "-1", "price_per_unit": "150", "currency": "EUR",
                    "transaction_date": "2024-01-01T17:00:00+00:00",
                },
            ]
        )

        result = analyze_ledger(records, None, normalizer, TEST_AS_OF)

        [sale] = result.gains.sales
        assert sale.holding_days == 366
        assert sale.term == HoldingTerm.LONG_TERM
        assert result.gains.long_realized == pytest.approx(50)


class TestApplyQuotes:
    """Test quote fields are copied onto positions."""

    def test_unusable_quote_is_ignored(self, sample_records, normalizer):
        result = analyze_ledger(sample_records, None, normalizer, TEST_AS_OF)

        quoted = apply_quotes(result.positions, {TEST_SYMBOL_1: Quote(price=0.0)})

        assert quoted[0].current_price is None

    def test_original_positions_untouched(self, sample_records, normalizer):
        result = analyze_ledger(sample_records, None, normalizer, TEST_AS_OF)

        quoted = apply_quotes(
            result.positions,
            {TEST_SYMBOL_1: Quote(price=140.0, currency="EUR", change_percent=1.5)},
        )

        assert quoted[0].current_price == 140.0
        assert quoted[0].price_change_pct == 1.5
        assert result.positions[0].current_price is None


class TestRefresh:
    """Test the fetch-quote-analyse cycle."""

    def test_refresh_with_prices(self, sample_records, normalizer):
        loader = StubLoader(sample_records)
        provider = StaticPriceProvider({TEST_SYMBOL_1: 130.0})

        result = refresh(loader, provider, normalizer, TEST_AS_OF)

        assert loader.calls == 1
        assert result.positions[0].current_price == 130.0
        assert result.gains.unrealized == pytest.approx(50)

    def test_refresh_without_provider(self, sample_records, normalizer):
        result = refresh(StubLoader(sample_records), None, normalizer, TEST_AS_OF)

        assert result.positions[0].current_price is None

    def test_refresh_reports_undated_rows(self, sample_records, normalizer):
        result = refresh(StubLoader(sample_records, dropped_rows=2), None, normalizer, TEST_AS_OF)

        assert result.stats.undated == 2
        assert result.stats.total == len(sample_records)

    def test_loader_failure_propagates(self, normalizer):
        with pytest.raises(LedgerFetchError):
            refresh(FailingLoader(), None, normalizer, TEST_AS_OF)
