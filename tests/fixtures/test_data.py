"""Shared test data constants and record builders."""

from datetime import date, datetime
from typing import Optional

from tracky.core.models import Direction, NormalizedTrade, RawTransactionRecord

# Test dates
TEST_DATE_1 = date(2023, 1, 10)
TEST_DATE_2 = date(2023, 3, 15)
TEST_DATE_3 = date(2023, 6, 1)
TEST_DATE_4 = date(2024, 2, 20)
TEST_AS_OF = date(2024, 6, 30)

# Test symbols
TEST_SYMBOL_1 = "ASML"
TEST_SYMBOL_2 = "AAPL"
TEST_SYMBOL_3 = "VWRL"
TEST_FULL_SYMBOL_1 = "ASML:XAMS"
TEST_FULL_SYMBOL_2 = "AAPL:XNAS"
TEST_FULL_SYMBOL_3 = "VWRL:XLON"

# Rate table (reporting currency units per unit)
TEST_RATES = {"USD": 0.92, "EUR": 1.0, "GBP": 1.17}
TEST_FALLBACK_RATE = 0.92


def make_record(
    symbol: str = TEST_FULL_SYMBOL_1,
    asset_type: str = "stock",
    transaction_type: str = "buy",
    quantity: float = 10.0,
    price: float = 100.0,
    currency: str = "EUR",
    tx_date: date = TEST_DATE_1,
    row_index: int = 0,
    timestamp: Optional[datetime] = None,
) -> RawTransactionRecord:
    """Build a raw ledger record with sensible defaults."""
    return RawTransactionRecord(
        symbol=symbol,
        asset_type=asset_type,
        transaction_type=transaction_type,
        quantity=quantity,
        price_per_unit=price,
        currency=currency,
        transaction_date=tx_date,
        row_index=row_index,
        timestamp=timestamp,
    )


def make_trade(
    direction: Direction,
    shares: float,
    price: float,
    tx_date: date,
    symbol: str = TEST_SYMBOL_1,
    currency: str = "EUR",
    asset_type: str = "stock",
    timestamp: Optional[datetime] = None,
) -> NormalizedTrade:
    """Build a normalized trade with sensible defaults."""
    return NormalizedTrade(
        symbol=symbol,
        full_symbol=f"{symbol}:XAMS",
        direction=direction,
        share_count=shares,
        unit_price=price,
        currency=currency,
        date=tx_date,
        exchange="XAMS",
        asset_type=asset_type,
        timestamp=timestamp,
    )


# A small mixed ledger: cash, two buys and a sell, a fee, a tax, a dividend
SAMPLE_LEDGER_ROWS = [
    {
        "symbol": "CASH", "asset_type": "cash", "transaction_type": "deposit",
        "quantity": "1", "price_per_unit": "5000", "currency": "EUR",
        "transaction_date": "2023-01-02",
    },
    {
        "symbol": TEST_FULL_SYMBOL_1, "asset_type": "stock", "transaction_type": "buy",
        "quantity": "10", "price_per_unit": "100", "currency": "EUR",
        "transaction_date": "2023-01-10",
    },
    {
        "symbol": TEST_FULL_SYMBOL_1, "asset_type": "stock", "transaction_type": "buy",
        "quantity": "10", "price_per_unit": "120", "currency": "EUR",
        "transaction_date": "2023-03-15",
    },
    {
        "symbol": "FEE", "asset_type": "expense", "transaction_type": "fee",
        "quantity": "1", "price_per_unit": "-2.50", "currency": "EUR",
        "transaction_date": "2023-03-15",
    },
    {
        "symbol": TEST_FULL_SYMBOL_2, "asset_type": "dividend", "transaction_type": "dividend",
        "quantity": "0", "price_per_unit": "50", "currency": "USD",
        "transaction_date": "2023-05-01",
    },
    {
        "symbol": TEST_FULL_SYMBOL_2, "asset_type": "tax", "transaction_type": "withholding tax",
        "quantity": "0", "price_per_unit": "-7.50", "currency": "USD",
        "transaction_date": "2023-05-01",
    },
    {
        "symbol": TEST_FULL_SYMBOL_1, "asset_type": "stock", "transaction_type": "sell",
        "quantity": "-15", "price_per_unit": "150", "currency": "EUR",
        "transaction_date": "2023-06-01",
    },
]
