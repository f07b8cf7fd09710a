"""Shared pytest fixtures and configuration."""

from io import StringIO
from unittest.mock import Mock

import pandas as pd
import pytest

from tracky.core.config import Config, GainsSettings
from tracky.core.models import HoldingPeriodMethod
from tracky.loaders.base import records_from_rows
from tracky.utils.currency import CurrencyNormalizer
from tests.fixtures.test_data import (
    SAMPLE_LEDGER_ROWS,
    TEST_DATE_1,
    TEST_FALLBACK_RATE,
    TEST_RATES,
)


# ============================================================================
# CURRENCY / SETTINGS FIXTURES
# ============================================================================


@pytest.fixture
def normalizer():
    """EUR normaliser with the default static rate table."""
    return CurrencyNormalizer(
        reporting_currency="EUR",
        rates=dict(TEST_RATES),
        fallback_rate=TEST_FALLBACK_RATE,
    )


@pytest.fixture
def gains_settings():
    """Default gains engine settings."""
    return GainsSettings()


@pytest.fixture
def per_lot_settings():
    """Gains settings that split mixed-age sales per lot."""
    return GainsSettings(holding_period_method=HoldingPeriodMethod.PER_LOT)


@pytest.fixture
def strict_settings():
    """Gains settings that reject unmatched sells."""
    return GainsSettings(strict_matching=True)


# ============================================================================
# LEDGER FIXTURES
# ============================================================================


@pytest.fixture
def sample_records():
    """Raw records for the mixed sample ledger."""
    return records_from_rows(SAMPLE_LEDGER_ROWS)


@pytest.fixture
def comma_csv_sample():
    """Comma-separated ledger export as StringIO."""
    csv_content = """symbol,type,side,quantity,price,currency,date
ASML:XAMS,stock,buy,10,"1,050.50",EUR,2023-01-10
AAPL:XNAS,stock,buy,5,150.25,USD,2023-02-01
FEE,expense,fee,1,-2.5,EUR,2023-02-01
"""
    return StringIO(csv_content)


@pytest.fixture
def semicolon_csv_sample():
    """Semicolon-separated ledger export with decimal commas as StringIO."""
    csv_content = """symbol;asset_type;transaction_type;quantity;price_per_unit;currency;transaction_date
ASML:XAMS;stock;buy;2,5;612,40;EUR;10/01/2023
VWRL:XLON;etf;buy;10;1.050,75;GBP;15.03.2023
"""
    return StringIO(csv_content)


@pytest.fixture
def config_dict():
    """Raw configuration mapping as it would come out of YAML."""
    return {
        "ledger": {"url": "https://ledger.example.com", "api_key": "secret-key"},
        "reporting": {"currency": "eur", "rates": {"usd": 0.9, "gbp": 1.2}},
        "gains": {"long_term_days": 365, "holding_period_method": "per_lot"},
        "prices": {"provider": "none"},
    }


@pytest.fixture
def config(config_dict):
    """Config built from config_dict."""
    return Config.from_dict(config_dict)


# ============================================================================
# YFINANCE MOCK FIXTURES
# ============================================================================


@pytest.fixture
def mock_yfinance_ticker():
    """Create a mock yfinance Ticker object."""
    mock_ticker = Mock()

    price_data = pd.DataFrame(
        {
            "Close": [100.0, 101.0, 102.0],
        },
        index=pd.date_range(start=TEST_DATE_1, periods=3),
    )
    mock_ticker.history.return_value = price_data
    mock_ticker.fast_info = {"currency": "EUR"}

    return mock_ticker


@pytest.fixture
def patch_yfinance_ticker(mocker, mock_yfinance_ticker):
    """Patch yfinance.Ticker to return mock ticker."""
    return mocker.patch("yfinance.Ticker", return_value=mock_yfinance_ticker)


# ============================================================================
# PYTEST CONFIGURATION
# ============================================================================


def pytest_configure(config):
    """Configure pytest."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
