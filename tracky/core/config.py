"""
Configuration loader for tracky.

Loads settings from a YAML file and provides access throughout the application.
Every section is optional; missing keys fall back to the defaults below.
"""
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from tracky.core.exceptions import ConfigurationError
from tracky.core.models import DEFAULT_CURRENCY, HoldingPeriodMethod


logger = logging.getLogger(__name__)

API_KEY_ENV_VAR = "TRACKY_LEDGER_API_KEY"

DEFAULT_RATES = {"USD": 0.92, "EUR": 1.0, "GBP": 1.17}
DEFAULT_FALLBACK_RATE = 0.92


@dataclass
class LedgerConfig:
    """Connection record for the ledger store REST endpoint."""
    url: str = ""
    api_key: str = ""
    table: str = "transactions"
    timeout: float = 30.0

    @property
    def is_configured(self) -> bool:
        return bool(self.url and self.api_key)


@dataclass
class DataConfig:
    """Location of delimited-text ledger exports."""
    csv_directory: Optional[str] = None
    file_pattern: str = "*.csv"

    @property
    def csv_path(self) -> Optional[Path]:
        return Path(self.csv_directory) if self.csv_directory else None


@dataclass
class ReportingConfig:
    """Reporting currency and the static rate table into it."""
    currency: str = DEFAULT_CURRENCY
    rates: dict[str, float] = field(default_factory=lambda: dict(DEFAULT_RATES))
    fallback_rate: float = DEFAULT_FALLBACK_RATE


@dataclass
class GainsSettings:
    """Knobs for the FIFO gains engine."""
    long_term_days: int = 365
    holding_period_method: HoldingPeriodMethod = HoldingPeriodMethod.OLDEST_LOT
    strict_matching: bool = False


@dataclass
class PriceConfig:
    """Which price collaborator to use."""
    provider: str = "yfinance"  # "yfinance" or "none"


@dataclass
class LoggingConfig:
    """Configuration for logging."""
    level: str = "INFO"
    format: str = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"


@dataclass
class Config:
    """Main configuration container."""
    ledger: LedgerConfig = field(default_factory=LedgerConfig)
    data: DataConfig = field(default_factory=DataConfig)
    reporting: ReportingConfig = field(default_factory=ReportingConfig)
    gains: GainsSettings = field(default_factory=GainsSettings)
    prices: PriceConfig = field(default_factory=PriceConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Config":
        """Build a Config from an already-parsed mapping."""
        raw = raw or {}

        ledger = LedgerConfig(**(raw.get("ledger") or {}))
        if not ledger.api_key:
            ledger.api_key = os.environ.get(API_KEY_ENV_VAR, "")

        reporting_raw = dict(raw.get("reporting") or {})
        rates = {
            str(code).upper(): float(rate)
            for code, rate in (reporting_raw.pop("rates", None) or DEFAULT_RATES).items()
        }
        reporting = ReportingConfig(rates=rates, **reporting_raw)
        reporting.currency = reporting.currency.upper()

        gains_raw = dict(raw.get("gains") or {})
        method = gains_raw.pop("holding_period_method", HoldingPeriodMethod.OLDEST_LOT.value)
        try:
            gains = GainsSettings(holding_period_method=HoldingPeriodMethod(method), **gains_raw)
        except ValueError as e:
            raise ConfigurationError(f"Invalid holding_period_method: {method}") from e

        return cls(
            ledger=ledger,
            data=DataConfig(**(raw.get("data") or {})),
            reporting=reporting,
            gains=gains,
            prices=PriceConfig(**(raw.get("prices") or {})),
            logging=LoggingConfig(**(raw.get("logging") or {})),
        )

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Config":
        """Load configuration from a YAML file."""
        path = Path(path)
        logger.debug(f"Loading configuration from {path}")

        if not path.exists():
            raise ConfigurationError(f"Configuration file not found: {path}")

        with open(path, "r") as f:
            raw = yaml.safe_load(f)

        try:
            return cls.from_dict(raw)
        except TypeError as e:
            raise ConfigurationError(f"Invalid configuration in {path}: {e}") from e


def setup_logging(config: LoggingConfig) -> None:
    """Configure logging based on configuration."""
    logging.basicConfig(
        level=getattr(logging, config.level.upper()),
        format=config.format,
        datefmt=config.date_format,
    )
    logger.info("Logging configured successfully")


def load_config(path: str | Path = "config.yaml") -> Config:
    """
    Load configuration and set up logging.

    Args:
        path: Path to the YAML configuration file.

    Returns:
        Loaded Config object.
    """
    config = Config.from_yaml(path)
    setup_logging(config.logging)
    return config
