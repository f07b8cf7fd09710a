"""
Currency normalisation into a single reporting currency.

Uses a static rate table. Callers wanting live rates build a new
normaliser with with_rates(); nothing here fetches anything.
"""
import logging
from dataclasses import dataclass, field
from typing import Mapping, Optional

from tracky.core.config import DEFAULT_FALLBACK_RATE, DEFAULT_RATES, ReportingConfig
from tracky.core.models import DEFAULT_CURRENCY


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CurrencyNormalizer:
    """
    Convert amounts into the reporting currency.

    rates maps a currency code to the number of reporting-currency units
    per one unit of that currency. Unknown codes use fallback_rate.
    """

    reporting_currency: str = DEFAULT_CURRENCY
    rates: Mapping[str, float] = field(default_factory=lambda: dict(DEFAULT_RATES))
    fallback_rate: float = DEFAULT_FALLBACK_RATE

    @classmethod
    def from_config(cls, config: ReportingConfig) -> "CurrencyNormalizer":
        return cls(
            reporting_currency=config.currency.upper(),
            rates={code.upper(): rate for code, rate in config.rates.items()},
            fallback_rate=config.fallback_rate,
        )

    def is_known(self, currency: str) -> bool:
        code = (currency or "").upper()
        return code == self.reporting_currency or code in self.rates

    def rate(self, currency: Optional[str]) -> float:
        """Conversion factor from currency into the reporting currency."""
        code = (currency or self.reporting_currency).upper()
        if code == self.reporting_currency:
            return 1.0
        if code not in self.rates:
            logger.debug(
                f"No rate for {code}->{self.reporting_currency}, "
                f"using fallback {self.fallback_rate}"
            )
            return self.fallback_rate
        return self.rates[code]

    def convert(self, amount: float, currency: Optional[str]) -> float:
        """
        Convert an amount into the reporting currency.

        Args:
            amount: Amount in the transaction currency.
            currency: ISO code of the transaction currency.

        Returns:
            The amount in the reporting currency.
        """
        return amount * self.rate(currency)

    def with_rates(self, rates: Mapping[str, float]) -> "CurrencyNormalizer":
        """Return a normaliser with the given rates layered over this table."""
        merged = dict(self.rates)
        merged.update({code.upper(): rate for code, rate in rates.items()})
        return CurrencyNormalizer(
            reporting_currency=self.reporting_currency,
            rates=merged,
            fallback_rate=self.fallback_rate,
        )


if __name__ == "__main__":
    normalizer = CurrencyNormalizer()

    print(f"Reporting currency: {normalizer.reporting_currency}")
    print(f"  100 GBP -> {normalizer.convert(100, 'GBP'):.2f} EUR")
    print(f"  100 USD -> {normalizer.convert(100, 'USD'):.2f} EUR")
    print(f"  100 CHF -> {normalizer.convert(100, 'CHF'):.2f} EUR (fallback)")
