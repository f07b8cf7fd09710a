"""
Exception types raised across the ledger pipeline.
"""


class TrackyError(Exception):
    """Base class for all errors raised by this package."""


class ConfigurationError(TrackyError):
    """A collaborator is not configured, misconfigured, or unreachable."""


class LedgerFetchError(TrackyError):
    """The ledger could not be fetched or parsed as a whole."""


class MatchingError(TrackyError):
    """A sell could not be matched against open tax lots (strict mode only)."""

    def __init__(self, symbol: str, sell_date, unmatched_shares: float):
        self.symbol = symbol
        self.sell_date = sell_date
        self.unmatched_shares = unmatched_shares
        super().__init__(
            f"{symbol}: SELL on {sell_date} has {unmatched_shares:.6f} shares "
            f"with no matching BUY lots"
        )
