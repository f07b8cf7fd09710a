"""
Client for the hosted ledger store (PostgREST-style REST endpoint).

The client is a plain value built from a LedgerConfig and passed to
whoever needs it; there is no module-level connection state.
"""
import logging
from dataclasses import dataclass
from typing import Any

import requests

from tracky.core.config import LedgerConfig
from tracky.core.exceptions import ConfigurationError, LedgerFetchError
from tracky.core.models import RawTransactionRecord
from .base import BaseLoader, convert_rows, records_from_rows


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LedgerClient:
    """Read-only access to the transactions table of one account."""

    base_url: str
    api_key: str
    table: str = "transactions"
    timeout: float = 30.0

    @classmethod
    def from_config(cls, config: LedgerConfig) -> "LedgerClient":
        """
        Build a client from its configuration record.

        Raises:
            ConfigurationError: If the endpoint URL or API key is missing.
        """
        if not config.is_configured:
            raise ConfigurationError("Ledger store not configured: url and api_key are required")
        return cls(
            base_url=config.url.rstrip("/"),
            api_key=config.api_key,
            table=config.table or "transactions",
            timeout=config.timeout,
        )

    @property
    def headers(self) -> dict[str, str]:
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    @property
    def transactions_url(self) -> str:
        return f"{self.base_url}/rest/v1/{self.table}"

    def fetch_rows(self) -> list[dict[str, Any]]:
        """
        Fetch every raw transaction row, as returned by the store.

        Raises:
            ConfigurationError: If the store cannot be reached.
            LedgerFetchError: If the store answers with an error or bad payload.
        """
        logger.info(f"Fetching transactions from {self.transactions_url}")
        try:
            resp = requests.get(
                self.transactions_url,
                headers=self.headers,
                params={"select": "*", "order": "transaction_date.asc"},
                timeout=self.timeout,
            )
        except (requests.ConnectionError, requests.Timeout) as e:
            raise ConfigurationError(f"Ledger store unreachable at {self.base_url}: {e}") from e
        except requests.RequestException as e:
            raise LedgerFetchError(f"Ledger request failed: {e}") from e

        if not resp.ok:
            raise LedgerFetchError(f"Ledger store returned {resp.status_code}: {resp.text}")

        try:
            payload = resp.json()
        except ValueError as e:
            raise LedgerFetchError(f"Ledger store returned invalid JSON: {e}") from e

        if not isinstance(payload, list):
            raise LedgerFetchError(
                f"Ledger store returned {type(payload).__name__}, expected a list of rows"
            )

        logger.info(f"Fetched {len(payload)} transaction rows")
        return payload

    def fetch_transactions(self) -> list[RawTransactionRecord]:
        """Fetch every transaction and resolve field aliases."""
        return records_from_rows(self.fetch_rows())


class LedgerLoader(BaseLoader):
    """BaseLoader adapter over a LedgerClient."""

    source_name = "ledger_store"

    def __init__(self, client: LedgerClient):
        self.client = client

    def load(self) -> list[RawTransactionRecord]:
        records, self.dropped_rows = convert_rows(self.client.fetch_rows())
        return records
