"""
Rule-based classification of raw ledger records.

Each record is checked against a priority-ordered rule list and the first
matching rule decides its kind: cash movements are counted and dropped,
fees, withholding taxes and dividends become cost/income records, and
buy/sell activity becomes NormalizedTrade objects.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional, Union

from tracky.core.models import (
    SHARE_EPSILON,
    CURRENCY_EPSILON,
    DividendRecord,
    Direction,
    FeeRecord,
    FeeType,
    NormalizedTrade,
    RawTransactionRecord,
    RecordKind,
    split_symbol,
)

logger = logging.getLogger(__name__)

DIVIDEND_TYPES = {"cash dividends", "dividend"}
TRADE_ASSET_TYPES = {"stock", "etf", "equity"}
TRADE_ACTIONS = {"buy", "sell", "transfer in", "transfer out"}
SELL_ACTIONS = {"sell", "transfer out"}
BUY_ACTIONS = {"buy", "transfer in"}

# Below this quantity a dividend row carries the total amount in its price field
DIVIDEND_QUANTITY_EPSILON = 1e-4

Payload = Union[NormalizedTrade, FeeRecord, DividendRecord, None]


@dataclass(frozen=True)
class Classification:
    """Tagged result of classifying one raw record."""

    kind: RecordKind
    record: Payload = None


@dataclass
class ClassificationStats:
    """Diagnostic counters of records processed per category."""

    cash: int = 0
    fees: int = 0
    taxes: int = 0
    dividends: int = 0
    buys: int = 0
    sells: int = 0
    skipped: int = 0
    # Source rows dropped before classification for want of a date
    undated: int = 0

    @property
    def total(self) -> int:
        return (
            self.cash + self.fees + self.taxes + self.dividends
            + self.buys + self.sells + self.skipped
        )

    def count(self, classification: Classification) -> None:
        kind = classification.kind
        if kind is RecordKind.CASH:
            self.cash += 1
        elif kind is RecordKind.FEE:
            self.fees += 1
        elif kind is RecordKind.TAX:
            self.taxes += 1
        elif kind is RecordKind.DIVIDEND:
            self.dividends += 1
        elif kind is RecordKind.TRADE:
            if classification.record.is_buy:
                self.buys += 1
            else:
                self.sells += 1
        else:
            self.skipped += 1

    def to_dict(self) -> dict:
        return {
            "cash": self.cash,
            "fees": self.fees,
            "taxes": self.taxes,
            "dividends": self.dividends,
            "buys": self.buys,
            "sells": self.sells,
            "skipped": self.skipped,
            "undated": self.undated,
            "total": self.total,
        }


@dataclass
class ClassifiedLedger:
    """Streams produced from a full ledger, each in ascending date order."""

    trades: list[NormalizedTrade] = field(default_factory=list)
    fees: list[FeeRecord] = field(default_factory=list)
    dividends: list[DividendRecord] = field(default_factory=list)
    stats: ClassificationStats = field(default_factory=ClassificationStats)


def _trade_direction(transaction_type: str, quantity: float) -> Direction:
    if transaction_type in SELL_ACTIONS:
        return Direction.SELL
    if transaction_type in BUY_ACTIONS:
        return Direction.BUY
    return Direction.BUY if quantity > 0 else Direction.SELL


def classify_record(record: RawTransactionRecord) -> Classification:
    """
    Classify a single raw record. First matching rule wins.

    Args:
        record: The raw ledger record.

    Returns:
        Classification with the derived record, if any.
    """
    symbol = record.symbol.strip()
    asset_type = record.asset_type.lower().strip()
    tx_type = record.transaction_type.lower().strip()
    qty = record.quantity
    price = record.price_per_unit

    if symbol.lower() == "cash" or asset_type == "cash":
        return Classification(RecordKind.CASH)

    if symbol.lower() == "fee" or asset_type == "expense":
        return Classification(
            RecordKind.FEE,
            FeeRecord(
                fee_type=FeeType.TRANSACTION_FEE,
                amount=abs(price),
                currency=record.currency,
                date=record.transaction_date,
            ),
        )

    if asset_type == "tax" or tx_type == "withholding tax":
        return Classification(
            RecordKind.TAX,
            FeeRecord(
                fee_type=FeeType.WITHHOLDING_TAX,
                amount=abs(price),
                currency=record.currency,
                date=record.transaction_date,
                symbol=symbol or None,
            ),
        )

    if asset_type in DIVIDEND_TYPES or tx_type in DIVIDEND_TYPES:
        clean_symbol, _ = split_symbol(symbol)
        if abs(qty) < DIVIDEND_QUANTITY_EPSILON:
            amount = abs(price)
        else:
            amount = abs(price * qty)

        dividend: Optional[DividendRecord] = None
        if amount > CURRENCY_EPSILON:
            dividend = DividendRecord(
                symbol=clean_symbol,
                amount=amount,
                currency=record.currency,
                date=record.transaction_date,
                full_symbol=symbol,
            )
        return Classification(RecordKind.DIVIDEND, dividend)

    is_trade_asset = asset_type in TRADE_ASSET_TYPES
    is_trade_action = tx_type in TRADE_ACTIONS

    if (is_trade_asset or is_trade_action) and abs(qty) > SHARE_EPSILON and price > 0:
        clean_symbol, exchange = split_symbol(symbol)
        return Classification(
            RecordKind.TRADE,
            NormalizedTrade(
                symbol=clean_symbol,
                full_symbol=symbol,
                direction=_trade_direction(tx_type, qty),
                share_count=abs(qty),
                unit_price=price,
                currency=record.currency,
                date=record.transaction_date,
                exchange=exchange,
                asset_type=asset_type,
                timestamp=record.timestamp,
            ),
        )

    return Classification(RecordKind.SKIPPED)


def sort_records(records: Iterable[RawTransactionRecord]) -> list[RawTransactionRecord]:
    """Order records by timestamp; ties keep their source order."""
    indexed = list(enumerate(records))
    indexed.sort(key=lambda item: (item[1].occurred_at, item[0]))
    return [record for _, record in indexed]


def classify_records(records: Iterable[RawTransactionRecord]) -> ClassifiedLedger:
    """
    Classify a full ledger into trade, fee and dividend streams.

    The input is re-sorted by date, so callers may pass records in any order.

    Args:
        records: Raw ledger records.

    Returns:
        ClassifiedLedger with date-ordered streams and category counters.
    """
    ledger = ClassifiedLedger()

    for record in sort_records(records):
        classification = classify_record(record)
        ledger.stats.count(classification)

        payload = classification.record
        if isinstance(payload, NormalizedTrade):
            ledger.trades.append(payload)
        elif isinstance(payload, FeeRecord):
            ledger.fees.append(payload)
        elif isinstance(payload, DividendRecord):
            ledger.dividends.append(payload)
        elif classification.kind is RecordKind.SKIPPED:
            logger.debug(
                f"Skipped ledger row {record.row_index}: "
                f"symbol={record.symbol!r} asset_type={record.asset_type!r} "
                f"transaction_type={record.transaction_type!r}"
            )

    stats = ledger.stats
    logger.info(
        f"Classified {stats.total} records: {stats.buys} buys, {stats.sells} sells, "
        f"{stats.fees} fees, {stats.taxes} taxes, {stats.dividends} dividends, "
        f"{stats.cash} cash, {stats.skipped} skipped"
    )
    return ledger
