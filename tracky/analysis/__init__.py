"""
Ledger analysis for tracky.

Provides:
- Rule-based classification of raw ledger records
- Weighted-average-cost positions
- FIFO tax-lot matching with short/long-term gains
- Report tables built on pandas
"""

from tracky.analysis.classifier import ClassificationStats, ClassifiedLedger, classify_records
from tracky.analysis.fifo import FifoGainsEngine
from tracky.analysis.models import (
    GainsReport,
    HoldingTerm,
    SaleResult,
    SellMatch,
    SymbolGains,
    TaxLot,
)
from tracky.analysis.pipeline import PortfolioResult, analyze_ledger, refresh
from tracky.analysis.positions import PositionBuilder, build_positions

__all__ = [
    "ClassificationStats",
    "ClassifiedLedger",
    "FifoGainsEngine",
    "GainsReport",
    "HoldingTerm",
    "PortfolioResult",
    "PositionBuilder",
    "SaleResult",
    "SellMatch",
    "SymbolGains",
    "TaxLot",
    "analyze_ledger",
    "build_positions",
    "classify_records",
    "refresh",
]
