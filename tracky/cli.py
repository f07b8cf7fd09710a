"""
Command-line entry point.

Usage:
    tracky report --config config.yaml
    tracky report --config config.yaml --csv ./data --no-prices
    tracky report --config config.yaml --as-of 2024-12-31 --output gains.csv
"""

import argparse
import logging
import sys
from datetime import date, datetime
from pathlib import Path
from typing import Optional

from tracky.analysis.pipeline import PortfolioResult, refresh
from tracky.analysis.prices import PriceProvider, YFinanceProvider
from tracky.analysis.report import gains_frame, positions_frame, summarize
from tracky.core.config import Config, load_config
from tracky.core.exceptions import TrackyError
from tracky.loaders.base import BaseLoader
from tracky.loaders.csv_loader import CsvLedgerLoader
from tracky.loaders.ledger_client import LedgerClient, LedgerLoader
from tracky.utils.currency import CurrencyNormalizer

logger = logging.getLogger(__name__)


def parse_as_of(date_str: str) -> date:
    """Parse date string in YYYY-MM-DD format."""
    try:
        return datetime.strptime(date_str, "%Y-%m-%d").date()
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"Invalid date format: {date_str}. Use YYYY-MM-DD."
        )


def build_loader(config: Config, csv_directory: Optional[str] = None) -> BaseLoader:
    """CSV exports if a directory is given or configured, otherwise the ledger store."""
    directory = csv_directory or config.data.csv_directory
    if directory:
        return CsvLedgerLoader(Path(directory), config.data.file_pattern)
    return LedgerLoader(LedgerClient.from_config(config.ledger))


def build_provider(config: Config, no_prices: bool = False) -> Optional[PriceProvider]:
    if no_prices or config.prices.provider.lower() == "none":
        return None
    return YFinanceProvider()


def print_summary(result: PortfolioResult, normalizer: CurrencyNormalizer) -> None:
    summary = summarize(result, normalizer)
    ccy = summary["reporting_currency"]

    print("=" * 60)
    print(f"PORTFOLIO as of {summary['as_of']} ({ccy})")
    print("=" * 60)
    print(f"Records:           {summary['records']}")
    if summary["undated_rows"]:
        print(f"WARNING: {summary['undated_rows']} ledger rows without a date were left out")
    print(f"Open positions:    {summary['open_positions']}")
    print(f"Market value:      {summary['market_value']:>14,.2f}")
    print(f"Cost:              {summary['cost']:>14,.2f}")
    print(
        f"Unrealized gain:   {summary['unrealized_gain']:>14,.2f} "
        f"({summary['unrealized_gain_pct']:.2f}%)"
    )

    gains = summary.get("gains")
    if gains:
        print("-" * 60)
        print(f"Realized (FIFO):   {gains['realized']:>14,.2f}")
        print(f"  short-term:      {gains['short_realized']:>14,.2f}")
        print(f"  long-term:       {gains['long_realized']:>14,.2f}")
        print(f"Unrealized (FIFO): {gains['unrealized']:>14,.2f}")
        print(f"  short-term:      {gains['short_unrealized']:>14,.2f}")
        print(f"  long-term:       {gains['long_unrealized']:>14,.2f}")
        print(f"Total gain:        {gains['total']:>14,.2f}")
        if summary["unmatched_sales"]:
            print(f"WARNING: {summary['unmatched_sales']} sells exceed available lots")

    print("-" * 60)
    for fee_type, amount in summary["fees"].items():
        print(f"{fee_type + ':':<19}{amount:>14,.2f}")
    print(f"Dividends:         {summary['total_dividends']:>14,.2f}")

    positions = positions_frame(result.positions, normalizer)
    if not positions.empty:
        print("-" * 60)
        print(
            positions[["symbol", "type", "shares", "avg_price", "current_price", "currency"]]
            .to_string(index=False)
        )


def run_report(args: argparse.Namespace) -> int:
    config = load_config(args.config)
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    normalizer = CurrencyNormalizer.from_config(config.reporting)
    loader = build_loader(config, args.csv)
    provider = build_provider(config, args.no_prices)

    result = refresh(loader, provider, normalizer, args.as_of, config.gains)
    print_summary(result, normalizer)

    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        gains_frame(result).to_csv(output_path, index=False)
        logger.info(f"Gains table written to {output_path}")

    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="tracky",
        description="Positions and FIFO gains from an investment ledger",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  tracky report --config config.yaml
  tracky report --config config.yaml --csv ./data --no-prices
  tracky report --config config.yaml --as-of 2024-12-31 --output gains.csv
        """,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    report = subparsers.add_parser("report", help="Print a portfolio and gains summary")
    report.add_argument(
        "--config",
        default="config.yaml",
        help="Path to YAML configuration (default: config.yaml)",
    )
    report.add_argument(
        "--csv",
        default=None,
        help="Read ledger exports from this directory instead of the ledger store",
    )
    report.add_argument(
        "--no-prices",
        action="store_true",
        help="Skip quote lookups and mark positions at average cost",
    )
    report.add_argument(
        "--as-of",
        type=parse_as_of,
        default=None,
        help="Date used to age open lots (YYYY-MM-DD). Default: today",
    )
    report.add_argument(
        "--output",
        "-o",
        default=None,
        help="Write the per-symbol gains table to this CSV file",
    )
    report.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose/debug output",
    )

    args = parser.parse_args(argv)

    try:
        return run_report(args)
    except TrackyError as e:
        logger.error(str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
