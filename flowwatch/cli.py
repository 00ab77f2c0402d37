"""
Command-line entry point for the flowwatch money-flow analysis.

Pipeline flow
-------------
1.  Check the ledger path exists (fail fast with exit status 1).
2.  Load the ledger and build the money-flow graph.
3.  Aggregate per-account metrics and classify every account.
4.  Print the collector report, then the money-mule report.
5.  Optionally score the flags against the ledger's fraud labels and export
    the flagged accounts as CSV.

Usage
-----
::

    flowwatch data/cleaned_fraud_dataset.csv
    python -m flowwatch.cli --strict --mule-limit 50 --export flagged.csv

Defaults come from :mod:`flowwatch.config`.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from flowwatch.config import (
    COLLECTOR_DISPLAY_LIMIT,
    DATA_PATH,
    LOG_LEVEL,
    MULE_DISPLAY_LIMIT,
    STRICT_ROW_PARSING,
)
from flowwatch.data.loader import read_transaction_dataset
from flowwatch.detection.analysis import FraudAnalysis
from flowwatch.detection.evaluation import evaluate_flags, fraud_labels, print_evaluation
from flowwatch.features.rules import CollectorRule, MoneyMuleRule
from flowwatch.utils import Timer, configure_logging

logger = logging.getLogger(__name__)


def _non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {number}")
    return number


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Detect collector and money-mule accounts in a transaction ledger."
    )
    parser.add_argument(
        "path",
        nargs="?",
        type=Path,
        default=DATA_PATH,
        help=f"Ledger CSV to analyse (default: {DATA_PATH})",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        default=STRICT_ROW_PARSING,
        help="Abort on the first malformed row instead of skipping it",
    )
    parser.add_argument(
        "--collector-limit",
        type=_non_negative_int,
        default=COLLECTOR_DISPLAY_LIMIT,
        help="Maximum collector rows to print",
    )
    parser.add_argument(
        "--mule-limit",
        type=_non_negative_int,
        default=MULE_DISPLAY_LIMIT,
        help="Maximum money-mule rows to print",
    )
    parser.add_argument(
        "--export",
        type=Path,
        default=None,
        help="Write every flagged account to this CSV file",
    )
    parser.add_argument(
        "--evaluate",
        action="store_true",
        help="Score the flags against the ledger's isFraud labels",
    )
    parser.add_argument(
        "--no-progress",
        action="store_true",
        help="Disable the graph construction progress bar",
    )
    parser.add_argument(
        "--log-level",
        default=LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        help="Logging verbosity",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the full analysis; returns the process exit status."""
    args = parse_args(argv)
    configure_logging(args.log_level)

    if not args.path.exists():
        logger.error(f"Error: File not found: {args.path}")
        return 1

    print("Money Laundering Detection Analysis")
    print("===================================")

    try:
        with Timer("Data loading and graph construction"):
            graph = read_transaction_dataset(
                args.path,
                strict=args.strict,
                show_progress=not args.no_progress,
            )
    except (OSError, ValueError) as e:
        logger.error(f"Error: Failed to load data: {e}")
        return 1

    print(
        f"Loaded {graph.transaction_count:,} transactions, "
        f"{graph.node_count:,} unique accounts"
    )

    with Timer("Fraud analysis"):
        analysis = FraudAnalysis.from_graph(
            graph,
            collector_rule=CollectorRule(display_limit=args.collector_limit),
            mule_rule=MoneyMuleRule(display_limit=args.mule_limit),
        )
        analysis.print_collector_accounts()
        analysis.print_money_mule_accounts()

        if args.evaluate:
            labels = fraud_labels(graph)
            print("\n=== Evaluation against isFraud labels ===")
            for rule in analysis.rules:
                flagged = [account for account, _ in analysis.identify(rule)]
                print_evaluation(rule.label, evaluate_flags(flagged, labels))

        if args.export is not None:
            flagged_df = analysis.to_frame()
            flagged_df.to_csv(args.export, index=False)
            logger.info(f"Exported {len(flagged_df):,} flagged rows to {args.export}")

    print("\nAnalysis complete.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
