"""
Plain-text rendering of ranked account lists.

The renderer only formats: filtering and ordering are done beforehand by
:class:`flowwatch.detection.analysis.FraudAnalysis`.
"""

from __future__ import annotations

from typing import IO, Optional

from flowwatch.features.metrics import AccountMetrics

HEADER_FORMAT = "{:<15} {:<12} {:<12} {:<15} {:<15} {:<10}"
ROW_FORMAT = "{:<15} {:<12} {:<12} {:<15.2f} {:<15.2f} {:<10.2f}"
COLUMN_TITLES = ("Account", "In Count", "Out Count", "In Volume", "Out Volume", "Retention")


def format_row(account: str, metrics: AccountMetrics) -> str:
    return ROW_FORMAT.format(
        account,
        metrics.incoming_count,
        metrics.outgoing_count,
        metrics.incoming_volume,
        metrics.outgoing_volume,
        metrics.retention_rate,
    )


def print_ranked_accounts(
    label: str,
    ranked: list[tuple[str, AccountMetrics]],
    display_limit: int,
    file: Optional[IO[str]] = None,
) -> None:
    """
    Print a ranked account table, truncated to *display_limit* rows.

    Parameters
    ----------
    label : str
        Category name, e.g. ``"collector"``.
    ranked : list[tuple[str, AccountMetrics]]
        ``[(account, metrics), ...]`` already sorted best-first.
    display_limit : int
        Maximum number of rows to print.  When more accounts matched, a
        trailing ``... and N more accounts not shown`` line reports the rest.
    file : IO[str], optional
        Output stream; defaults to ``sys.stdout``.
    """
    print(
        f"\n=== Total of {len(ranked)} accounts detected as fraudulent "
        f"{label} accounts ===",
        file=file,
    )
    print(HEADER_FORMAT.format(*COLUMN_TITLES), file=file)

    for account, metrics in ranked[:display_limit]:
        print(format_row(account, metrics), file=file)

    remaining = len(ranked) - display_limit
    if remaining > 0:
        print(f"\n... and {remaining} more accounts not shown", file=file)
