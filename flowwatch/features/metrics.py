"""
Per-account flow metrics for the flowwatch pipeline.

:func:`calculate_account_metrics` is a single-pass reducer over every edge of
a :class:`~flowwatch.graph.builder.MoneyFlowGraph`.  It produces one
:class:`AccountMetrics` record per account, keyed by account identifier and
independent of the graph afterwards.

Invariants
----------
* Every account that appears as an endpoint of at least one transaction has
  exactly one record, zero-initialised before the fold.
* Counts and volumes are plain sums, so the result does not depend on edge
  enumeration order.
* A self-loop edge counts as one outgoing *and* one incoming event on the
  same account.
* ``retention_rate = (incoming_volume - outgoing_volume) / incoming_volume``
  whenever ``incoming_volume > 0``; it may be negative.  Accounts with zero
  inflow keep the initial ``0.0``.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields

import pandas as pd

from flowwatch.graph.builder import MoneyFlowGraph


@dataclass
class AccountMetrics:
    """Statistical summary of one account's transaction behaviour."""

    incoming_count: int = 0
    outgoing_count: int = 0
    incoming_volume: float = 0.0
    outgoing_volume: float = 0.0
    retention_rate: float = 0.0

    def calculate_retention_rate(self) -> None:
        """Set ``retention_rate`` from the current volumes (no-op without inflow)."""
        if self.incoming_volume > 0:
            retained = self.incoming_volume - self.outgoing_volume
            self.retention_rate = retained / self.incoming_volume

    def as_dict(self) -> dict[str, float | int]:
        return asdict(self)


def calculate_account_metrics(graph: MoneyFlowGraph) -> dict[str, AccountMetrics]:
    """
    Fold every edge of *graph* into per-account metrics.

    Parameters
    ----------
    graph : MoneyFlowGraph
        Fully constructed graph.  It is not modified.

    Returns
    -------
    dict[str, AccountMetrics]
        One record per account, in the graph's node discovery order.
    """
    metrics: dict[str, AccountMetrics] = {
        account: AccountMetrics() for account in graph.node_map
    }

    for source, destination, amount in graph.edges():
        source_metrics = metrics[source]
        source_metrics.outgoing_count += 1
        source_metrics.outgoing_volume += amount

        destination_metrics = metrics[destination]
        destination_metrics.incoming_count += 1
        destination_metrics.incoming_volume += amount

    for account_metrics in metrics.values():
        account_metrics.calculate_retention_rate()

    return metrics


def metrics_to_frame(metrics: dict[str, AccountMetrics]) -> pd.DataFrame:
    """
    Tabulate *metrics* as a DataFrame indexed by account identifier.

    Columns are ``incoming_count``, ``outgoing_count``, ``incoming_volume``,
    ``outgoing_volume`` and ``retention_rate``.  An empty mapping yields an
    empty frame with those columns.
    """
    columns = [field.name for field in fields(AccountMetrics)]
    frame = pd.DataFrame.from_dict(
        {account: m.as_dict() for account, m in metrics.items()},
        orient="index",
        columns=columns,
    )
    frame.index.name = "account"
    return frame
