"""
Classification and ranking of accounts for the flowwatch pipeline.

:class:`FraudAnalysis` is the context object of the rule Strategy Pattern:
it owns the per-account metrics of one run and applies each
:class:`~flowwatch.features.base.AccountRule` to them.

Ranking
-------
Matches are sorted highest ``rank_key`` first.  Python's sort is stable, so
accounts with equal keys keep the graph's node discovery order.
"""

from __future__ import annotations

from typing import IO, Optional

import pandas as pd

from flowwatch.detection.report import print_ranked_accounts
from flowwatch.features.base import AccountRule
from flowwatch.features.metrics import AccountMetrics, calculate_account_metrics
from flowwatch.features.rules import CollectorRule, MoneyMuleRule
from flowwatch.graph.builder import MoneyFlowGraph

EXPORT_COLUMNS = [
    "account",
    "category",
    "rank",
    "incoming_count",
    "outgoing_count",
    "incoming_volume",
    "outgoing_volume",
    "retention_rate",
]


class FraudAnalysis:
    """
    Flag collector and money-mule accounts from per-account metrics.

    Parameters
    ----------
    account_metrics : dict[str, AccountMetrics]
        Output of :func:`flowwatch.features.metrics.calculate_account_metrics`.
    collector_rule : AccountRule, optional
        Defaults to :class:`~flowwatch.features.rules.CollectorRule` with the
        configured thresholds.
    mule_rule : AccountRule, optional
        Defaults to :class:`~flowwatch.features.rules.MoneyMuleRule` with the
        configured thresholds.

    Examples
    --------
    >>> analysis = FraudAnalysis.from_graph(graph)
    >>> analysis.print_collector_accounts()
    >>> analysis.print_money_mule_accounts()
    """

    def __init__(
        self,
        account_metrics: dict[str, AccountMetrics],
        collector_rule: Optional[AccountRule] = None,
        mule_rule: Optional[AccountRule] = None,
    ) -> None:
        self.account_metrics = account_metrics
        self.collector_rule = collector_rule or CollectorRule()
        self.mule_rule = mule_rule or MoneyMuleRule()

    @classmethod
    def from_graph(cls, graph: MoneyFlowGraph, **rules: AccountRule) -> "FraudAnalysis":
        """Aggregate *graph* into metrics and wrap them in a new analysis."""
        return cls(calculate_account_metrics(graph), **rules)

    @property
    def rules(self) -> list[AccountRule]:
        return [self.collector_rule, self.mule_rule]

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------

    def identify(self, rule: AccountRule) -> list[tuple[str, AccountMetrics]]:
        """Return ``(account, metrics)`` pairs matching *rule*, best first."""
        matches = [
            (account, metrics)
            for account, metrics in self.account_metrics.items()
            if rule.matches(metrics)
        ]
        return sorted(matches, key=lambda item: rule.rank_key(item[1]), reverse=True)

    def identify_collector_accounts(self) -> list[tuple[str, AccountMetrics]]:
        return self.identify(self.collector_rule)

    def identify_money_mule_accounts(self) -> list[tuple[str, AccountMetrics]]:
        return self.identify(self.mule_rule)

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def print_accounts(self, rule: AccountRule, file: Optional[IO[str]] = None) -> None:
        print_ranked_accounts(rule.label, self.identify(rule), rule.display_limit, file=file)

    def print_collector_accounts(self, file: Optional[IO[str]] = None) -> None:
        self.print_accounts(self.collector_rule, file=file)

    def print_money_mule_accounts(self, file: Optional[IO[str]] = None) -> None:
        self.print_accounts(self.mule_rule, file=file)

    def to_frame(self) -> pd.DataFrame:
        """
        Every flagged account as one row per (account, category).

        An account matching both rules appears twice.  ``rank`` is 1-based
        within its category.
        """
        rows = []
        for rule in self.rules:
            for rank, (account, metrics) in enumerate(self.identify(rule), start=1):
                rows.append(
                    {"account": account, "category": rule.label, "rank": rank, **metrics.as_dict()}
                )
        return pd.DataFrame(rows, columns=EXPORT_COLUMNS)
