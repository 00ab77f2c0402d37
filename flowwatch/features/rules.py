"""
Collector and money-mule classification rules.

The two archetypes are expressed twice:

* as pure predicate functions (:func:`is_collector`, :func:`is_money_mule`)
  whose default thresholds come from :mod:`flowwatch.config`;
* as :class:`~flowwatch.features.base.AccountRule` strategies
  (:class:`CollectorRule`, :class:`MoneyMuleRule`) that bind a set of
  thresholds, a ranking key and a display limit for the analysis layer.

The predicates are independent: an account may satisfy both, either or
neither.
"""

from __future__ import annotations

from flowwatch.config import (
    COLLECTOR_COUNT_RATIO,
    COLLECTOR_DISPLAY_LIMIT,
    COLLECTOR_MIN_INCOMING_COUNT,
    COLLECTOR_MIN_RETENTION,
    MULE_DISPLAY_LIMIT,
    MULE_MAX_RETENTION,
    MULE_MIN_INCOMING_VOLUME,
    MULE_MIN_PASS_THROUGH,
)
from flowwatch.features.base import AccountRule
from flowwatch.features.metrics import AccountMetrics


def is_collector(
    metrics: AccountMetrics,
    min_incoming_count: int = COLLECTOR_MIN_INCOMING_COUNT,
    count_ratio: int = COLLECTOR_COUNT_RATIO,
    min_retention: float = COLLECTOR_MIN_RETENTION,
) -> bool:
    """
    Collectors receive from many sources but rarely send money on.

    Requires more than ``min_incoming_count`` inbound transactions, inbound
    count above ``count_ratio`` times the outbound count, and a retention
    rate above ``min_retention``.
    """
    return (
        metrics.incoming_count > min_incoming_count
        and metrics.incoming_count > count_ratio * metrics.outgoing_count
        and metrics.retention_rate > min_retention
    )


def is_money_mule(
    metrics: AccountMetrics,
    min_pass_through: float = MULE_MIN_PASS_THROUGH,
    max_retention: float = MULE_MAX_RETENTION,
    min_incoming_volume: float = MULE_MIN_INCOMING_VOLUME,
) -> bool:
    """
    Money mules receive large sums and forward most of them.

    Requires at least one inbound and one outbound transaction, outgoing
    volume above ``min_pass_through`` of incoming volume, retention below
    ``max_retention`` and incoming volume above ``min_incoming_volume``.
    """
    return (
        metrics.incoming_count >= 1
        and metrics.outgoing_count >= 1
        and metrics.outgoing_volume > min_pass_through * metrics.incoming_volume
        and metrics.retention_rate < max_retention
        and metrics.incoming_volume > min_incoming_volume
    )


class CollectorRule(AccountRule):
    """
    Accounts that accumulate funds with little outbound movement.

    Ranked by ``incoming_volume``.
    """

    label = "collector"

    def __init__(
        self,
        min_incoming_count: int = COLLECTOR_MIN_INCOMING_COUNT,
        count_ratio: int = COLLECTOR_COUNT_RATIO,
        min_retention: float = COLLECTOR_MIN_RETENTION,
        display_limit: int = COLLECTOR_DISPLAY_LIMIT,
    ) -> None:
        super().__init__(display_limit)
        self._min_incoming_count = min_incoming_count
        self._count_ratio = count_ratio
        self._min_retention = min_retention

    def matches(self, metrics: AccountMetrics) -> bool:
        return is_collector(
            metrics,
            min_incoming_count=self._min_incoming_count,
            count_ratio=self._count_ratio,
            min_retention=self._min_retention,
        )

    def rank_key(self, metrics: AccountMetrics) -> float:
        return metrics.incoming_volume


class MoneyMuleRule(AccountRule):
    """
    Accounts that rapidly pass large inbound funds through.

    Ranked by ``outgoing_volume``.
    """

    label = "money mule"

    def __init__(
        self,
        min_pass_through: float = MULE_MIN_PASS_THROUGH,
        max_retention: float = MULE_MAX_RETENTION,
        min_incoming_volume: float = MULE_MIN_INCOMING_VOLUME,
        display_limit: int = MULE_DISPLAY_LIMIT,
    ) -> None:
        super().__init__(display_limit)
        self._min_pass_through = min_pass_through
        self._max_retention = max_retention
        self._min_incoming_volume = min_incoming_volume

    def matches(self, metrics: AccountMetrics) -> bool:
        return is_money_mule(
            metrics,
            min_pass_through=self._min_pass_through,
            max_retention=self._max_retention,
            min_incoming_volume=self._min_incoming_volume,
        )

    def rank_key(self, metrics: AccountMetrics) -> float:
        return metrics.outgoing_volume
