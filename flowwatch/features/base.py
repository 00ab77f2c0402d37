"""
Abstract base class for the Strategy Pattern account rules.

Every concrete classification rule in this package inherits from
:class:`AccountRule`.  The analysis layer in
:mod:`flowwatch.detection.analysis` treats all rules through this uniform
interface, so adding a new archetype means adding one class here and
nothing in the ranking or reporting loop.

Strategy Pattern roles
----------------------
* **Strategy interface** -> :class:`AccountRule` (this module)
* **Concrete strategies** -> :mod:`flowwatch.features.rules`
* **Context** -> :class:`flowwatch.detection.analysis.FraudAnalysis`
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from flowwatch.features.metrics import AccountMetrics


class AccountRule(ABC):
    """
    Abstract strategy interface for account classification.

    A rule decides membership (:meth:`matches`) and supplies the key the
    matching accounts are ranked by (:meth:`rank_key`, highest first).

    The contract guarantees that:

    * :meth:`matches` is a pure predicate over a flat metrics record; it
      never looks at the graph or at other accounts.
    * Rules are stateless apart from their configured thresholds.

    Attributes
    ----------
    label : str
        Category name used in report headers and exported rows.
    display_limit : int
        Maximum rows rendered for this category in the text report.
    """

    label: str = "flagged"

    def __init__(self, display_limit: int) -> None:
        if display_limit < 0:
            raise ValueError(f"display_limit must be >= 0, got {display_limit}.")
        self.display_limit = display_limit

    @abstractmethod
    def matches(self, metrics: AccountMetrics) -> bool:
        """Return ``True`` when *metrics* satisfies this rule."""

    @abstractmethod
    def rank_key(self, metrics: AccountMetrics) -> float:
        """Value that matching accounts are sorted by, descending."""

    @property
    def name(self) -> str:
        """
        Human-readable identifier for this rule.

        Defaults to the class name.
        """
        return type(self).__name__

    def __repr__(self) -> str:
        return f"{self.name}(display_limit={self.display_limit})"
