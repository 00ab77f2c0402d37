"""
Transaction record type shared by the loader and the graph builder.

A :class:`Transaction` is one immutable ledger entry.  Only ``amount``,
``source`` and ``destination`` feed the money-flow metrics; ``step``,
``type`` and ``is_fraud`` are carried through untouched so that later rules
(or the label evaluation in :mod:`flowwatch.detection.evaluation`) can use
them.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Transaction:
    """One ledger entry: ``amount`` moved from ``source`` to ``destination``."""

    step: int
    type: str
    amount: float
    source: str
    destination: str
    is_fraud: int = 0
