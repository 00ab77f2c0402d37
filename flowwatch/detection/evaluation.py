"""
Post-hoc evaluation of flagged accounts against the ledger's fraud labels.

The ledger marks individual *transactions* as fraudulent (``is_fraud``).
Here an account is labelled fraudulent when it is an endpoint of at least
one such transaction, and each flagged set is scored against those labels:

* Precision = (flagged accounts labelled fraudulent) / (flagged accounts)
* Recall    = (flagged accounts labelled fraudulent) / (labelled accounts)

Nothing here feeds back into classification; the heuristics never see the
labels.
"""

from __future__ import annotations

from typing import IO, Iterable, Optional

from sklearn.metrics import precision_score, recall_score

from flowwatch.graph.builder import MoneyFlowGraph


def fraud_labels(graph: MoneyFlowGraph) -> dict[str, int]:
    """Return ``{account: 1|0}`` for every account in *graph*."""
    labels = {account: 0 for account in graph.node_map}
    for transaction in graph.transactions:
        if transaction.is_fraud == 1:
            labels[transaction.source] = 1
            labels[transaction.destination] = 1
    return labels


def evaluate_flags(flagged_accounts: Iterable[str], labels: dict[str, int]) -> dict:
    """
    Score a set of flagged accounts against account-level fraud labels.

    Parameters
    ----------
    flagged_accounts : Iterable[str]
        Accounts a rule flagged.
    labels : dict[str, int]
        ``{account: 1|0}`` as returned by :func:`fraud_labels`.  Flagged
        accounts missing from *labels* count as benign.

    Returns
    -------
    dict
        * ``flagged``        -- number of flagged accounts
        * ``true_positives`` -- flagged accounts labelled fraudulent
        * ``labelled_fraud`` -- accounts labelled fraudulent overall
        * ``precision``      -- 0.0 when nothing was flagged
        * ``recall``         -- 0.0 when no account is labelled fraudulent
    """
    flagged = set(flagged_accounts)
    accounts = list(labels) + sorted(flagged - labels.keys())

    if not accounts:
        return {
            "flagged": 0,
            "true_positives": 0,
            "labelled_fraud": 0,
            "precision": 0.0,
            "recall": 0.0,
        }

    y_true = [labels.get(account, 0) for account in accounts]
    y_pred = [1 if account in flagged else 0 for account in accounts]

    return {
        "flagged": len(flagged),
        "true_positives": sum(1 for t, p in zip(y_true, y_pred) if t == 1 and p == 1),
        "labelled_fraud": sum(y_true),
        "precision": float(precision_score(y_true, y_pred, zero_division=0)),
        "recall": float(recall_score(y_true, y_pred, zero_division=0)),
    }


def print_evaluation(label: str, result: dict, file: Optional[IO[str]] = None) -> None:
    print(
        f"[{label}] flagged={result['flagged']:,} "
        f"true_positives={result['true_positives']:,} "
        f"labelled_fraud={result['labelled_fraud']:,} "
        f"precision={result['precision']:.4f} recall={result['recall']:.4f}",
        file=file,
    )
