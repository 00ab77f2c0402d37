"""
Graph construction for the flowwatch pipeline.

All graph-construction concerns are isolated here so that the metrics
aggregator and the analysis layer can treat a :class:`MoneyFlowGraph` as an
opaque, fully-formed input.

Storage model
-------------
* Nodes are dense integer indices handed out the first time an account
  identifier is seen (``0, 1, 2, ...``, never reused).  ``node_map`` is the
  identifier → index allocator; ``_accounts`` resolves an index back to its
  identifier.  The identifier is also stored on the networkx node as the
  ``account`` attribute.
* Edges live in a ``nx.MultiDiGraph``: every transaction becomes its own
  directed edge carrying an ``amount`` attribute.  Parallel transactions
  between the same ordered pair are **not** merged, and a transaction whose
  source equals its destination becomes a self-loop.
* The graph is append-only.  Nothing is ever removed once added.
"""

from __future__ import annotations

from typing import Iterable, Iterator

import networkx as nx
from tqdm import tqdm

from flowwatch.data.records import Transaction


class MoneyFlowGraph:
    """
    Directed money-flow multigraph over account identifiers.

    Attributes
    ----------
    node_map : dict[str, int]
        Account identifier → node index, in discovery order.
    transactions : list[Transaction]
        Every transaction added, in insertion order.

    Examples
    --------
    >>> graph = MoneyFlowGraph()
    >>> graph.add_transaction(Transaction(1, "TRANSFER", 250.0, "A", "B"))
    >>> list(graph.edges())
    [('A', 'B', 250.0)]
    """

    def __init__(self) -> None:
        self._graph = nx.MultiDiGraph()
        self._accounts: list[str] = []
        self.node_map: dict[str, int] = {}
        self.transactions: list[Transaction] = []

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def _node_for(self, account: str) -> int:
        """Look up the node index for *account*, creating the node on first sight."""
        idx = self.node_map.get(account)
        if idx is None:
            idx = len(self._accounts)
            self.node_map[account] = idx
            self._accounts.append(account)
            self._graph.add_node(idx, account=account)
        return idx

    def add_transaction(self, transaction: Transaction) -> None:
        """
        Add *transaction* as a directed ``source -> destination`` edge.

        The source node is resolved (or created) before the destination so
        that index assignment is reproducible for a given input order.
        """
        source_idx = self._node_for(transaction.source)
        destination_idx = self._node_for(transaction.destination)

        self._graph.add_edge(source_idx, destination_idx, amount=transaction.amount)
        self.transactions.append(transaction)

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    def edges(self) -> Iterator[tuple[str, str, float]]:
        """
        Yield ``(source_account, destination_account, amount)`` for every edge.

        No ordering is guaranteed across edges.
        """
        accounts = self._accounts
        for source_idx, destination_idx, amount in self._graph.edges(data="amount"):
            yield accounts[source_idx], accounts[destination_idx], amount

    def node_index(self, account: str) -> int:
        """Return the node index of *account*; raises ``KeyError`` if unseen."""
        return self.node_map[account]

    def account_at(self, index: int) -> str:
        """Return the account identifier stored at node *index*."""
        return self._accounts[index]

    def successors(self, account: str) -> list[str]:
        """Distinct accounts that *account* has sent money to."""
        idx = self.node_map[account]
        return [self._accounts[n] for n in self._graph.successors(idx)]

    def predecessors(self, account: str) -> list[str]:
        """Distinct accounts that *account* has received money from."""
        idx = self.node_map[account]
        return [self._accounts[n] for n in self._graph.predecessors(idx)]

    @property
    def node_count(self) -> int:
        return self._graph.number_of_nodes()

    @property
    def edge_count(self) -> int:
        return self._graph.number_of_edges()

    @property
    def transaction_count(self) -> int:
        return len(self.transactions)

    def __contains__(self, account: object) -> bool:
        return account in self.node_map

    def __len__(self) -> int:
        return self.node_count

    def __repr__(self) -> str:
        return (
            f"MoneyFlowGraph(nodes={self.node_count:,}, "
            f"edges={self.edge_count:,})"
        )


def build_money_flow_graph(
    transactions: Iterable[Transaction],
    show_progress: bool = False,
) -> MoneyFlowGraph:
    """
    Build a :class:`MoneyFlowGraph` from an iterable of transaction records.

    Parameters
    ----------
    transactions : Iterable[Transaction]
        Records as produced by :func:`flowwatch.data.loader.load_transactions`.
    show_progress : bool
        Wrap the iteration in a ``tqdm`` progress bar.

    Returns
    -------
    MoneyFlowGraph
        A new graph; an **empty** graph when *transactions* is empty.
    """
    graph = MoneyFlowGraph()

    for transaction in tqdm(
        transactions,
        desc="Building graph",
        unit="tx",
        disable=not show_progress,
    ):
        graph.add_transaction(transaction)

    return graph
