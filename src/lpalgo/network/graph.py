"""
Weighted undirected graph used by every community detection engine.

The graph is an adjacency map ``node -> {neighbor: weight}`` kept symmetric
by construction. All queries are total: asking about a node that is not in
the graph returns an empty set or zero instead of raising.
"""

from typing import Dict, Iterator, List, Set, Tuple


class WeightedGraph:
    """
    Undirected graph with a weight on every edge.

    Nodes are integers. Adding an edge adds both endpoints; removing an edge
    never removes a node. Self-loops are allowed and stored once in the
    adjacency map of their node.

    Examples
    --------
    >>> graph = WeightedGraph()
    >>> graph.add_edge(0, 1)
    >>> graph.add_edge(1, 2, weight=2.5)
    >>> graph.neighbors(1)
    {0, 2}
    >>> graph.weighted_degree(1)
    3.5
    >>> graph.total_weight()
    3.5
    >>> graph.weight(0, 2)
    0.0

    Notes
    -----
    The total weight is half the sum of all adjacency entries, so a
    self-loop of weight w contributes w / 2 while its node's weighted
    degree grows by w.
    """

    def __init__(self) -> None:
        self._adj: Dict[int, Dict[int, float]] = {}

    def add_node(self, v: int) -> None:
        """Add a node. Adding an existing node is a no-op."""
        self._adj.setdefault(v, {})

    def add_edge(self, u: int, v: int, weight: float = 1.0) -> None:
        """
        Add an undirected edge, creating missing endpoints.

        An existing edge between ``u`` and ``v`` has its weight overwritten.
        """
        self.add_node(u)
        self.add_node(v)
        weight = float(weight)
        self._adj[u][v] = weight
        self._adj[v][u] = weight

    def remove_edge(self, u: int, v: int) -> None:
        """Remove the edge between ``u`` and ``v`` if present."""
        if u in self._adj:
            self._adj[u].pop(v, None)
        if v in self._adj:
            self._adj[v].pop(u, None)

    def neighbors(self, v: int) -> Set[int]:
        """
        Return the neighbors of ``v`` as a new set.

        Unknown nodes have no neighbors. A node with a self-loop is its own
        neighbor.
        """
        return set(self._adj.get(v, ()))

    def weight(self, u: int, v: int) -> float:
        """Weight of the edge ``(u, v)``, or 0.0 when there is no such edge."""
        return self._adj.get(u, {}).get(v, 0.0)

    def degree(self, v: int) -> int:
        """Number of neighbors of ``v``."""
        return len(self._adj.get(v, ()))

    def weighted_degree(self, v: int) -> float:
        """Sum of the weights of the edges incident to ``v``."""
        return sum(self._adj.get(v, {}).values())

    def total_weight(self) -> float:
        """Sum of all edge weights, each undirected edge counted once."""
        return sum(sum(nbrs.values()) for nbrs in self._adj.values()) / 2.0

    def copy(self) -> "WeightedGraph":
        """Return a deep, independent copy, isolated nodes included."""
        clone = WeightedGraph()
        clone._adj = {node: dict(nbrs) for node, nbrs in self._adj.items()}
        return clone

    def nodes(self) -> List[int]:
        """All nodes in ascending order."""
        return sorted(self._adj)

    def edges(self) -> Iterator[Tuple[int, int, float]]:
        """
        Iterate over every undirected edge once as ``(u, v, weight)``.

        Endpoints are ordered so that ``u <= v``; edges are yielded in
        ascending ``(u, v)`` order.
        """
        for u in sorted(self._adj):
            for v in sorted(self._adj[u]):
                if u <= v:
                    yield u, v, self._adj[u][v]

    def has_node(self, v: int) -> bool:
        return v in self._adj

    def has_edge(self, u: int, v: int) -> bool:
        return v in self._adj.get(u, ())

    def number_of_nodes(self) -> int:
        return len(self._adj)

    def number_of_edges(self) -> int:
        """Number of undirected edges, self-loops included."""
        doubled = 0
        for u, nbrs in self._adj.items():
            doubled += len(nbrs)
            if u in nbrs:
                doubled += 1
        return doubled // 2

    def __len__(self) -> int:
        return len(self._adj)

    def __contains__(self, v: object) -> bool:
        return v in self._adj

    def __iter__(self) -> Iterator[int]:
        return iter(self.nodes())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, WeightedGraph):
            return NotImplemented
        return self._adj == other._adj

    def __repr__(self) -> str:
        return (
            f"WeightedGraph(nodes={self.number_of_nodes()}, "
            f"edges={self.number_of_edges()}, total_weight={self.total_weight():g})"
        )
