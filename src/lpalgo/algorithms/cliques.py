"""
Maximal clique enumeration and the Clique Percolation Method (CPM).

Maximal cliques are found with the Bron-Kerbosch algorithm with pivoting.
CPM then joins k-cliques that share k-1 nodes into overlapping communities:
two cliques of size >= k are adjacent in the clique graph when their
intersection holds at least k-1 nodes, and every connected component of
that clique graph yields one community, the union of its cliques.

References
----------
.. [1] Bron, C. and Kerbosch, J. "Algorithm 457: finding all cliques of an
       undirected graph." Communications of the ACM 16.9 (1973).
.. [2] Palla, G., et al. "Uncovering the overlapping community structure of
       complex networks in nature and society." Nature 435 (2005).
"""

from collections import deque
from typing import Dict, FrozenSet, List, Set

from ..common.exceptions import ConfigurationError
from ..common.logging_config import get_logger, LoggingTimer
from ..common.validators import validate_graph_argument
from ..network.graph import WeightedGraph

logger = get_logger(__name__)

Clique = FrozenSet[int]

# Smallest percolation order with a meaningful (k-1)-node overlap
MIN_PERCOLATION_ORDER = 2


class CliqueEngine:
    """
    Enumerate maximal cliques and derive overlapping CPM communities.

    The engine only reads the graph. Cliques are enumerated again on every
    call, so results always reflect the current state of the graph.

    Parameters
    ----------
    graph : WeightedGraph
        Graph to analyze (edge weights are ignored)

    Raises
    ------
    ValidationError
        If graph is None or not a WeightedGraph

    Examples
    --------
    >>> g = WeightedGraph()
    >>> for u, v in [(0, 1), (1, 2), (0, 2), (2, 3)]:
    ...     g.add_edge(u, v)
    >>> engine = CliqueEngine(g)
    >>> sorted(sorted(c) for c in engine.enumerate_maximal_cliques())
    [[0, 1, 2], [2, 3]]
    >>> engine.find_communities(3)
    {0: {0, 1, 2}}
    """

    def __init__(self, graph: WeightedGraph) -> None:
        validate_graph_argument(graph, "CliqueEngine")
        self._graph = graph
        self._communities: Dict[int, Set[int]] = {}
        self._results_computed = False

    def enumerate_maximal_cliques(self) -> Set[Clique]:
        """
        Enumerate every maximal clique with at least two nodes.

        Returns
        -------
        Set[FrozenSet[int]]
            All maximal cliques, without duplicates

        Notes
        -----
        Self-loops are ignored: a node is never its own clique neighbor.
        Isolated nodes are maximal cliques of size one and are discarded.
        """
        adjacency = {
            node: self._graph.neighbors(node) - {node}
            for node in self._graph.nodes()
        }
        cliques: Set[Clique] = set()

        with LoggingTimer("enumerate_maximal_cliques", {"nodes": len(adjacency)}):
            self._bron_kerbosch(adjacency, set(), set(adjacency), set(), cliques)

        logger.debug("Found %d maximal cliques", len(cliques))
        return cliques

    def _bron_kerbosch(
        self,
        adjacency: Dict[int, Set[int]],
        r: Set[int],
        p: Set[int],
        x: Set[int],
        cliques: Set[Clique]
    ) -> None:
        if not p and not x:
            if len(r) >= 2:
                cliques.add(frozenset(r))
            return

        # Pivot with the most neighbors; smallest id on ties
        pivot = None
        max_neighbors = -1
        for candidate in sorted(p | x):
            neighbor_count = len(adjacency[candidate])
            if neighbor_count > max_neighbors:
                max_neighbors = neighbor_count
                pivot = candidate

        for v in sorted(p - adjacency[pivot]):
            neighbors = adjacency[v]
            self._bron_kerbosch(adjacency, r | {v}, p & neighbors, x & neighbors, cliques)
            p.remove(v)
            x.add(v)

    def find_all_cliques(self, k: int = 2) -> List[Clique]:
        """
        Maximal cliques with at least ``k`` nodes, largest first.

        Cliques of equal size are ordered by their sorted members, so the
        result is deterministic.
        """
        cliques = [clique for clique in self.enumerate_maximal_cliques() if len(clique) >= k]
        cliques.sort(key=lambda clique: (-len(clique), sorted(clique)))
        return cliques

    def find_communities(self, k: int) -> Dict[int, Set[int]]:
        """
        Find overlapping communities with the Clique Percolation Method.

        Parameters
        ----------
        k : int
            Percolation order: minimum clique size, and two cliques are
            joined when they share at least ``k - 1`` nodes

        Returns
        -------
        Dict[int, Set[int]]
            Community id -> member nodes. Ids follow discovery order.
            Communities may overlap and nodes outside every qualifying
            clique belong to no community.

        Raises
        ------
        ConfigurationError
            If k < 2
        """
        if not isinstance(k, int) or k < MIN_PERCOLATION_ORDER:
            raise ConfigurationError(
                f"Percolation order k must be an integer >= {MIN_PERCOLATION_ORDER}, got {k}",
                parameter="k",
                value=k,
                function="find_communities"
            )

        k_cliques = self.find_all_cliques(k)
        clique_graph = self._build_clique_graph(k_cliques, k)
        self._communities = self._percolate(clique_graph, k_cliques)
        self._results_computed = True

        logger.info(
            "CPM with k=%d: %d qualifying cliques, %d communities",
            k, len(k_cliques), len(self._communities)
        )
        return self.get_communities()

    @staticmethod
    def _build_clique_graph(k_cliques: List[Clique], k: int) -> Dict[int, Set[int]]:
        clique_graph: Dict[int, Set[int]] = {i: set() for i in range(len(k_cliques))}

        for i in range(len(k_cliques)):
            for j in range(i + 1, len(k_cliques)):
                if len(k_cliques[i] & k_cliques[j]) >= k - 1:
                    clique_graph[i].add(j)
                    clique_graph[j].add(i)

        return clique_graph

    @staticmethod
    def _percolate(clique_graph: Dict[int, Set[int]], k_cliques: List[Clique]) -> Dict[int, Set[int]]:
        communities: Dict[int, Set[int]] = {}
        visited: Set[int] = set()

        for start in range(len(k_cliques)):
            if start in visited:
                continue

            component: Set[int] = set()
            visited.add(start)
            queue = deque([start])
            while queue:
                current = queue.popleft()
                component.update(k_cliques[current])
                for neighbor in sorted(clique_graph[current]):
                    if neighbor not in visited:
                        visited.add(neighbor)
                        queue.append(neighbor)

            communities[len(communities)] = component

        return communities

    def get_communities(self) -> Dict[int, Set[int]]:
        """Communities from the last :meth:`find_communities` call (copies)."""
        return {cid: set(members) for cid, members in self._communities.items()}

    def has_results(self) -> bool:
        return self._results_computed

    def get_overlapping_nodes(self) -> Set[int]:
        """Nodes that belong to more than one community of the last result."""
        seen: Set[int] = set()
        overlapping: Set[int] = set()
        for members in self._communities.values():
            overlapping |= seen & members
            seen |= members
        return overlapping
