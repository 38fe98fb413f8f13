"""
Louvain community detection.

The method alternates two phases:

1. **Local moving**: nodes are visited in random order and each node moves to
   the neighboring community that improves modularity the most.
2. **Aggregation**: every community collapses into a super-node and local
   moving restarts on the smaller graph.

The engine exposes both phases as separate steps so callers can observe
intermediate partitions; :meth:`LouvainEngine.run` drives them to completion.

References
----------
.. [1] Blondel, V. D., et al. "Fast unfolding of communities in large
       networks." Journal of Statistical Mechanics (2008).
"""

from typing import Any, Dict, List, Optional, Set, Tuple

from ..common.logging_config import get_logger
from ..common.validators import validate_graph_argument
from ..network.graph import WeightedGraph
from .modularity import Partition, partition_from_assignment, resolve_random_source

logger = get_logger(__name__)

DEFAULT_MAX_LEVELS = 10
DEFAULT_MAX_PASSES = 100


class LouvainEngine:
    """
    Step-wise Louvain modularity optimization.

    Parameters
    ----------
    graph : WeightedGraph
        Graph to partition. The engine works on its own copy.
    rng : object, optional
        Random source with ``shuffle``; controls the node visit order
    random_seed : int, optional
        Seed for a :class:`random.Random` when ``rng`` is not given
    keep_internal_weight : bool, default False
        Store the internal weight of each community as a self-loop on its
        super-node during aggregation. When False the internal weight is
        dropped, so later phases see a lighter graph.

    Raises
    ------
    ValidationError
        If graph is None or not a WeightedGraph

    Examples
    --------
    >>> g = WeightedGraph()
    >>> for u, v in [(0, 1), (1, 2), (0, 2), (3, 4), (4, 5), (3, 5)]:
    ...     g.add_edge(u, v)
    >>> engine = LouvainEngine(g, random_seed=42)
    >>> engine.perform_one_pass()
    True
    >>> round(engine.compute_modularity(), 3)
    0.5
    """

    def __init__(
        self,
        graph: WeightedGraph,
        rng: Optional[Any] = None,
        random_seed: Optional[int] = None,
        keep_internal_weight: bool = False
    ) -> None:
        validate_graph_argument(graph, "LouvainEngine")

        self._graph = graph.copy()
        self._rng = resolve_random_source(rng, random_seed)
        self._keep_internal_weight = keep_internal_weight
        self._phase = 1

        self._total_weight = self._graph.total_weight()
        self._community: Dict[int, int] = {node: node for node in self._graph.nodes()}
        self._representatives: Dict[int, Set[int]] = {
            node: {node} for node in self._graph.nodes()
        }
        self._internal: Dict[int, float] = {}
        self._totals: Dict[int, float] = {}
        self._compute_community_stats()

    def _compute_community_stats(self) -> None:
        self._internal = {}
        self._totals = {}

        for node in self._graph.nodes():
            community = self._community[node]
            self._totals[community] = (
                self._totals.get(community, 0.0) + self._graph.weighted_degree(node)
            )
            self._internal.setdefault(community, 0.0)
            for neighbor in self._graph.neighbors(node):
                if self._community[neighbor] == community:
                    # Every internal edge is visited from both endpoints
                    self._internal[community] += self._graph.weight(node, neighbor) / 2.0

    def _links_to_communities(self, node: int) -> Tuple[List[int], Dict[int, float]]:
        """
        Weight from ``node`` into each neighboring community.

        Neighbors are scanned in ascending order; the returned list keeps the
        order in which communities were first seen. The self-loop is skipped.
        """
        order: List[int] = []
        links: Dict[int, float] = {}
        for neighbor in sorted(self._graph.neighbors(node)):
            if neighbor == node:
                continue
            community = self._community[neighbor]
            if community not in links:
                order.append(community)
                links[community] = 0.0
            links[community] += self._graph.weight(node, neighbor)
        return order, links

    def _remove(self, node: int, community: int, links: Dict[int, float]) -> None:
        self._totals[community] -= self._graph.weighted_degree(node)
        self._internal[community] -= (
            links.get(community, 0.0) + self._graph.weight(node, node) / 2.0
        )

    def _insert(self, node: int, community: int, links: Dict[int, float]) -> None:
        self._community[node] = community
        self._totals[community] = (
            self._totals.get(community, 0.0) + self._graph.weighted_degree(node)
        )
        self._internal[community] = (
            self._internal.get(community, 0.0)
            + links.get(community, 0.0)
            + self._graph.weight(node, node) / 2.0
        )

    def _gain(self, k_in: float, k_i: float, community: int) -> float:
        m = self._total_weight
        sigma_tot = self._totals.get(community, 0.0)
        return k_in / m - sigma_tot * k_i / (2.0 * m) ** 2

    def perform_one_pass(self) -> bool:
        """
        Run one local-moving pass over every node.

        Each node is taken out of its community and put into the neighboring
        community with the highest positive gain
        ``k_in / m - sigma_tot * k_i / (2m)^2``. The node's own community is
        kept unless another one is strictly better.

        The penalty term is half that of the exact modularity change, so a
        pass can occasionally lower :meth:`compute_modularity`. Callers that
        need the best partition should score each pass themselves.

        Returns
        -------
        bool
            True if at least one node changed community
        """
        if self._total_weight <= 0:
            return False

        nodes = self._graph.nodes()
        self._rng.shuffle(nodes)

        moved = 0
        for node in nodes:
            current = self._community[node]
            order, links = self._links_to_communities(node)
            k_i = self._graph.weighted_degree(node)

            self._remove(node, current, links)

            best_community = current
            best_gain = max(0.0, self._gain(links.get(current, 0.0), k_i, current))
            for community in order:
                if community == current:
                    continue
                gain = self._gain(links[community], k_i, community)
                if gain > best_gain:
                    best_gain = gain
                    best_community = community

            self._insert(node, best_community, links)
            if best_community != current:
                moved += 1

        # Drop communities emptied by the pass
        occupied = set(self._community.values())
        self._totals = {c: t for c, t in self._totals.items() if c in occupied}
        self._internal = {c: w for c, w in self._internal.items() if c in occupied}

        logger.debug(
            "Louvain phase %d pass moved %d of %d nodes (Q=%.4f)",
            self._phase, moved, len(nodes), self.compute_modularity()
        )
        return moved > 0

    def compute_modularity(self) -> float:
        """
        Modularity of the current partition of the current graph.

        Returns 0.0 when the current graph carries no weight.
        """
        m = self._total_weight
        if m <= 0:
            return 0.0

        q = 0.0
        for community in set(self._community.values()):
            internal = self._internal.get(community, 0.0)
            degree = self._totals.get(community, 0.0)
            q += internal / m - (degree / (2.0 * m)) ** 2
        return q

    def aggregate_graph(self) -> None:
        """
        Collapse every community into a super-node.

        Super-nodes are numbered 0, 1, ... by ascending community id. An edge
        between two super-nodes carries the summed weight of the edges that
        cross between their communities. Weight inside a community is dropped
        unless the engine was created with ``keep_internal_weight``, in which
        case it becomes a self-loop of weight ``2 * L_c`` so that degrees and
        total weight are preserved. Every super-node is kept, even without
        edges, and each starts in its own community.
        """
        communities = sorted(set(self._community.values()))
        super_node = {community: index for index, community in enumerate(communities)}

        new_graph = WeightedGraph()
        new_representatives: Dict[int, Set[int]] = {}
        for index in range(len(communities)):
            new_graph.add_node(index)
            new_representatives[index] = set()

        for node in self._graph.nodes():
            new_representatives[super_node[self._community[node]]] |= self._representatives[node]

        super_edges: Dict[Tuple[int, int], float] = {}
        for u, v, weight in self._graph.edges():
            su = super_node[self._community[u]]
            sv = super_node[self._community[v]]
            if su == sv:
                if not self._keep_internal_weight:
                    continue
                # Loop weight counts twice toward the degree of its node
                weight = weight if u == v else 2.0 * weight
            key = (min(su, sv), max(su, sv))
            super_edges[key] = super_edges.get(key, 0.0) + weight

        for (su, sv), weight in sorted(super_edges.items()):
            new_graph.add_edge(su, sv, weight)

        self._graph = new_graph
        self._total_weight = new_graph.total_weight()
        self._representatives = new_representatives
        self._community = {node: node for node in new_graph.nodes()}
        self._compute_community_stats()
        self._phase += 1

        logger.debug(
            "Louvain aggregated into %d super-nodes (phase %d, total weight %.4f)",
            len(communities), self._phase, self._total_weight
        )

    def run(self, max_levels: int = DEFAULT_MAX_LEVELS, max_passes: int = DEFAULT_MAX_PASSES) -> Dict[int, int]:
        """
        Alternate local moving and aggregation until nothing moves.

        Parameters
        ----------
        max_levels : int, default 10
            Maximum number of local-moving levels
        max_passes : int, default 100
            Maximum number of passes within one level

        Returns
        -------
        Dict[int, int]
            Final community of every original node
        """
        for level in range(max_levels):
            moved = False
            for _ in range(max_passes):
                if not self.perform_one_pass():
                    break
                moved = True

            if not moved or level == max_levels - 1:
                break
            self.aggregate_graph()

        logger.info(
            "Louvain finished in phase %d with %d communities (Q=%.4f)",
            self._phase, self.get_num_communities(), self.compute_modularity()
        )
        return self.get_community_map()

    def get_phase(self) -> int:
        return self._phase

    def get_num_communities(self) -> int:
        return len(set(self._community.values()))

    def get_community_map(self) -> Dict[int, int]:
        """
        Community of every original node.

        Original nodes are resolved through the super-node representative
        map, so the result is valid in every phase.
        """
        community_map: Dict[int, int] = {}
        for node, originals in self._representatives.items():
            community = self._community[node]
            for original in originals:
                community_map[original] = community
        return community_map

    def get_communities(self) -> Partition:
        """Community id -> original member nodes."""
        return partition_from_assignment(self.get_community_map())

    def get_graph(self) -> WeightedGraph:
        """The graph of the current phase (a copy)."""
        return self._graph.copy()
