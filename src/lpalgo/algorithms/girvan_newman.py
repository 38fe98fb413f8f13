"""
Girvan-Newman divisive community detection.

Each step removes the edge with the highest shortest-path betweenness from a
private working copy of the graph. The connected components that remain form
the current partition, which is scored against the original graph so that
modularity values from different steps are comparable.

References
----------
.. [1] Girvan, M. and Newman, M. E. J. "Community structure in social and
       biological networks." PNAS 99.12 (2002).
.. [2] Brandes, U. "A faster algorithm for betweenness centrality."
       Journal of Mathematical Sociology 25.2 (2001).
"""

from collections import deque
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Tuple

from ..common.logging_config import get_logger, LoggingTimer
from ..common.validators import validate_graph_argument
from ..network.graph import WeightedGraph
from .modularity import Partition, connected_components, modularity

logger = get_logger(__name__)

Edge = Tuple[int, int]

# Betweenness scores closer than this are treated as equal
BETWEENNESS_TOLERANCE = 1e-9


@dataclass(frozen=True)
class PartitionRecord:
    """A partition reached by the divisive process and its modularity."""

    step: int
    partition: Partition
    modularity: float

    @property
    def num_communities(self) -> int:
        return len(self.partition)


def _copy_partition(partition: Partition) -> Partition:
    return {cid: set(members) for cid, members in partition.items()}


class GirvanNewmanEngine:
    """
    Step-wise Girvan-Newman clustering.

    The caller's graph is never modified; edges are removed from a copy.
    The initial partition (components of the untouched graph) is recorded
    before the first step.

    Parameters
    ----------
    graph : WeightedGraph
        Graph to partition

    Raises
    ------
    ValidationError
        If graph is None or not a WeightedGraph

    Examples
    --------
    >>> g = WeightedGraph()
    >>> for u, v in [(0, 1), (1, 2), (0, 2), (2, 3), (3, 4), (4, 5), (3, 5)]:
    ...     g.add_edge(u, v)
    >>> engine = GirvanNewmanEngine(g)
    >>> engine.perform_one_step()
    True
    >>> engine.get_current_communities()
    {0: {0, 1, 2}, 1: {3, 4, 5}}
    """

    def __init__(self, graph: WeightedGraph) -> None:
        validate_graph_argument(graph, "GirvanNewmanEngine")

        self._original_graph = graph.copy()
        self._working_graph = graph.copy()
        self._step = 0

        initial = connected_components(self._working_graph)
        record = PartitionRecord(
            step=0,
            partition=initial,
            modularity=modularity(self._original_graph, initial)
        )
        self._current = record
        self._best = record
        self._history: List[PartitionRecord] = [record]

    def compute_edge_betweenness(self) -> Dict[Edge, float]:
        """
        Edge betweenness of the working graph.

        Shortest-path counts from every source are accumulated with Brandes'
        dependency back-propagation. Scores are summed over all sources, so
        each unordered pair of endpoints contributes twice.

        Returns
        -------
        Dict[Tuple[int, int], float]
            ``(min(u, v), max(u, v))`` -> betweenness, for every edge
            (self-loops score 0.0)
        """
        graph = self._working_graph
        betweenness: Dict[Edge, float] = {(u, v): 0.0 for u, v, _ in graph.edges()}

        for source in graph.nodes():
            stack: List[int] = []
            predecessors: Dict[int, List[int]] = {source: []}
            sigma: Dict[int, float] = {source: 1.0}
            distance: Dict[int, int] = {source: 0}

            queue = deque([source])
            while queue:
                v = queue.popleft()
                stack.append(v)
                for w in sorted(graph.neighbors(v)):
                    if w not in distance:
                        distance[w] = distance[v] + 1
                        sigma[w] = 0.0
                        predecessors[w] = []
                        queue.append(w)
                    if distance[w] == distance[v] + 1:
                        sigma[w] += sigma[v]
                        predecessors[w].append(v)

            delta: Dict[int, float] = {node: 0.0 for node in stack}
            while stack:
                w = stack.pop()
                for v in predecessors[w]:
                    credit = sigma[v] / sigma[w] * (1.0 + delta[w])
                    betweenness[(min(v, w), max(v, w))] += credit
                    delta[v] += credit

        return betweenness

    def _select_edge(self, betweenness: Dict[Edge, float]) -> Edge:
        best_edge = None
        best_score = float("-inf")
        for edge in sorted(betweenness):
            if betweenness[edge] > best_score + BETWEENNESS_TOLERANCE:
                best_score = betweenness[edge]
                best_edge = edge
        return best_edge

    def perform_one_step(self) -> bool:
        """
        Remove the edge with the highest betweenness and re-partition.

        Ties are broken toward the lowest ``(u, v)`` pair.

        Returns
        -------
        bool
            False if the working graph has no edges left, True otherwise
        """
        edge_count = self._working_graph.number_of_edges()
        if edge_count == 0:
            return False

        with LoggingTimer("edge_betweenness", {"edges": edge_count, "step": self._step + 1}):
            betweenness = self.compute_edge_betweenness()

        u, v = self._select_edge(betweenness)
        self._working_graph.remove_edge(u, v)
        self._step += 1

        partition = connected_components(self._working_graph)
        record = PartitionRecord(
            step=self._step,
            partition=partition,
            modularity=modularity(self._original_graph, partition)
        )
        self._current = record
        self._history.append(record)
        if record.modularity > self._best.modularity:
            self._best = record

        logger.debug(
            "Girvan-Newman step %d removed edge (%d, %d) with betweenness %.4f: "
            "%d communities, Q=%.4f",
            self._step, u, v, betweenness[(u, v)], len(partition), record.modularity
        )
        return True

    def run(self, max_steps: Optional[int] = None) -> Partition:
        """
        Remove edges until none are left or ``max_steps`` steps were taken.

        Returns
        -------
        Dict[int, Set[int]]
            The partition with the highest modularity seen so far
        """
        steps = 0
        while max_steps is None or steps < max_steps:
            if not self.perform_one_step():
                break
            steps += 1

        logger.info(
            "Girvan-Newman stopped after %d steps: best Q=%.4f with %d communities",
            self._step, self._best.modularity, self._best.num_communities
        )
        return self.get_best_communities()

    def get_current_communities(self) -> Partition:
        return _copy_partition(self._current.partition)

    def get_best_communities(self) -> Partition:
        return _copy_partition(self._best.partition)

    def get_current_modularity(self) -> float:
        return self._current.modularity

    def get_max_modularity(self) -> float:
        return self._best.modularity

    def get_current_step(self) -> int:
        return self._step

    def get_remaining_edge_count(self) -> int:
        return self._working_graph.number_of_edges()

    def get_history(self) -> List[PartitionRecord]:
        """Every recorded partition, the initial one first (copies)."""
        return [
            replace(record, partition=_copy_partition(record.partition))
            for record in self._history
        ]

    def get_original_graph(self) -> WeightedGraph:
        """A copy of the graph the engine was created with."""
        return self._original_graph.copy()
