"""
Label propagation community detection (LPA).

Every node starts with its own id as label and repeatedly adopts the label
that dominates its neighborhood. Updates are synchronous: all new labels of
an iteration are computed from the labels at the start of that iteration.
Convergence is not guaranteed, since random tie-breaking can make labels
oscillate, so callers iterate until nothing changes or a cap is reached.

References
----------
.. [1] Raghavan, U. N., Albert, R. and Kumara, S. "Near linear time
       algorithm to detect community structures in large-scale networks."
       Physical Review E 76.3 (2007).
"""

from typing import Any, Dict, Optional

from ..common.logging_config import get_logger
from ..common.validators import validate_graph_argument
from ..network.graph import WeightedGraph
from .modularity import Partition, partition_from_assignment, resolve_random_source

logger = get_logger(__name__)

DEFAULT_MAX_ITERATIONS = 100

# Weighted votes closer than this count as a tie
WEIGHT_TOLERANCE = 1e-9


class LabelPropagationEngine:
    """
    Step-wise synchronous label propagation.

    Parameters
    ----------
    graph : WeightedGraph
        Graph to partition (read only)
    rng : object, optional
        Random source with ``shuffle`` and ``choice``, used for the visit
        order and to break ties between equally frequent labels
    random_seed : int, optional
        Seed for a :class:`random.Random` when ``rng`` is not given
    weighted : bool, default False
        Vote with edge weights instead of neighbor counts

    Raises
    ------
    ValidationError
        If graph is None or not a WeightedGraph

    Examples
    --------
    >>> g = WeightedGraph()
    >>> for u, v in [(0, 1), (1, 2), (0, 2), (3, 4), (4, 5), (3, 5)]:
    ...     g.add_edge(u, v)
    >>> engine = LabelPropagationEngine(g, random_seed=7)
    >>> engine.run()
    True
    >>> len(engine.get_communities())
    2
    """

    def __init__(
        self,
        graph: WeightedGraph,
        rng: Optional[Any] = None,
        random_seed: Optional[int] = None,
        weighted: bool = False
    ) -> None:
        validate_graph_argument(graph, "LabelPropagationEngine")

        self._graph = graph
        self._rng = resolve_random_source(rng, random_seed)
        self._weighted = weighted
        self._labels: Dict[int, int] = {}
        self._iteration = 0
        self.reset()

    def reset(self) -> None:
        """Give every node its own id as label and zero the counter."""
        self._labels = {node: node for node in self._graph.nodes()}
        self._iteration = 0

    def _dominant_label(self, node: int, snapshot: Dict[int, int]) -> int:
        votes: Dict[int, float] = {}
        for neighbor in self._graph.neighbors(node):
            label = snapshot.get(neighbor, neighbor)
            vote = self._graph.weight(node, neighbor) if self._weighted else 1.0
            votes[label] = votes.get(label, 0.0) + vote

        if not votes:
            return snapshot.get(node, node)

        best = max(votes.values())
        candidates = sorted(
            label for label, vote in votes.items()
            if vote >= best - WEIGHT_TOLERANCE
        )
        if len(candidates) == 1:
            return candidates[0]
        return self._rng.choice(candidates)

    def iterate(self) -> bool:
        """
        Run one synchronous iteration.

        Returns
        -------
        bool
            True if at least one label changed
        """
        snapshot = dict(self._labels)
        nodes = self._graph.nodes()
        self._rng.shuffle(nodes)

        new_labels: Dict[int, int] = {}
        changed = 0
        for node in nodes:
            label = self._dominant_label(node, snapshot)
            new_labels[node] = label
            if label != snapshot.get(node, node):
                changed += 1

        self._labels = new_labels
        self._iteration += 1

        logger.debug(
            "LPA iteration %d changed %d of %d labels",
            self._iteration, changed, len(nodes)
        )
        return changed > 0

    def run(self, max_iterations: int = DEFAULT_MAX_ITERATIONS) -> bool:
        """
        Iterate until no label changes or ``max_iterations`` is reached.

        Returns
        -------
        bool
            True if the labels converged within the cap
        """
        converged = False
        for _ in range(max_iterations):
            if not self.iterate():
                converged = True
                break

        if converged:
            logger.info(
                "LPA converged after %d iterations with %d communities",
                self._iteration, len(set(self._labels.values()))
            )
        else:
            logger.info(
                "LPA did not converge within %d iterations (%d communities)",
                max_iterations, len(set(self._labels.values()))
            )
        return converged

    def get_label(self, node: int) -> int:
        """Current label of ``node``; a node outside the graph is its own label."""
        return self._labels.get(node, node)

    def get_labels(self) -> Dict[int, int]:
        return dict(self._labels)

    def get_communities(self) -> Partition:
        """Label -> nodes carrying it."""
        return partition_from_assignment(self._labels)

    def get_iteration(self) -> int:
        return self._iteration
