"""
Partition helpers shared by the community detection engines.

Provides connected component labeling, the modularity score of a partition
and the random source used by the randomized engines.
"""

from collections import deque
import random
from typing import Any, Dict, Optional, Set

from ..network.graph import WeightedGraph

Partition = Dict[int, Set[int]]


def connected_components(graph: WeightedGraph) -> Partition:
    """
    Label the connected components of a graph.

    Nodes are scanned in ascending order and components are numbered
    0, 1, 2, ... in the order they are discovered. Isolated nodes form
    their own component.

    Parameters
    ----------
    graph : WeightedGraph
        Graph to label

    Returns
    -------
    Dict[int, Set[int]]
        Component id -> member nodes

    Examples
    --------
    >>> g = WeightedGraph()
    >>> g.add_edge(0, 1)
    >>> g.add_node(5)
    >>> connected_components(g)
    {0: {0, 1}, 1: {5}}
    """
    components: Partition = {}
    visited: Set[int] = set()

    for start in graph.nodes():
        if start in visited:
            continue

        component = {start}
        visited.add(start)
        queue = deque([start])
        while queue:
            node = queue.popleft()
            for neighbor in graph.neighbors(node):
                if neighbor not in visited:
                    visited.add(neighbor)
                    component.add(neighbor)
                    queue.append(neighbor)

        components[len(components)] = component

    return components


def modularity(graph: WeightedGraph, partition: Partition) -> float:
    """
    Compute the modularity of a non-overlapping partition.

    ``Q = sum_c (L_c / m - (D_c / 2m)^2)`` where ``m`` is the total weight
    of ``graph``, ``L_c`` the weight of edges with both endpoints in
    community ``c`` and ``D_c`` the summed weighted degree of its members.

    Parameters
    ----------
    graph : WeightedGraph
        Graph supplying edge weights and degrees
    partition : Dict[int, Set[int]]
        Community id -> member nodes

    Returns
    -------
    float
        Modularity score, 0.0 for a graph without weight

    Notes
    -----
    Self-loops count half their weight toward ``L_c``, matching the way
    :meth:`WeightedGraph.total_weight` counts them.
    """
    m = graph.total_weight()
    if m <= 0:
        return 0.0

    q = 0.0
    for members in partition.values():
        internal = 0.0
        degree = 0.0
        for node in members:
            degree += graph.weighted_degree(node)
            for neighbor in graph.neighbors(node):
                if neighbor in members:
                    # Each internal edge is seen from both endpoints
                    internal += graph.weight(node, neighbor) / 2.0
        q += internal / m - (degree / (2.0 * m)) ** 2

    return q


def partition_from_assignment(assignment: Dict[int, int]) -> Partition:
    """
    Group a node -> community mapping into community -> members.

    Examples
    --------
    >>> partition_from_assignment({0: 7, 1: 7, 2: 3})
    {7: {0, 1}, 3: {2}}
    """
    partition: Partition = {}
    for node, community in assignment.items():
        partition.setdefault(community, set()).add(node)
    return partition


def resolve_random_source(rng: Optional[Any] = None, random_seed: Optional[int] = None) -> Any:
    """
    Return the random source an engine should use.

    Parameters
    ----------
    rng : object, optional
        Any object providing ``shuffle(list)`` and ``choice(sequence)``,
        for example :class:`random.Random`. Takes precedence over
        ``random_seed``.
    random_seed : int, optional
        Seed for a new :class:`random.Random` when ``rng`` is not given.

    Returns
    -------
    object
        The random source
    """
    if rng is not None:
        return rng
    return random.Random(random_seed)
