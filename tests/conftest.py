"""
Shared fixtures for the lpalgo test suite.
"""

import pytest

from lpalgo.network.graph import WeightedGraph


class OrderedRandom:
    """
    Deterministic random source.

    ``shuffle`` keeps the order and ``choice`` returns the first candidate,
    so engines visit nodes in ascending order and break ties toward the
    smallest label. Calls are recorded for inspection.
    """

    def __init__(self):
        self.shuffled = []
        self.choices = []

    def shuffle(self, items):
        self.shuffled.append(list(items))

    def choice(self, candidates):
        self.choices.append(list(candidates))
        return candidates[0]


def build_graph(edges, nodes=()):
    graph = WeightedGraph()
    for node in nodes:
        graph.add_node(node)
    for edge in edges:
        graph.add_edge(*edge)
    return graph


@pytest.fixture
def ordered_rng():
    return OrderedRandom()


@pytest.fixture
def two_triangles():
    """Triangles {0, 1, 2} and {3, 4, 5} without edges between them."""
    return build_graph([(0, 1), (1, 2), (0, 2), (3, 4), (4, 5), (3, 5)])


@pytest.fixture
def barbell():
    """Triangles {0, 1, 2} and {3, 4, 5} joined by the bridge (2, 3)."""
    return build_graph([(0, 1), (1, 2), (0, 2), (2, 3), (3, 4), (4, 5), (3, 5)])


@pytest.fixture
def isolated_node():
    return build_graph([], nodes=[0])


@pytest.fixture
def make_graph():
    """Factory building a WeightedGraph from ``(u, v[, weight])`` tuples."""
    return build_graph
