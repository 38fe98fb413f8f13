"""
Tests for the shared partition helpers.
"""

import random

import pytest

from lpalgo.algorithms.modularity import (
    connected_components,
    modularity,
    partition_from_assignment,
    resolve_random_source
)


class TestConnectedComponents:
    """Test component labeling."""

    def test_components_in_discovery_order(self, make_graph):
        """Test numbering by smallest unvisited node."""
        graph = make_graph([(5, 6), (0, 1), (1, 2)], nodes=[3])

        assert connected_components(graph) == {0: {0, 1, 2}, 1: {3}, 2: {5, 6}}

    def test_empty_graph(self, make_graph):
        """Test that an empty graph has no components."""
        assert connected_components(make_graph([])) == {}

    def test_self_loop_only(self, make_graph):
        """Test that a node with only a self-loop is its own component."""
        assert connected_components(make_graph([(4, 4)])) == {0: {4}}


class TestModularity:
    """Test the modularity score."""

    def test_two_triangles(self, two_triangles):
        """Test the natural split of two disjoint triangles."""
        partition = {0: {0, 1, 2}, 1: {3, 4, 5}}

        assert modularity(two_triangles, partition) == pytest.approx(0.5)

    def test_single_community(self, barbell):
        """Test that one community covering everything scores zero."""
        assert modularity(barbell, {0: set(range(6))}) == pytest.approx(0.0)

    def test_barbell_split(self, barbell):
        """Test the split at the bridge."""
        partition = {0: {0, 1, 2}, 1: {3, 4, 5}}

        assert modularity(barbell, partition) == pytest.approx(5 / 14)

    def test_singletons_are_negative(self, two_triangles):
        """Test that singletons score below zero on a graph with edges."""
        partition = {node: {node} for node in two_triangles.nodes()}

        assert modularity(two_triangles, partition) == pytest.approx(-1 / 6)

    def test_no_weight(self, isolated_node):
        """Test that a graph without weight scores zero."""
        assert modularity(isolated_node, {0: {0}}) == 0.0

    def test_weighted_edges(self, make_graph):
        """Test that weights are used."""
        graph = make_graph([(0, 1, 3.0), (1, 2, 1.0)])
        partition = {0: {0, 1}, 1: {2}}

        # m = 4; community {0, 1}: L = 3, D = 7; community {2}: L = 0, D = 1
        expected = 3 / 4 - (7 / 8) ** 2 - (1 / 8) ** 2
        assert modularity(graph, partition) == pytest.approx(expected)

    def test_self_loop(self, make_graph):
        """Test that a self-loop counts half its weight as internal."""
        graph = make_graph([(0, 0, 2.0)])

        assert modularity(graph, {0: {0}}) == pytest.approx(0.0)


class TestPartitionHelpers:
    """Test assignment grouping and random sources."""

    def test_partition_from_assignment(self):
        """Test grouping node -> community into community -> nodes."""
        assert partition_from_assignment({0: 7, 1: 7, 2: 3}) == {7: {0, 1}, 3: {2}}
        assert partition_from_assignment({}) == {}

    def test_explicit_rng_wins(self, ordered_rng):
        """Test that a given random source is returned unchanged."""
        assert resolve_random_source(ordered_rng, random_seed=3) is ordered_rng

    def test_seeded_source_is_reproducible(self):
        """Test that equal seeds give equal shuffles."""
        first = list(range(20))
        second = list(range(20))

        resolve_random_source(random_seed=5).shuffle(first)
        resolve_random_source(random_seed=5).shuffle(second)

        assert first == second

    def test_default_source(self):
        """Test that the default source is a random.Random."""
        assert isinstance(resolve_random_source(), random.Random)
