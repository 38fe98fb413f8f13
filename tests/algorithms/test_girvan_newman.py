"""
Tests for the divisive Girvan-Newman engine.
"""

import dataclasses

import pytest

from lpalgo.algorithms.girvan_newman import GirvanNewmanEngine, PartitionRecord
from lpalgo.common.exceptions import ValidationError


class TestEdgeBetweenness:
    """Test Brandes edge betweenness."""

    def test_path(self, make_graph):
        """Test a three-node path where both edges carry four paths."""
        engine = GirvanNewmanEngine(make_graph([(0, 1), (1, 2)]))

        assert engine.compute_edge_betweenness() == {(0, 1): 4.0, (1, 2): 4.0}

    def test_bridge_dominates(self, barbell):
        """Test that the bridge carries every cross-triangle path."""
        betweenness = GirvanNewmanEngine(barbell).compute_edge_betweenness()

        assert betweenness[(2, 3)] == pytest.approx(18.0)
        assert max(betweenness, key=betweenness.get) == (2, 3)
        assert betweenness[(0, 1)] == pytest.approx(2.0)

    def test_two_triangles_uniform(self, two_triangles):
        """Test that every triangle edge has the same score."""
        betweenness = GirvanNewmanEngine(two_triangles).compute_edge_betweenness()

        assert set(betweenness) == {(0, 1), (0, 2), (1, 2), (3, 4), (3, 5), (4, 5)}
        assert all(score == pytest.approx(2.0) for score in betweenness.values())

    def test_parallel_paths_share_credit(self, make_graph):
        """Test that two shortest paths split the credit evenly."""
        engine = GirvanNewmanEngine(make_graph([(0, 1), (1, 3), (0, 2), (2, 3)]))

        betweenness = engine.compute_edge_betweenness()

        assert all(score == pytest.approx(4.0) for score in betweenness.values())

    def test_self_loop_scores_zero(self, make_graph):
        """Test that a self-loop lies on no shortest path."""
        betweenness = GirvanNewmanEngine(make_graph([(0, 0), (0, 1)])).compute_edge_betweenness()

        assert betweenness == {(0, 0): 0.0, (0, 1): 2.0}


class TestSteps:
    """Test edge removal and partition tracking."""

    def test_initial_record(self, barbell):
        """Test that the untouched graph is recorded as step 0."""
        engine = GirvanNewmanEngine(barbell)

        assert engine.get_current_step() == 0
        assert engine.get_current_communities() == {0: set(range(6))}
        assert engine.get_current_modularity() == pytest.approx(0.0)
        assert len(engine.get_history()) == 1

    def test_bridge_removed_first(self, barbell):
        """Test that the first step separates the triangles."""
        engine = GirvanNewmanEngine(barbell)

        assert engine.perform_one_step()

        assert engine.get_current_step() == 1
        assert engine.get_remaining_edge_count() == 6
        assert engine.get_current_communities() == {0: {0, 1, 2}, 1: {3, 4, 5}}
        assert engine.get_current_modularity() == pytest.approx(5 / 14)
        assert engine.get_max_modularity() == pytest.approx(5 / 14)

    def test_ties_go_to_lowest_edge(self, two_triangles):
        """Test that equal scores remove the smallest (u, v) pair."""
        engine = GirvanNewmanEngine(two_triangles)

        engine.perform_one_step()

        assert engine.get_current_step() == 1
        assert engine.get_remaining_edge_count() == 5
        assert (0, 1) not in engine.compute_edge_betweenness()
        assert engine.get_current_communities() == {0: {0, 1, 2}, 1: {3, 4, 5}}

    def test_run_to_exhaustion(self, barbell):
        """Test that a full run removes every edge and keeps the best split."""
        engine = GirvanNewmanEngine(barbell)

        best = engine.run()

        assert best == {0: {0, 1, 2}, 1: {3, 4, 5}}
        assert engine.get_remaining_edge_count() == 0
        assert not engine.perform_one_step()
        assert engine.get_current_communities() == {node: {node} for node in range(6)}

        history = engine.get_history()
        assert len(history) == 8
        assert [record.step for record in history] == list(range(8))
        best_so_far = float("-inf")
        for record in history:
            best_so_far = max(best_so_far, record.modularity)
        assert engine.get_max_modularity() == pytest.approx(best_so_far)

    def test_max_steps(self, barbell):
        """Test that run stops after the requested number of steps."""
        engine = GirvanNewmanEngine(barbell)

        engine.run(max_steps=2)

        assert engine.get_current_step() == 2
        assert engine.get_remaining_edge_count() == 5

    def test_zero_steps(self, barbell):
        """Test that no step is taken for max_steps=0."""
        engine = GirvanNewmanEngine(barbell)

        assert engine.run(max_steps=0) == {0: set(range(6))}
        assert engine.get_current_step() == 0

    def test_isolated_node(self, isolated_node):
        """Test that a graph without edges cannot be divided."""
        engine = GirvanNewmanEngine(isolated_node)

        assert not engine.perform_one_step()
        assert engine.get_current_modularity() == 0.0
        assert engine.get_current_communities() == {0: {0}}

    def test_self_loop_is_removed_last(self, make_graph):
        """Test that self-loops are removed once nothing scores higher."""
        engine = GirvanNewmanEngine(make_graph([(0, 0), (0, 1)]))

        assert engine.perform_one_step()
        assert engine.get_current_communities() == {0: {0}, 1: {1}}
        assert engine.get_remaining_edge_count() == 1

        assert engine.perform_one_step()
        assert not engine.perform_one_step()


class TestIsolation:
    """Test that engine state is private."""

    def test_original_graph_untouched(self, barbell):
        """Test that steps do not modify the caller's graph."""
        before = barbell.copy()
        engine = GirvanNewmanEngine(barbell)

        engine.run()

        assert barbell == before
        assert engine.get_original_graph() == before

    def test_returned_partitions_are_copies(self, barbell):
        """Test that callers cannot alter stored partitions."""
        engine = GirvanNewmanEngine(barbell)
        engine.perform_one_step()

        engine.get_current_communities()[0].add(99)
        engine.get_best_communities()[0].add(99)

        assert 99 not in engine.get_current_communities()[0]
        assert 99 not in engine.get_best_communities()[0]

    def test_history_records_are_copies(self, barbell):
        """Test that editing a history record leaves the engine intact."""
        engine = GirvanNewmanEngine(barbell)
        engine.perform_one_step()

        history = engine.get_history()
        history[-1].partition[0].add(99)
        history[0].partition.clear()

        assert 99 not in engine.get_current_communities()[0]
        assert 99 not in engine.get_best_communities()[0]
        assert engine.get_history()[-1].partition == {0: {0, 1, 2}, 1: {3, 4, 5}}
        assert engine.get_history()[0].partition == {0: set(range(6))}
        assert engine.get_history()[-1].modularity == pytest.approx(5 / 14)

    def test_partition_record_is_frozen(self):
        """Test that history records cannot be reassigned."""
        record = PartitionRecord(step=0, partition={0: {0}}, modularity=0.0)

        assert record.num_communities == 1
        with pytest.raises(dataclasses.FrozenInstanceError):
            record.modularity = 1.0

    def test_none_graph(self):
        """Test that a missing graph is rejected."""
        with pytest.raises(ValidationError):
            GirvanNewmanEngine(None)
