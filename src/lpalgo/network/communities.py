"""
Community detection module for the lpalgo library.

Drives one of the step-wise engines in :mod:`lpalgo.algorithms` to completion
and reports the result as a Polars DataFrame keyed by original node IDs, with
summary and comparison helpers for the resulting partitions.
"""

from typing import Any, Dict, List, Optional, Tuple
import warnings
from collections import Counter

import polars as pl
import numpy as np
from sklearn.metrics import normalized_mutual_info_score

from ..common.id_mapper import IDMapper
from ..common.exceptions import (
    ComputationError,
    NetworkAnalysisError,
    ValidationError,
    validate_parameter,
    require_positive
)
from ..common.validators import validate_graph_argument
from ..common.logging_config import get_logger, log_function_entry, LoggingTimer
from ..algorithms.cliques import CliqueEngine
from ..algorithms.girvan_newman import GirvanNewmanEngine
from ..algorithms.label_propagation import LabelPropagationEngine
from ..algorithms.louvain import LouvainEngine, DEFAULT_MAX_LEVELS
from ..algorithms.modularity import Partition, modularity, partition_from_assignment
from .graph import WeightedGraph

logger = get_logger(__name__)

# Available community detection algorithms
AVAILABLE_ALGORITHMS = ["louvain", "girvan_newman", "label_propagation", "clique_percolation"]

RESULT_COLUMNS = ["node_id", "community", "modularity", "num_communities", "algorithm"]


def detect_communities(
    graph: WeightedGraph,
    algorithm: str = "louvain",
    id_mapper: Optional[IDMapper] = None,
    k: int = 3,
    max_iterations: int = 100,
    max_steps: Optional[int] = None,
    random_seed: Optional[int] = None,
    rng: Optional[Any] = None
) -> pl.DataFrame:
    """
    Detect communities with the chosen algorithm.

    Parameters
    ----------
    graph : WeightedGraph
        Graph to analyze
    algorithm : str, default "louvain"
        One of:
        - "louvain": greedy modularity optimization with aggregation
        - "girvan_newman": divisive removal of high-betweenness edges
        - "label_propagation": synchronous label diffusion
        - "clique_percolation": overlapping communities of adjacent k-cliques
    id_mapper : IDMapper, optional
        Maps graph node IDs back to original IDs in the output. Without it
        the graph node IDs are reported.
    k : int, default 3
        Percolation order for "clique_percolation"
    max_iterations : int, default 100
        Pass cap per level for "louvain", iteration cap for "label_propagation"
    max_steps : int, optional
        Edge removal cap for "girvan_newman" (None removes every edge)
    random_seed : int, optional
        Seed for the randomized engines
    rng : object, optional
        Random source with ``shuffle`` and ``choice``; overrides random_seed

    Returns
    -------
    pl.DataFrame
        One row per (node, community) membership, sorted by node_id, with
        columns:
        - node_id: Original node ID
        - community: Community ID (0-indexed)
        - modularity: Modularity of the partition against the input graph
          (null for clique percolation, whose communities overlap)
        - num_communities: Number of communities found
        - algorithm: Algorithm name

    Raises
    ------
    ValidationError
        If graph is not a WeightedGraph
    ConfigurationError
        If the algorithm is unknown or a numeric parameter is out of range
    ComputationError
        If the engine fails unexpectedly

    Examples
    --------
    >>> graph, mapper = build_graph_from_edgelist(edges)
    >>> result = detect_communities(graph, "louvain", id_mapper=mapper, random_seed=42)
    >>> print(result.select(["node_id", "community", "modularity"]))

    Overlapping communities:

    >>> result = detect_communities(graph, "clique_percolation", k=3)
    >>> overlapping = result.filter(pl.col("node_id").is_duplicated())

    Notes
    -----
    Louvain reports the level whose partition scores best against the input
    graph, and Girvan-Newman reports the best partition of the divisive
    process. Label propagation may stop at the iteration cap without
    converging; this is logged, not raised.
    """
    log_function_entry(
        "detect_communities",
        algorithm=algorithm,
        k=k,
        max_iterations=max_iterations,
        max_steps=max_steps,
        random_seed=random_seed
    )

    validate_parameter(algorithm, AVAILABLE_ALGORITHMS, "algorithm", "detect_communities")
    validate_graph_argument(graph, "detect_communities")
    require_positive(max_iterations, "max_iterations")
    if max_steps is not None:
        require_positive(max_steps, "max_steps", allow_zero=True)

    if graph.number_of_nodes() == 0:
        warnings.warn("Empty graph provided. Returning empty DataFrame.")
        return _create_result_dataframe({}, None, algorithm, id_mapper)

    with LoggingTimer("detect_communities", {"algorithm": algorithm, "nodes": graph.number_of_nodes()}):
        try:
            if algorithm == "louvain":
                partition, q = _run_louvain(graph, max_iterations, random_seed, rng)
            elif algorithm == "girvan_newman":
                partition, q = _run_girvan_newman(graph, max_steps)
            elif algorithm == "label_propagation":
                partition, q = _run_label_propagation(graph, max_iterations, random_seed, rng)
            else:
                partition, q = _run_clique_percolation(graph, k)
        except NetworkAnalysisError:
            raise
        except Exception as e:
            raise ComputationError(
                f"Community detection failed: {str(e)}",
                operation="detect_communities",
                error_type="algorithm_failure",
                resource_info={"nodes": graph.number_of_nodes(), "edges": graph.number_of_edges()},
                cause=e
            ) from e

    result_df = _create_result_dataframe(partition, q, algorithm, id_mapper)

    logger.info(
        f"Community detection completed: algorithm={algorithm}, "
        f"{len(partition)} communities, {result_df.height} memberships"
        + (f", modularity={q:.3f}" if q is not None else "")
    )
    return result_df


def _run_louvain(
    graph: WeightedGraph,
    max_passes: int,
    random_seed: Optional[int],
    rng: Optional[Any]
) -> Tuple[Partition, float]:
    """
    Run Louvain level by level and keep the best level.

    Every level is scored against the input graph, since aggregation
    without internal weight changes what later levels optimize.
    """
    engine = LouvainEngine(graph, rng=rng, random_seed=random_seed)

    best_partition = engine.get_communities()
    best_q = modularity(graph, best_partition)

    for level in range(DEFAULT_MAX_LEVELS):
        moved = False
        for _ in range(max_passes):
            if not engine.perform_one_pass():
                break
            moved = True

        if not moved:
            break

        partition = engine.get_communities()
        q = modularity(graph, partition)
        logger.debug(f"Louvain level {level}: {len(partition)} communities, Q={q:.4f}")
        if q > best_q:
            best_partition, best_q = partition, q

        engine.aggregate_graph()

    return _relabel_communities(best_partition), best_q


def _run_girvan_newman(graph: WeightedGraph, max_steps: Optional[int]) -> Tuple[Partition, float]:
    engine = GirvanNewmanEngine(graph)
    best = engine.run(max_steps=max_steps)
    return _relabel_communities(best), engine.get_max_modularity()


def _run_label_propagation(
    graph: WeightedGraph,
    max_iterations: int,
    random_seed: Optional[int],
    rng: Optional[Any]
) -> Tuple[Partition, float]:
    engine = LabelPropagationEngine(graph, rng=rng, random_seed=random_seed)
    if not engine.run(max_iterations=max_iterations):
        logger.warning(
            f"Label propagation did not converge within {max_iterations} iterations; "
            "reporting the last labels"
        )
    partition = engine.get_communities()
    return _relabel_communities(partition), modularity(graph, partition)


def _run_clique_percolation(graph: WeightedGraph, k: int) -> Tuple[Partition, None]:
    engine = CliqueEngine(graph)
    communities = engine.find_communities(k)
    overlapping = engine.get_overlapping_nodes()
    if overlapping:
        logger.debug(f"{len(overlapping)} nodes belong to more than one community")
    return communities, None


def _relabel_communities(partition: Partition) -> Partition:
    """
    Renumber a disjoint partition 0, 1, ... by smallest member node.

    Examples
    --------
    >>> _relabel_communities({7: {3, 4}, 2: {0, 9}})
    {0: {0, 9}, 1: {3, 4}}
    """
    ordered = sorted(
        (members for members in partition.values() if members),
        key=min
    )
    return {new_id: set(members) for new_id, members in enumerate(ordered)}


def _create_result_dataframe(
    partition: Partition,
    q: Optional[float],
    algorithm: str,
    id_mapper: Optional[IDMapper]
) -> pl.DataFrame:
    """
    Build the result DataFrame with original node IDs.

    Parameters
    ----------
    partition : Dict[int, Set[int]]
        Community id -> member graph nodes
    q : float, optional
        Modularity of the partition
    algorithm : str
        Algorithm name
    id_mapper : IDMapper, optional
        Mapping back to original IDs

    Returns
    -------
    pl.DataFrame
        One row per membership, sorted by node_id then community
    """
    node_ids: List[Any] = []
    communities: List[int] = []

    for community_id in sorted(partition):
        for node in sorted(partition[community_id]):
            node_ids.append(id_mapper.get_original(node) if id_mapper is not None else node)
            communities.append(community_id)

    n_rows = len(node_ids)
    result_df = pl.DataFrame({
        "node_id": node_ids,
        "community": communities,
        "modularity": [q] * n_rows,
        "num_communities": [len(partition)] * n_rows,
        "algorithm": [algorithm] * n_rows
    }).with_columns(
        pl.col("community").cast(pl.Int64),
        pl.col("modularity").cast(pl.Float64),
        pl.col("num_communities").cast(pl.Int64),
        pl.col("algorithm").cast(pl.Utf8)
    )

    return result_df.sort(["node_id", "community"])


def get_community_summary(communities_df: pl.DataFrame) -> Dict[str, Any]:
    """
    Get summary statistics for community detection results.

    Parameters
    ----------
    communities_df : pl.DataFrame
        DataFrame returned by detect_communities()

    Returns
    -------
    Dict[str, Any]
        Summary statistics including:
        - algorithm: Algorithm that produced the result
        - num_communities: Number of communities
        - modularity: Modularity score (None for clique percolation)
        - community_sizes: Community sizes, largest first
        - size_distribution: min/max/mean/median/std of the sizes
        - total_nodes: Number of distinct nodes assigned to a community
        - num_overlapping_nodes: Nodes in more than one community

    Raises
    ------
    ValidationError
        If the DataFrame lacks the result columns
    """
    missing = [col for col in ("node_id", "community") if col not in communities_df.columns]
    if missing:
        raise ValidationError(
            f"Missing required columns: {missing}",
            field="columns",
            details={"available_columns": communities_df.columns}
        )

    community_counts = Counter(communities_df["community"].to_list())
    community_sizes = list(community_counts.values())

    size_stats = {
        "min": int(np.min(community_sizes)) if community_sizes else 0,
        "max": int(np.max(community_sizes)) if community_sizes else 0,
        "mean": float(np.mean(community_sizes)) if community_sizes else 0.0,
        "median": float(np.median(community_sizes)) if community_sizes else 0.0,
        "std": float(np.std(community_sizes)) if community_sizes else 0.0
    }

    modularity_value = None
    if "modularity" in communities_df.columns and communities_df.height > 0:
        modularity_value = communities_df["modularity"][0]

    algorithm = None
    if "algorithm" in communities_df.columns and communities_df.height > 0:
        algorithm = communities_df["algorithm"][0]

    node_counts = Counter(communities_df["node_id"].to_list())

    return {
        "algorithm": algorithm,
        "num_communities": len(community_sizes),
        "modularity": modularity_value,
        "community_sizes": sorted(community_sizes, reverse=True),
        "size_distribution": size_stats,
        "total_nodes": len(node_counts),
        "num_overlapping_nodes": sum(1 for count in node_counts.values() if count > 1)
    }


def partition_to_membership(partition: Partition) -> Dict[int, int]:
    """
    Turn community id -> members into node -> community id.

    Raises
    ------
    ValidationError
        If a node belongs to more than one community
    """
    membership: Dict[int, int] = {}
    for community_id, members in partition.items():
        for node in members:
            if node in membership:
                raise ValidationError(
                    f"Node {node} belongs to communities {membership[node]} and {community_id}",
                    field="partition",
                    expected="non-overlapping communities"
                )
            membership[node] = community_id
    return membership


def membership_to_partition(membership: Dict[int, int]) -> Partition:
    """Turn node -> community id into community id -> members."""
    return partition_from_assignment(membership)


def compare_partitions(partition_a: Partition, partition_b: Partition) -> float:
    """
    Normalized mutual information between two disjoint partitions.

    Only nodes present in both partitions are compared.

    Parameters
    ----------
    partition_a, partition_b : Dict[int, Set[int]]
        Partitions to compare

    Returns
    -------
    float
        NMI in [0, 1]; 1.0 when the partitions agree on every shared node

    Raises
    ------
    ValidationError
        If the partitions share no node or either one overlaps

    Examples
    --------
    >>> compare_partitions({0: {0, 1}, 1: {2, 3}}, {5: {0, 1}, 9: {2, 3}})
    1.0
    """
    membership_a = partition_to_membership(partition_a)
    membership_b = partition_to_membership(partition_b)

    shared = sorted(set(membership_a) & set(membership_b))
    if not shared:
        raise ValidationError(
            "Partitions have no nodes in common",
            field="partition",
            details={"size_a": len(membership_a), "size_b": len(membership_b)}
        )

    labels_a = [membership_a[node] for node in shared]
    labels_b = [membership_b[node] for node in shared]

    nmi = float(normalized_mutual_info_score(labels_a, labels_b))
    logger.debug(f"NMI over {len(shared)} shared nodes: {nmi:.3f}")
    return nmi
