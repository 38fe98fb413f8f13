"""
Graph construction for the lpalgo library.

Builds a :class:`~lpalgo.network.graph.WeightedGraph` from an edge list while
preserving the original node identifiers through an :class:`IDMapper`, and
exports graphs to NetworkIt for use with its algorithm collection.
"""

from typing import Union, Tuple, Optional, Dict, Any
import warnings
from pathlib import Path

import polars as pl
import networkit as nk

from ..common.id_mapper import IDMapper
from ..common.exceptions import (
    GraphConstructionError,
    ValidationError,
    DataFormatError
)
from ..common.validators import validate_edgelist_dataframe
from ..common.logging_config import get_logger, log_function_entry, LoggingTimer
from ..algorithms.modularity import connected_components
from .graph import WeightedGraph

logger = get_logger(__name__)

# Internal columns holding the canonical (smaller, larger) endpoint pair
_U_COL = "_u"
_V_COL = "_v"
_WEIGHT_COL = "_weight"


def build_graph_from_edgelist(
    edgelist: Union[str, Path, pl.DataFrame],
    source_col: str = "source",
    target_col: str = "target",
    weight_col: Optional[str] = None,
    auto_weight: bool = True,
    allow_self_loops: bool = True
) -> Tuple[WeightedGraph, IDMapper]:
    """
    Construct a WeightedGraph from an edge list with ID preservation.

    Parameters
    ----------
    edgelist : Union[str, Path, pl.DataFrame]
        Path to a CSV file or a Polars DataFrame containing edge data
    source_col : str, default "source"
        Column holding the first endpoint of each edge
    target_col : str, default "target"
        Column holding the second endpoint of each edge
    weight_col : str, optional
        Column holding edge weights. Weights of rows that describe the same
        undirected edge are summed; null weights count as zero.
    auto_weight : bool, default True
        When no weight column is given, weight each edge by the number of
        rows that describe it. Otherwise every edge gets weight 1.0.
    allow_self_loops : bool, default True
        If False, rows joining a node to itself are dropped

    Returns
    -------
    graph : WeightedGraph
        Graph over internal node IDs 0..n-1
    id_mapper : IDMapper
        Mapping between original IDs and internal IDs

    Raises
    ------
    ValidationError
        If the edge list misses columns or holds invalid values
    DataFormatError
        If the input file cannot be read or parsed
    GraphConstructionError
        If the graph cannot be built for any other reason

    Examples
    --------
    >>> edges = pl.DataFrame({
    ...     "source": ["A", "B", "C", "B"],
    ...     "target": ["B", "C", "A", "A"]
    ... })
    >>> graph, mapper = build_graph_from_edgelist(edges)
    >>> graph.number_of_edges()
    3
    >>> graph.weight(mapper.get_internal("A"), mapper.get_internal("B"))
    2.0

    Notes
    -----
    Graphs are undirected: ``(A, B)`` and ``(B, A)`` rows describe the same
    edge. Original IDs are sorted by their string form before internal IDs
    are assigned, so the same edge list always produces the same graph.
    """
    log_function_entry(
        "build_graph_from_edgelist",
        edgelist=type(edgelist).__name__,
        weight_col=weight_col,
        auto_weight=auto_weight,
        allow_self_loops=allow_self_loops
    )

    with LoggingTimer("build_graph_from_edgelist"):
        try:
            df = _load_edge_list(edgelist)

            # Self-loops are filtered below rather than rejected
            validate_edgelist_dataframe(
                df,
                source_col=source_col,
                target_col=target_col,
                weight_col=weight_col,
                allow_self_loops=True
            )

            if df.is_empty():
                warnings.warn("Empty edge list provided. Creating empty graph.")
                return WeightedGraph(), IDMapper()

            if not allow_self_loops:
                initial_count = len(df)
                df = df.filter(pl.col(source_col) != pl.col(target_col))
                removed_count = initial_count - len(df)
                if removed_count > 0:
                    logger.info("Removed %d self-loop edges", removed_count)

            id_mapper = _create_id_mapping(df, source_col, target_col)
            merged = _merge_undirected_edges(
                df, id_mapper, source_col, target_col, weight_col, auto_weight
            )
            graph = _construct_graph(merged, id_mapper)

            logger.info(
                "Graph construction completed: %d nodes, %d edges, weighted=%s",
                graph.number_of_nodes(), graph.number_of_edges(),
                weight_col is not None or auto_weight
            )
            return graph, id_mapper

        except (ValidationError, GraphConstructionError):
            raise
        except Exception as e:
            raise GraphConstructionError(
                f"Unexpected error during graph construction: {str(e)}",
                operation="build_graph_from_edgelist",
                cause=e
            ) from e


def _load_edge_list(edgelist: Union[str, Path, pl.DataFrame]) -> pl.DataFrame:
    """
    Load an edge list from a CSV path, or return a DataFrame as-is.

    Raises
    ------
    DataFormatError
        If the file is missing or cannot be parsed, or the input type is wrong
    """
    if isinstance(edgelist, pl.DataFrame):
        return edgelist

    if not isinstance(edgelist, (str, Path)):
        raise DataFormatError(
            f"Invalid edgelist type: {type(edgelist)}. Expected str, Path or pl.DataFrame",
            format_type="DataFrame"
        )

    file_path = Path(edgelist)
    if not file_path.exists():
        raise DataFormatError(
            f"Edge list file not found: {edgelist}",
            format_type="CSV",
            file_path=str(edgelist)
        )

    logger.debug("Loading edge list from file: %s", file_path)
    try:
        return pl.read_csv(file_path)
    except pl.exceptions.ComputeError as e:
        raise DataFormatError(
            f"Failed to parse CSV file: {str(e)}",
            format_type="CSV",
            file_path=str(edgelist),
            cause=e
        ) from e
    except Exception as e:
        raise DataFormatError(
            f"Error reading file: {str(e)}",
            format_type="CSV",
            file_path=str(edgelist),
            cause=e
        ) from e


def _create_id_mapping(df: pl.DataFrame, source_col: str, target_col: str) -> IDMapper:
    """Map every original ID to 0..n-1 in order of its string form."""
    source_ids = df[source_col].unique().to_list()
    target_ids = df[target_col].unique().to_list()

    all_ids = list(set(source_ids + target_ids))
    all_ids.sort(key=str)

    id_mapper = IDMapper()
    for internal_id, original_id in enumerate(all_ids):
        id_mapper.add_mapping(original_id, internal_id)

    logger.debug("Created ID mapping for %d unique nodes", len(all_ids))
    return id_mapper


def _merge_undirected_edges(
    df: pl.DataFrame,
    id_mapper: IDMapper,
    source_col: str,
    target_col: str,
    weight_col: Optional[str],
    auto_weight: bool
) -> pl.DataFrame:
    """
    Collapse rows describing the same undirected edge into one row.

    Returns a DataFrame with the canonical endpoint columns and one weight
    column, sorted by endpoints.
    """
    internal = df.with_columns(
        pl.Series("_src", id_mapper.get_internal_batch(df[source_col].to_list()), dtype=pl.Int64),
        pl.Series("_dst", id_mapper.get_internal_batch(df[target_col].to_list()), dtype=pl.Int64)
    ).with_columns(
        pl.min_horizontal("_src", "_dst").alias(_U_COL),
        pl.max_horizontal("_src", "_dst").alias(_V_COL)
    )

    if weight_col is not None:
        logger.debug("Summing weights of duplicate and reversed edges")
        merged = internal.group_by([_U_COL, _V_COL]).agg(
            pl.col(weight_col).cast(pl.Float64).fill_null(0.0).sum().alias(_WEIGHT_COL)
        )
    elif auto_weight:
        logger.debug("Calculating automatic weights from duplicate edges")
        merged = internal.group_by([_U_COL, _V_COL]).agg(
            pl.len().cast(pl.Float64).alias(_WEIGHT_COL)
        )
    else:
        merged = internal.select([_U_COL, _V_COL]).unique().with_columns(
            pl.lit(1.0).alias(_WEIGHT_COL)
        )

    duplicate_rows = len(df) - len(merged)
    if duplicate_rows > 0:
        logger.debug("Merged %d duplicate or reversed rows", duplicate_rows)

    return merged.sort([_U_COL, _V_COL])


def _construct_graph(merged: pl.DataFrame, id_mapper: IDMapper) -> WeightedGraph:
    graph = WeightedGraph()
    for internal_id in range(id_mapper.size()):
        graph.add_node(internal_id)

    for u, v, weight in merged.select([_U_COL, _V_COL, _WEIGHT_COL]).iter_rows():
        graph.add_edge(u, v, weight)

    return graph


def to_networkit(graph: WeightedGraph) -> Tuple[nk.Graph, IDMapper]:
    """
    Export a WeightedGraph as a weighted, undirected NetworkIt graph.

    NetworkIt requires consecutive node IDs, so graph nodes are renumbered
    in ascending order. The returned mapper maps graph node IDs (as
    "original" IDs) to NetworkIt node IDs.

    Parameters
    ----------
    graph : WeightedGraph
        Graph to export

    Returns
    -------
    nk_graph : nk.Graph
        Weighted undirected NetworkIt graph
    id_mapper : IDMapper
        Mapping between graph node IDs and NetworkIt node IDs

    Raises
    ------
    GraphConstructionError
        If NetworkIt rejects the graph

    Examples
    --------
    >>> g = WeightedGraph()
    >>> g.add_edge(10, 20, weight=2.0)
    >>> nk_graph, mapper = to_networkit(g)
    >>> nk_graph.weight(mapper.get_internal(10), mapper.get_internal(20))
    2.0
    """
    id_mapper = IDMapper()
    for nk_id, node in enumerate(graph.nodes()):
        id_mapper.add_mapping(node, nk_id)

    try:
        nk_graph = nk.Graph(id_mapper.size(), weighted=True, directed=False)
        for u, v, weight in graph.edges():
            nk_graph.addEdge(id_mapper.get_internal(u), id_mapper.get_internal(v), weight)
    except Exception as e:
        raise GraphConstructionError(
            f"Failed to export graph to NetworkIt: {str(e)}",
            graph_type="networkit",
            node_count=graph.number_of_nodes(),
            edge_count=graph.number_of_edges(),
            operation="to_networkit",
            cause=e
        ) from e

    logger.debug(
        "Exported graph to NetworkIt: %d nodes, %d edges",
        nk_graph.numberOfNodes(), nk_graph.numberOfEdges()
    )
    return nk_graph, id_mapper


def get_graph_info(graph: WeightedGraph) -> Dict[str, Any]:
    """
    Summarize a graph.

    Returns
    -------
    Dict[str, Any]
        ``num_nodes``, ``num_edges``, ``total_weight``, ``density`` (self-loops
        excluded), ``num_isolated_nodes``, ``num_self_loops``,
        ``has_self_loops``, ``num_components`` and ``is_connected``

    Examples
    --------
    >>> graph, mapper = build_graph_from_edgelist(edges)
    >>> info = get_graph_info(graph)
    >>> print(f"Nodes: {info['num_nodes']}, Edges: {info['num_edges']}")
    """
    num_nodes = graph.number_of_nodes()
    num_edges = graph.number_of_edges()
    num_self_loops = sum(1 for u, v, _ in graph.edges() if u == v)

    if num_nodes > 1:
        density = 2.0 * (num_edges - num_self_loops) / (num_nodes * (num_nodes - 1))
    else:
        density = 0.0

    num_components = len(connected_components(graph))

    return {
        "num_nodes": num_nodes,
        "num_edges": num_edges,
        "total_weight": graph.total_weight(),
        "density": density,
        "num_isolated_nodes": sum(1 for node in graph.nodes() if graph.degree(node) == 0),
        "num_self_loops": num_self_loops,
        "has_self_loops": num_self_loops > 0,
        "num_components": num_components,
        "is_connected": num_components == 1
    }
