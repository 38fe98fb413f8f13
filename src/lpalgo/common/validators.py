"""
Input validation utilities for the lpalgo library.

Checks edge list DataFrames before they are turned into a
:class:`~lpalgo.network.graph.WeightedGraph`, and checks the graph argument
handed to the community detection engines.
"""

from typing import Any, Optional
import warnings

import polars as pl

from .exceptions import ValidationError


def validate_edgelist_dataframe(
    df: pl.DataFrame,
    source_col: str = "source",
    target_col: str = "target",
    weight_col: Optional[str] = None,
    allow_self_loops: bool = True
) -> None:
    """
    Validate an edge list DataFrame for graph construction.

    Parameters
    ----------
    df : pl.DataFrame
        Edge list DataFrame to validate
    source_col : str, default "source"
        Name of the first endpoint column
    target_col : str, default "target"
        Name of the second endpoint column
    weight_col : str, optional
        Name of the edge weight column (if present)
    allow_self_loops : bool, default True
        Whether rows joining a node to itself are accepted

    Raises
    ------
    ValidationError
        If the DataFrame fails any check

    Examples
    --------
    >>> df = pl.DataFrame({
    ...     "source": ["A", "B", "C"],
    ...     "target": ["B", "C", "A"],
    ...     "weight": [1.0, 2.0, 1.5]
    ... })
    >>> validate_edgelist_dataframe(df, weight_col="weight")

    Notes
    -----
    Edge direction carries no meaning here; ``source``/``target`` only name
    the two endpoint columns. An empty DataFrame is valid and yields an
    empty graph.
    """
    required_cols = [source_col, target_col]
    all_required_cols = required_cols + ([weight_col] if weight_col is not None else [])

    missing_cols = [col for col in all_required_cols if col not in df.columns]
    if missing_cols:
        raise ValidationError(
            f"Missing required columns: {missing_cols}",
            field="columns",
            details={"available_columns": df.columns, "missing": missing_cols}
        )

    if df.is_empty():
        return

    for col in required_cols:
        null_count = df[col].null_count()
        if null_count > 0:
            raise ValidationError(
                f"Column contains {null_count} null values",
                field=col,
                details={"null_count": null_count, "total_rows": len(df)}
            )

    if weight_col is not None:
        weight_series = df[weight_col]

        if not weight_series.dtype.is_numeric():
            raise ValidationError(
                f"Weight column must be numeric, got {weight_series.dtype}",
                field=weight_col,
                details={"dtype": str(weight_series.dtype)}
            )

        null_count = weight_series.null_count()
        if null_count > 0:
            warnings.warn(
                f"Weight column contains {null_count} null values. "
                "These edges will be given zero weight."
            )

        non_null_weights = weight_series.drop_nulls()
        if len(non_null_weights) > 0:
            min_weight = non_null_weights.min()
            if min_weight < 0:
                negative_count = int((non_null_weights < 0).sum())
                raise ValidationError(
                    f"Weight column contains {negative_count} negative values. "
                    f"Minimum weight: {min_weight}",
                    field=weight_col,
                    details={"min_weight": min_weight, "negative_count": negative_count}
                )

    if not allow_self_loops:
        self_loop_count = int((df[source_col] == df[target_col]).sum())
        if self_loop_count > 0:
            raise ValidationError(
                f"Found {self_loop_count} self-loops (edges from node to itself)",
                field="edges",
                details={"self_loop_count": self_loop_count, "allow_self_loops": False}
            )


def validate_graph_argument(graph: Any, engine: str) -> None:
    """
    Check that an engine received a usable graph.

    Parameters
    ----------
    graph : Any
        Object passed to the engine constructor
    engine : str
        Engine name, used in the error message

    Raises
    ------
    ValidationError
        If graph is None or not a WeightedGraph
    """
    # Imported here to keep common free of a module-level dependency on network
    from ..network.graph import WeightedGraph

    if graph is None:
        raise ValidationError(
            f"{engine} requires a graph, got None",
            field="graph",
            expected="WeightedGraph"
        )

    if not isinstance(graph, WeightedGraph):
        raise ValidationError(
            f"{engine} requires a WeightedGraph, got {type(graph).__name__}",
            field="graph",
            expected="WeightedGraph"
        )
