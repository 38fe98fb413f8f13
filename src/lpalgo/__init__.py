"""
lpalgo - Community detection on weighted undirected graphs.

This package finds community structure with four independent methods:
Louvain modularity optimization, Girvan-Newman edge removal, label
propagation and overlapping clique percolation. Every method is available
as a step-wise engine and through a single DataFrame-returning facade.

Modules:
    common: Exceptions, logging, ID mapping and input validation
    network: The WeightedGraph, graph construction and the detection facade
    algorithms: The community detection engines
"""

__version__ = "0.1.0"

from .common.exceptions import (
    NetworkAnalysisError,
    ValidationError,
    GraphConstructionError,
    ConfigurationError,
    ComputationError,
    DataFormatError
)
from .common.id_mapper import IDMapper
from .network.graph import WeightedGraph
from .network.construction import build_graph_from_edgelist, to_networkit, get_graph_info
from .network.communities import (
    AVAILABLE_ALGORITHMS,
    detect_communities,
    get_community_summary,
    compare_partitions
)
from .algorithms import (
    CliqueEngine,
    LouvainEngine,
    GirvanNewmanEngine,
    LabelPropagationEngine,
    PartitionRecord
)

__all__ = [
    "NetworkAnalysisError",
    "ValidationError",
    "GraphConstructionError",
    "ConfigurationError",
    "ComputationError",
    "DataFormatError",
    "IDMapper",
    "WeightedGraph",
    "build_graph_from_edgelist",
    "to_networkit",
    "get_graph_info",
    "AVAILABLE_ALGORITHMS",
    "detect_communities",
    "get_community_summary",
    "compare_partitions",
    "CliqueEngine",
    "LouvainEngine",
    "GirvanNewmanEngine",
    "LabelPropagationEngine",
    "PartitionRecord",
]
