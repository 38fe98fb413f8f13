"""
Network representation, construction and community detection.

This module provides:
- The WeightedGraph used by every engine
- Graph construction from edge lists and export to NetworkIt
- A community detection facade returning Polars DataFrames
"""

# Graph representation
from .graph import WeightedGraph

# Network construction functions
from .construction import (
    build_graph_from_edgelist,
    to_networkit,
    get_graph_info
)

# Community detection functions
from .communities import (
    AVAILABLE_ALGORITHMS,
    detect_communities,
    get_community_summary,
    partition_to_membership,
    membership_to_partition,
    compare_partitions
)
