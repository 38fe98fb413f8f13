"""
Community detection engines.

Each engine owns its state and advances one discrete step per call:
- CliqueEngine: Bron-Kerbosch maximal cliques and clique percolation
- LouvainEngine: local moving passes and graph aggregation
- GirvanNewmanEngine: removal of the highest-betweenness edge
- LabelPropagationEngine: synchronous label propagation iterations
"""

# Shared partition helpers
from .modularity import (
    Partition,
    connected_components,
    modularity,
    partition_from_assignment,
    resolve_random_source
)

# Engines
from .cliques import CliqueEngine
from .louvain import LouvainEngine
from .girvan_newman import GirvanNewmanEngine, PartitionRecord
from .label_propagation import LabelPropagationEngine
