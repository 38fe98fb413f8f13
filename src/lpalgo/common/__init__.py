"""
Common utilities for the lpalgo library.

This module provides shared functionality used across all other modules:
- Custom exception hierarchy
- Logging configuration
- ID mapping between original and internal integer IDs
- Input validation for edge lists and engine arguments
"""

# Exception hierarchy - available for import throughout the library
from .exceptions import (
    NetworkAnalysisError,
    ValidationError,
    GraphConstructionError,
    ConfigurationError,
    ComputationError,
    DataFormatError,
    validate_parameter,
    require_positive
)

# Core utilities
from .id_mapper import IDMapper
from .validators import (
    validate_edgelist_dataframe,
    validate_graph_argument
)

# Logging configuration
from .logging_config import (
    setup_logging,
    get_logger,
    configure_external_library_logging,
    log_function_entry,
    log_performance_metric,
    LoggingTimer,
    JSONFormatter,
    PerformanceFilter
)
