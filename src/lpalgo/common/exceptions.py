"""
Custom exception hierarchy for the lpalgo community detection library.

Graph queries in this library are total functions: asking about an unknown
node returns an empty collection or zero. The exceptions below are reserved
for structural misuse (an engine built without a graph, a percolation order
below two) and for failures while building graphs from external data.
"""

from typing import Dict, Any, Optional, List, Union
import traceback


class NetworkAnalysisError(Exception):
    """
    Base exception for all lpalgo errors.

    Every library-specific exception inherits from this class so callers can
    catch all of them with a single except clause.

    Parameters
    ----------
    message : str
        Human-readable error message describing what went wrong
    details : Dict[str, Any], optional
        Structured information about the error for debugging or
        programmatic handling
    cause : Exception, optional
        The underlying exception that caused this error
    context : Dict[str, Any], optional
        Information about the operation that failed

    Examples
    --------
    >>> raise NetworkAnalysisError("Clique enumeration failed")
    >>> raise NetworkAnalysisError(
    ...     "Graph has no weight",
    ...     details={"nodes": 4, "edges": 0}
    ... )
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        context: Optional[Dict[str, Any]] = None
    ) -> None:
        self.message = message
        self.details = details or {}
        self.cause = cause
        self.context = context or {}

        full_message = message

        if self.details:
            detail_parts = []
            for key, value in self.details.items():
                if isinstance(value, (list, dict, set)) and len(str(value)) > 100:
                    # Long collections are summarized
                    detail_parts.append(f"{key}=<{type(value).__name__} with {len(value)} items>")
                else:
                    detail_parts.append(f"{key}={value}")

            if detail_parts:
                full_message += f" (Details: {', '.join(detail_parts)})"

        if self.context:
            context_parts = [f"{k}={v}" for k, v in self.context.items()]
            if context_parts:
                full_message += f" (Context: {', '.join(context_parts)})"

        super().__init__(full_message)

        if cause is not None:
            self.__cause__ = cause

    def add_context(self, **kwargs: Any) -> 'NetworkAnalysisError':
        """
        Add context to the exception and return it for chaining.

        Examples
        --------
        >>> error = NetworkAnalysisError("Failed")
        >>> error.add_context(engine="louvain", phase=2)
        """
        self.context.update(kwargs)
        return self

    def get_debug_info(self) -> Dict[str, Any]:
        """
        Get all available information about the error as a dictionary.
        """
        return {
            "exception_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
            "context": self.context,
            "cause": str(self.cause) if self.cause else None,
            "traceback": traceback.format_exc() if hasattr(self, '__traceback__') else None
        }


class ValidationError(NetworkAnalysisError):
    """
    Exception raised for invalid inputs.

    Raised when an engine is constructed without a usable graph, or when
    edge list data cannot be turned into a graph.

    Parameters
    ----------
    message : str
        Error message explaining the validation failure
    field : str, optional
        Name of the argument or column that failed validation
    value : Any, optional
        The invalid value
    expected : str, optional
        Description of what was expected
    details : Dict[str, Any], optional
        Additional details about the failure

    Examples
    --------
    >>> raise ValidationError("Engine requires a graph", field="graph")
    >>> raise ValidationError(
    ...     "Weight column contains negative values",
    ...     field="weight",
    ...     expected="non-negative numbers"
    ... )
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        expected: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        **kwargs
    ) -> None:
        self.field = field
        self.value = value
        self.expected = expected

        enhanced_details = details or {}
        if field is not None:
            enhanced_details["field"] = field
        if value is not None:
            enhanced_details["invalid_value"] = value
        if expected is not None:
            enhanced_details["expected"] = expected

        if field:
            enhanced_message = f"Validation error in field '{field}': {message}"
        else:
            enhanced_message = f"Validation error: {message}"

        super().__init__(enhanced_message, details=enhanced_details, **kwargs)


class GraphConstructionError(NetworkAnalysisError):
    """
    Exception raised while building or converting a graph.

    Parameters
    ----------
    message : str
        Description of the construction error
    graph_type : str, optional
        Kind of graph being produced (e.g. "weighted", "networkit")
    node_count : int, optional
        Number of nodes when the error occurred
    edge_count : int, optional
        Number of edges processed when the error occurred
    operation : str, optional
        Operation that failed (e.g. "add_edges", "to_networkit")

    Examples
    --------
    >>> raise GraphConstructionError(
    ...     "Failed to export graph",
    ...     graph_type="networkit",
    ...     operation="to_networkit"
    ... )
    """

    def __init__(
        self,
        message: str,
        graph_type: Optional[str] = None,
        node_count: Optional[int] = None,
        edge_count: Optional[int] = None,
        operation: Optional[str] = None,
        **kwargs
    ) -> None:
        self.graph_type = graph_type
        self.node_count = node_count
        self.edge_count = edge_count
        self.operation = operation

        context = {}
        if graph_type:
            context["graph_type"] = graph_type
        if node_count is not None:
            context["node_count"] = node_count
        if edge_count is not None:
            context["edge_count"] = edge_count
        if operation:
            context["operation"] = operation

        super().__init__(message, context=context, **kwargs)


class ConfigurationError(NetworkAnalysisError):
    """
    Exception raised for invalid parameter values.

    Parameters
    ----------
    message : str
        Description of the configuration error
    parameter : str, optional
        Name of the problematic parameter
    value : Any, optional
        The invalid parameter value
    valid_options : List[Any], optional
        Valid options for the parameter
    function : str, optional
        Name of the function where the error occurred

    Examples
    --------
    >>> raise ConfigurationError(
    ...     "Percolation order must be at least 2",
    ...     parameter="k",
    ...     value=1
    ... )
    >>> raise ConfigurationError(
    ...     "Unknown algorithm",
    ...     parameter="algorithm",
    ...     value="walktrap",
    ...     valid_options=["louvain", "girvan_newman"]
    ... )
    """

    def __init__(
        self,
        message: str,
        parameter: Optional[str] = None,
        value: Optional[Any] = None,
        valid_options: Optional[List[Any]] = None,
        function: Optional[str] = None,
        **kwargs
    ) -> None:
        self.parameter = parameter
        self.value = value
        self.valid_options = valid_options
        self.function = function

        details = kwargs.get('details', {})
        if parameter:
            details["parameter"] = parameter
        if value is not None:
            details["invalid_value"] = value
        if valid_options:
            details["valid_options"] = valid_options
        if function:
            details["function"] = function

        enhanced_message = message
        if parameter and valid_options:
            enhanced_message += f". Valid options for '{parameter}': {valid_options}"

        kwargs["details"] = details
        super().__init__(enhanced_message, **kwargs)


class ComputationError(NetworkAnalysisError):
    """
    Exception raised when an algorithm run fails unexpectedly.

    Parameters
    ----------
    message : str
        Description of the computational error
    operation : str, optional
        The operation that failed
    error_type : str, optional
        Kind of failure (e.g. "algorithm_failure", "numerical")
    resource_info : Dict[str, Any], optional
        Graph size or similar information at failure time

    Examples
    --------
    >>> raise ComputationError(
    ...     "Community detection failed",
    ...     operation="detect_communities",
    ...     error_type="algorithm_failure",
    ...     resource_info={"nodes": 1000}
    ... )
    """

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        error_type: Optional[str] = None,
        resource_info: Optional[Dict[str, Any]] = None,
        **kwargs
    ) -> None:
        self.operation = operation
        self.error_type = error_type
        self.resource_info = resource_info or {}

        context = kwargs.get('context', {})
        if operation:
            context["operation"] = operation
        if error_type:
            context["error_type"] = error_type

        details = kwargs.get('details', {})
        details.update(self.resource_info)

        kwargs["details"] = details
        kwargs["context"] = context

        super().__init__(message, **kwargs)


class DataFormatError(ValidationError):
    """
    Exception raised when edge list input cannot be read or parsed.

    Parameters
    ----------
    message : str
        Description of the format error
    format_type : str, optional
        Expected format (e.g. "CSV", "DataFrame")
    file_path : str, optional
        Path to the problematic file
    line_number : int, optional
        Line number where the error occurred

    Examples
    --------
    >>> raise DataFormatError(
    ...     "Edge list file not found",
    ...     format_type="CSV",
    ...     file_path="/data/edges.csv"
    ... )
    """

    def __init__(
        self,
        message: str,
        format_type: Optional[str] = None,
        file_path: Optional[str] = None,
        line_number: Optional[int] = None,
        **kwargs
    ) -> None:
        details = kwargs.get('details', {})

        if format_type:
            details["format_type"] = format_type
        if file_path:
            details["file_path"] = file_path
        if line_number is not None:
            details["line_number"] = line_number

        kwargs["details"] = details
        super().__init__(message, **kwargs)


# Convenience functions for common error patterns

def validate_parameter(
    value: Any,
    valid_options: List[Any],
    parameter_name: str,
    function_name: Optional[str] = None
) -> None:
    """
    Validate that a parameter value is one of the valid options.

    Raises
    ------
    ConfigurationError
        If value is not in valid_options
    """
    if value not in valid_options:
        raise ConfigurationError(
            f"Invalid value for parameter '{parameter_name}': {value}",
            parameter=parameter_name,
            value=value,
            valid_options=valid_options,
            function=function_name
        )


def require_positive(
    value: Union[int, float],
    parameter_name: str,
    allow_zero: bool = False
) -> None:
    """
    Validate that a numeric parameter is positive.

    Parameters
    ----------
    value : Union[int, float]
        The numeric value to validate
    parameter_name : str
        Name of the parameter
    allow_zero : bool, default False
        Whether zero is accepted

    Raises
    ------
    ConfigurationError
        If value is not positive (or negative when allow_zero=True)
    """
    if allow_zero and value < 0:
        raise ConfigurationError(
            f"Parameter '{parameter_name}' must be non-negative, got {value}",
            parameter=parameter_name,
            value=value
        )
    elif not allow_zero and value <= 0:
        raise ConfigurationError(
            f"Parameter '{parameter_name}' must be positive, got {value}",
            parameter=parameter_name,
            value=value
        )
