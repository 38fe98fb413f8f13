"""
Logging configuration for the lpalgo library.

All modules obtain their logger through :func:`get_logger` with ``__name__``,
so every logger lives below the ``"lpalgo"`` root configured here. The
configuration can be driven by arguments or by ``LPALGO_LOG_*`` environment
variables, with arguments taking precedence.
"""

import logging
import logging.handlers
import os
import sys
import time
from pathlib import Path
from typing import Optional, Dict, Any
from datetime import datetime
import json


# Default configuration constants
ROOT_LOGGER_NAME = "lpalgo"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s.%(funcName)s:%(lineno)d | %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_LOG_FILE_NAME = "lpalgo.log"
DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB
DEFAULT_BACKUP_COUNT = 5

# Environment variable names
ENV_LOG_LEVEL = "LPALGO_LOG_LEVEL"
ENV_LOG_FILE = "LPALGO_LOG_FILE"
ENV_LOG_DIR = "LPALGO_LOG_DIR"
ENV_LOG_FORMAT = "LPALGO_LOG_FORMAT"
ENV_LOG_CONSOLE = "LPALGO_LOG_CONSOLE"
ENV_LOG_JSON = "LPALGO_LOG_JSON"
ENV_LOG_PERFORMANCE = "LPALGO_LOG_PERFORMANCE"


class PerformanceFilter(logging.Filter):
    """
    Filter that passes only performance-related records.

    Used to route timing output (see :class:`LoggingTimer`) to a separate
    handler when benchmarking the engines.
    """

    PERFORMANCE_KEYWORDS = (
        "performance", "timing", "duration", "elapsed", "benchmark",
        "memory", "cpu", "profiling", "metrics"
    )

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage().lower()
        return any(keyword in message for keyword in self.PERFORMANCE_KEYWORDS)


class JSONFormatter(logging.Formatter):
    """
    Formatter that renders each record as one JSON object.
    """

    _STANDARD_ATTRIBUTES = {
        "name", "msg", "args", "levelname", "levelno", "pathname",
        "filename", "module", "lineno", "funcName", "created",
        "msecs", "relativeCreated", "thread", "threadName",
        "processName", "process", "getMessage", "exc_info", "exc_text",
        "stack_info", "message", "taskName"
    }

    def format(self, record: logging.LogRecord) -> str:
        log_obj = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        # Fields passed through ``extra=``
        for key, value in record.__dict__.items():
            if key not in self._STANDARD_ATTRIBUTES:
                log_obj[key] = value

        return json.dumps(log_obj, default=str)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the given name.

    Parameters
    ----------
    name : str
        The name for the logger (typically ``__name__``)

    Returns
    -------
    logging.Logger
        Logger that inherits the handlers installed by :func:`setup_logging`

    Examples
    --------
    >>> logger = get_logger(__name__)
    >>> logger.debug("Pass moved %d nodes", 12)
    """
    return logging.getLogger(name)


def setup_logging(
    level: Optional[str] = None,
    log_file: Optional[str] = None,
    log_dir: Optional[str] = None,
    console: Optional[bool] = None,
    json_format: Optional[bool] = None,
    performance_logging: Optional[bool] = None,
    format_string: Optional[str] = None,
    date_format: Optional[str] = None,
    max_file_size: Optional[int] = None,
    backup_count: Optional[int] = None,
    force_setup: bool = False
) -> logging.Logger:
    """
    Set up logging for the lpalgo library.

    Parameters
    ----------
    level : str, optional
        Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL). Falls back to
        ``LPALGO_LOG_LEVEL`` and then INFO.
    log_file : str, optional
        Path to a log file. Falls back to ``LPALGO_LOG_FILE``.
    log_dir : str, optional
        Directory for ``lpalgo.log`` when no explicit file is given. Falls
        back to ``LPALGO_LOG_DIR``. Without a file or directory only console
        output is configured.
    console : bool, optional
        Enable console output. Falls back to ``LPALGO_LOG_CONSOLE``, default True.
    json_format : bool, optional
        Use :class:`JSONFormatter`. Falls back to ``LPALGO_LOG_JSON``, default False.
    performance_logging : bool, optional
        Attach :class:`PerformanceFilter` to the ``lpalgo.performance`` logger.
        Falls back to ``LPALGO_LOG_PERFORMANCE``, default False.
    format_string : str, optional
        Format string for plain-text output. Falls back to ``LPALGO_LOG_FORMAT``.
    date_format : str, optional
        Timestamp format.
    max_file_size : int, optional
        Size in bytes before a log file is rotated. Defaults to 10MB.
    backup_count : int, optional
        Number of rotated files to keep. Defaults to 5.
    force_setup : bool, default False
        Reconfigure even if handlers are already installed.

    Returns
    -------
    logging.Logger
        The configured ``"lpalgo"`` root logger

    Raises
    ------
    ValueError
        If an invalid logging level is specified

    Examples
    --------
    >>> logger = setup_logging(level="DEBUG")
    >>> logger = setup_logging(log_dir="/var/log/lpalgo", json_format=True,
    ...                        console=False, force_setup=True)
    """
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)

    if not force_setup and root_logger.handlers:
        return root_logger

    if force_setup:
        for handler in list(root_logger.handlers):
            handler.close()
        root_logger.handlers.clear()

    config = _resolve_logging_config(
        level=level,
        log_file=log_file,
        log_dir=log_dir,
        console=console,
        json_format=json_format,
        performance_logging=performance_logging,
        format_string=format_string,
        date_format=date_format,
        max_file_size=max_file_size,
        backup_count=backup_count
    )

    log_level = getattr(logging, str(config["level"]).upper(), None)
    if not isinstance(log_level, int):
        raise ValueError(f"Invalid logging level: {config['level']}")
    root_logger.setLevel(log_level)

    if config["json_format"]:
        formatter: logging.Formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(
            fmt=config["format_string"],
            datefmt=config["date_format"]
        )

    if config["console"]:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    log_path = None
    if config["log_file"]:
        log_path = Path(config["log_file"])
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            filename=str(log_path),
            maxBytes=config["max_file_size"],
            backupCount=config["backup_count"],
            encoding="utf-8"
        )
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    if config["performance_logging"]:
        perf_filter = PerformanceFilter()
        perf_logger = logging.getLogger(f"{ROOT_LOGGER_NAME}.performance")
        perf_logger.addFilter(perf_filter)

        if log_path is not None:
            perf_handler = logging.handlers.RotatingFileHandler(
                filename=str(log_path.parent / "performance.log"),
                maxBytes=config["max_file_size"],
                backupCount=config["backup_count"],
                encoding="utf-8"
            )
            perf_handler.setFormatter(formatter)
            perf_handler.addFilter(perf_filter)
            perf_logger.addHandler(perf_handler)

    root_logger.propagate = False

    root_logger.info(
        "Logging configured: level=%s, console=%s, file=%s, json=%s",
        config["level"], config["console"],
        config["log_file"] or "None", config["json_format"]
    )

    return root_logger


def _resolve_logging_config(**kwargs) -> Dict[str, Any]:
    """
    Resolve logging configuration from parameters and environment variables.

    Parameters take precedence over environment variables, which take
    precedence over defaults.
    """
    def _get_bool_env(env_var: str, default: bool) -> bool:
        value = os.getenv(env_var, "").lower()
        if value in ("true", "yes", "1", "on"):
            return True
        elif value in ("false", "no", "0", "off"):
            return False
        return default

    level = kwargs.get("level") or os.getenv(ENV_LOG_LEVEL, DEFAULT_LOG_LEVEL)

    log_dir = kwargs.get("log_dir") or os.getenv(ENV_LOG_DIR)
    log_file = kwargs.get("log_file") or os.getenv(ENV_LOG_FILE)

    if not log_file and log_dir:
        log_file = os.path.join(log_dir, DEFAULT_LOG_FILE_NAME)

    console = kwargs.get("console")
    if console is None:
        console = _get_bool_env(ENV_LOG_CONSOLE, True)

    json_format = kwargs.get("json_format")
    if json_format is None:
        json_format = _get_bool_env(ENV_LOG_JSON, False)

    performance_logging = kwargs.get("performance_logging")
    if performance_logging is None:
        performance_logging = _get_bool_env(ENV_LOG_PERFORMANCE, False)

    format_string = (
        kwargs.get("format_string") or
        os.getenv(ENV_LOG_FORMAT, DEFAULT_LOG_FORMAT)
    )

    return {
        "level": level,
        "log_file": log_file,
        "console": console,
        "json_format": json_format,
        "performance_logging": performance_logging,
        "format_string": format_string,
        "date_format": kwargs.get("date_format") or DEFAULT_DATE_FORMAT,
        "max_file_size": kwargs.get("max_file_size") or DEFAULT_MAX_FILE_SIZE,
        "backup_count": kwargs.get("backup_count") or DEFAULT_BACKUP_COUNT,
    }


def configure_external_library_logging(
    libraries: Optional[Dict[str, str]] = None
) -> None:
    """
    Quiet the loggers of third-party libraries used alongside lpalgo.

    Parameters
    ----------
    libraries : Dict[str, str], optional
        Mapping of library logger name to level name. Defaults cover
        NetworkIt, Polars, scikit-learn and NumPy.

    Examples
    --------
    >>> configure_external_library_logging({"networkit": "ERROR"})
    """
    config = libraries or {
        "networkit": "WARNING",
        "polars": "WARNING",
        "sklearn": "WARNING",
        "numpy": "WARNING",
    }

    for library_name, level in config.items():
        library_level = getattr(logging, level.upper(), None)
        if not isinstance(library_level, int):
            # Unknown level names are ignored
            continue
        logging.getLogger(library_name).setLevel(library_level)


def log_function_entry(func_name: str, **kwargs) -> None:
    """
    Log function entry with parameters at DEBUG level.

    Examples
    --------
    >>> log_function_entry("detect_communities", algorithm="louvain")
    """
    logger = get_logger(f"{ROOT_LOGGER_NAME}.debug")
    if logger.isEnabledFor(logging.DEBUG):
        param_str = ", ".join([f"{k}={v}" for k, v in kwargs.items()])
        logger.debug("Entering %s(%s)", func_name, param_str)


def log_performance_metric(
    operation: str,
    duration: float,
    details: Optional[Dict[str, Any]] = None
) -> None:
    """
    Log how long an operation took.

    Parameters
    ----------
    operation : str
        Name of the operation that was timed
    duration : float
        Duration in seconds
    details : Dict[str, Any], optional
        Extra information such as node or edge counts
    """
    logger = get_logger(f"{ROOT_LOGGER_NAME}.performance")

    message = f"Performance: {operation} completed in {duration:.3f}s"

    if details:
        detail_str = ", ".join([f"{k}={v}" for k, v in details.items()])
        message += f" ({detail_str})"

    logger.info(message, extra={"operation": operation, "duration": duration, **(details or {})})


class LoggingTimer:
    """
    Context manager that times a block and logs the duration.

    Examples
    --------
    >>> with LoggingTimer("edge_betweenness", {"edges": 120}):
    ...     pass
    """

    def __init__(self, operation: str, details: Optional[Dict[str, Any]] = None):
        self.operation = operation
        self.details = details or {}
        self.start_time: Optional[float] = None
        self.duration: Optional[float] = None

    def __enter__(self) -> "LoggingTimer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self.start_time is not None:
            self.duration = time.perf_counter() - self.start_time
            log_performance_metric(self.operation, self.duration, self.details)
