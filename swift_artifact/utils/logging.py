"""
Logging utilities for swift-artifact.

Provides structured logging with entry/exit decorators, JSON formatting and a
per-run identifier, so every record emitted during one plugin invocation can
be grouped together in CI log collectors.

Features:
    - Structured JSON logging when LOG_FORMAT=json
    - Run ID tracking across a single upload run
    - Entry/exit decorators with timing
    - Colorized console output for interactive use

Example usage:
    >>> from swift_artifact.utils.logging import get_logger, set_run_id
    >>>
    >>> logger = get_logger(__name__)
    >>> set_run_id("build-42")
    >>> logger.info("Uploading file", extra={"source": "dist/app.tar.gz"})
"""

import logging
import functools
import json
import os
import uuid
from typing import Any, Callable, TypeVar, cast, Optional, Dict
from datetime import datetime, timezone
from contextvars import ContextVar

import coloredlogs

# Type variable for generic decorator typing
F = TypeVar("F", bound=Callable[..., Any])

# Run ID shared by every record of one invocation
_run_id: ContextVar[Optional[str]] = ContextVar("run_id", default=None)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Attributes present on every LogRecord; anything else came from `extra=`
_RESERVED_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime"}


# ============================================================================
# Run ID Management
# ============================================================================

def get_run_id() -> str:
    """
    Get current run ID or generate a new one.

    Returns:
        Current run ID (generates UUID if not set)
    """
    run_id = _run_id.get()
    if run_id is None:
        run_id = str(uuid.uuid4())
        _run_id.set(run_id)
    return run_id


def set_run_id(run_id: str) -> None:
    """
    Set run ID for current context.

    Args:
        run_id: Identifier attached to every subsequent log record
    """
    _run_id.set(run_id)


def clear_run_id() -> None:
    """Clear run ID for current context."""
    _run_id.set(None)


# ============================================================================
# JSON Formatter
# ============================================================================

class JSONFormatter(logging.Formatter):
    """
    JSON log formatter for structured logging.

    Outputs one JSON object per record with standard fields and every field
    passed through ``extra=``.

    Example output:
        {
            "timestamp": "2026-01-04T10:30:15.123456Z",
            "level": "INFO",
            "logger": "swift_artifact.uploader.uploader",
            "message": "Uploading file",
            "run_id": "build-42",
            "extra": {"source": "dist/app.tar.gz", "container": "releases"}
        }
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "run_id": get_run_id(),
        }

        log_data["source"] = {
            "file": record.pathname,
            "line": record.lineno,
            "function": record.funcName,
        }

        extra_fields = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RESERVED_ATTRS
        }
        if extra_fields:
            log_data["extra"] = extra_fields

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info),
            }

        # CI runners expose these; empty outside of a build
        log_data["environment"] = {
            "hostname": os.getenv("HOSTNAME", "unknown"),
            "build_number": os.getenv("DRONE_BUILD_NUMBER", ""),
            "repo": os.getenv("DRONE_REPO", ""),
        }

        return json.dumps(log_data, default=str)


def setup_logging(
    level: str = "INFO",
    enable_colors: bool = True,
    json_format: Optional[bool] = None,
) -> None:
    """
    Configure global logging settings for the application.

    Sets up structured JSON logging for machine consumption or colorized text
    for humans. When ``json_format`` is None the LOG_FORMAT environment
    variable decides.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        enable_colors: Whether to enable colorized console output
        json_format: Force JSON (True) or text (False) output

    Example:
        >>> os.environ["LOG_FORMAT"] = "json"
        >>> setup_logging(level="INFO")
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    if json_format is None:
        json_format = os.getenv("LOG_FORMAT", "text").lower() == "json"

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove existing handlers to avoid duplicates
    root_logger.handlers.clear()

    if json_format:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_level)
        console_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(console_handler)
    else:
        coloredlogs.install(
            level=log_level,
            fmt=LOG_FORMAT,
            datefmt=LOG_DATE_FORMAT,
            logger=root_logger,
            isatty=None if enable_colors else False,
        )

    # swiftclient logs full request/response dumps at INFO
    logging.getLogger("swiftclient").setLevel(max(log_level, logging.WARNING))


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the specified name.

    Args:
        name: Logger name (typically __name__ of the calling module)

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)


def log_function_call(func: F) -> F:
    """
    Decorator that logs function entry and exit at DEBUG level.

    - Logs function entry with all parameter values
    - Logs function exit with return value and execution time
    - Logs exceptions with full traceback and re-raises them

    Only decorate functions whose arguments are safe to print; credentials
    must never pass through a decorated call.

    Args:
        func: Function to be decorated

    Returns:
        Wrapped function with logging

    Example:
        >>> @log_function_call
        >>> def build_target(local_path: str, target: str) -> str:
        >>>     ...
        >>>
        >>> # 2026-01-04 10:30:15 - module - DEBUG - ENTER build_target(...)
        >>> # 2026-01-04 10:30:15 - module - DEBUG - EXIT build_target -> '...' (0.00s)
    """
    logger = get_logger(func.__module__)

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        run_id = get_run_id()

        arg_names = func.__code__.co_varnames[: func.__code__.co_argcount]
        args_repr = [f"{name}={value!r}" for name, value in zip(arg_names, args)]
        kwargs_repr = [f"{key}={value!r}" for key, value in kwargs.items()]
        all_args = ", ".join(args_repr + kwargs_repr)

        logger.debug(
            f"ENTER {func.__name__}({all_args})",
            extra={
                "function": func.__name__,
                "arguments": all_args,
                "run_id": run_id,
                "event": "function_entry",
            },
        )

        start_time = datetime.now()

        try:
            result = func(*args, **kwargs)

            execution_time = (datetime.now() - start_time).total_seconds()
            logger.debug(
                f"EXIT {func.__name__} -> {result!r} ({execution_time:.2f}s)",
                extra={
                    "function": func.__name__,
                    "duration_seconds": execution_time,
                    "return_value": repr(result),
                    "run_id": run_id,
                    "event": "function_exit",
                    "status": "success",
                },
            )

            return result

        except Exception as error:
            execution_time = (datetime.now() - start_time).total_seconds()
            logger.debug(
                f"ERROR {func.__name__} raised {type(error).__name__}: {error}",
                extra={
                    "function": func.__name__,
                    "duration_seconds": execution_time,
                    "run_id": run_id,
                    "event": "function_error",
                    "status": "error",
                    "error_type": type(error).__name__,
                    "error_message": str(error),
                },
                exc_info=True,
            )
            raise

    return cast(F, wrapper)
