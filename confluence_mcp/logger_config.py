"""Logging setup for the Confluence MCP server.

Two loggers are configured here:
- mcp_call_logger: one line per tool call with arguments and result
- error_logger: JSON structured error records (StructuredLogFormatter)

Both write to rotating files. Nothing is written to stdout, which carries the
protocol frames when the server runs over the stdio transport.
"""

import datetime
import functools
import json
import logging
import os
import traceback
from enum import Enum
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

from .metrics_config import record_tool_call_error
from .metrics_config import record_tool_call_start
from .metrics_config import record_tool_call_success

_MAX_LOG_BYTES = 10 * 1024 * 1024  # 10MB
_LOG_BACKUP_COUNT = 5

# Attributes present on every LogRecord; anything else came in through `extra`.
_STANDARD_RECORD_FIELDS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime", "taskName"}


def _log_directory() -> Path:
    log_dir = os.environ.get("CONFLUENCE_MCP_LOG_DIR")
    path = Path(log_dir) if log_dir else Path(__file__).resolve().parent
    path.mkdir(parents=True, exist_ok=True)
    return path


class ErrorCategory(Enum):
    """Severity classification for structured error records."""

    CRITICAL = "CRITICAL"
    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"


_CATEGORY_LEVELS = {
    ErrorCategory.CRITICAL: logging.CRITICAL,
    ErrorCategory.ERROR: logging.ERROR,
    ErrorCategory.WARNING: logging.WARNING,
    ErrorCategory.INFO: logging.INFO,
}


class StructuredLogFormatter(logging.Formatter):
    """Render log records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": datetime.datetime.fromtimestamp(
                record.created, tz=datetime.timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "line": record.lineno,
        }

        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc_value, exc_tb = record.exc_info
            log_entry["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc_value),
                "traceback": traceback.format_exception(exc_type, exc_value, exc_tb),
            }

        for key, value in record.__dict__.items():
            if key not in _STANDARD_RECORD_FIELDS and not key.startswith("_"):
                log_entry[key] = value

        return json.dumps(log_entry, default=str)


# --- Logging Setup ---
mcp_call_logger = logging.getLogger("mcp_call_logger")
mcp_call_logger.setLevel(logging.INFO)

file_handler = RotatingFileHandler(
    _log_directory() / "mcp_calls.log", maxBytes=_MAX_LOG_BYTES, backupCount=_LOG_BACKUP_COUNT
)
file_handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
mcp_call_logger.addHandler(file_handler)
mcp_call_logger.propagate = False

error_logger = logging.getLogger("error_logger")
error_logger.setLevel(logging.INFO)

error_file_handler = RotatingFileHandler(
    _log_directory() / "errors.log", maxBytes=_MAX_LOG_BYTES, backupCount=_LOG_BACKUP_COUNT
)
error_file_handler.setFormatter(StructuredLogFormatter())
error_logger.addHandler(error_file_handler)
error_logger.propagate = False


def log_structured_error(
    category: ErrorCategory,
    message: str,
    exception: Exception | None = None,
    context: dict[str, Any] | None = None,
    operation: str | None = None,
    **fields: Any,
) -> None:
    """Write one structured error record to the error log.

    `context` and any extra keyword fields become top-level keys of the JSON
    record, next to `error_category` and `operation`.
    """
    extra: dict[str, Any] = {"error_category": category.value}
    if operation:
        extra["operation"] = operation
    if context:
        extra.update(context)
    extra.update(fields)
    if exception is not None:
        extra.setdefault("error_type", type(exception).__name__)

    error_logger.log(
        _CATEGORY_LEVELS[category],
        message,
        exc_info=exception is not None,
        extra=extra,
    )


def safe_operation(
    operation_name: str,
    func,
    *args,
    error_category: ErrorCategory = ErrorCategory.ERROR,
    **kwargs,
) -> tuple[bool, Any, Exception | None]:
    """Run `func` and return (success, result, error) instead of raising."""
    try:
        return True, func(*args, **kwargs), None
    except Exception as e:
        log_structured_error(
            category=error_category,
            message=f"Operation {operation_name} failed: {e}",
            exception=e,
            operation=operation_name,
        )
        return False, None, e


def _describe(value: Any) -> str:
    if hasattr(value, "model_dump_json"):
        return value.model_dump_json(indent=None, exclude_none=True)
    if isinstance(value, str) and len(value) > 500:
        return repr(value[:500] + "...")
    return repr(value)


# --- Decorator for Logging MCP Calls with Metrics ---
def log_mcp_call(func):
    """Log entry, result and failure of a tool function, and feed call metrics."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        func_name = getattr(func, "__name__", "unknown_function")

        start_time = None
        try:
            start_time = record_tool_call_start(func_name, args, kwargs)
        except Exception as e:
            mcp_call_logger.warning(f"Metrics recording failed for {func_name}: {e}")

        try:
            logged_args = [_describe(arg) for arg in args]
            logged_kwargs = {k: _describe(v) for k, v in kwargs.items()}
            arg_str = f"args={logged_args}, kwargs={logged_kwargs}"
        except Exception as e:
            arg_str = f"args/kwargs logging error: {e}"

        mcp_call_logger.info(f"Calling tool: {func_name} with {arg_str}")
        try:
            result = func(*args, **kwargs)
        except Exception as e:
            try:
                record_tool_call_error(func_name, start_time, e)
            except Exception as metrics_error:
                mcp_call_logger.warning(f"Metrics error recording failed for {func_name}: {metrics_error}")

            mcp_call_logger.error(f"Tool {func_name} raised exception: {e}", exc_info=True)
            log_structured_error(
                category=ErrorCategory.ERROR,
                message=f"Tool {func_name} failed: {e}",
                exception=e,
                operation="tool_execution",
                function=func_name,
            )
            raise

        try:
            record_tool_call_success(func_name, start_time, len(str(result)))
        except Exception as e:
            mcp_call_logger.warning(f"Metrics success recording failed for {func_name}: {e}")

        try:
            result_str = _describe(result)
        except Exception as e:
            result_str = f"Result logging error: {e}"

        mcp_call_logger.info(f"Tool {func_name} returned: {result_str}")
        return result

    return wrapper


def configure_log_level(level: str) -> None:
    """Set the level of the ``confluence_mcp`` package loggers (e.g. "DEBUG")."""
    logging.getLogger("confluence_mcp").setLevel(level)
