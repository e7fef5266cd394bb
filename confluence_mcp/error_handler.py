"""Error handling utilities for MCP tools and the export command.

- handle_mcp_tool_error: turn ConfluenceMCPError into an MCP ToolError whose
  message is safe to show the caller
- create_error_response: build an OperationStatus for callers that report
  failures instead of raising
"""

from __future__ import annotations

import logging
from functools import wraps

from mcp.server.fastmcp.exceptions import ToolError

from .exceptions import ConfluenceMCPError
from .exceptions import ValidationError
from .models import OperationStatus

logger = logging.getLogger(__name__)


def handle_mcp_tool_error(operation: str):
    """Decorator converting domain errors raised by a tool into ToolError.

    Validation failures and remote failures both reach the caller as tool
    errors; the original exception is chained. Other exceptions propagate
    unchanged.
    """

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except ValidationError as e:
                logger.warning("%s rejected input: %s", operation, e.message)
                raise ToolError(e.user_message) from e
            except ConfluenceMCPError as e:
                logger.error(
                    "%s failed [%s]: %s", operation, e.error_code, e.message, extra={"details": e.details}
                )
                raise ToolError(e.user_message) from e

        return wrapper

    return decorator


def create_error_response(error: Exception, operation: str) -> OperationStatus:
    """Create a failed OperationStatus describing `error`."""
    if isinstance(error, ConfluenceMCPError):
        details = {"error_code": error.error_code, "operation": operation, **error.details}
        return OperationStatus(success=False, message=error.user_message, details=details)

    return OperationStatus(
        success=False,
        message=f"An unexpected error occurred during {operation}",
        details={
            "error_code": "UNEXPECTED_ERROR",
            "error_type": type(error).__name__,
            "operation": operation,
        },
    )
