"""Custom exception hierarchy for the Confluence MCP server.

Every error raised by this package derives from ConfluenceMCPError and carries:
- message: technical description for logs
- error_code: machine-readable code
- details: structured context (status codes, field names, ...)
- user_message: text safe to show to the tool caller

A detected edit conflict is not an exception. The patch-update coordinator
reports it as a ConflictDetected outcome.
"""

from __future__ import annotations

from typing import Any


class ConfluenceMCPError(Exception):
    """Base class for all Confluence MCP errors."""

    def __init__(
        self,
        message: str,
        error_code: str = "UNKNOWN_ERROR",
        details: dict[str, Any] | None = None,
        user_message: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.user_message = user_message or message

    def to_dict(self) -> dict[str, Any]:
        """Convert the error to a dictionary for structured responses."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "user_message": self.user_message,
            "details": self.details,
        }


class ValidationError(ConfluenceMCPError):
    """Raised when tool input is missing, malformed or unsafe."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
        details: dict[str, Any] | None = None,
    ):
        details = dict(details or {})
        if field is not None:
            details["field"] = field
        if value is not None:
            details["invalid_value"] = value
        super().__init__(
            message,
            error_code="VALIDATION_ERROR",
            details=details,
            user_message=message,
        )
        self.field = field


class ConfigurationError(ConfluenceMCPError):
    """Raised when required settings are missing or still hold placeholders."""

    def __init__(self, message: str, setting: str | None = None):
        details = {"setting": setting} if setting else {}
        super().__init__(
            message,
            error_code="CONFIGURATION_ERROR",
            details=details,
            user_message=message,
        )
        self.setting = setting


class RemoteError(ConfluenceMCPError):
    """Raised when a call to the Confluence REST API fails.

    Covers transport failures (status_code is None) as well as any
    non-success HTTP response.
    """

    default_code = "REMOTE_ERROR"

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        method: str | None = None,
        path: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = dict(details or {})
        details["status_code"] = status_code
        if method:
            details["method"] = method
        if path:
            details["path"] = path
        if status_code is not None:
            user_message = f"Confluence API error: {status_code} {message}"
        else:
            user_message = f"Confluence API error: {message}"
        super().__init__(
            message,
            error_code=self.default_code,
            details=details,
            user_message=user_message,
        )
        self.status_code = status_code
        self.method = method
        self.path = path


class AuthError(RemoteError):
    """Confluence rejected the credentials (401) or the permission check (403)."""

    default_code = "AUTH_ERROR"


class NotFoundError(RemoteError):
    """The requested page or attachment does not exist (404)."""

    default_code = "NOT_FOUND"


class VersionConflictError(RemoteError):
    """Confluence refused a write whose declared version is stale (409)."""

    default_code = "VERSION_CONFLICT"


class ExportError(ConfluenceMCPError):
    """Raised when a page export cannot be completed."""

    def __init__(self, message: str, page_id: str | None = None):
        details = {"page_id": page_id} if page_id else {}
        super().__init__(message, error_code="EXPORT_ERROR", details=details)
        self.page_id = page_id
