"""Shared Confluence client for the MCP tools.

The client is created on first use from the global settings. Tests swap it
out with ``set_client`` or reset it with ``reset_client``.
"""

from __future__ import annotations

from ..config import Settings
from ..config import get_settings
from .client import ConfluenceClient

_client_instance: ConfluenceClient | None = None


def create_client(settings: Settings | None = None) -> ConfluenceClient:
    """Create a Confluence client, validating credentials first."""
    settings = settings or get_settings()
    settings.validate_credentials()
    return ConfluenceClient(settings)


def get_client() -> ConfluenceClient:
    """Get the global client instance, creating it on first call."""
    global _client_instance
    if _client_instance is None:
        _client_instance = create_client()
    return _client_instance


def set_client(client: ConfluenceClient | None) -> None:
    """Install a specific client instance (for embedding and testing)."""
    global _client_instance
    _client_instance = client


def reset_client() -> None:
    """Close and drop the global client instance."""
    global _client_instance
    if _client_instance is not None:
        _client_instance.close()
    _client_instance = None
