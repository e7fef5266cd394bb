"""Confluence REST API access.

Usage:
    from confluence_mcp.confluence_api import get_client

    client = get_client()
    page = client.fetch_document("123456789")
"""

from .base import RemoteDocumentClient
from .client import ConfluenceClient
from .factory import create_client
from .factory import get_client
from .factory import reset_client
from .factory import set_client

__all__ = [
    "ConfluenceClient",
    "RemoteDocumentClient",
    "create_client",
    "get_client",
    "reset_client",
    "set_client",
]
