"""Tool category modules for the Confluence MCP server.

- page_tools: search, read, create, update and conflict-aware patch update
- attachment_tools: list, download, and page-with-attachments
"""

from .attachment_tools import register_attachment_tools
from .page_tools import register_page_tools

__all__ = [
    "register_attachment_tools",
    "register_page_tools",
]
