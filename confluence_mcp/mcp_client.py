"""Clean client interface for Confluence MCP tools.

This module provides a plain Python interface to all registered MCP tools,
allowing tests and scripts to call them without going through an MCP
transport.

All functions in this module correspond directly to registered MCP tools.
"""
from __future__ import annotations

# Import the MCP server to access registered tools
from .tool_server import mcp_server


def _get_mcp_tool(tool_name: str):
    """Get a registered MCP tool function by name."""
    if (
        hasattr(mcp_server, "_tool_manager")
        and hasattr(mcp_server._tool_manager, "_tools")
        and tool_name in mcp_server._tool_manager._tools
    ):
        tool = mcp_server._tool_manager._tools[tool_name]
        if hasattr(tool, "fn"):
            return tool.fn
    raise RuntimeError(f"MCP tool '{tool_name}' not found or not properly registered")


# Page tools
def confluence_search(cql: str, limit: int | None = None):
    """Search pages with CQL."""
    return _get_mcp_tool("confluence_search")(cql, limit)


def confluence_get_page(page_id: str):
    """Read one page with body, version and space."""
    return _get_mcp_tool("confluence_get_page")(page_id)


def confluence_create_page(space_key: str, title: str, content: str, parent_id: str | None = None):
    """Create a page in a space."""
    return _get_mcp_tool("confluence_create_page")(space_key, title, content, parent_id)


def confluence_update_page(page_id: str, title: str, content: str):
    """Overwrite a page without a version check."""
    return _get_mcp_tool("confluence_update_page")(page_id, title, content)


def confluence_patch_update(
    page_id: str,
    title: str,
    content: str,
    baseline_version: int | None = None,
    force_update: bool = False,
):
    """Update a page unless it moved past the baseline version."""
    return _get_mcp_tool("confluence_patch_update")(
        page_id, title, content, baseline_version, force_update
    )


# Attachment tools
def confluence_get_attachments(page_id: str):
    """List the attachments of a page."""
    return _get_mcp_tool("confluence_get_attachments")(page_id)


def confluence_download_attachment(page_id: str, attachment_id: str):
    """Download one attachment as base64."""
    return _get_mcp_tool("confluence_download_attachment")(page_id, attachment_id)


def confluence_get_page_with_attachments(page_id: str, download_attachments: bool = False):
    """Read a page together with its attachments."""
    return _get_mcp_tool("confluence_get_page_with_attachments")(page_id, download_attachments)


__all__ = [
    # Page tools (5 tools)
    "confluence_search",
    "confluence_get_page",
    "confluence_create_page",
    "confluence_update_page",
    "confluence_patch_update",
    # Attachment tools (3 tools)
    "confluence_get_attachments",
    "confluence_download_attachment",
    "confluence_get_page_with_attachments",
]
