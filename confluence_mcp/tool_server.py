"""MCP Server for Confluence.

This module provides a FastMCP-based MCP server exposing Confluence pages and
attachments as tools, including a patch update that refuses to overwrite
edits made after the caller's baseline version.
"""

import argparse
import sys

from mcp.server import FastMCP

from .config import get_settings
from .exceptions import ConfigurationError
from .logger_config import configure_log_level
from .metrics_config import ensure_metrics_initialized
from .metrics_config import is_metrics_enabled

# Import tool registration functions from modular architecture
from .tools import register_attachment_tools
from .tools import register_page_tools

mcp_server = FastMCP(name="ConfluenceTools")

register_page_tools(mcp_server)
register_attachment_tools(mcp_server)

__all__ = ["main", "mcp_server"]


def _status(message: str) -> None:
    # stdout belongs to the MCP protocol under the stdio transport
    print(message, file=sys.stderr)


# --- Main Server Execution ---
def main():
    """Run the main entry point for the server with argument parsing."""
    settings = get_settings()

    parser = argparse.ArgumentParser(description="Confluence MCP Server")
    parser.add_argument(
        "transport",
        choices=["sse", "stdio"],
        default="stdio",
        nargs="?",
        help="Transport: 'sse' for HTTP SSE or 'stdio' for standard I/O (default: stdio)",
    )
    parser.add_argument(
        "--host",
        default=settings.sse_host,
        help=f"Host to bind to for SSE transport (default: {settings.sse_host})",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=settings.sse_port,
        help=f"Port to bind to for SSE transport (default: {settings.sse_port})",
    )

    args = parser.parse_args()
    configure_log_level(settings.log_level)

    try:
        settings.validate_credentials()
    except ConfigurationError as e:
        _status(f"Configuration error: {e.message}")
        _status("Set CONFLUENCE_URL, ATLASSIAN_USERNAME and ATLASSIAN_API_TOKEN (or add them to .env).")
        sys.exit(1)

    ensure_metrics_initialized()

    _status(f"Confluence tool server starting. Tools exposed by '{mcp_server.name}':")
    _status(f"Serving Confluence instance: {settings.wiki_base_url}")
    _status(f"Metrics: {'enabled' if is_metrics_enabled() else 'disabled'}")

    if args.transport == "stdio":
        _status("MCP server running with stdio transport. Waiting for client connection...")
        mcp_server.run(transport="stdio")
    else:
        _status(f"MCP server running with HTTP SSE transport on {args.host}:{args.port}")
        _status(f"SSE endpoint: http://{args.host}:{args.port}/sse")
        mcp_server.settings.host = args.host
        mcp_server.settings.port = args.port
        mcp_server.run(transport="sse")


if __name__ == "__main__":
    main()
