"""Confluence MCP server.

MCP tools for searching, reading and writing Confluence pages and their
attachments, a conflict-aware patch update, and a Markdown export command.
"""

__version__ = "1.0.0"
