"""Utility modules for the Confluence MCP server.

- validation.py: Tool argument validation helpers
"""
