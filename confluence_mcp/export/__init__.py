"""Markdown export of Confluence pages and page hierarchies.

Usage:
    python -m confluence_mcp.export 123456789 ./downloads
    python -m confluence_mcp.export 123456789 ./hierarchy --mode hierarchy
"""

from .exporter import PageExporter
from .markdown import html_to_markdown
from .markdown import sanitize_filename
from .models import ExportManifest
from .models import HierarchyManifest

__all__ = [
    "ExportManifest",
    "HierarchyManifest",
    "PageExporter",
    "html_to_markdown",
    "sanitize_filename",
]
