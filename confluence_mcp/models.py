"""Pydantic models for the Confluence MCP server.

This module contains the page and attachment models shared by the Confluence
client, the MCP tools and the exporter. Patch-update request and outcome
models live in ``confluence_mcp.patch.models``.
"""

from typing import Any

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic.alias_generators import to_camel

# === Core Operation Models ===


class OperationStatus(BaseModel):
    """Generic status for operations that report failures instead of raising."""

    success: bool
    message: str
    details: dict[str, Any] | None = None
    warnings: list[str] = []


# === Page Models ===


class Document(BaseModel):
    """A Confluence page as seen at one point in time.

    ``version`` is assigned by Confluence on every accepted write; this
    server never invents one.
    """

    id: str
    title: str
    body: str = ""  # storage-format markup
    version: int = Field(..., ge=1)
    space_key: str | None = None
    space_name: str | None = None
    last_modified: str | None = None  # version.when
    web_url: str | None = None

    @classmethod
    def from_api(cls, payload: dict[str, Any], wiki_base_url: str | None = None) -> "Document":
        """Build a Document from a ``GET /content/{id}?expand=body.storage,version,space`` payload."""
        version = payload.get("version") or {}
        space = payload.get("space") or {}
        storage = (payload.get("body") or {}).get("storage") or {}
        webui = (payload.get("_links") or {}).get("webui")
        return cls(
            id=str(payload["id"]),
            title=payload.get("title", ""),
            body=storage.get("value", "") or "",
            version=int(version.get("number", 1)),
            space_key=space.get("key"),
            space_name=space.get("name"),
            last_modified=version.get("when"),
            web_url=f"{wiki_base_url}{webui}" if wiki_base_url and webui else webui,
        )


class SearchResult(BaseModel):
    """One hit of a CQL search."""

    id: str
    title: str
    type: str = "page"
    status: str | None = None


class SearchResults(BaseModel):
    """Envelope returned by ``GET /content/search``."""

    cql: str
    results: list[SearchResult]
    size: int
    total_size: int | None = None


# === Attachment Models ===


class CamelModel(BaseModel):
    """Base for models serialized to tool callers with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Attachment(CamelModel):
    """Metadata of a page attachment."""

    id: str
    title: str
    media_type: str | None = None
    file_size: int | None = None
    download_link: str | None = None  # relative to the /wiki root

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> "Attachment":
        extensions = payload.get("extensions") or {}
        links = payload.get("_links") or {}
        file_size = extensions.get("fileSize")
        return cls(
            id=str(payload["id"]),
            title=payload.get("title", ""),
            media_type=extensions.get("mediaType"),
            file_size=int(file_size) if file_size not in (None, "") else None,
            download_link=links.get("download"),
        )


class DownloadedAttachment(CamelModel):
    """An attachment's content, base64 encoded for transport in a tool result."""

    attachment_id: str
    filename: str
    content_type: str
    size: int
    data: str


class FailedAttachment(CamelModel):
    """An attachment that could not be downloaded alongside its page."""

    attachment_id: str
    filename: str
    error: str


class PageWithAttachments(CamelModel):
    """A page together with its attachment metadata and optional downloads."""

    page: Document
    attachments: list[Attachment]
    downloaded_attachments: list[DownloadedAttachment] = []
    failed_attachments: list[FailedAttachment] = []


# === Patch Update Result Models ===


class PatchInfo(CamelModel):
    old_version: int
    new_version: int


class ConflictDetails(CamelModel):
    original_version: int
    current_version: int
    message: str


class PatchUpdateResult(CamelModel):
    """Structured result of the patch-update tool.

    A detected conflict or a no-op is still a successful tool call; only
    ``status`` tells the outcomes apart.
    """

    status: str  # "success" | "conflict-detected" | "no-changes"
    success: bool
    message: str
    page_id: str
    changes_summary: str | None = None
    patch_info: PatchInfo | None = None
    conflict_details: ConflictDetails | None = None
    current_version: int | None = None
