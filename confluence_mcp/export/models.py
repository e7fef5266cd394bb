"""Manifests written next to exported Markdown files."""

from ..models import CamelModel


class ExportFiles(CamelModel):
    page: str
    attachments: list[str] = []


class ExportManifest(CamelModel):
    """``manifest.json`` of a single-page export."""

    download_date: str
    page_id: str
    title: str
    space: str | None = None
    version: int
    attachment_count: int
    downloaded_attachment_count: int
    failed_attachments: list[str] = []
    files: ExportFiles


class ExportedPage(CamelModel):
    id: str
    title: str
    filename: str
    attachment_count: int
    is_root: bool = False


class ExportedAttachment(CamelModel):
    filename: str
    page_title: str
    page_id: str
    size: int
    content_type: str


class HierarchyManifest(CamelModel):
    """``hierarchy.json`` of a hierarchy export."""

    download_date: str
    root_page_id: str
    root_page_title: str
    space_key: str
    total_pages: int
    total_attachments: int
    pages: list[ExportedPage]
    attachments: list[ExportedAttachment]
    skipped_pages: list[str] = []
