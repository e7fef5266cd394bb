"""Export Confluence pages to Markdown files with their attachments.

Single-page export writes::

    <output>/
    ├── <Title>.md
    ├── attachments/<files>
    └── manifest.json

Hierarchy export writes one ``<Title>_<id>.md`` per page (the root, every page
below it, and the rest of the space when the space is small), a shared
``attachments/`` folder, ``README.md`` and ``hierarchy.json``. A page that
fails to export is logged and skipped.
"""

from __future__ import annotations

import datetime
import logging
from dataclasses import dataclass
from pathlib import Path

from ..confluence_api import ConfluenceClient
from ..exceptions import ConfluenceMCPError
from ..exceptions import ExportError
from ..logger_config import ErrorCategory
from ..logger_config import log_structured_error
from ..logger_config import safe_operation
from ..models import Attachment
from ..models import Document
from .markdown import attachment_filename
from .markdown import html_to_markdown
from .markdown import sanitize_filename
from .models import ExportedAttachment
from .models import ExportedPage
from .models import ExportFiles
from .models import ExportManifest
from .models import HierarchyManifest

logger = logging.getLogger(__name__)

ATTACHMENTS_DIR = "attachments"


def _now() -> str:
    return datetime.datetime.now(datetime.timezone.utc).isoformat()


def _write_text(path: Path, text: str) -> None:
    try:
        path.write_text(text, encoding="utf-8")
    except OSError as e:
        raise ExportError(f"Could not write {path}: {e}") from e


def _write_bytes(path: Path, data: bytes) -> None:
    try:
        path.write_bytes(data)
    except OSError as e:
        raise ExportError(f"Could not write {path}: {e}") from e


def _ensure_dir(path: Path) -> Path:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ExportError(f"Could not create directory {path}: {e}") from e
    return path


@dataclass
class _SavedAttachment:
    attachment: Attachment
    filename: str
    size: int
    content_type: str


def render_page_markdown(page: Document, attachments: list[Attachment], saved_names: set[str]) -> str:
    """Render a page as Markdown: title, metadata header, body and attachment list."""
    body = html_to_markdown(page.body, saved_names, ATTACHMENTS_DIR)
    parts = [
        f"# {page.title}",
        "",
        f"**Page ID:** {page.id}  ",
        f"**Space:** {page.space_name or 'Unknown'}  ",
        f"**Version:** {page.version}  ",
        f"**Last Modified:** {page.last_modified or 'Unknown'}  ",
        "",
        "---",
        "",
        body,
        "",
    ]
    if attachments:
        parts += ["", f"## Attachments ({len(attachments)})", ""]
        for attachment in attachments:
            size = attachment.file_size if attachment.file_size is not None else "Unknown"
            parts.append(f"- **{attachment.title}** ({size} bytes, {attachment.media_type or 'Unknown'})")
        parts.append("")
    return "\n".join(parts)


class PageExporter:
    """Writes Confluence pages and their attachments to a local directory.

    Args:
        client: Confluence client used for every read
        space_page_limit: A hierarchy export also includes the other pages of
            the root's space when the space search returns at most this many
    """

    def __init__(self, client: ConfluenceClient, space_page_limit: int = 20):
        self.client = client
        self.space_page_limit = space_page_limit

    # -- attachments -------------------------------------------------------

    def _save_attachments(
        self, page: Document, attachments: list[Attachment], attachments_dir: Path
    ) -> tuple[list[_SavedAttachment], list[str]]:
        saved: list[_SavedAttachment] = []
        failed: list[str] = []
        if not attachments:
            return saved, failed

        _ensure_dir(attachments_dir)
        for attachment in attachments:
            name = attachment_filename(attachment.title, f"attachment_{attachment.id}")
            try:
                content, content_type = self.client.download_attachment(page.id, attachment)
            except ConfluenceMCPError as e:
                log_structured_error(
                    category=ErrorCategory.WARNING,
                    message=f"Skipping attachment {attachment.id} of page {page.id}: {e.message}",
                    exception=e,
                    operation="export_attachment",
                    page_id=page.id,
                    attachment_id=attachment.id,
                )
                failed.append(name)
                continue
            _write_bytes(attachments_dir / name, content)
            logger.info("Saved attachment %s (%d bytes)", name, len(content))
            saved.append(_SavedAttachment(attachment, name, len(content), content_type))
        return saved, failed

    # -- single page -------------------------------------------------------

    def export_page(self, page_id: str, output_dir: str | Path) -> ExportManifest:
        """Export one page with all of its attachments.

        Raises:
            ConfluenceMCPError: If the page or its attachment list cannot be read
            ExportError: If a file cannot be written
        """
        output = _ensure_dir(Path(output_dir))
        page = self.client.fetch_document(page_id)
        attachments = self.client.get_attachments(page.id)
        saved, failed = self._save_attachments(page, attachments, output / ATTACHMENTS_DIR)

        page_filename = f"{sanitize_filename(page.title)}.md"
        markdown = render_page_markdown(page, attachments, {s.filename for s in saved})
        _write_text(output / page_filename, markdown)
        logger.info("Saved page %s to %s", page.id, page_filename)

        manifest = ExportManifest(
            download_date=_now(),
            page_id=page.id,
            title=page.title,
            space=page.space_name,
            version=page.version,
            attachment_count=len(attachments),
            downloaded_attachment_count=len(saved),
            failed_attachments=failed,
            files=ExportFiles(
                page=page_filename,
                attachments=[f"{ATTACHMENTS_DIR}/{s.filename}" for s in saved],
            ),
        )
        _write_text(output / "manifest.json", manifest.model_dump_json(by_alias=True, indent=2))
        return manifest

    # -- hierarchy ---------------------------------------------------------

    def _collect_page_ids(self, root: Document) -> list[str]:
        page_ids = [root.id]
        children = self.client.search(f"ancestor = {root.id}")
        space_pages = self.client.search(f'space = "{root.space_key}" AND type = "page"')

        candidates = list(children.results)
        if len(space_pages.results) <= self.space_page_limit:
            candidates += space_pages.results
        else:
            logger.info(
                "Space %s has more than %d pages; exporting only pages below %s",
                root.space_key,
                self.space_page_limit,
                root.id,
            )

        for result in candidates:
            if result.id not in page_ids:
                page_ids.append(result.id)
        return page_ids

    def _export_hierarchy_page(
        self, page_id: str, root: Document, output: Path
    ) -> tuple[ExportedPage, list[ExportedAttachment]]:
        page = root if page_id == root.id else self.client.fetch_document(page_id)
        attachments = self.client.get_attachments(page.id)
        saved, _ = self._save_attachments(page, attachments, output / ATTACHMENTS_DIR)

        page_filename = f"{sanitize_filename(page.title)}_{page.id}.md"
        markdown = render_page_markdown(page, attachments, {s.filename for s in saved})
        _write_text(output / page_filename, markdown)
        logger.info("Saved page %s to %s", page.id, page_filename)

        exported = ExportedPage(
            id=page.id,
            title=page.title,
            filename=page_filename,
            attachment_count=len(saved),
            is_root=page.id == root.id,
        )
        exported_attachments = [
            ExportedAttachment(
                filename=s.filename,
                page_title=page.title,
                page_id=page.id,
                size=s.size,
                content_type=s.content_type,
            )
            for s in saved
        ]
        return exported, exported_attachments

    def export_hierarchy(self, root_page_id: str, output_dir: str | Path) -> HierarchyManifest:
        """Export a page, the pages below it and, for small spaces, the whole space.

        Raises:
            ConfluenceMCPError: If the root page or the page searches fail
            ExportError: If the root page has no space, or a summary file
                cannot be written
        """
        output = _ensure_dir(Path(output_dir))
        _ensure_dir(output / ATTACHMENTS_DIR)

        root = self.client.fetch_document(root_page_id)
        if not root.space_key:
            raise ExportError("Could not determine space key from root page", page_id=root.id)

        page_ids = self._collect_page_ids(root)
        logger.info("Found %d pages to export below %s", len(page_ids), root.id)

        pages: list[ExportedPage] = []
        attachments_by_name: dict[str, ExportedAttachment] = {}
        skipped: list[str] = []
        for page_id in page_ids:
            ok, result, _ = safe_operation(
                "export_page",
                self._export_hierarchy_page,
                page_id,
                root,
                output,
                error_category=ErrorCategory.WARNING,
            )
            if not ok:
                skipped.append(page_id)
                continue
            exported, exported_attachments = result
            pages.append(exported)
            for attachment in exported_attachments:
                attachments_by_name[attachment.filename] = attachment

        manifest = HierarchyManifest(
            download_date=_now(),
            root_page_id=root.id,
            root_page_title=root.title,
            space_key=root.space_key,
            total_pages=len(pages),
            total_attachments=len(attachments_by_name),
            pages=pages,
            attachments=list(attachments_by_name.values()),
            skipped_pages=skipped,
        )
        _write_text(output / "README.md", render_readme(manifest, output.name))
        _write_text(output / "hierarchy.json", manifest.model_dump_json(by_alias=True, indent=2))
        return manifest


def render_readme(manifest: HierarchyManifest, folder_name: str) -> str:
    lines = [
        f"# {manifest.space_key} Space Export",
        "",
        f"**Export Date:** {manifest.download_date}  ",
        f"**Root Page ID:** {manifest.root_page_id}  ",
        f"**Root Page:** {manifest.root_page_title}  ",
        f"**Total Pages:** {manifest.total_pages}  ",
        f"**Total Attachments:** {manifest.total_attachments}  ",
        "",
        "## Pages",
        "",
    ]
    for page in manifest.pages:
        marker = " (root)" if page.is_root else ""
        lines.append(f"- [{page.title}]({page.filename}){marker} ({page.attachment_count} attachments)")
    lines += ["", "## Attachments", ""]
    for attachment in manifest.attachments:
        lines.append(
            f'- **{attachment.filename}** from "{attachment.page_title}" '
            f"({attachment.size} bytes, {attachment.content_type})"
        )
    if manifest.skipped_pages:
        lines += ["", "## Skipped Pages", ""]
        lines += [f"- {page_id}" for page_id in manifest.skipped_pages]
    lines += [
        "",
        "## Structure",
        "",
        "```",
        f"{folder_name}/",
        "├── README.md",
        "├── hierarchy.json",
        f"├── {ATTACHMENTS_DIR}/ ({manifest.total_attachments} files)",
    ]
    lines += [f"├── {page.filename}" for page in manifest.pages]
    lines += [
        "```",
        "",
        f"Images in the Markdown files link to the `{ATTACHMENTS_DIR}/` folder with relative paths.",
        "",
    ]
    return "\n".join(lines)
