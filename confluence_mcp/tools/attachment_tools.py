"""Attachment Tools.

This module contains MCP tools for page attachments:
- confluence_get_attachments: List attachment metadata of a page
- confluence_download_attachment: Download one attachment as base64
- confluence_get_page_with_attachments: Page, attachments and optional downloads
"""

import base64
from typing import Any

from mcp.server import FastMCP

from ..confluence_api import ConfluenceClient
from ..confluence_api import get_client
from ..error_handler import handle_mcp_tool_error
from ..exceptions import ConfluenceMCPError
from ..logger_config import ErrorCategory
from ..logger_config import log_mcp_call
from ..logger_config import log_structured_error
from ..models import Attachment
from ..models import DownloadedAttachment
from ..models import FailedAttachment
from ..models import PageWithAttachments
from ..utils.validation import validate_input


def download_as_base64(client: ConfluenceClient, page_id: str, attachment: Attachment) -> DownloadedAttachment:
    """Download an attachment and wrap its bytes for a JSON tool result."""
    content, content_type = client.download_attachment(page_id, attachment)
    return DownloadedAttachment(
        attachment_id=attachment.id,
        filename=attachment.title,
        content_type=content_type,
        size=len(content),
        data=base64.b64encode(content).decode("ascii"),
    )


def collect_page_with_attachments(
    client: ConfluenceClient, page_id: str, download_attachments: bool = False
) -> PageWithAttachments:
    """Fetch a page and its attachments, downloading them when asked.

    A failed download is recorded in ``failed_attachments``; the remaining
    attachments are still downloaded.
    """
    page = client.fetch_document(page_id)
    attachments = client.get_attachments(page_id)

    downloaded: list[DownloadedAttachment] = []
    failed: list[FailedAttachment] = []
    if download_attachments:
        for attachment in attachments:
            try:
                downloaded.append(download_as_base64(client, page_id, attachment))
            except ConfluenceMCPError as e:
                log_structured_error(
                    category=ErrorCategory.WARNING,
                    message=f"Attachment download failed: {e.message}",
                    exception=e,
                    operation="download_attachment",
                    page_id=page_id,
                    attachment_id=attachment.id,
                )
                failed.append(
                    FailedAttachment(attachment_id=attachment.id, filename=attachment.title, error=e.user_message)
                )

    return PageWithAttachments(
        page=page,
        attachments=attachments,
        downloaded_attachments=downloaded,
        failed_attachments=failed,
    )


def register_attachment_tools(mcp_server: FastMCP) -> None:
    """Register all attachment tools with the MCP server."""

    @mcp_server.tool()
    @handle_mcp_tool_error("confluence_get_attachments")
    @log_mcp_call
    def confluence_get_attachments(page_id: str) -> dict[str, Any]:
        """List the attachments of a Confluence page.

        Parameters:
            page_id (str): The ID of the page

        Returns:
            Dict[str, Any]: pageId and attachments (id, title, mediaType,
            fileSize, downloadLink)
        """
        page_id = validate_input(page_id, "Page ID")
        attachments = get_client().get_attachments(page_id)
        return {
            "pageId": page_id,
            "attachments": [a.model_dump(by_alias=True) for a in attachments],
            "count": len(attachments),
        }

    @mcp_server.tool()
    @handle_mcp_tool_error("confluence_download_attachment")
    @log_mcp_call
    def confluence_download_attachment(page_id: str, attachment_id: str) -> dict[str, Any]:
        """Download one attachment of a Confluence page.

        Parameters:
            page_id (str): The ID of the page owning the attachment
            attachment_id (str): The attachment ID (e.g. "att123456")

        Returns:
            Dict[str, Any]: attachmentId, filename, contentType, size and the
            base64-encoded bytes in data
        """
        page_id = validate_input(page_id, "Page ID")
        attachment_id = validate_input(attachment_id, "Attachment ID")
        client = get_client()
        attachment = client.get_attachment(page_id, attachment_id)
        return download_as_base64(client, page_id, attachment).model_dump(by_alias=True)

    @mcp_server.tool()
    @handle_mcp_tool_error("confluence_get_page_with_attachments")
    @log_mcp_call
    def confluence_get_page_with_attachments(
        page_id: str, download_attachments: bool = False
    ) -> dict[str, Any]:
        """Get a Confluence page together with its attachments.

        Parameters:
            page_id (str): The ID of the page
            download_attachments (bool): Also download every attachment as
                base64 (default False). Attachments that fail to download are
                listed in failedAttachments.

        Returns:
            Dict[str, Any]: page, attachments, downloadedAttachments,
            failedAttachments
        """
        page_id = validate_input(page_id, "Page ID")
        result = collect_page_with_attachments(get_client(), page_id, bool(download_attachments))
        return result.model_dump(by_alias=True)
