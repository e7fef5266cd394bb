"""HTTP client for the Confluence Cloud REST API.

Each request follows the same lifecycle:

1. Send the request with Basic auth (username + API token).
2. On ``2xx`` return the parsed JSON (or raw bytes for downloads).
3. On ``401``/``403`` raise AuthError, on ``404`` NotFoundError, on ``409``
   VersionConflictError, on anything else RemoteError.
4. On a transport failure (timeout, connection refused, ...) raise
   RemoteError without a status code.

Nothing is retried here. Callers that want a retry policy own it.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..config import Settings
from ..exceptions import AuthError
from ..exceptions import NotFoundError
from ..exceptions import RemoteError
from ..exceptions import ValidationError
from ..exceptions import VersionConflictError
from ..models import Attachment
from ..models import Document
from ..models import SearchResult
from ..models import SearchResults
from .base import RemoteDocumentClient

logger = logging.getLogger(__name__)

PAGE_EXPAND = "body.storage,version,space"
ATTACHMENT_PAGE_SIZE = 100


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return response.reason_phrase or response.text[:500]


def _raise_for_status(response: httpx.Response, method: str, path: str) -> None:
    """Raise the RemoteError subclass matching a non-2xx response."""
    status = response.status_code
    if 200 <= status < 300:
        return

    message = _error_message(response)
    logger.error("Confluence API error %s on %s %s: %s", status, method, path, message)

    if status in (401, 403):
        raise AuthError(message, status_code=status, method=method, path=path)
    if status == 404:
        raise NotFoundError(message, status_code=status, method=method, path=path)
    if status == 409:
        raise VersionConflictError(message, status_code=status, method=method, path=path)
    raise RemoteError(message, status_code=status, method=method, path=path)


class ConfluenceClient(RemoteDocumentClient):
    """Synchronous Confluence REST client.

    Args:
        settings: Connection settings (site URL, credentials, timeout)
        transport: Optional httpx transport, used by tests to stub the network
    """

    def __init__(self, settings: Settings, transport: httpx.BaseTransport | None = None):
        self._settings = settings
        self._client = httpx.Client(
            base_url=settings.wiki_base_url,
            auth=(settings.atlassian_username, settings.atlassian_api_token),
            headers={"Accept": "application/json", "Content-Type": "application/json"},
            timeout=httpx.Timeout(settings.request_timeout),
            follow_redirects=True,
            transport=transport,
        )

    # -- transport ---------------------------------------------------------

    def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            logger.error("Network error on %s %s: %s", method, path, exc)
            raise RemoteError(f"Network error: {exc}", method=method, path=path) from exc
        _raise_for_status(response, method, path)
        return response

    def request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        """Send a request to the REST API and return the decoded JSON body."""
        response = self._send(method, path, **kwargs)
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as exc:
            raise RemoteError(
                "Response body is not valid JSON",
                status_code=response.status_code,
                method=method,
                path=path,
            ) from exc

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> ConfluenceClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # -- pages -------------------------------------------------------------

    def search(self, cql: str, limit: int | None = None) -> SearchResults:
        """Run a CQL query and return the first page of hits."""
        limit = limit or self._settings.search_limit
        logger.info("Searching Confluence with CQL: %s", cql)
        payload = self.request(
            "GET", "/rest/api/content/search", params={"cql": cql, "limit": limit}
        )
        results = [
            SearchResult(
                id=str(item["id"]),
                title=item.get("title", ""),
                type=item.get("type", "page"),
                status=item.get("status"),
            )
            for item in payload.get("results", [])
        ]
        return SearchResults(
            cql=cql,
            results=results,
            size=payload.get("size", len(results)),
            total_size=payload.get("totalSize"),
        )

    def fetch_document(self, document_id: str) -> Document:
        logger.info("Fetching Confluence page: %s", document_id)
        payload = self.request(
            "GET", f"/rest/api/content/{document_id}", params={"expand": PAGE_EXPAND}
        )
        return Document.from_api(payload, self._settings.wiki_base_url)

    get_page = fetch_document

    def create_page(
        self,
        space_key: str,
        title: str,
        body: str,
        parent_id: str | None = None,
    ) -> Document:
        """Create a page in a space, optionally below a parent page."""
        logger.info("Creating Confluence page %r in space %s", title, space_key)
        data: dict[str, Any] = {
            "type": "page",
            "title": title,
            "space": {"key": space_key},
            "body": {"storage": {"value": body, "representation": "storage"}},
        }
        if parent_id:
            data["ancestors"] = [{"id": parent_id}]
        payload = self.request("POST", "/rest/api/content", json=data)
        document = Document.from_api(payload, self._settings.wiki_base_url)
        return document if document.body else document.model_copy(update={"body": body})

    def write_document(
        self,
        document_id: str,
        title: str,
        body: str,
        expected_prior_version: int,
    ) -> Document:
        logger.info(
            "Updating Confluence page %s from version %d", document_id, expected_prior_version
        )
        data = {
            "id": document_id,
            "type": "page",
            "title": title,
            "version": {"number": expected_prior_version + 1},
            "body": {"storage": {"value": body, "representation": "storage"}},
        }
        payload = self.request("PUT", f"/rest/api/content/{document_id}", json=data)
        document = Document.from_api(payload, self._settings.wiki_base_url)
        return document if document.body else document.model_copy(update={"body": body})

    def update_page(self, page_id: str, title: str, body: str) -> Document:
        """Overwrite a page unconditionally, based on whatever version is current."""
        current = self.fetch_document(page_id)
        return self.write_document(page_id, title, body, current.version)

    # -- attachments -------------------------------------------------------

    def get_attachments(self, page_id: str) -> list[Attachment]:
        """List every attachment of a page, following pagination."""
        attachments: list[Attachment] = []
        start = 0
        while True:
            payload = self.request(
                "GET",
                f"/rest/api/content/{page_id}/child/attachment",
                params={"start": start, "limit": ATTACHMENT_PAGE_SIZE},
            )
            batch = payload.get("results", [])
            attachments.extend(Attachment.from_api(item) for item in batch)
            if len(batch) < ATTACHMENT_PAGE_SIZE or "next" not in payload.get("_links", {}):
                break
            start += len(batch)
        logger.info("Page %s has %d attachments", page_id, len(attachments))
        return attachments

    def get_attachment(self, page_id: str, attachment_id: str) -> Attachment:
        for attachment in self.get_attachments(page_id):
            if attachment.id == attachment_id:
                return attachment
        raise NotFoundError(
            f"Attachment {attachment_id} not found on page {page_id}",
            status_code=404,
            method="GET",
            path=f"/rest/api/content/{page_id}/child/attachment",
        )

    def download_attachment(self, page_id: str, attachment: Attachment) -> tuple[bytes, str]:
        """Download an attachment's bytes.

        Returns:
            (content, content_type)

        Raises:
            ValidationError: If the attachment exceeds ``attachment_max_bytes``
        """
        max_bytes = self._settings.attachment_max_bytes
        if attachment.file_size is not None and attachment.file_size > max_bytes:
            raise ValidationError(
                f"Attachment '{attachment.title}' is {attachment.file_size} bytes, "
                f"larger than the {max_bytes} byte limit",
                field="attachment_id",
                value=attachment.id,
            )

        path = attachment.download_link or (
            f"/rest/api/content/{page_id}/child/attachment/{attachment.id}/download"
        )
        logger.info("Downloading attachment %s (%s)", attachment.id, attachment.title)
        response = self._send("GET", path, headers={"Accept": "*/*"})
        content = response.content
        if len(content) > max_bytes:
            raise ValidationError(
                f"Attachment '{attachment.title}' exceeds the {max_bytes} byte limit",
                field="attachment_id",
                value=attachment.id,
            )
        content_type = response.headers.get(
            "content-type", attachment.media_type or "application/octet-stream"
        )
        return content, content_type.split(";")[0].strip()
