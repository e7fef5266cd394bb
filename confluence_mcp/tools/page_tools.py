"""Page Tools.

This module contains MCP tools for reading and writing Confluence pages:
- confluence_search: Search pages with CQL
- confluence_get_page: Read one page with body, version and space
- confluence_create_page: Create a page in a space
- confluence_update_page: Overwrite a page unconditionally
- confluence_patch_update: Update a page with version-conflict detection
"""

from typing import Any

from mcp.server import FastMCP

from ..confluence_api import get_client
from ..error_handler import handle_mcp_tool_error
from ..logger_config import log_mcp_call
from ..metrics_config import record_patch_outcome
from ..models import ConflictDetails
from ..models import PatchInfo
from ..models import PatchUpdateResult
from ..patch import ConflictDetected
from ..patch import NoChangesNeeded
from ..patch import PatchUpdateCoordinator
from ..patch import UpdateOutcome
from ..patch import UpdateRequest
from ..patch import UpdateSuccess
from ..utils.validation import validate_input
from ..utils.validation import validate_version


def build_patch_result(page_id: str, outcome: UpdateOutcome) -> PatchUpdateResult:
    """Translate a coordinator outcome into the tool's structured result."""
    if isinstance(outcome, UpdateSuccess):
        old_version = outcome.new_version - 1
        return PatchUpdateResult(
            status=outcome.status,
            success=True,
            message=(
                f"Page '{page_id}' updated from version {old_version} to "
                f"{outcome.new_version} ({outcome.change_set.summary})."
            ),
            page_id=page_id,
            changes_summary=outcome.change_set.summary,
            patch_info=PatchInfo(old_version=old_version, new_version=outcome.new_version),
        )

    if isinstance(outcome, ConflictDetected):
        conflict_message = (
            f"Page '{page_id}' was modified after version {outcome.baseline_version} "
            f"and is now at version {outcome.current_version}. Nothing was written. "
            "Re-read the page and apply your edit to the current content, or retry "
            "with force_update=true to overwrite the other changes."
        )
        return PatchUpdateResult(
            status=outcome.status,
            success=False,
            message=conflict_message,
            page_id=page_id,
            changes_summary=outcome.our_change_set.summary,
            conflict_details=ConflictDetails(
                original_version=outcome.baseline_version,
                current_version=outcome.current_version,
                message=conflict_message,
            ),
            current_version=outcome.current_version,
        )

    if isinstance(outcome, NoChangesNeeded):
        return PatchUpdateResult(
            status=outcome.status,
            success=True,
            message=(
                f"Page '{page_id}' already has the requested content at version "
                f"{outcome.current_version}. Nothing was written."
            ),
            page_id=page_id,
            current_version=outcome.current_version,
        )

    raise TypeError(f"Unknown update outcome: {outcome!r}")


def register_page_tools(mcp_server: FastMCP) -> None:
    """Register all page tools with the MCP server."""

    @mcp_server.tool()
    @handle_mcp_tool_error("confluence_search")
    @log_mcp_call
    def confluence_search(cql: str, limit: int | None = None) -> dict[str, Any]:
        """Search Confluence pages using CQL (Confluence Query Language).

        Parameters:
            cql (str): CQL query, e.g. 'space = "DOC" AND title ~ "release"'
            limit (Optional[int]): Maximum number of hits (default from settings)

        Returns:
            Dict[str, Any]: cql, results (id, title, type, status), size, total_size
        """
        query = validate_input(cql, "CQL query")
        return get_client().search(query, limit).model_dump()

    @mcp_server.tool()
    @handle_mcp_tool_error("confluence_get_page")
    @log_mcp_call
    def confluence_get_page(page_id: str) -> dict[str, Any]:
        """Get a specific Confluence page by ID.

        Parameters:
            page_id (str): The ID of the page to retrieve

        Returns:
            Dict[str, Any]: id, title, body (storage format), version, space_key,
            space_name, last_modified, web_url. Keep `version` as the
            baseline_version for a later confluence_patch_update.
        """
        page_id = validate_input(page_id, "Page ID")
        return get_client().fetch_document(page_id).model_dump()

    @mcp_server.tool()
    @handle_mcp_tool_error("confluence_create_page")
    @log_mcp_call
    def confluence_create_page(
        space_key: str,
        title: str,
        content: str,
        parent_id: str | None = None,
    ) -> dict[str, Any]:
        """Create a new Confluence page.

        Parameters:
            space_key (str): Key of the space the page is created in
            title (str): Title of the new page
            content (str): Page body in Confluence storage format (XHTML)
            parent_id (Optional[str]): Page to nest the new page under

        Returns:
            Dict[str, Any]: The created page (version 1)
        """
        space_key = validate_input(space_key, "Space key")
        title = validate_input(title, "Title")
        content = validate_input(content, "Content")
        parent_id = validate_input(parent_id, "Parent ID", required=False)
        return get_client().create_page(space_key, title, content, parent_id).model_dump()

    @mcp_server.tool()
    @handle_mcp_tool_error("confluence_update_page")
    @log_mcp_call
    def confluence_update_page(page_id: str, title: str, content: str) -> dict[str, Any]:
        """Overwrite an existing Confluence page.

        The page is written on top of whatever version is current, without
        checking for concurrent edits. Prefer confluence_patch_update when the
        content was derived from an earlier read of the page.

        Parameters:
            page_id (str): The ID of the page to update
            title (str): The new title of the page
            content (str): The new body in Confluence storage format

        Returns:
            Dict[str, Any]: The page as stored after the update
        """
        page_id = validate_input(page_id, "Page ID")
        title = validate_input(title, "Title")
        content = validate_input(content, "Content")
        return get_client().update_page(page_id, title, content).model_dump()

    @mcp_server.tool()
    @handle_mcp_tool_error("confluence_patch_update")
    @log_mcp_call
    def confluence_patch_update(
        page_id: str,
        title: str,
        content: str,
        baseline_version: int | None = None,
        force_update: bool = False,
    ) -> dict[str, Any]:
        r"""Update a Confluence page, refusing to overwrite concurrent edits.

        The current page is fetched first. If `baseline_version` is given and
        the page has moved past it, nothing is written and a conflict is
        reported, unless the page already holds the requested content. If the
        content is unchanged, nothing is written either. Otherwise the page is
        written and its version advances by one.

        Parameters:
            page_id (str): The ID of the page to update
            title (str): The new title of the page
            content (str): The new body in Confluence storage format
            baseline_version (Optional[int]): Version the content was based on
                (the `version` returned by confluence_get_page). Omit to skip
                conflict detection.
            force_update (bool): Write even if the baseline is stale (default False)

        Returns:
            Dict[str, Any]: status is one of:
                - "success": written; patchInfo holds oldVersion/newVersion
                - "conflict-detected": not written; conflictDetails holds
                  originalVersion/currentVersion
                - "no-changes": not written; currentVersion holds the version
            changesSummary reads "+{added} -{removed} lines".

        Example Usage:
            ```json
            {
                "name": "confluence_patch_update",
                "arguments": {
                    "page_id": "123456789",
                    "title": "Release notes",
                    "content": "<p>Version 2.1 is out.</p>",
                    "baseline_version": 5
                }
            }
            ```

        Example Conflict Response:
            ```json
            {
                "status": "conflict-detected",
                "success": false,
                "message": "Page '123456789' was modified after version 5 ...",
                "pageId": "123456789",
                "changesSummary": "+1 -1 lines",
                "conflictDetails": {"originalVersion": 5, "currentVersion": 6, "message": "..."},
                "currentVersion": 6
            }
            ```
        """
        page_id = validate_input(page_id, "Page ID")
        title = validate_input(title, "Title")
        content = validate_input(content, "Content")
        baseline_version = validate_version(baseline_version)

        client = get_client()
        request = UpdateRequest(
            document_id=page_id,
            new_title=title,
            new_body=content,
            baseline_version=baseline_version,
            force_update=bool(force_update),
        )

        outcome = PatchUpdateCoordinator(client).apply(request)
        record_patch_outcome(outcome.status)
        result = build_patch_result(page_id, outcome)
        return result.model_dump(by_alias=True, exclude_none=True)
