"""Unit tests for the shared page and attachment models."""

import pytest
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from confluence_mcp.models import Attachment
from confluence_mcp.models import Document
from confluence_mcp.models import PatchInfo
from confluence_mcp.models import PatchUpdateResult
from confluence_mcp.patch import ChangeSet
from confluence_mcp.patch import UpdateOutcome


class TestDocument:
    def test_from_minimal_payload(self):
        document = Document.from_api({"id": 7, "title": "Bare", "version": {"number": 2}})

        assert document.id == "7"
        assert document.body == ""
        assert document.space_key is None
        assert document.web_url is None

    def test_version_must_be_positive(self):
        with pytest.raises(PydanticValidationError):
            Document(id="1", title="T", version=0)


class TestAttachment:
    def test_from_api_without_extensions(self):
        attachment = Attachment.from_api({"id": "att1", "title": "a.txt", "extensions": {"fileSize": ""}})

        assert attachment.file_size is None
        assert attachment.media_type is None
        assert attachment.download_link is None

    def test_camel_case_serialization(self):
        attachment = Attachment(id="att1", title="a.png", media_type="image/png", file_size=3)

        assert attachment.model_dump(by_alias=True)["mediaType"] == "image/png"


class TestPatchUpdateResult:
    def test_aliases_and_exclude_none(self):
        result = PatchUpdateResult(
            status="success",
            success=True,
            message="done",
            page_id="42",
            changes_summary="+1 -0 lines",
            patch_info=PatchInfo(old_version=1, new_version=2),
        )

        assert result.model_dump(by_alias=True, exclude_none=True) == {
            "status": "success",
            "success": True,
            "message": "done",
            "pageId": "42",
            "changesSummary": "+1 -0 lines",
            "patchInfo": {"oldVersion": 1, "newVersion": 2},
        }


class TestUpdateOutcome:
    def test_discriminated_by_status(self):
        adapter = TypeAdapter(UpdateOutcome)

        outcome = adapter.validate_python({"status": "no-changes", "current_version": 4})

        assert type(outcome).__name__ == "NoChangesNeeded"

    def test_change_set_summary(self):
        assert ChangeSet(has_changes=True, added_lines=3, removed_lines=2).summary == "+3 -2 lines"
