"""Unit tests for PatchUpdateCoordinator against an in-memory Confluence."""

import pytest

from confluence_mcp.exceptions import AuthError
from confluence_mcp.exceptions import NotFoundError
from confluence_mcp.exceptions import RemoteError
from confluence_mcp.exceptions import ValidationError
from confluence_mcp.exceptions import VersionConflictError
from confluence_mcp.patch import ConflictDetected
from confluence_mcp.patch import NoChangesNeeded
from confluence_mcp.patch import PatchUpdateCoordinator
from confluence_mcp.patch import UpdateRequest
from confluence_mcp.patch import UpdateSuccess


def _request(body, baseline_version=None, force_update=False, document_id="42", title="T"):
    return UpdateRequest(
        document_id=document_id,
        new_title=title,
        new_body=body,
        baseline_version=baseline_version,
        force_update=force_update,
    )


class TestNoOpWrites:
    """A body equal to the current one is never written."""

    @pytest.mark.parametrize("baseline_version", [None, 1, 4, 5, 9])
    def test_equal_body_returns_no_changes_for_any_baseline(self, fake_client, baseline_version):
        fake_client.add_page("42", body="<p>A</p>", version=5)

        outcome = PatchUpdateCoordinator(fake_client).apply(_request("<p>A</p>", baseline_version))

        assert isinstance(outcome, NoChangesNeeded)
        assert outcome.current_version == 5
        assert fake_client.write_calls == []

    def test_stale_baseline_with_matching_body_is_not_a_conflict(self, fake_client):
        fake_client.add_page("42", body="<p>A</p><p>extra</p>", version=6)

        outcome = PatchUpdateCoordinator(fake_client).apply(_request("<p>A</p><p>extra</p>", 5))

        assert isinstance(outcome, NoChangesNeeded)
        assert outcome.current_version == 6


class TestConflictDetection:
    """A stale baseline with a differing body is reported, not written."""

    @pytest.mark.parametrize("baseline_version,current_version", [(4, 5), (1, 9), (7, 6)])
    def test_stale_baseline_reports_conflict(self, fake_client, baseline_version, current_version):
        fake_client.add_page("42", body="old", version=current_version)

        outcome = PatchUpdateCoordinator(fake_client).apply(_request("new", baseline_version))

        assert isinstance(outcome, ConflictDetected)
        assert outcome.baseline_version == baseline_version
        assert outcome.current_version == current_version
        assert outcome.our_change_set.has_changes is True
        assert fake_client.write_calls == []
        assert fake_client.pages["42"].version == current_version

    def test_conflict_change_set_is_against_current_body(self, fake_client):
        fake_client.add_page("42", body="line1\nline2\nline3", version=3)

        outcome = PatchUpdateCoordinator(fake_client).apply(
            _request("line1\nlineX\nline3\nline4", baseline_version=2)
        )

        assert outcome.our_change_set.added_lines == 2
        assert outcome.our_change_set.removed_lines == 1

    def test_force_update_overrides_conflict(self, fake_client):
        fake_client.add_page("42", body="old", version=5)

        outcome = PatchUpdateCoordinator(fake_client).apply(_request("new", 3, force_update=True))

        assert isinstance(outcome, UpdateSuccess)
        assert outcome.new_version == 6
        assert len(fake_client.write_calls) == 1
        assert fake_client.write_calls[0]["expected_prior_version"] == 5

    def test_force_update_still_skips_identical_body(self, fake_client):
        fake_client.add_page("42", body="same", version=5)

        outcome = PatchUpdateCoordinator(fake_client).apply(_request("same", 3, force_update=True))

        assert isinstance(outcome, NoChangesNeeded)
        assert fake_client.write_calls == []


class TestSuccessfulWrite:
    """Writes go through when the baseline is current or absent."""

    def test_matching_baseline_writes_once(self, fake_client):
        fake_client.add_page("42", body="line1\nline2\nline3", version=5)

        outcome = PatchUpdateCoordinator(fake_client).apply(
            _request("line1\nlineX\nline3\nline4", baseline_version=5)
        )

        assert isinstance(outcome, UpdateSuccess)
        assert outcome.new_version == 6
        assert outcome.change_set.summary == "+2 -1 lines"
        assert fake_client.write_calls == [
            {
                "document_id": "42",
                "title": "T",
                "body": "line1\nlineX\nline3\nline4",
                "expected_prior_version": 5,
            }
        ]

    @pytest.mark.parametrize("current_version", [1, 5, 120])
    def test_absent_baseline_skips_conflict_check(self, fake_client, current_version):
        fake_client.add_page("42", body="old", version=current_version)

        outcome = PatchUpdateCoordinator(fake_client).apply(_request("new"))

        assert isinstance(outcome, UpdateSuccess)
        assert outcome.new_version == current_version + 1
        assert fake_client.pages["42"].version == current_version + 1

    def test_fetches_exactly_once(self, fake_client):
        fake_client.add_page("42", body="old", version=2)

        PatchUpdateCoordinator(fake_client).apply(_request("new", 2))

        assert fake_client.fetch_calls == ["42"]

    def test_title_only_change_is_not_written(self, fake_client):
        fake_client.add_page("42", title="Old title", body="body", version=2)

        outcome = PatchUpdateCoordinator(fake_client).apply(_request("body", 2, title="New title"))

        assert isinstance(outcome, NoChangesNeeded)
        assert fake_client.pages["42"].title == "Old title"

    def test_crlf_to_lf_is_written(self, fake_client):
        fake_client.add_page("42", body="<p>A</p>\r\n<p>B</p>", version=5)

        outcome = PatchUpdateCoordinator(fake_client).apply(_request("<p>A</p>\n<p>B</p>", 5))

        assert isinstance(outcome, UpdateSuccess)
        assert outcome.new_version == 6
        assert len(fake_client.write_calls) == 1
        assert fake_client.pages["42"].body == "<p>A</p>\n<p>B</p>"

    def test_line_separator_replaced_by_newline_is_written(self, fake_client):
        fake_client.add_page("42", body="<p>a\u2028b</p>", version=2)

        outcome = PatchUpdateCoordinator(fake_client).apply(_request("<p>a\nb</p>", 2))

        assert isinstance(outcome, UpdateSuccess)
        assert fake_client.pages["42"].body == "<p>a\nb</p>"

    def test_writes_stripped_title_and_body(self, fake_client):
        fake_client.add_page("42", body="old", version=2)

        PatchUpdateCoordinator(fake_client).apply(_request("  <p>new</p>\n", 2, title="  Release notes "))

        assert fake_client.write_calls[0]["title"] == "Release notes"
        assert fake_client.write_calls[0]["body"] == "<p>new</p>"


class TestValidationBeforeIO:
    """Invalid requests are rejected before the client is touched."""

    @pytest.mark.parametrize("document_id", ["", "   "])
    def test_blank_document_id(self, fake_client, document_id):
        with pytest.raises(ValidationError):
            PatchUpdateCoordinator(fake_client).apply(_request("new", document_id=document_id))

        assert fake_client.fetch_calls == []
        assert fake_client.write_calls == []

    def test_blank_title(self, fake_client):
        with pytest.raises(ValidationError):
            PatchUpdateCoordinator(fake_client).apply(_request("new", title=""))

        assert fake_client.fetch_calls == []

    @pytest.mark.parametrize("body", ["", "   ", "<p>hi</p><script>alert(1)</script>", "<a href=\"javascript:x\">x</a>"])
    def test_blank_or_unsafe_body(self, fake_client, body):
        fake_client.add_page("42", body="old", version=2)

        with pytest.raises(ValidationError):
            PatchUpdateCoordinator(fake_client).apply(_request(body, 2))

        assert fake_client.fetch_calls == []
        assert fake_client.write_calls == []

    @pytest.mark.parametrize("baseline_version", [0, -3])
    def test_non_positive_baseline(self, fake_client, baseline_version):
        with pytest.raises(ValidationError):
            PatchUpdateCoordinator(fake_client).apply(_request("new", baseline_version))

        assert fake_client.fetch_calls == []


class TestRemoteFailures:
    """Remote errors propagate unchanged and are not retried."""

    def test_missing_page(self, fake_client):
        with pytest.raises(NotFoundError):
            PatchUpdateCoordinator(fake_client).apply(_request("new"))

        assert fake_client.write_calls == []

    def test_fetch_failure(self, fake_client):
        fake_client.add_page("42", body="old", version=1)
        fake_client.fetch_error = RemoteError("connection reset")

        with pytest.raises(RemoteError, match="connection reset"):
            PatchUpdateCoordinator(fake_client).apply(_request("new", 1))

        assert fake_client.write_calls == []

    def test_write_failure(self, fake_client):
        fake_client.add_page("42", body="old", version=1)
        fake_client.write_error = AuthError("Forbidden", status_code=403)

        with pytest.raises(AuthError):
            PatchUpdateCoordinator(fake_client).apply(_request("new", 1))

        assert len(fake_client.write_calls) == 1
        assert fake_client.pages["42"].version == 1

    def test_write_rejected_by_remote_version_check(self, fake_client):
        fake_client.add_page("42", body="old", version=1)
        fake_client.write_error = VersionConflictError("Version must be incremented", status_code=409)

        with pytest.raises(VersionConflictError):
            PatchUpdateCoordinator(fake_client).apply(_request("new", 1))

        assert len(fake_client.write_calls) == 1


class TestConcurrentEditScenario:
    """A concurrent editor moves the page from version 5 to 6 mid-edit."""

    def test_stale_edit_is_reported_then_succeeds_after_reread(self, fake_client):
        fake_client.add_page("42", body="<p>A</p>", version=5)
        coordinator = PatchUpdateCoordinator(fake_client)

        baseline = fake_client.fetch_document("42").version
        fake_client.simulate_remote_edit("42", "<p>A</p><p>extra</p>")

        outcome = coordinator.apply(_request("<p>B</p>", baseline_version=baseline))

        assert isinstance(outcome, ConflictDetected)
        assert outcome.baseline_version == 5
        assert outcome.current_version == 6
        assert fake_client.write_calls == []
        assert fake_client.pages["42"].body == "<p>A</p><p>extra</p>"

        retry = coordinator.apply(_request("<p>B</p>", baseline_version=outcome.current_version))

        assert isinstance(retry, UpdateSuccess)
        assert retry.new_version == 7
        assert fake_client.pages["42"].body == "<p>B</p>"
