"""Unit tests for the MCP server module and its entry point."""

import logging
import sys

import pytest

from confluence_mcp import tool_server
from confluence_mcp.tool_server import main
from confluence_mcp.tool_server import mcp_server

EXPECTED_TOOLS = {
    "confluence_search",
    "confluence_get_page",
    "confluence_create_page",
    "confluence_update_page",
    "confluence_patch_update",
    "confluence_get_attachments",
    "confluence_download_attachment",
    "confluence_get_page_with_attachments",
}


def test_all_tools_registered():
    assert set(mcp_server._tool_manager._tools) == EXPECTED_TOOLS


def test_patch_update_schema_exposes_baseline_and_force():
    tool = mcp_server._tool_manager._tools["confluence_patch_update"]
    properties = tool.parameters["properties"]

    assert {"page_id", "title", "content", "baseline_version", "force_update"} <= set(properties)
    assert set(tool.parameters["required"]) == {"page_id", "title", "content"}


class TestMain:
    @pytest.fixture
    def no_metrics(self, mocker):
        return mocker.patch.object(tool_server, "ensure_metrics_initialized")

    def test_stdio_is_default(self, confluence_env, no_metrics, mocker, monkeypatch):
        run = mocker.patch.object(mcp_server, "run")
        monkeypatch.setattr(sys, "argv", ["confluence-mcp"])

        main()

        run.assert_called_once_with(transport="stdio")
        no_metrics.assert_called_once()

    def test_log_level_applied(self, confluence_env, no_metrics, mocker, monkeypatch):
        mocker.patch.object(mcp_server, "run")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setattr(sys, "argv", ["confluence-mcp"])

        main()

        assert logging.getLogger("confluence_mcp").level == logging.DEBUG

    def test_sse_transport(self, confluence_env, no_metrics, mocker, monkeypatch):
        run = mocker.patch.object(mcp_server, "run")
        server_settings = mocker.patch.object(mcp_server, "settings")
        monkeypatch.setattr(sys, "argv", ["confluence-mcp", "sse", "--host", "0.0.0.0", "--port", "4000"])

        main()

        assert server_settings.host == "0.0.0.0"
        assert server_settings.port == 4000
        run.assert_called_once_with(transport="sse")

    def test_missing_credentials_exit(self, no_metrics, mocker, monkeypatch, capsys):
        for name in ("CONFLUENCE_URL", "ATLASSIAN_USERNAME", "ATLASSIAN_API_TOKEN"):
            monkeypatch.delenv(name, raising=False)
        mocker.patch("confluence_mcp.config.settings.load_dotenv")
        run = mocker.patch.object(mcp_server, "run")
        monkeypatch.setattr(sys, "argv", ["confluence-mcp"])

        with pytest.raises(SystemExit) as exc_info:
            main()

        assert exc_info.value.code == 1
        assert "CONFLUENCE_URL is not configured" in capsys.readouterr().err
        run.assert_not_called()

    def test_status_lines_go_to_stderr(self, confluence_env, no_metrics, mocker, monkeypatch, capsys):
        mocker.patch.object(mcp_server, "run")
        monkeypatch.setattr(sys, "argv", ["confluence-mcp"])

        main()

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "ConfluenceTools" in captured.err
