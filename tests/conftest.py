"""The pytest configuration for Confluence MCP testing.

Log files go to a temporary directory and metrics stay off. Every test starts
without a cached Settings instance or shared Confluence client.
"""

import logging
import os
import tempfile

# Must be set before confluence_mcp.logger_config opens its log files.
os.environ.setdefault("CONFLUENCE_MCP_LOG_DIR", tempfile.mkdtemp(prefix="confluence-mcp-logs-"))
os.environ.setdefault("MCP_METRICS_ENABLED", "false")

import pytest

from confluence_mcp.config import reset_settings
from confluence_mcp.confluence_api import reset_client
from confluence_mcp.confluence_api import set_client
from tests.shared.fake_client import FakeConfluenceClient

CONFLUENCE_ENV = {
    "CONFLUENCE_URL": "https://acme.atlassian.net",
    "ATLASSIAN_USERNAME": "bot@acme.com",
    "ATLASSIAN_API_TOKEN": "secret-token",
}


@pytest.fixture(autouse=True)
def reset_global_state():
    """Drop the cached settings and shared client around every test."""
    reset_settings()
    set_client(None)
    yield
    reset_client()
    reset_settings()
    logging.getLogger("confluence_mcp").setLevel(logging.NOTSET)


@pytest.fixture
def confluence_env(monkeypatch):
    """Provide valid Confluence credentials through the environment."""
    for name, value in CONFLUENCE_ENV.items():
        monkeypatch.setenv(name, value)
    return CONFLUENCE_ENV


@pytest.fixture
def fake_client():
    """An in-memory Confluence with no pages."""
    return FakeConfluenceClient()


@pytest.fixture
def installed_client(fake_client):
    """The fake client installed as the shared client used by the tools."""
    set_client(fake_client)
    return fake_client


def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "integration: tests running the registered MCP tools end to end")
