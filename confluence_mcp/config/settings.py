"""Centralized configuration management for the Confluence MCP server.

Settings are read once from the environment and an optional .env file, then
handed explicitly to the Confluence client. No other module reads
credentials from the environment.
"""

from __future__ import annotations

from typing import Literal

from dotenv import load_dotenv
from pydantic import Field
from pydantic import field_validator
from pydantic_settings import BaseSettings

from ..exceptions import ConfigurationError

# Values shipped in the sample .env file; treated as "not configured".
PLACEHOLDER_VALUES = {
    "confluence_url": ("https://your-instance.atlassian.net", "https://your-instance.atlassian.net/"),
    "atlassian_username": ("your-email@company.com",),
    "atlassian_api_token": ("your-api-token-here",),
}


class Settings(BaseSettings):
    """Centralized settings for the Confluence MCP server."""

    # === Confluence Connection ===
    confluence_url: str = Field(default="", description="Confluence site URL, e.g. https://acme.atlassian.net")
    atlassian_username: str = Field(default="", description="Atlassian account e-mail")
    atlassian_api_token: str = Field(default="", repr=False, description="Atlassian API token")

    # === HTTP Configuration ===
    request_timeout: float = Field(default=30.0, gt=0, description="HTTP timeout in seconds")

    # === Tool Defaults ===
    search_limit: int = Field(default=25, ge=1, le=250, description="Default CQL search page size")
    attachment_max_bytes: int = Field(
        default=25 * 1024 * 1024, gt=0, description="Largest attachment downloaded inline"
    )

    # === Export Configuration ===
    export_space_page_limit: int = Field(
        default=20, ge=0, description="Include space pages in a hierarchy export only up to this many"
    )

    # === HTTP SSE Server Configuration ===
    sse_host: str = Field(default="localhost", description="SSE server host")
    sse_port: int = Field(default=3001, description="SSE server port")

    # === Logging Configuration ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Level of the confluence_mcp package loggers"
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }

    @field_validator("confluence_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.strip().rstrip("/")

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_log_level(cls, value):
        return value.strip().upper() if isinstance(value, str) else value

    @property
    def wiki_base_url(self) -> str:
        """Root that attachment ``_links.download`` paths are relative to."""
        return f"{self.confluence_url}/wiki"

    @property
    def is_configured(self) -> bool:
        try:
            self.validate_credentials()
        except ConfigurationError:
            return False
        return True

    def validate_credentials(self) -> None:
        """Raise ConfigurationError if any connection setting is missing or a placeholder."""
        values = {
            "confluence_url": self.confluence_url,
            "atlassian_username": self.atlassian_username,
            "atlassian_api_token": self.atlassian_api_token,
        }
        for name, value in values.items():
            env_name = name.upper()
            if not value or not value.strip():
                raise ConfigurationError(f"{env_name} is not configured", setting=env_name)
            if value in PLACEHOLDER_VALUES[name] or value.rstrip("/") in PLACEHOLDER_VALUES[name]:
                raise ConfigurationError(
                    f"{env_name} still holds the placeholder value from the sample .env file",
                    setting=env_name,
                )
        if not self.confluence_url.startswith(("https://", "http://localhost", "http://127.0.0.1")):
            raise ConfigurationError(
                "CONFLUENCE_URL must use https (plain http is only accepted for localhost)",
                setting="CONFLUENCE_URL",
            )


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance (singleton pattern)."""
    global _settings
    if _settings is None:
        load_dotenv()
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset the global settings instance (primarily for testing)."""
    global _settings
    _settings = None
