"""Runtime configuration for mstodo-mcp.

All environment access happens here, once, at process start. Everything
downstream receives a Settings instance instead of reading os.environ.

Environment variables:
    MS_TODO_ACCESS_TOKEN / MS_TODO_REFRESH_TOKEN: Ambient token pair.
    CLIENT_ID / CLIENT_SECRET / TENANT_ID: Application identity for refreshes.
    MSTODO_MCP_LOG_LEVEL: Console log level (default INFO).
    MSTODO_MCP_LOG_FILE: Optional JSONL log file.
    MSTODO_MCP_HTTP_TIMEOUT: Outbound HTTP timeout in seconds.

Example usage:
    settings = Settings.from_env()
    store = TokenStore(settings.token_dir)
"""

from __future__ import annotations

__all__ = [
    "Settings",
]

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

from mstodo_mcp.constants import (
    DEFAULT_HTTP_TIMEOUT_SECONDS,
    DEFAULT_TENANT_ID,
    DESKTOP_CONFIG_FILE_NAME,
    TOKEN_FILE_NAME,
    get_desktop_config_dir,
    get_token_dir,
)

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings(BaseModel):
    """Process configuration.

    Attributes:
        access_token: Ambient access token (MS_TODO_ACCESS_TOKEN).
        refresh_token: Ambient refresh token (MS_TODO_REFRESH_TOKEN).
        client_id: Application (client) ID used for refreshes.
        client_secret: Application secret used for refreshes.
        tenant_id: Tenant for the token endpoint.
        token_dir: Directory of the canonical token file.
        legacy_token_path: Deprecated token file location (working directory).
        desktop_config_path: Desktop host config updated after refreshes.
            None disables the update.
        log_level: Console log level.
        log_file: Optional JSONL log file.
        http_timeout: Timeout in seconds for all outbound HTTP calls.
    """

    model_config = ConfigDict(frozen=True)

    access_token: str | None = None
    refresh_token: str | None = None
    client_id: str | None = None
    client_secret: str | None = None
    tenant_id: str = DEFAULT_TENANT_ID
    token_dir: Path = Field(default_factory=get_token_dir)
    legacy_token_path: Path = Field(default_factory=lambda: Path.cwd() / TOKEN_FILE_NAME)
    desktop_config_path: Path | None = Field(
        default_factory=lambda: get_desktop_config_dir() / DESKTOP_CONFIG_FILE_NAME
    )
    log_level: LogLevel = "INFO"
    log_file: Path | None = None
    http_timeout: float = Field(default=DEFAULT_HTTP_TIMEOUT_SECONDS, gt=0)

    @property
    def has_ambient_tokens(self) -> bool:
        """True when both halves of the environment token pair are set."""
        return bool(self.access_token and self.refresh_token)

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        *,
        load_env_file: bool = True,
    ) -> "Settings":
        """Build settings from environment variables.

        Args:
            environ: Mapping to read instead of os.environ (for testing).
            load_env_file: Load ./.env into os.environ first. Existing
                variables are never overridden.

        Returns:
            Settings instance.

        Raises:
            pydantic.ValidationError: If a value has the wrong type.
        """
        if environ is None:
            if load_env_file:
                load_dotenv(override=False)
            environ = os.environ

        values: dict[str, object] = {
            "access_token": environ.get("MS_TODO_ACCESS_TOKEN") or None,
            "refresh_token": environ.get("MS_TODO_REFRESH_TOKEN") or None,
            "client_id": environ.get("CLIENT_ID") or None,
            "client_secret": environ.get("CLIENT_SECRET") or None,
        }
        if environ.get("TENANT_ID"):
            values["tenant_id"] = environ["TENANT_ID"]
        if environ.get("MSTODO_MCP_LOG_LEVEL"):
            values["log_level"] = environ["MSTODO_MCP_LOG_LEVEL"].upper()
        if environ.get("MSTODO_MCP_LOG_FILE"):
            values["log_file"] = Path(environ["MSTODO_MCP_LOG_FILE"]).expanduser()
        if environ.get("MSTODO_MCP_HTTP_TIMEOUT"):
            values["http_timeout"] = environ["MSTODO_MCP_HTTP_TIMEOUT"]

        return cls.model_validate(values)
