"""Token storage for Microsoft OAuth tokens.

A single credential record is persisted as plain JSON:

    {
      "accessToken": "...",
      "refreshToken": "...",
      "expiresAt": 1735689600000,
      "clientId": "...",
      "clientSecret": "...",
      "tenantId": "organizations"
    }

expiresAt is milliseconds since the epoch. clientId/clientSecret/tenantId
are optional; without them the record cannot be refreshed.

Locations:
- Canonical: <token dir>/tokens.json (see constants.get_token_dir)
- Legacy: tokens.json in the working directory, read-only fallback

Writes always replace the whole file atomically. This module does no
expiry or network logic; see token_manager.
"""

from __future__ import annotations

__all__ = [
    "CredentialRecord",
    "TokenStore",
    "now_ms",
]

import json
import time
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from mstodo_mcp.constants import TOKEN_FILE_NAME, get_token_dir
from mstodo_mcp.exceptions import CorruptTokenFileError, TokenStoreError
from mstodo_mcp.utils.file_helpers import atomic_write_json, ensure_private_dir
from mstodo_mcp.utils.logging.logger_setup import get_logger

_logger = get_logger("auth.token_storage")


def now_ms() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


class CredentialRecord(BaseModel):
    """OAuth tokens plus the application identity needed to refresh them.

    Attributes:
        access_token: Short-lived bearer token for Graph calls.
        refresh_token: Long-lived token exchanged for new access tokens.
        expires_at: Absolute expiry in epoch milliseconds (already includes
            the 5-minute safety margin).
        client_id: Application ID used for refreshes (optional).
        client_secret: Application secret used for refreshes (optional).
        tenant_id: Tenant used for refreshes (optional).
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    access_token: str = Field(alias="accessToken", min_length=1)
    refresh_token: str = Field(alias="refreshToken", min_length=1)
    expires_at: int = Field(alias="expiresAt")
    client_id: str | None = Field(default=None, alias="clientId")
    client_secret: str | None = Field(default=None, alias="clientSecret")
    tenant_id: str | None = Field(default=None, alias="tenantId")

    def is_expired(self, at_ms: int | None = None) -> bool:
        """Check whether the access token should be treated as expired.

        Args:
            at_ms: Instant to check against (defaults to now).

        Returns:
            True when at_ms >= expires_at.
        """
        return (now_ms() if at_ms is None else at_ms) >= self.expires_at

    @property
    def seconds_until_expiry(self) -> float:
        """Seconds until expires_at (negative if expired)."""
        return (self.expires_at - now_ms()) / 1000

    @property
    def can_refresh(self) -> bool:
        """True when the record embeds the client credentials a refresh needs."""
        return bool(self.client_id and self.client_secret)

    def to_dict(self) -> dict[str, object]:
        """Serialize to the on-disk JSON shape (camelCase, absent fields omitted)."""
        return self.model_dump(by_alias=True, exclude_none=True)

    @classmethod
    def from_dict(cls, data: object) -> "CredentialRecord":
        """Validate a decoded JSON object.

        Raises:
            pydantic.ValidationError: If required fields are missing or mistyped.
        """
        return cls.model_validate(data)


class TokenStore:
    """Reads and writes the credential record file.

    Usage:
        store = TokenStore()
        record = store.load()          # None if no file
        store.save(new_record)         # atomic overwrite
    """

    def __init__(self, token_dir: Path | None = None, legacy_path: Path | None = None) -> None:
        """Initialize the store.

        Args:
            token_dir: Directory of the canonical file (default: platform path).
            legacy_path: Deprecated file location (default: ./tokens.json).
        """
        self._token_dir = token_dir if token_dir is not None else get_token_dir()
        self._legacy_path = legacy_path if legacy_path is not None else Path.cwd() / TOKEN_FILE_NAME

    @property
    def path(self) -> Path:
        """Canonical token file path (directory not created)."""
        return self._token_dir / TOKEN_FILE_NAME

    @property
    def legacy_path(self) -> Path:
        """Deprecated token file path."""
        return self._legacy_path

    def locate(self) -> Path:
        """Return the canonical token file path, creating its directory.

        Returns:
            Path to tokens.json in the token directory.

        Raises:
            OSError: If the directory cannot be created.
        """
        ensure_private_dir(self._token_dir)
        return self.path

    def load(self) -> CredentialRecord | None:
        """Load the record from the canonical path.

        Returns:
            CredentialRecord, or None if no file exists.

        Raises:
            CorruptTokenFileError: If the file exists but is not a valid record.
        """
        return self._read(self.path)

    def load_legacy(self) -> CredentialRecord | None:
        """Load the record from the legacy (working directory) path.

        Returns:
            CredentialRecord, or None if no file exists.

        Raises:
            CorruptTokenFileError: If the file exists but is not a valid record.
        """
        return self._read(self._legacy_path)

    def save(self, record: CredentialRecord) -> Path:
        """Overwrite the canonical file with record.

        Args:
            record: Full record to persist.

        Returns:
            Path written.

        Raises:
            TokenStoreError: If the file cannot be written.
        """
        try:
            path = self.locate()
            atomic_write_json(path, record.to_dict())
        except OSError as e:
            raise TokenStoreError(f"Failed to save tokens to {self.path}: {e}") from e

        _logger.debug({"event": "tokens_saved", "message": f"Tokens saved to {path}"})
        return path

    def migrate(self, record: CredentialRecord) -> Path:
        """Copy a legacy record to the canonical location.

        The legacy file is left in place.

        Args:
            record: Record read from the legacy path.

        Returns:
            Canonical path written.

        Raises:
            TokenStoreError: If the file cannot be written.
        """
        path = self.save(record)
        _logger.info(
            {
                "event": "tokens_migrated",
                "message": f"Migrated tokens from {self._legacy_path} to {path}",
                "legacy_path": str(self._legacy_path),
                "path": str(path),
            }
        )
        return path

    def _read(self, path: Path) -> CredentialRecord | None:
        if not path.is_file():
            return None

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise CorruptTokenFileError(path, str(e)) from e

        try:
            return CredentialRecord.from_dict(data)
        except ValidationError as e:
            raise CorruptTokenFileError(path, f"{e.error_count()} validation error(s)") from e
