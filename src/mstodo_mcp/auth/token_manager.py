"""Token lifecycle manager.

TokenManager is the single authority the rest of the server asks for a
usable access token. It hides storage, migration and refresh:

Source priority (first source that yields a record wins, no fall-through):
    1. Environment pair (MS_TODO_ACCESS_TOKEN + MS_TODO_REFRESH_TOKEN),
       assumed valid for one hour from when it was first seen
    2. Canonical token file
    3. Legacy token file in the working directory, migrated to the
       canonical location and returned without an expiry check

Once resolved, the record is cached in memory and later calls check
expiry against the cache instead of re-reading sources. A failed refresh
drops the cache, so the next call resolves from sources again (picking up
tokens written by an external login in the meantime).

Every public method returns a result and never raises: leaf errors
(CorruptTokenFileError, TokenRefreshError, TokenStoreError,
ConfigWriteError) are logged and mapped onto TokenResolution here.

Concurrency:
    One asyncio.Lock guards resolve -> refresh -> persist, so concurrent
    callers share a single in-flight refresh and then read its result.
"""

from __future__ import annotations

__all__ = [
    "TokenManager",
    "TokenResolution",
    "TokenSource",
    "TokenState",
]

import asyncio
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

import httpx

from mstodo_mcp.auth.desktop_config import update_desktop_config
from mstodo_mcp.auth.token_refresh import refresh_tokens
from mstodo_mcp.auth.token_storage import CredentialRecord, TokenStore, now_ms
from mstodo_mcp.config import Settings
from mstodo_mcp.constants import AMBIENT_TOKEN_LIFETIME_MS, REAUTH_COMMAND
from mstodo_mcp.exceptions import (
    ConfigWriteError,
    CorruptTokenFileError,
    MissingClientCredentialsError,
    TodoMcpError,
    TokenRefreshError,
    TokenStoreError,
)
from mstodo_mcp.utils.logging.logger_setup import get_logger

_logger = get_logger("auth.token_manager")


class TokenSource(str, Enum):
    """Where the current record came from."""

    ENVIRONMENT = "environment"
    STORE = "store"
    LEGACY = "legacy"
    REFRESH = "refresh"


class TokenState(str, Enum):
    """Validity of the current record.

    ABSENT: nothing resolvable from any source.
    VALID: record present and not expired.
    EXPIRED: record present but expired (refresh pending or impossible).
    REFRESHING: refresh in flight.
    UNRECOVERABLE: refresh failed; external re-authentication required.
    """

    ABSENT = "absent"
    VALID = "valid"
    EXPIRED = "expired"
    REFRESHING = "refreshing"
    UNRECOVERABLE = "unrecoverable"


@dataclass(frozen=True)
class TokenResolution:
    """Outcome of a token request.

    Attributes:
        record: Usable record, or None when no token is obtainable.
        source: Source the record (or the failed attempt) came from.
        state: State after this resolution.
        refreshed: True if a refresh happened during this resolution.
        error: Absorbed leaf error explaining a None record, if any.
    """

    record: CredentialRecord | None
    source: TokenSource | None
    state: TokenState
    refreshed: bool = False
    error: TodoMcpError | None = None

    @property
    def ok(self) -> bool:
        """True if a record was obtained."""
        return self.record is not None


class TokenManager:
    """Resolves, refreshes and persists the process's credential record.

    Usage:
        manager = TokenManager(settings, TokenStore(settings.token_dir), http_client)
        token = await manager.get_access_token()     # None if unauthenticated

        # After Graph answered 401 for `token`:
        record = await manager.force_refresh(token)
    """

    def __init__(
        self,
        settings: Settings,
        store: TokenStore,
        http_client: httpx.AsyncClient,
        *,
        desktop_config_path: Path | None = None,
    ) -> None:
        """Initialize the manager.

        Args:
            settings: Process settings (environment pair, client credentials).
            store: Token file store.
            http_client: Client used for token endpoint calls.
            desktop_config_path: Host config to update after refreshes.
                Defaults to settings.desktop_config_path; None disables it.
        """
        self._settings = settings
        self._store = store
        self._http_client = http_client
        self._desktop_config_path = (
            desktop_config_path if desktop_config_path is not None else settings.desktop_config_path
        )
        self._lock = asyncio.Lock()
        self._current: CredentialRecord | None = None
        self._source: TokenSource | None = None
        self._state = TokenState.ABSENT
        self._environment_expires_at: int | None = None

    @property
    def state(self) -> TokenState:
        """Current state (expiry is re-evaluated against the clock)."""
        if self._state == TokenState.VALID and self._current is not None and self._current.is_expired():
            return TokenState.EXPIRED
        return self._state

    @property
    def source(self) -> TokenSource | None:
        """Source of the cached record."""
        return self._source

    @property
    def current(self) -> CredentialRecord | None:
        """Cached record (may be expired)."""
        return self._current

    @property
    def store(self) -> TokenStore:
        """The token file store."""
        return self._store

    async def resolve(self) -> TokenResolution:
        """Return a usable record, refreshing an expired one first.

        Returns:
            TokenResolution; record is None when nothing usable exists.
        """
        async with self._lock:
            current = self._current
            if current is None:
                resolution = self._resolve_sources()
                if resolution.record is None or resolution.source == TokenSource.LEGACY:
                    return resolution
                current = resolution.record

            if not current.is_expired():
                return self._resolution(TokenState.VALID)
            return await self._refresh(current)

    async def get_tokens(self) -> CredentialRecord | None:
        """Return a usable record, or None if unauthenticated."""
        return (await self.resolve()).record

    async def get_access_token(self) -> str | None:
        """Return a usable access token, or None if unauthenticated."""
        record = await self.get_tokens()
        return record.access_token if record is not None else None

    async def force_refresh(self, rejected_access_token: str | None = None) -> CredentialRecord | None:
        """Refresh regardless of the cached record's expiry.

        Used after the API rejected a token. If the cached access token
        already differs from rejected_access_token, another caller
        refreshed in the meantime and that record is returned as-is.

        Args:
            rejected_access_token: Token the API answered 401 for.

        Returns:
            The new (or already newer) record, or None if refresh failed.
        """
        async with self._lock:
            current = self._current
            if current is None:
                resolution = self._resolve_sources()
                if resolution.record is None:
                    return None
                current = resolution.record

            if rejected_access_token is not None and current.access_token != rejected_access_token:
                return current

            return (await self._refresh(current)).record

    # -------------------------------------------------------------------------
    # Internals (caller holds the lock)
    # -------------------------------------------------------------------------

    def _resolution(self, state: TokenState, *, refreshed: bool = False) -> TokenResolution:
        self._state = state
        return TokenResolution(
            record=self._current,
            source=self._source,
            state=state,
            refreshed=refreshed,
        )

    def _resolve_sources(self) -> TokenResolution:
        """Walk sources in priority order and cache the first record found."""
        settings = self._settings

        if settings.access_token and settings.refresh_token:
            # The assumed lifetime starts once per process; re-reading the
            # pair after a failed refresh must not make it valid again.
            if self._environment_expires_at is None:
                self._environment_expires_at = now_ms() + AMBIENT_TOKEN_LIFETIME_MS
            record = CredentialRecord(
                access_token=settings.access_token,
                refresh_token=settings.refresh_token,
                expires_at=self._environment_expires_at,
            )
            self._cache(record, TokenSource.ENVIRONMENT)
            return self._resolution(TokenState.EXPIRED if record.is_expired() else TokenState.VALID)

        try:
            record = self._store.load()
        except CorruptTokenFileError as e:
            _logger.warning(
                {
                    "event": "token_file_corrupt",
                    "message": f"Ignoring unreadable token file: {e}",
                    "path": str(e.path),
                }
            )
            record = None

        if record is not None:
            self._cache(record, TokenSource.STORE)
            return self._resolution(TokenState.EXPIRED if record.is_expired() else TokenState.VALID)

        try:
            record = self._store.load_legacy()
        except CorruptTokenFileError as e:
            _logger.warning(
                {
                    "event": "legacy_token_file_corrupt",
                    "message": f"Ignoring unreadable legacy token file: {e}",
                    "path": str(e.path),
                }
            )
            record = None

        if record is not None:
            try:
                self._store.migrate(record)
            except TokenStoreError as e:
                _logger.warning(
                    {
                        "event": "token_migration_failed",
                        "message": f"Could not migrate legacy token file: {e}",
                    }
                )
            self._cache(record, TokenSource.LEGACY)
            # Legacy records are returned without an expiry check.
            return self._resolution(TokenState.VALID)

        self._current = None
        self._source = None
        return self._resolution(TokenState.ABSENT)

    def _cache(self, record: CredentialRecord, source: TokenSource) -> None:
        self._current = record
        self._source = source
        _logger.debug(
            {
                "event": "token_resolved",
                "message": f"Using tokens from {source.value}",
                "source": source.value,
                "expires_at": record.expires_at,
            }
        )

    async def _refresh(self, current: CredentialRecord) -> TokenResolution:
        """Refresh current (the cached record), then persist and notify."""
        source = self._source
        self._state = TokenState.REFRESHING

        client_id = current.client_id or self._settings.client_id
        client_secret = current.client_secret or self._settings.client_secret
        tenant_id = current.tenant_id or self._settings.tenant_id

        try:
            if not client_id or not client_secret:
                raise MissingClientCredentialsError()
            record = await refresh_tokens(
                current.refresh_token,
                client_id=client_id,
                client_secret=client_secret,
                tenant_id=tenant_id,
                http_client=self._http_client,
            )
        except TokenRefreshError as e:
            _logger.error(
                {
                    "event": "token_refresh_failed",
                    "message": str(e),
                    "source": source.value if source else None,
                    "status_code": e.status_code,
                }
            )
            if not isinstance(e, MissingClientCredentialsError):
                self._prompt_for_reauth()
            self._current = None
            self._source = None
            self._state = TokenState.UNRECOVERABLE
            return TokenResolution(
                record=None,
                source=source,
                state=TokenState.UNRECOVERABLE,
                error=e,
            )

        self._current = record
        self._source = TokenSource.REFRESH
        _logger.info(
            {
                "event": "token_refreshed",
                "message": "Access token refreshed",
                "expires_at": record.expires_at,
                "rotated_refresh_token": record.refresh_token != current.refresh_token,
            }
        )
        self._persist(record)
        return self._resolution(TokenState.VALID, refreshed=True)

    def _persist(self, record: CredentialRecord) -> None:
        """Save the refreshed record and update the desktop config.

        Both steps are best-effort: the refreshed record stays usable in
        memory even if it cannot be written.
        """
        try:
            self._store.save(record)
        except TokenStoreError as e:
            _logger.error({"event": "token_save_failed", "message": str(e)})

        if self._desktop_config_path is None:
            return
        try:
            update_desktop_config(record, self._desktop_config_path)
        except ConfigWriteError as e:
            _logger.warning({"event": "desktop_config_update_failed", "message": str(e)})

    def _prompt_for_reauth(self) -> None:
        _logger.warning(
            {
                "event": "reauth_required",
                "message": (
                    "Token refresh failed, re-authentication required. "
                    f"Run `{REAUTH_COMMAND}`, complete the sign-in in your browser, "
                    f"then restart your MCP host. Tokens are stored in: {self._store.path}"
                ),
                "path": str(self._store.path),
                "command": REAUTH_COMMAND,
            }
        )
