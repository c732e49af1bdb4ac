"""Custom exceptions for mstodo-mcp.

This module contains all custom exceptions used throughout the package.
Exceptions are organized into three categories:

Token Lifecycle (absorbed by TokenManager, never reach tool callers):
    - CorruptTokenFileError: Persisted token file exists but cannot be parsed
    - TokenStoreError: Persisted token file cannot be written
    - TokenRefreshError: Identity provider rejected a refresh
    - MissingClientCredentialsError: Refresh needed but no client id/secret
    - ConfigWriteError: Best-effort desktop config update failed

Graph Requests (converted to text by the tool layer):
    - UnauthenticatedError: No access token obtainable
    - GraphHttpError: Non-2xx response from Microsoft Graph
    - AccountCapabilityError: Account type cannot use the To Do API

Startup (process exits):
    - StartupError: Server could not be wired up

Usage:
    from mstodo_mcp.exceptions import GraphApiError, TokenRefreshError
"""

from __future__ import annotations

__all__ = [
    "AccountCapabilityError",
    "ConfigWriteError",
    "CorruptTokenFileError",
    "GraphApiError",
    "GraphHttpError",
    "MissingClientCredentialsError",
    "StartupError",
    "TodoMcpError",
    "TokenRefreshError",
    "TokenStoreError",
    "UnauthenticatedError",
]

from pathlib import Path


class TodoMcpError(Exception):
    """Base class for all mstodo-mcp errors."""


# =============================================================================
# Token Lifecycle
# =============================================================================


class CorruptTokenFileError(TodoMcpError):
    """Token file exists but is not a valid credential record.

    Callers treat this as "no token found" rather than a fatal error.

    Attributes:
        path: Path of the unreadable file.
    """

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        super().__init__(f"Token file {path} is corrupted: {reason}")


class TokenStoreError(TodoMcpError):
    """Token file could not be written."""


class TokenRefreshError(TodoMcpError):
    """Identity provider rejected the refresh_token grant.

    Attributes:
        status_code: HTTP status from the token endpoint (None for transport errors).
        body: Raw error body returned by the provider.
    """

    def __init__(self, message: str, *, status_code: int | None = None, body: str = "") -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(message)


class MissingClientCredentialsError(TokenRefreshError):
    """A refresh was needed but no client id/secret is available.

    Records that came from environment variables carry no application
    identity; without CLIENT_ID/CLIENT_SECRET they cannot be refreshed.
    """

    def __init__(self) -> None:
        super().__init__("Missing client credentials for token refresh")


class ConfigWriteError(TodoMcpError):
    """Desktop host config could not be read or written.

    Always logged and swallowed: refreshed tokens are already persisted.
    """


# =============================================================================
# Graph Requests
# =============================================================================


class GraphApiError(TodoMcpError):
    """Base for errors raised by GraphClient.request()."""


class UnauthenticatedError(GraphApiError):
    """No access token could be obtained from any source."""

    def __init__(self, message: str = "Failed to authenticate with Microsoft API") -> None:
        super().__init__(message)


class GraphHttpError(GraphApiError):
    """Microsoft Graph returned a non-success status.

    Attributes:
        status_code: HTTP status code.
        body: Response body text.
    """

    def __init__(self, status_code: int, body: str) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(f"HTTP error! status: {status_code}, body: {body}")


class AccountCapabilityError(GraphHttpError):
    """The signed-in account cannot use the To Do API.

    Raised for MailboxNotEnabledForRESTAPI, which Graph returns for personal
    Microsoft accounts (outlook.com, hotmail.com, live.com). This is an
    account-type limitation, not an authentication problem.
    """

    explanation = (
        "The Microsoft To Do API is not available for personal Microsoft accounts "
        "(outlook.com, hotmail.com, live.com, etc.) through Microsoft Graph. "
        "Only Microsoft 365 work or school accounts can use it. This is a Microsoft "
        "Graph limitation, not an authentication issue; the To Do web and mobile "
        "apps keep working for personal accounts."
    )

    def __str__(self) -> str:
        return self.explanation


# =============================================================================
# Startup
# =============================================================================


class StartupError(TodoMcpError):
    """Server could not be started.

    Attributes:
        exit_code: Process exit code.
    """

    exit_code: int = 1
