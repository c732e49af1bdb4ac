"""Signed-in account inspection."""

from __future__ import annotations

__all__ = [
    "account_email",
    "is_personal_account",
    "is_personal_email",
]

from typing import TYPE_CHECKING, Any

import httpx

from mstodo_mcp.constants import PERSONAL_ACCOUNT_DOMAINS
from mstodo_mcp.exceptions import GraphApiError
from mstodo_mcp.utils.logging.logger_setup import get_logger

if TYPE_CHECKING:
    from mstodo_mcp.graph.client import GraphClient

_logger = get_logger("graph.account")


def account_email(profile: dict[str, Any]) -> str:
    """Email of a /me profile (mail, falling back to userPrincipalName)."""
    return str(profile.get("mail") or profile.get("userPrincipalName") or "")


def is_personal_email(email: str) -> bool:
    """True if the address belongs to a consumer Microsoft domain."""
    _, _, domain = email.rpartition("@")
    domain = domain.lower()
    return bool(domain) and any(personal in domain for personal in PERSONAL_ACCOUNT_DOMAINS)


async def is_personal_account(graph: "GraphClient") -> bool:
    """Check whether the signed-in account is a personal Microsoft account.

    Personal accounts cannot use the To Do API through Graph, so this is
    used to warn early. Any failure (no token, HTTP or network error)
    counts as "not personal".

    Args:
        graph: Authenticated Graph client.

    Returns:
        True if the /me profile's email domain is a consumer domain.
    """
    try:
        profile = await graph.request("/me")
    except (GraphApiError, httpx.HTTPError) as e:
        _logger.debug({"event": "account_check_failed", "message": f"Could not check account type: {e}"})
        return False

    email = account_email(profile)
    if not is_personal_email(email):
        return False

    _logger.warning(
        {
            "event": "personal_account_detected",
            "message": (
                f"Your Microsoft account ({email}) appears to be a personal account. "
                "To Do API access through Microsoft Graph is typically only available for "
                "Microsoft 365 work or school accounts; expect MailboxNotEnabledForRESTAPI errors."
            ),
        }
    )
    return True
