"""Text rendering shared by the tool modules.

Tools always answer with text. failure_text() is the single place where
request-layer exceptions become user-facing messages.
"""

from __future__ import annotations

__all__ = [
    "GRAPH_FAILURES",
    "failure_text",
    "format_checklist_item",
    "format_date",
    "format_task",
    "format_task_list",
]

from datetime import datetime, timezone

import httpx
from pydantic import ValidationError

from mstodo_mcp.exceptions import GraphApiError, UnauthenticatedError
from mstodo_mcp.graph.models import ChecklistItem, DateTimeTimeZone, TaskList, TodoTask

# Exceptions a tool converts to text instead of raising.
GRAPH_FAILURES: tuple[type[Exception], ...] = (GraphApiError, httpx.HTTPError, ValidationError)

BODY_PREVIEW_LENGTH = 50


def failure_text(action: str, error: Exception) -> str:
    """Describe a failed Graph call.

    Args:
        action: What the tool was doing, e.g. "fetching task lists".
        error: The caught exception.

    Returns:
        "Failed to authenticate with Microsoft API" for missing tokens,
        a short note for payloads that do not match the
        expected shape, otherwise "Error <action>: <error>".
    """
    if isinstance(error, UnauthenticatedError):
        return str(error)
    if isinstance(error, ValidationError):
        return f"Error {action}: unexpected response from Microsoft Graph ({error.error_count()} invalid fields)"
    return f"Error {action}: {error}"


def format_date(value: DateTimeTimeZone | datetime | None, *, with_time: bool = False) -> str:
    """Render a Graph date as YYYY-MM-DD (or YYYY-MM-DD HH:MM UTC)."""
    if isinstance(value, DateTimeTimeZone):
        parsed = value.as_datetime()
        if parsed is None:
            return value.date_time
        value = parsed
    if value is None:
        return "Unknown"
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%d %H:%M UTC" if with_time else "%Y-%m-%d")


def format_task_list(task_list: TaskList) -> str:
    well_known = ""
    if task_list.wellknown_list_name == "defaultList":
        well_known = " (Default Tasks List)"
    elif task_list.wellknown_list_name == "flaggedEmails":
        well_known = " (Flagged Emails)"

    sharing = ""
    if task_list.is_shared:
        sharing = " (Shared by you)" if task_list.is_owner else " (Shared with you)"

    return f"ID: {task_list.id}\nName: {task_list.display_name}{well_known}{sharing}\n---"


def format_task(task: TodoTask) -> str:
    info = f"ID: {task.id}\nTitle: {task.title}"
    if task.status:
        info = f"{'✓' if task.is_completed else '○'} {info}"
    if task.due_date_time:
        info += f"\nDue: {format_date(task.due_date_time)}"
    if task.importance:
        info += f"\nImportance: {task.importance}"
    if task.categories:
        info += f"\nCategories: {', '.join(task.categories)}"
    if task.body and task.body.content.strip():
        content = task.body.content
        if len(content) > BODY_PREVIEW_LENGTH:
            content = content[:BODY_PREVIEW_LENGTH] + "..."
        info += f"\nDescription: {content}"
    return f"{info}\n---"


def format_checklist_item(item: ChecklistItem) -> str:
    info = f"{'✓' if item.is_checked else '○'} {item.display_name} (ID: {item.id})"
    if item.created_date_time:
        created = DateTimeTimeZone(dateTime=item.created_date_time)
        info += f"\nCreated: {format_date(created, with_time=True)}"
    return info
