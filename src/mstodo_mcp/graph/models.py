"""Pydantic models for the Microsoft To Do resources the tools read.

Only fields the tools display or copy are declared; everything else in a
Graph payload is ignored. Field names follow Graph's camelCase through
aliases so payloads validate directly.
"""

from __future__ import annotations

__all__ = [
    "ChecklistItem",
    "DateTimeTimeZone",
    "ItemBody",
    "TaskList",
    "TodoTask",
    "to_graph_datetime",
]

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class _GraphModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class DateTimeTimeZone(_GraphModel):
    """Graph dateTimeTimeZone value."""

    date_time: str = Field(alias="dateTime")
    time_zone: str = Field(default="UTC", alias="timeZone")

    def as_datetime(self) -> datetime | None:
        """Parse dateTime as an aware datetime (naive values are taken as UTC).

        Returns:
            datetime, or None if the value cannot be parsed.
        """
        value = self.date_time
        # Graph sends seven fractional digits; fromisoformat accepts at most six.
        if "." in value:
            head, _, frac = value.partition(".")
            digits = "".join(ch for ch in frac if ch.isdigit())
            suffix = frac[len(digits) :]
            value = f"{head}.{digits[:6]}{suffix}"
        value = value.replace("Z", "+00:00")
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError:
            return None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed


class ItemBody(_GraphModel):
    """Graph itemBody value."""

    content: str = ""
    content_type: str = Field(default="text", alias="contentType")


class TaskList(_GraphModel):
    """A To Do task list (top-level container)."""

    id: str
    display_name: str = Field(default="", alias="displayName")
    is_owner: bool | None = Field(default=None, alias="isOwner")
    is_shared: bool | None = Field(default=None, alias="isShared")
    wellknown_list_name: str | None = Field(default=None, alias="wellknownListName")


class TodoTask(_GraphModel):
    """A To Do task."""

    id: str
    title: str = ""
    status: str | None = None
    importance: str | None = None
    has_attachments: bool | None = Field(default=None, alias="hasAttachments")
    is_reminder_on: bool | None = Field(default=None, alias="isReminderOn")
    categories: list[str] = Field(default_factory=list)
    body: ItemBody | None = None
    due_date_time: DateTimeTimeZone | None = Field(default=None, alias="dueDateTime")
    start_date_time: DateTimeTimeZone | None = Field(default=None, alias="startDateTime")
    completed_date_time: DateTimeTimeZone | None = Field(default=None, alias="completedDateTime")
    reminder_date_time: DateTimeTimeZone | None = Field(default=None, alias="reminderDateTime")
    recurrence: dict[str, Any] | None = None
    linked_resources: list[dict[str, Any]] | None = Field(default=None, alias="linkedResources")
    created_date_time: str | None = Field(default=None, alias="createdDateTime")

    @property
    def is_completed(self) -> bool:
        return self.status == "completed"


class ChecklistItem(_GraphModel):
    """A checklist item (subtask) of a task."""

    id: str
    display_name: str = Field(default="", alias="displayName")
    is_checked: bool = Field(default=False, alias="isChecked")
    created_date_time: str | None = Field(default=None, alias="createdDateTime")


def to_graph_datetime(value: str) -> dict[str, str]:
    """Wrap an ISO 8601 string as a UTC dateTimeTimeZone payload."""
    return {"dateTime": value, "timeZone": "UTC"}
