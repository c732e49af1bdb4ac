"""Multi-request tools: archive completed tasks, move a task between lists.

Graph has no move operation for tasks, so both tools copy the task into
the target list and then delete the original. Per-task failures are
collected and reported; they never abort the whole run.
"""

from __future__ import annotations

__all__ = [
    "ARCHIVE_COPY_FIELDS",
    "MOVE_COPY_FIELDS",
    "copy_fields",
    "register_bulk_tools",
]

from datetime import datetime, timedelta, timezone
from typing import Annotated, Any

from fastmcp import FastMCP
from pydantic import Field

from mstodo_mcp.graph.client import GraphClient
from mstodo_mcp.graph.models import ChecklistItem, TodoTask
from mstodo_mcp.tools.formatting import GRAPH_FAILURES, failure_text, format_date
from mstodo_mcp.tools.tasks import build_task_query
from mstodo_mcp.utils.logging.logger_setup import get_logger

_logger = get_logger("tools.bulk")

ARCHIVE_COPY_FIELDS: tuple[str, ...] = (
    "title",
    "body",
    "importance",
    "completedDateTime",
    "dueDateTime",
    "reminderDateTime",
    "categories",
)

# Writable todoTask properties carried over by move-task.
MOVE_COPY_FIELDS: tuple[str, ...] = (
    "title",
    "body",
    "dueDateTime",
    "startDateTime",
    "importance",
    "isReminderOn",
    "reminderDateTime",
    "status",
    "categories",
    "recurrence",
    "linkedResources",
    "completedDateTime",
)

DEFAULT_ARCHIVE_AGE_DAYS = 90


def copy_fields(raw: dict[str, Any], fields: tuple[str, ...]) -> dict[str, Any]:
    """Subset of a Graph task payload, skipping absent and null values."""
    return {field: raw[field] for field in fields if raw.get(field) is not None}


def register_bulk_tools(server: FastMCP, graph: GraphClient) -> None:
    """Register archive-completed-tasks and move-task on server."""

    @server.tool(
        name="archive-completed-tasks",
        description=(
            "Move completed tasks older than a specified number of days from one list to another "
            "(archive) list. Useful for cleaning up active lists while preserving historical tasks."
        ),
    )
    async def archive_completed_tasks(
        source_list_id: Annotated[str, Field(description="ID of the source list to archive tasks from")],
        target_list_id: Annotated[str, Field(description="ID of the target archive list")],
        older_than_days: Annotated[
            int,
            Field(description="Archive tasks completed more than this many days ago (default: 90)", ge=0),
        ] = DEFAULT_ARCHIVE_AGE_DAYS,
        dry_run: Annotated[
            bool, Field(description="If true, only preview what would be archived without making changes")
        ] = False,
    ) -> str:
        cutoff = datetime.now(timezone.utc) - timedelta(days=older_than_days)

        try:
            query = build_task_query(filter="status eq 'completed'")
            response = await graph.request(f"/me/todo/lists/{source_list_id}/tasks?{query}")
            completed_tasks = [(raw, TodoTask.model_validate(raw)) for raw in response.get("value", [])]
        except GRAPH_FAILURES as e:
            return failure_text("archiving tasks", e)

        candidates: list[tuple[dict[str, Any], TodoTask]] = []
        for raw, task in completed_tasks:
            completed = task.completed_date_time.as_datetime() if task.completed_date_time else None
            if completed is not None and completed < cutoff:
                candidates.append((raw, task))

        if not candidates:
            return f"No completed tasks found older than {older_than_days} days."

        if dry_run:
            lines = [
                "Archive Preview",
                f"Would archive {len(candidates)} tasks completed before {format_date(cutoff)}",
                "",
            ]
            lines += [
                f"- {task.title} (completed: {format_date(task.completed_date_time)})"
                for _, task in candidates
            ]
            return "\n".join(lines)

        archived = 0
        failed: list[str] = []
        for raw, task in candidates:
            payload = copy_fields(raw, ARCHIVE_COPY_FIELDS)
            payload["status"] = "completed"
            try:
                await graph.request(f"/me/todo/lists/{target_list_id}/tasks", "POST", payload)
                await graph.request(f"/me/todo/lists/{source_list_id}/tasks/{task.id}", "DELETE")
            except GRAPH_FAILURES as e:
                _logger.warning(
                    {
                        "event": "archive_task_failed",
                        "message": f"Failed to archive task {task.id}: {e}",
                        "task_id": task.id,
                    }
                )
                failed.append(task.title)
                continue
            archived += 1

        lines = [
            "Archive Complete",
            f"Successfully archived {archived} of {len(candidates)} tasks",
            f"Tasks completed before {format_date(cutoff)} were moved.",
        ]
        if failed:
            lines += ["", f"Failed to archive {len(failed)} tasks:"]
            lines += [f"- {title}" for title in failed]
        return "\n".join(lines)

    @server.tool(
        name="move-task",
        description=(
            "Move a task from one list to another, preserving checklist items and most metadata. "
            "Tasks with attachments cannot be moved. Creation timestamps cannot be preserved due "
            "to API limitations."
        ),
    )
    async def move_task(
        source_list_id: Annotated[str, Field(description="ID of the source task list")],
        source_task_id: Annotated[str, Field(description="ID of the task to move")],
        target_list_id: Annotated[str, Field(description="ID of the target task list")],
    ) -> str:
        source_path = f"/me/todo/lists/{source_list_id}/tasks/{source_task_id}"
        try:
            raw = await graph.request(source_path)
            original = TodoTask.model_validate(raw)
        except GRAPH_FAILURES as e:
            return failure_text("moving task", e)

        if original.has_attachments:
            return (
                f'Cannot move task "{original.title}" because it has attachments. '
                "Tasks with attachments cannot be moved between lists."
            )

        try:
            checklist = await graph.request(f"{source_path}/checklistItems")
            items = [ChecklistItem.model_validate(item) for item in checklist.get("value", [])]
        except GRAPH_FAILURES as e:
            return failure_text("moving task", e)

        payload = copy_fields(raw, MOVE_COPY_FIELDS)
        if "body" in payload:
            payload["body"] = {
                "content": original.body.content if original.body else "",
                "contentType": original.body.content_type if original.body else "text",
            }
        try:
            created = TodoTask.model_validate(
                await graph.request(f"/me/todo/lists/{target_list_id}/tasks", "POST", payload)
            )
        except GRAPH_FAILURES as e:
            return failure_text("moving task", e)

        copied = 0
        for item in items:
            try:
                await graph.request(
                    f"/me/todo/lists/{target_list_id}/tasks/{created.id}/checklistItems",
                    "POST",
                    {"displayName": item.display_name, "isChecked": item.is_checked},
                )
            except GRAPH_FAILURES as e:
                _logger.warning(
                    {
                        "event": "checklist_copy_failed",
                        "message": f"Failed to copy checklist item {item.id}: {e}",
                        "task_id": created.id,
                    }
                )
                continue
            copied += 1

        # The copy already exists; keep the original rather than lose checklist items.
        if copied < len(items):
            deleted = False
        else:
            try:
                await graph.request(source_path, "DELETE")
                deleted = True
            except GRAPH_FAILURES as e:
                _logger.warning(
                    {
                        "event": "move_delete_failed",
                        "message": f"Failed to delete original task {source_task_id}: {e}",
                        "task_id": source_task_id,
                    }
                )
                deleted = False

        lines = [
            f'Successfully moved task "{original.title}"'
            if deleted
            else f'Copied task "{original.title}" but the original was not deleted',
            "",
            "Details:",
            f"- Task ID: {created.id}",
            f"- Checklist items moved: {copied} of {len(items)}",
            f"- Original task deleted: {'Yes' if deleted else 'No'}",
        ]
        if not deleted:
            lines.append(f"- The original task is still in list {source_list_id}; delete it manually.")
        lines += ["", "Note: creation and modification timestamps are set by the API and were not preserved."]
        return "\n".join(lines)
