"""Checklist item (subtask) tools: get, create, update, delete."""

from __future__ import annotations

__all__ = [
    "register_checklist_tools",
]

from typing import Annotated, Any

from fastmcp import FastMCP
from pydantic import Field

from mstodo_mcp.graph.client import GraphClient
from mstodo_mcp.graph.models import ChecklistItem, TodoTask
from mstodo_mcp.tools.formatting import GRAPH_FAILURES, failure_text, format_checklist_item

ListId = Annotated[str, Field(description="ID of the task list")]
TaskId = Annotated[str, Field(description="ID of the task")]


def _items_path(list_id: str, task_id: str) -> str:
    return f"/me/todo/lists/{list_id}/tasks/{task_id}/checklistItems"


def register_checklist_tools(server: FastMCP, graph: GraphClient) -> None:
    """Register the checklist item tools on server."""

    @server.tool(
        name="get-checklist-items",
        description=(
            "Get checklist items (subtasks) for a specific task. Checklist items are smaller "
            "steps or components that belong to a parent task."
        ),
    )
    async def get_checklist_items(list_id: ListId, task_id: TaskId) -> str:
        # The title is only decoration; a failed lookup must not fail the tool.
        try:
            task = TodoTask.model_validate(await graph.request(f"/me/todo/lists/{list_id}/tasks/{task_id}"))
            title = task.title
        except GRAPH_FAILURES:
            title = "Unknown Task"

        try:
            response = await graph.request(_items_path(list_id, task_id))
            items = [ChecklistItem.model_validate(item) for item in response.get("value", [])]
        except GRAPH_FAILURES as e:
            return failure_text("fetching checklist items", e)

        if not items:
            return f'No checklist items found for task "{title}" (ID: {task_id})'

        formatted = "\n\n".join(format_checklist_item(item) for item in items)
        return f'Checklist items for task "{title}" (ID: {task_id}):\n\n{formatted}'

    @server.tool(
        name="create-checklist-item",
        description=(
            "Create a new checklist item (subtask) for a task. Checklist items help break down "
            "a task into smaller, manageable steps."
        ),
    )
    async def create_checklist_item(
        list_id: ListId,
        task_id: TaskId,
        display_name: Annotated[str, Field(description="Text content of the checklist item")],
        is_checked: Annotated[bool | None, Field(description="Whether the item is checked off")] = None,
    ) -> str:
        payload: dict[str, Any] = {"displayName": display_name}
        if is_checked is not None:
            payload["isChecked"] = is_checked

        try:
            response = await graph.request(_items_path(list_id, task_id), "POST", payload)
            item = ChecklistItem.model_validate(response)
        except GRAPH_FAILURES as e:
            return failure_text("creating checklist item", e)

        return f"Checklist item created successfully!\nContent: {item.display_name}\nID: {item.id}"

    @server.tool(
        name="update-checklist-item",
        description=(
            "Update an existing checklist item (subtask). Allows changing the text content or "
            "completion status of the subtask."
        ),
    )
    async def update_checklist_item(
        list_id: ListId,
        task_id: TaskId,
        checklist_item_id: Annotated[str, Field(description="ID of the checklist item to update")],
        display_name: Annotated[
            str | None, Field(description="New text content of the checklist item")
        ] = None,
        is_checked: Annotated[bool | None, Field(description="Whether the item is checked off")] = None,
    ) -> str:
        payload: dict[str, Any] = {}
        if display_name is not None:
            payload["displayName"] = display_name
        if is_checked is not None:
            payload["isChecked"] = is_checked
        if not payload:
            return "No properties provided for update. Please specify either display_name or is_checked."

        try:
            response = await graph.request(
                f"{_items_path(list_id, task_id)}/{checklist_item_id}", "PATCH", payload
            )
            item = ChecklistItem.model_validate(response)
        except GRAPH_FAILURES as e:
            return failure_text("updating checklist item", e)

        status = "Checked" if item.is_checked else "Not checked"
        return f"Checklist item updated successfully!\nContent: {item.display_name}\nStatus: {status}"

    @server.tool(
        name="delete-checklist-item",
        description=(
            "Delete a checklist item (subtask) from a task. This removes just the specific "
            "subtask, not the parent task."
        ),
    )
    async def delete_checklist_item(
        list_id: ListId,
        task_id: TaskId,
        checklist_item_id: Annotated[str, Field(description="ID of the checklist item to delete")],
    ) -> str:
        try:
            await graph.request(f"{_items_path(list_id, task_id)}/{checklist_item_id}", "DELETE")
        except GRAPH_FAILURES as e:
            return failure_text("deleting checklist item", e)

        return f"Checklist item with ID: {checklist_item_id} was successfully deleted from task: {task_id}"
