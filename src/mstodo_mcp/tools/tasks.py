"""Task tools: get, create, update, delete."""

from __future__ import annotations

__all__ = [
    "Importance",
    "TaskStatus",
    "build_task_body",
    "build_task_query",
    "register_task_tools",
]

from typing import Annotated, Any, Literal
from urllib.parse import quote, urlencode

from fastmcp import FastMCP
from pydantic import Field

from mstodo_mcp.graph.client import GraphClient
from mstodo_mcp.graph.models import TodoTask, to_graph_datetime
from mstodo_mcp.tools.formatting import GRAPH_FAILURES, failure_text, format_task

Importance = Literal["low", "normal", "high"]
TaskStatus = Literal["notStarted", "inProgress", "completed", "waitingOnOthers", "deferred"]

ListId = Annotated[str, Field(description="ID of the task list")]

_DATE_FIELDS = ("dueDateTime", "startDateTime", "reminderDateTime")


def build_task_query(
    *,
    filter: str | None = None,
    select: str | None = None,
    orderby: str | None = None,
    top: int | None = None,
    skip: int | None = None,
    count: bool | None = None,
) -> str:
    """Build an OData query string ("" when no option is set)."""
    params: list[tuple[str, str]] = []
    if filter:
        params.append(("$filter", filter))
    if select:
        params.append(("$select", select))
    if orderby:
        params.append(("$orderby", orderby))
    if top is not None:
        params.append(("$top", str(top)))
    if skip is not None:
        params.append(("$skip", str(skip)))
    if count is not None:
        params.append(("$count", "true" if count else "false"))
    return urlencode(params, quote_via=quote, safe="$'") if params else ""


def build_task_body(
    *,
    title: str | None = None,
    body: str | None = None,
    due_date_time: str | None = None,
    start_date_time: str | None = None,
    importance: str | None = None,
    is_reminder_on: bool | None = None,
    reminder_date_time: str | None = None,
    status: str | None = None,
    categories: list[str] | None = None,
    clear_empty_dates: bool = False,
) -> dict[str, Any]:
    """Build a Graph todoTask payload from tool arguments.

    Arguments left as None are omitted. With clear_empty_dates, an empty
    date string is sent as null, which removes that date from the task.
    """
    payload: dict[str, Any] = {}
    if title is not None:
        payload["title"] = title
    if body is not None:
        payload["body"] = {"content": body, "contentType": "text"}

    dates = {
        "dueDateTime": due_date_time,
        "startDateTime": start_date_time,
        "reminderDateTime": reminder_date_time,
    }
    for field in _DATE_FIELDS:
        value = dates[field]
        if value is None:
            continue
        if value == "":
            if clear_empty_dates:
                payload[field] = None
            continue
        payload[field] = to_graph_datetime(value)

    if importance is not None:
        payload["importance"] = importance
    if is_reminder_on is not None:
        payload["isReminderOn"] = is_reminder_on
    if status is not None:
        payload["status"] = status
    if categories is not None:
        payload["categories"] = categories
    return payload


def register_task_tools(server: FastMCP, graph: GraphClient) -> None:
    """Register the task tools on server."""

    @server.tool(
        name="get-tasks",
        description=(
            "Get tasks from a specific Microsoft Todo list. These are the main todo items "
            "that can contain checklist items (subtasks)."
        ),
    )
    async def get_tasks(
        list_id: ListId,
        filter: Annotated[
            str | None, Field(description="OData $filter query (e.g., \"status eq 'completed'\")")
        ] = None,
        select: Annotated[
            str | None, Field(description="Comma-separated properties to include (e.g., 'id,title,status')")
        ] = None,
        orderby: Annotated[
            str | None, Field(description="Property to sort by (e.g., 'createdDateTime desc')")
        ] = None,
        top: Annotated[int | None, Field(description="Maximum number of tasks to retrieve", ge=0)] = None,
        skip: Annotated[int | None, Field(description="Number of tasks to skip", ge=0)] = None,
        count: Annotated[bool | None, Field(description="Whether to include a count of tasks")] = None,
    ) -> str:
        query = build_task_query(
            filter=filter, select=select, orderby=orderby, top=top, skip=skip, count=count
        )
        path = f"/me/todo/lists/{list_id}/tasks" + (f"?{query}" if query else "")
        try:
            response = await graph.request(path)
            tasks = [TodoTask.model_validate(item) for item in response.get("value", [])]
        except GRAPH_FAILURES as e:
            return failure_text("fetching tasks", e)

        if not tasks:
            return f"No tasks found in list with ID: {list_id}"

        count_info = ""
        if count and "@odata.count" in response:
            count_info = f"Total count: {response['@odata.count']}\n\n"
        formatted = "\n".join(format_task(task) for task in tasks)
        return f"Tasks in list {list_id}:\n\n{count_info}{formatted}"

    @server.tool(
        name="create-task",
        description=(
            "Create a new task in a specific Microsoft Todo list. A task is the main todo item "
            "that can have a title, description, due date, and other properties."
        ),
    )
    async def create_task(
        list_id: ListId,
        title: Annotated[str, Field(description="Title of the task")],
        body: Annotated[str | None, Field(description="Description or body content of the task")] = None,
        due_date_time: Annotated[
            str | None, Field(description="Due date in ISO format (e.g., 2023-12-31T23:59:59Z)")
        ] = None,
        start_date_time: Annotated[
            str | None, Field(description="Start date in ISO format (e.g., 2023-12-31T23:59:59Z)")
        ] = None,
        importance: Annotated[Importance | None, Field(description="Task importance")] = None,
        is_reminder_on: Annotated[
            bool | None, Field(description="Whether to enable reminder for this task")
        ] = None,
        reminder_date_time: Annotated[
            str | None, Field(description="Reminder date and time in ISO format")
        ] = None,
        status: Annotated[TaskStatus | None, Field(description="Status of the task")] = None,
        categories: Annotated[
            list[str] | None, Field(description="Categories associated with the task")
        ] = None,
    ) -> str:
        payload = build_task_body(
            title=title,
            body=body or None,
            due_date_time=due_date_time,
            start_date_time=start_date_time,
            importance=importance,
            is_reminder_on=is_reminder_on,
            reminder_date_time=reminder_date_time,
            status=status,
            categories=categories or None,
        )
        try:
            created = TodoTask.model_validate(
                await graph.request(f"/me/todo/lists/{list_id}/tasks", "POST", payload)
            )
        except GRAPH_FAILURES as e:
            return failure_text("creating task", e)

        return f"Task created successfully!\nID: {created.id}\nTitle: {created.title}"

    @server.tool(
        name="update-task",
        description=(
            "Update an existing task in Microsoft Todo. Allows changing any properties of the "
            "task including title, due date, importance, etc. Pass an empty string for a date "
            "to remove it."
        ),
    )
    async def update_task(
        list_id: ListId,
        task_id: Annotated[str, Field(description="ID of the task to update")],
        title: Annotated[str | None, Field(description="New title of the task")] = None,
        body: Annotated[
            str | None, Field(description="New description or body content of the task")
        ] = None,
        due_date_time: Annotated[
            str | None, Field(description="New due date in ISO format, or empty string to remove")
        ] = None,
        start_date_time: Annotated[
            str | None, Field(description="New start date in ISO format, or empty string to remove")
        ] = None,
        importance: Annotated[Importance | None, Field(description="New task importance")] = None,
        is_reminder_on: Annotated[
            bool | None, Field(description="Whether to enable reminder for this task")
        ] = None,
        reminder_date_time: Annotated[
            str | None, Field(description="New reminder date in ISO format, or empty string to remove")
        ] = None,
        status: Annotated[TaskStatus | None, Field(description="New status of the task")] = None,
        categories: Annotated[
            list[str] | None, Field(description="New categories associated with the task")
        ] = None,
    ) -> str:
        payload = build_task_body(
            title=title,
            body=body,
            due_date_time=due_date_time,
            start_date_time=start_date_time,
            importance=importance,
            is_reminder_on=is_reminder_on,
            reminder_date_time=reminder_date_time,
            status=status,
            categories=categories,
            clear_empty_dates=True,
        )
        if not payload:
            return "No properties provided for update. Please specify at least one property to change."

        try:
            response = await graph.request(f"/me/todo/lists/{list_id}/tasks/{task_id}", "PATCH", payload)
            updated = TodoTask.model_validate(response)
        except GRAPH_FAILURES as e:
            return failure_text("updating task", e)

        return f"Task updated successfully!\nID: {updated.id}\nTitle: {updated.title}"

    @server.tool(
        name="delete-task",
        description=(
            "Delete a task from a Microsoft Todo list. This will remove the task and all its "
            "checklist items (subtasks)."
        ),
    )
    async def delete_task(
        list_id: ListId,
        task_id: Annotated[str, Field(description="ID of the task to delete")],
    ) -> str:
        try:
            await graph.request(f"/me/todo/lists/{list_id}/tasks/{task_id}", "DELETE")
        except GRAPH_FAILURES as e:
            return failure_text("deleting task", e)

        return f"Task with ID: {task_id} was successfully deleted from list: {list_id}"
