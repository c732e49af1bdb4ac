"""Task list tools: get, organized view, create, update, delete."""

from __future__ import annotations

__all__ = [
    "organize_task_lists",
    "register_list_tools",
    "render_lists_by_sharing",
    "render_organized_lists",
]

import re
from typing import Annotated, Literal

from fastmcp import FastMCP
from pydantic import Field

from mstodo_mcp.graph.client import GraphClient
from mstodo_mcp.graph.models import TaskList
from mstodo_mcp.tools.formatting import GRAPH_FAILURES, failure_text, format_task_list

ListId = Annotated[str, Field(description="ID of the task list")]

RULE_WIDTH = 50

SPECIAL = "⭐ Special Lists"
SHARED = "👥 Shared Lists"
OTHER = "📋 Other Lists"
ARCHIVES = "📦 Archives"
ARCHIVED_PREFIX = "📦 Archived - "

# "Groceries (Home - Archived)" lands in "📦 Archived - Home".
_ARCHIVED_SUFFIX = re.compile(r"\(([^)]+?)\s*-\s*Archived\)$", re.IGNORECASE)
_ARCHIVE_PREFIX = re.compile(r"^📦\s*Archive", re.IGNORECASE)
_WORK_PREFIX = re.compile(r"^Work", re.IGNORECASE)

# First match wins; checked after the archive patterns.
_PREFIX_CATEGORIES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("🛒",), "🛒 Shopping Lists"),
    (("🏡",), "🏡 Properties"),
    (("👪",), "👪 Family"),
    (("🎄", "🎉"), "🎉 Seasonal & Events"),
    (("🚗",), "🚗 Travel"),
    (("📰",), "📚 Reading"),
)

_CATEGORY_ORDER = (
    SPECIAL,
    SHARED,
    "💼 Work",
    "👪 Family",
    "🏡 Properties",
    "🛒 Shopping Lists",
    "🚗 Travel",
    "🎉 Seasonal & Events",
    "📚 Reading",
    OTHER,
    ARCHIVES,
)


def _category_for(task_list: TaskList) -> str:
    name = task_list.display_name

    archived = _ARCHIVED_SUFFIX.search(name)
    if archived:
        return f"{ARCHIVED_PREFIX}{archived.group(1).strip()}"
    if _ARCHIVE_PREFIX.match(name):
        return ARCHIVES
    for prefixes, category in _PREFIX_CATEGORIES:
        if name.startswith(prefixes):
            return category
    if _WORK_PREFIX.match(name):
        return "💼 Work"
    if task_list.wellknown_list_name and task_list.wellknown_list_name != "none":
        return SPECIAL
    if task_list.is_shared:
        return SHARED
    return OTHER


def _category_sort_key(category: str) -> tuple[bool, int, str]:
    # Per-source "Archived - X" groups always come last, alphabetically.
    if category.startswith(ARCHIVED_PREFIX):
        return (True, 0, category)
    rank = _CATEGORY_ORDER.index(category) if category in _CATEGORY_ORDER else len(_CATEGORY_ORDER)
    return (False, rank, category)


def organize_task_lists(lists: list[TaskList]) -> dict[str, list[TaskList]]:
    """Group task lists into display categories.

    Lists are placed by name first (archive markers, emoji prefixes, a
    "Work" prefix), then as special (well-known) lists, then as shared
    lists; anything left goes to "Other Lists". Input order is kept
    within each category.

    Returns:
        Category name -> lists, in display order.
    """
    organized: dict[str, list[TaskList]] = {}
    for task_list in lists:
        organized.setdefault(_category_for(task_list), []).append(task_list)
    return {category: organized[category] for category in sorted(organized, key=_category_sort_key)}


def _list_labels(task_list: TaskList) -> list[str]:
    labels = []
    if task_list.wellknown_list_name == "defaultList":
        labels.append("Default")
    if task_list.wellknown_list_name == "flaggedEmails":
        labels.append("Flagged Emails")
    if task_list.is_shared:
        labels.append("Shared by you" if task_list.is_owner else "Shared with you")
    return labels


def render_organized_lists(lists: list[TaskList], *, include_ids: bool = False) -> str:
    """Render lists as a category tree with a summary line."""
    organized = organize_task_lists(lists)
    lines = ["📂 Microsoft To Do Lists - Organized View", "=" * RULE_WIDTH, ""]

    for category, members in organized.items():
        lines.append(f"{category} ({len(members)})")
        for index, task_list in enumerate(members):
            is_last = index == len(members) - 1
            entry = f"{'└─' if is_last else '├─'} {task_list.display_name}"
            labels = _list_labels(task_list)
            if labels:
                entry += f" [{', '.join(labels)}]"
            lines.append(f"   {entry}")
            if not is_last:
                lines.append("   │")
        lines.append("")

    lines.append("-" * RULE_WIDTH)
    lines.append(f"Summary: {len(lists)} lists in {len(organized)} categories")

    if include_ids:
        lines += ["", "", "📋 List IDs Reference:", "-" * RULE_WIDTH]
        lines += [f"{task_list.display_name}: {task_list.id}" for task_list in lists]
    return "\n".join(lines)


def render_lists_by_sharing(lists: list[TaskList]) -> str:
    """Render lists split into shared and personal."""
    shared = [task_list for task_list in lists if task_list.is_shared]
    personal = [task_list for task_list in lists if not task_list.is_shared]

    lines = ["📂 Microsoft To Do Lists - By Sharing Status", "=" * RULE_WIDTH, ""]
    lines.append(f"👥 Shared Lists ({len(shared)})")
    for task_list in shared:
        ownership = "Shared by you" if task_list.is_owner else "Shared with you"
        lines.append(f"   ├─ {task_list.display_name} [{ownership}]")
    lines += ["", f"🔒 Personal Lists ({len(personal)})"]
    lines += [f"   ├─ {task_list.display_name}" for task_list in personal]
    return "\n".join(lines)


def register_list_tools(server: FastMCP, graph: GraphClient) -> None:
    """Register the task list tools on server."""

    async def fetch_lists() -> list[TaskList]:
        response = await graph.request("/me/todo/lists")
        return [TaskList.model_validate(item) for item in response.get("value", [])]

    @server.tool(
        name="get-task-lists",
        description=(
            "Get all Microsoft Todo task lists (the top-level containers that organize your "
            "tasks). Shows list names, IDs, and indicates default or shared lists."
        ),
    )
    async def get_task_lists() -> str:
        try:
            lists = await fetch_lists()
        except GRAPH_FAILURES as e:
            return failure_text("fetching task lists", e)

        if not lists:
            return "No task lists found."
        return "Your task lists:\n\n" + "\n".join(format_task_list(item) for item in lists)

    @server.tool(
        name="get-task-lists-organized",
        description=(
            "Get all task lists organized into logical folders/categories based on naming "
            "patterns, emoji prefixes, and sharing status. Provides a hierarchical view similar "
            "to folder organization."
        ),
    )
    async def get_task_lists_organized(
        include_ids: Annotated[
            bool, Field(description="Include list IDs in output (default: false)")
        ] = False,
        group_by: Annotated[
            Literal["category", "shared"],
            Field(description="Grouping strategy: 'category' (default) or 'shared'"),
        ] = "category",
    ) -> str:
        try:
            lists = await fetch_lists()
        except GRAPH_FAILURES as e:
            return failure_text("fetching organized task lists", e)

        if not lists:
            return "No task lists found."
        if group_by == "shared":
            return render_lists_by_sharing(lists)
        return render_organized_lists(lists, include_ids=include_ids)

    @server.tool(
        name="create-task-list",
        description=(
            "Create a new task list (top-level container) in Microsoft Todo to help organize "
            "your tasks into categories or projects."
        ),
    )
    async def create_task_list(
        display_name: Annotated[str, Field(description="Name of the new task list")],
    ) -> str:
        try:
            response = await graph.request("/me/todo/lists", "POST", {"displayName": display_name})
            created = TaskList.model_validate(response)
        except GRAPH_FAILURES as e:
            return failure_text("creating task list", e)

        return f"Task list created successfully!\nName: {created.display_name}\nID: {created.id}"

    @server.tool(
        name="update-task-list",
        description="Update the name of an existing task list (top-level container) in Microsoft Todo.",
    )
    async def update_task_list(
        list_id: ListId,
        display_name: Annotated[str, Field(description="New name for the task list")],
    ) -> str:
        try:
            response = await graph.request(
                f"/me/todo/lists/{list_id}", "PATCH", {"displayName": display_name}
            )
            updated = TaskList.model_validate(response)
        except GRAPH_FAILURES as e:
            return failure_text("updating task list", e)

        return f"Task list updated successfully!\nNew name: {updated.display_name}"

    @server.tool(
        name="delete-task-list",
        description=(
            "Delete a task list (top-level container) from Microsoft Todo. "
            "This will remove the list and all tasks within it."
        ),
    )
    async def delete_task_list(list_id: ListId) -> str:
        try:
            await graph.request(f"/me/todo/lists/{list_id}", "DELETE")
        except GRAPH_FAILURES as e:
            return failure_text("deleting task list", e)

        return f"Task list with ID: {list_id} was successfully deleted."
