"""MCP tools for Microsoft To Do.

Each module registers one group of tools on a FastMCP server:
- status: auth-status
- lists: task list CRUD
- tasks: task CRUD
- checklist: checklist item CRUD
- bulk: archive-completed-tasks, move-task
"""

from __future__ import annotations

__all__ = [
    "register_all_tools",
]

from fastmcp import FastMCP

from mstodo_mcp.auth.token_manager import TokenManager
from mstodo_mcp.graph.client import GraphClient
from mstodo_mcp.tools.bulk import register_bulk_tools
from mstodo_mcp.tools.checklist import register_checklist_tools
from mstodo_mcp.tools.lists import register_list_tools
from mstodo_mcp.tools.status import register_status_tools
from mstodo_mcp.tools.tasks import register_task_tools


def register_all_tools(server: FastMCP, token_manager: TokenManager, graph: GraphClient) -> None:
    """Register every tool group on server."""
    register_status_tools(server, token_manager, graph)
    register_list_tools(server, graph)
    register_task_tools(server, graph)
    register_checklist_tools(server, graph)
    register_bulk_tools(server, graph)
