"""Microsoft Graph access.

- client: bearer-authenticated requests with a single 401 refresh-and-retry
- models: To Do resource models (task lists, tasks, checklist items)
- account: personal-account detection
"""

from mstodo_mcp.graph.account import is_personal_account
from mstodo_mcp.graph.client import GraphClient
from mstodo_mcp.graph.models import ChecklistItem, TaskList, TodoTask

__all__ = [
    "ChecklistItem",
    "GraphClient",
    "TaskList",
    "TodoTask",
    "is_personal_account",
]
