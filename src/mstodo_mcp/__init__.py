"""mstodo-mcp: Microsoft To Do tools for MCP hosts.

Exposes task lists, tasks and checklist items as MCP tools backed by
Microsoft Graph, with OAuth token persistence and refresh handled in
mstodo_mcp.auth.
"""

__version__ = "0.1.0"
