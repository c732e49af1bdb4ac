"""FastMCP server assembly.

Components are built once per process and passed by reference:

    Settings -> TokenStore -> TokenManager -> GraphClient -> FastMCP tools

One httpx.AsyncClient is shared by the token endpoint and Graph calls and
closed when the server stops.
"""

from __future__ import annotations

__all__ = [
    "create_server",
    "serve",
]

import httpx
from fastmcp import FastMCP

from mstodo_mcp import __version__
from mstodo_mcp.auth.token_manager import TokenManager
from mstodo_mcp.auth.token_storage import TokenStore
from mstodo_mcp.config import Settings
from mstodo_mcp.constants import SERVER_NAME
from mstodo_mcp.exceptions import StartupError
from mstodo_mcp.graph.account import is_personal_account
from mstodo_mcp.graph.client import GraphClient
from mstodo_mcp.tools import register_all_tools
from mstodo_mcp.utils.logging.logger_setup import get_logger

_logger = get_logger("server")


def create_server(token_manager: TokenManager, graph: GraphClient) -> FastMCP:
    """Create the FastMCP server with every To Do tool registered.

    Args:
        token_manager: Token lifecycle manager (used by auth-status).
        graph: Authenticated Graph client (used by every other tool).

    Returns:
        FastMCP server, not yet running.
    """
    server: FastMCP = FastMCP(SERVER_NAME, version=__version__)
    register_all_tools(server, token_manager, graph)
    return server


async def serve(settings: Settings) -> None:
    """Build all components and serve over stdio until the host disconnects.

    Args:
        settings: Process settings.

    Raises:
        StartupError: If the token directory cannot be created.
    """
    store = TokenStore(settings.token_dir, settings.legacy_token_path)
    try:
        store.locate()
    except OSError as e:
        raise StartupError(f"Cannot create token directory {settings.token_dir}: {e}") from e

    _logger.info(
        {
            "event": "server_starting",
            "message": f"Token file path: {store.path}",
            "path": str(store.path),
        }
    )

    async with httpx.AsyncClient(timeout=settings.http_timeout) as http_client:
        token_manager = TokenManager(settings, store, http_client)
        graph = GraphClient(token_manager, http_client)
        server = create_server(token_manager, graph)

        # Warn early; the result only affects the log.
        await is_personal_account(graph)

        _logger.info({"event": "server_started", "message": "Server started and listening on stdio"})
        await server.run_async(transport="stdio", show_banner=False)
