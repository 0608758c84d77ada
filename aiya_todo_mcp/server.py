"""FastMCP server initialization for Aiya Todo MCP."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from mcp.server.fastmcp import FastMCP

from aiya_todo_mcp.config import Settings, load_settings
from aiya_todo_mcp.manager import TodoManager
from aiya_todo_mcp.persistence import JsonFilePersistence

logger = logging.getLogger(__name__)

_manager: TodoManager | None = None
_settings: Settings | None = None


def configure(settings: Settings) -> None:
    """Select the settings used when the server starts."""
    global _settings
    _settings = settings


def set_manager(manager: TodoManager | None) -> None:
    """Install the manager the tools operate on."""
    global _manager
    _manager = manager


def get_manager() -> TodoManager:
    if _manager is None:
        raise RuntimeError("TodoManager is not initialized; start the server with run()")
    return _manager


@asynccontextmanager
async def _lifespan(_server: FastMCP) -> AsyncIterator[None]:
    settings = _settings or load_settings()
    manager = TodoManager(
        JsonFilePersistence(settings.todo_file),
        strict_durability=settings.strict_durability,
    )
    await manager.initialize()
    set_manager(manager)
    logger.info("Todo server running on stdio (file=%s)", settings.todo_file)
    try:
        yield
    finally:
        await manager.close()
        set_manager(None)
        logger.info("Todo server stopped")


# Initialize the MCP server
mcp = FastMCP("aiya_todo_mcp", lifespan=_lifespan)


def run() -> None:
    """Run the MCP server."""
    # Registers the tools and resources on `mcp`.
    import aiya_todo_mcp.resources  # noqa: F401
    import aiya_todo_mcp.tools  # noqa: F401

    mcp.run()


if __name__ == "__main__":
    run()
