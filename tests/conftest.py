"""Pytest configuration and fixtures for aiya-todo-mcp tests."""

from datetime import datetime, timezone

import pytest
import pytest_asyncio

from aiya_todo_mcp import TodoManager, set_manager
from aiya_todo_mcp.models.task import ExecutionStatus, Todo

from .fakes import InMemoryPersistence


@pytest.fixture
def make_todo():
    """Factory for Todo records with sensible defaults."""

    def _make(todo_id: str, **fields) -> Todo:
        state = fields.pop("state", None)
        if state is not None:
            fields["execution_status"] = ExecutionStatus(state=state)
        fields.setdefault("title", f"Todo {todo_id}")
        fields.setdefault("created_at", datetime(2025, 1, 1, tzinfo=timezone.utc))
        return Todo(id=todo_id, **fields)

    return _make


@pytest.fixture
def persistence():
    return InMemoryPersistence()


@pytest_asyncio.fixture
async def manager(persistence):
    """Initialized TodoManager over in-memory persistence."""
    todo_manager = TodoManager(persistence)
    await todo_manager.initialize()
    yield todo_manager
    await todo_manager.close()


@pytest_asyncio.fixture
async def installed_manager(manager):
    """TodoManager installed for the MCP tools."""
    set_manager(manager)
    yield manager
    set_manager(None)
