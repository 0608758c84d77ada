"""MCP resources exposing todos as JSON documents."""

from aiya_todo_mcp.errors import TodoNotFoundError
from aiya_todo_mcp.server import get_manager, mcp
from aiya_todo_mcp.utils.formatters import _to_json


@mcp.resource("todo://list", name="All todos", description="List of all todo items", mime_type="application/json")
def todo_list() -> str:
    """All todos as a JSON array."""
    return _to_json(get_manager().get_all_todos())


@mcp.resource(
    "todo://item/{todo_id}",
    name="Todo item",
    description="A single todo item by ID",
    mime_type="application/json",
)
def todo_item(todo_id: str) -> str:
    """One todo as a JSON object."""
    todo = get_manager().get_todo(todo_id)
    if todo is None:
        raise TodoNotFoundError(todo_id)
    return _to_json(todo)
