"""Utility functions for Aiya Todo MCP."""

from aiya_todo_mcp.utils.formatters import (
    _format_dependencies_markdown,
    _format_group_status_markdown,
    _format_todo_concise,
    _format_todo_markdown,
    _format_todos_concise,
    _format_todos_markdown,
    _to_json,
)

__all__ = [
    "_to_json",
    "_format_todo_concise",
    "_format_todos_concise",
    "_format_todo_markdown",
    "_format_todos_markdown",
    "_format_group_status_markdown",
    "_format_dependencies_markdown",
]
