"""MCP tool definitions for Aiya Todo MCP."""

# Import all tools to register them with the MCP server
from aiya_todo_mcp.tools.core import (
    create_todo,
    delete_todo,
    get_todo,
    get_todos_needing_verification,
    list_todos,
    set_verification_method,
    update_todo,
    update_verification_status,
)
from aiya_todo_mcp.tools.execution import (
    check_main_task_completion,
    create_task_group,
    get_executable_tasks,
    get_task_group_status,
    get_todo_dependencies,
    reset_task_execution,
    update_execution_status,
)

__all__ = [
    # Core tools
    "create_todo",
    "list_todos",
    "get_todo",
    "update_todo",
    "delete_todo",
    "set_verification_method",
    "update_verification_status",
    "get_todos_needing_verification",
    # Task group and execution tools
    "create_task_group",
    "get_executable_tasks",
    "update_execution_status",
    "get_task_group_status",
    "reset_task_execution",
    "check_main_task_completion",
    "get_todo_dependencies",
]
