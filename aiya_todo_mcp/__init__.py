"""
MCP Server for managing todos.

This server tracks todos with dependencies between them, groups of a main
task and ordered subtasks, verification metadata, and the execution state an
external executor reports for each todo.
"""

# Re-export enums
from aiya_todo_mcp.enums import ExecutionState, ResponseFormat, VerificationStatus

# Re-export errors
from aiya_todo_mcp.errors import (
    CircularDependencyError,
    DependencyError,
    DependencyNotFoundError,
    InvalidStateError,
    PersistenceError,
    TodoError,
    TodoNotFoundError,
    TodoValidationError,
)

# Re-export engine components
from aiya_todo_mcp.execution import VALID_TRANSITIONS, ExecutionStateMachine
from aiya_todo_mcp.manager import TodoManager

# Re-export models
from aiya_todo_mcp.models import (
    CheckMainTaskCompletionInput,
    CreateTaskGroupInput,
    CreateTodoInput,
    DeleteTodoInput,
    ExecutionConfig,
    ExecutionStatus,
    GetExecutableTasksInput,
    GetTaskGroupStatusInput,
    GetTodoDependenciesInput,
    GetTodoInput,
    GetTodosNeedingVerificationInput,
    GroupExecutionStats,
    ListTodosInput,
    MainTaskCompletion,
    ResetTaskExecutionInput,
    SetVerificationMethodInput,
    StateTransitionResult,
    TaskGroup,
    TaskGroupMainTask,
    TaskGroupStatus,
    TaskGroupSubtask,
    Todo,
    TodoDependencies,
    TodoSnapshot,
    UpdateExecutionStatusInput,
    UpdateTodoInput,
    UpdateVerificationStatusInput,
)
from aiya_todo_mcp.persistence import JsonFilePersistence, SnapshotWriter

# Re-export MCP server instance and resources
from aiya_todo_mcp.resources import todo_item, todo_list
from aiya_todo_mcp.server import get_manager, mcp, set_manager
from aiya_todo_mcp.store import TodoStore

# Re-export tools
from aiya_todo_mcp.tools import (
    check_main_task_completion,
    create_task_group,
    create_todo,
    delete_todo,
    get_executable_tasks,
    get_task_group_status,
    get_todo,
    get_todo_dependencies,
    get_todos_needing_verification,
    list_todos,
    reset_task_execution,
    set_verification_method,
    update_execution_status,
    update_todo,
    update_verification_status,
)

__all__ = [
    # Enums
    "ExecutionState",
    "ResponseFormat",
    "VerificationStatus",
    # Errors
    "TodoError",
    "TodoValidationError",
    "TodoNotFoundError",
    "DependencyError",
    "DependencyNotFoundError",
    "CircularDependencyError",
    "InvalidStateError",
    "PersistenceError",
    # Engine
    "VALID_TRANSITIONS",
    "ExecutionStateMachine",
    "TodoManager",
    "TodoStore",
    "JsonFilePersistence",
    "SnapshotWriter",
    # Todo models
    "ExecutionConfig",
    "ExecutionStatus",
    "Todo",
    "TodoSnapshot",
    # Input models
    "CreateTodoInput",
    "ListTodosInput",
    "GetTodoInput",
    "UpdateTodoInput",
    "DeleteTodoInput",
    "SetVerificationMethodInput",
    "UpdateVerificationStatusInput",
    "GetTodosNeedingVerificationInput",
    "TaskGroupMainTask",
    "TaskGroupSubtask",
    "CreateTaskGroupInput",
    "GetExecutableTasksInput",
    "UpdateExecutionStatusInput",
    "GetTaskGroupStatusInput",
    "ResetTaskExecutionInput",
    "CheckMainTaskCompletionInput",
    "GetTodoDependenciesInput",
    # Output models
    "MainTaskCompletion",
    "StateTransitionResult",
    "GroupExecutionStats",
    "TaskGroup",
    "TaskGroupStatus",
    "TodoDependencies",
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
    # Resources
    "todo_list",
    "todo_item",
    # MCP server instance
    "mcp",
    "get_manager",
    "set_manager",
]
