"""Pydantic models for Aiya Todo MCP."""

from aiya_todo_mcp.models.inputs import (
    CheckMainTaskCompletionInput,
    CreateTaskGroupInput,
    CreateTodoInput,
    DeleteTodoInput,
    GetExecutableTasksInput,
    GetTaskGroupStatusInput,
    GetTodoDependenciesInput,
    GetTodoInput,
    GetTodosNeedingVerificationInput,
    ListTodosInput,
    ResetTaskExecutionInput,
    SetVerificationMethodInput,
    TaskGroupMainTask,
    TaskGroupSubtask,
    UpdateExecutionStatusInput,
    UpdateTodoInput,
    UpdateVerificationStatusInput,
)
from aiya_todo_mcp.models.results import (
    GroupExecutionStats,
    MainTaskCompletion,
    StateTransitionResult,
    TaskGroup,
    TaskGroupStatus,
    TodoDependencies,
)
from aiya_todo_mcp.models.task import ExecutionConfig, ExecutionStatus, Todo, TodoSnapshot

__all__ = [
    # Todo models
    "ExecutionConfig",
    "ExecutionStatus",
    "Todo",
    "TodoSnapshot",
    # Core input models
    "CreateTodoInput",
    "ListTodosInput",
    "GetTodoInput",
    "UpdateTodoInput",
    "DeleteTodoInput",
    # Verification input models
    "SetVerificationMethodInput",
    "UpdateVerificationStatusInput",
    "GetTodosNeedingVerificationInput",
    # Task group and execution input models
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
]
