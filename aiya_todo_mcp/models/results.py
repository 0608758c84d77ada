"""Output models for execution, grouping and dependency operations."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from aiya_todo_mcp.models.task import Todo

_RESULT_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MainTaskCompletion(BaseModel):
    """Outcome of the main-task auto-completion check for a group."""

    model_config = _RESULT_CONFIG

    main_task_completed: bool
    main_task: Todo | None = None
    message: str = ""


class StateTransitionResult(BaseModel):
    """Outcome of an execution state transition request."""

    model_config = _RESULT_CONFIG

    success: bool
    updated_todo: Todo
    message: str
    main_task_completion: MainTaskCompletion | None = None


class GroupExecutionStats(BaseModel):
    """Per-state todo counts for a group; completed todos count as completed."""

    model_config = _RESULT_CONFIG

    total: int = 0
    pending: int = 0
    ready: int = 0
    running: int = 0
    completed: int = 0
    failed: int = 0


class TaskGroup(BaseModel):
    """Todos created by a single task group request."""

    model_config = _RESULT_CONFIG

    group_id: str
    main_task: Todo
    subtasks: list[Todo] = Field(default_factory=list)


class TaskGroupStatus(BaseModel):
    """Status report of a task group."""

    model_config = _RESULT_CONFIG

    group_id: str
    main_task: Todo | None = None
    tasks: list[Todo] = Field(default_factory=list)
    stats: GroupExecutionStats


class TodoDependencies(BaseModel):
    """Dependency neighbourhood of a todo."""

    model_config = _RESULT_CONFIG

    todo: Todo
    blocked_by: list[Todo] = Field(default_factory=list)
    blocks: list[Todo] = Field(default_factory=list)
    missing: list[str] = Field(default_factory=list)
    ready: bool
