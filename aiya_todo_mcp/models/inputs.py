"""Input models for Aiya Todo MCP tools.

Field names are snake_case in Python and camelCase on the wire (``todoId``,
``groupId``, ...); either spelling is accepted when validating.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from aiya_todo_mcp.enums import ExecutionState, ResponseFormat, VerificationStatus
from aiya_todo_mcp.models.task import ExecutionConfig, ExecutionStatus

_INPUT_CONFIG = ConfigDict(str_strip_whitespace=True, alias_generator=to_camel, populate_by_name=True)

_FORMAT_DESCRIPTION = "Output format: 'markdown' for human-readable, 'json' for machine-readable, or 'concise'"

# ============================================================================
# Core Tool Input Models
# ============================================================================


class CreateTodoInput(BaseModel):
    """Input model for creating a new todo."""

    model_config = _INPUT_CONFIG

    title: str = Field(..., description="Title of the todo (required)", min_length=1, max_length=1000)
    description: str | None = Field(default=None, description="Longer description of the work")
    tags: list[str] | None = Field(default=None, description="Free-form tags", max_length=50)
    group_id: str | None = Field(default=None, description="Group this todo belongs to")
    verification_method: str | None = Field(
        default=None, description="How to verify the todo is done (e.g., 'run the test suite')"
    )
    dependencies: list[str] | None = Field(default=None, description="IDs of todos this todo waits on")
    execution_order: int | None = Field(
        default=None, description="Ordering within the group; 0 marks the group's main task", ge=0
    )
    execution_config: ExecutionConfig | None = Field(
        default=None, description="Opaque execution settings (toolsRequired, params, retryOnFailure)"
    )
    execution_status: ExecutionStatus | None = Field(default=None, description="Initial execution status")
    completed: bool | None = Field(default=None, description="Initial completion flag (defaults to false)")


class ListTodosInput(BaseModel):
    """Input model for listing todos."""

    model_config = _INPUT_CONFIG

    completed: bool | None = Field(default=None, description="Filter by completion status (optional)")
    group_id: str | None = Field(default=None, description="Only list todos of this group (optional)")
    response_format: ResponseFormat = Field(default=ResponseFormat.MARKDOWN, description=_FORMAT_DESCRIPTION)


class GetTodoInput(BaseModel):
    """Input model for getting a single todo."""

    model_config = _INPUT_CONFIG

    id: str = Field(..., description="ID of the todo to retrieve", min_length=1)
    response_format: ResponseFormat = Field(default=ResponseFormat.MARKDOWN, description=_FORMAT_DESCRIPTION)


class UpdateTodoInput(BaseModel):
    """Input model for updating a todo. Only the fields provided are changed."""

    model_config = _INPUT_CONFIG

    id: str = Field(..., description="ID of the todo to update", min_length=1)
    title: str | None = Field(default=None, description="New title", min_length=1, max_length=1000)
    description: str | None = Field(default=None, description="New description")
    completed: bool | None = Field(default=None, description="New completion status")
    tags: list[str] | None = Field(default=None, description="Replacement tag list")
    group_id: str | None = Field(default=None, description="New group ID")
    verification_method: str | None = Field(default=None, description="New verification method")
    verification_status: VerificationStatus | None = Field(default=None, description="New verification status")
    verification_notes: str | None = Field(default=None, description="New verification notes")
    dependencies: list[str] | None = Field(
        default=None, description="Replacement dependency IDs (an empty list clears them)"
    )
    execution_order: int | None = Field(default=None, description="New execution order", ge=0)
    execution_config: ExecutionConfig | None = Field(default=None, description="Replacement execution settings")
    execution_status: ExecutionStatus | None = Field(
        default=None, description="Replacement execution status (bypasses transition checks)"
    )

    @model_validator(mode="after")
    def validate_has_changes(self) -> "UpdateTodoInput":
        if not any(getattr(self, name) is not None for name in self.model_fields_set if name != "id"):
            raise ValueError("At least one field must be provided for update")
        return self


class DeleteTodoInput(BaseModel):
    """Input model for deleting a todo."""

    model_config = _INPUT_CONFIG

    id: str = Field(..., description="ID of the todo to delete", min_length=1)


# ============================================================================
# Verification Input Models
# ============================================================================


class SetVerificationMethodInput(BaseModel):
    """Input model for attaching a verification method to a todo."""

    model_config = _INPUT_CONFIG

    todo_id: str = Field(..., description="ID of the todo", min_length=1)
    method: str = Field(..., description="How the todo should be verified", min_length=1, max_length=2000)
    notes: str | None = Field(default=None, description="Optional verification notes")


class UpdateVerificationStatusInput(BaseModel):
    """Input model for recording a verification outcome."""

    model_config = _INPUT_CONFIG

    todo_id: str = Field(..., description="ID of the todo", min_length=1)
    status: VerificationStatus = Field(..., description="Verification status: pending, verified or failed")
    notes: str | None = Field(default=None, description="Optional verification notes")


class GetTodosNeedingVerificationInput(BaseModel):
    """Input model for listing todos awaiting verification."""

    model_config = _INPUT_CONFIG

    group_id: str | None = Field(default=None, description="Only consider todos of this group (optional)")
    response_format: ResponseFormat = Field(default=ResponseFormat.MARKDOWN, description=_FORMAT_DESCRIPTION)


# ============================================================================
# Task Group and Execution Input Models
# ============================================================================


class TaskGroupMainTask(BaseModel):
    """Description of the main task of a task group."""

    model_config = _INPUT_CONFIG

    title: str = Field(..., description="Title of the main task", min_length=1, max_length=1000)
    description: str | None = Field(default=None, description="Description of the overall goal")
    tags: list[str] | None = Field(default=None, description="Tags for the main task")
    verification_method: str | None = Field(
        default=None, description="Verification method; the main task is auto-verified on completion"
    )


class TaskGroupSubtask(BaseModel):
    """Description of one subtask of a task group."""

    model_config = _INPUT_CONFIG

    title: str = Field(..., description="Title of the subtask", min_length=1, max_length=1000)
    description: str | None = Field(default=None, description="Description of the subtask")
    tags: list[str] | None = Field(default=None, description="Tags for the subtask")
    dependencies: list[int] | None = Field(
        default=None,
        description="Indices this subtask waits on: 0 is the main task, k is the k-th subtask listed before it",
    )
    execution_config: ExecutionConfig | None = Field(default=None, description="Opaque execution settings")

    @field_validator("dependencies")
    @classmethod
    def validate_dependencies(cls, v: list[int] | None) -> list[int] | None:
        if v is not None and any(index < 0 for index in v):
            raise ValueError("Dependency indices cannot be negative")
        return v


class CreateTaskGroupInput(BaseModel):
    """Input model for creating a main task and its subtasks in one call."""

    model_config = _INPUT_CONFIG

    main_task: TaskGroupMainTask = Field(..., description="The main task of the group")
    subtasks: list[TaskGroupSubtask] = Field(..., description="Ordered subtasks", max_length=100)
    group_id: str | None = Field(default=None, description="Group ID to use (generated when omitted)")


class GetExecutableTasksInput(BaseModel):
    """Input model for listing todos that are ready to execute."""

    model_config = _INPUT_CONFIG

    group_id: str | None = Field(default=None, description="Only consider todos of this group (optional)")
    limit: int | None = Field(default=None, description="Maximum number of todos to return", ge=1, le=500)
    response_format: ResponseFormat = Field(default=ResponseFormat.MARKDOWN, description=_FORMAT_DESCRIPTION)


class UpdateExecutionStatusInput(BaseModel):
    """Input model for reporting an execution state transition."""

    model_config = _INPUT_CONFIG

    todo_id: str = Field(..., description="ID of the todo", min_length=1)
    state: ExecutionState = Field(..., description="New state: pending, ready, running, completed or failed")
    error: str | None = Field(default=None, description="Error message to record with this transition")


class GetTaskGroupStatusInput(BaseModel):
    """Input model for a task group status report."""

    model_config = _INPUT_CONFIG

    group_id: str = Field(..., description="ID of the task group", min_length=1)
    response_format: ResponseFormat = Field(default=ResponseFormat.MARKDOWN, description=_FORMAT_DESCRIPTION)


class ResetTaskExecutionInput(BaseModel):
    """Input model for resetting a failed todo."""

    model_config = _INPUT_CONFIG

    todo_id: str = Field(..., description="ID of the failed todo", min_length=1)
    reset_dependents: bool = Field(
        default=False, description="Also reset completed or failed todos that depend on this one"
    )


class CheckMainTaskCompletionInput(BaseModel):
    """Input model for running the main-task auto-completion check."""

    model_config = _INPUT_CONFIG

    group_id: str = Field(..., description="ID of the task group", min_length=1)


class GetTodoDependenciesInput(BaseModel):
    """Input model for dependency analysis of one todo."""

    model_config = _INPUT_CONFIG

    todo_id: str = Field(..., description="ID of the todo to analyze", min_length=1)
    response_format: ResponseFormat = Field(default=ResponseFormat.MARKDOWN, description=_FORMAT_DESCRIPTION)
