"""Core todo models for Aiya Todo MCP."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from aiya_todo_mcp.enums import ExecutionState, VerificationStatus

# Attribute names are snake_case, serialized names camelCase so that snapshot
# files and JSON tool output keep the wire names of the todo document.
_CAMEL_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ExecutionConfig(BaseModel):
    """Opaque execution settings, passed through to the executor untouched."""

    model_config = _CAMEL_CONFIG

    tools_required: list[str] | None = None
    params: dict[str, Any] | None = None
    retry_on_failure: bool | None = None


class ExecutionStatus(BaseModel):
    """Execution lifecycle record of a todo."""

    model_config = _CAMEL_CONFIG

    state: ExecutionState = ExecutionState.PENDING
    last_error: str | None = None
    attempts: int | None = None


class Todo(BaseModel):
    """Model representing a todo with all its attributes.

    Optional fields stay ``None`` when absent, both in memory and on disk;
    they are never defaulted to empty collections.
    """

    model_config = _CAMEL_CONFIG

    id: str
    title: str
    completed: bool = False
    created_at: datetime = Field(default_factory=_utcnow)
    description: str | None = None
    tags: list[str] | None = None
    group_id: str | None = None
    verification_method: str | None = None
    verification_status: VerificationStatus | None = None
    verification_notes: str | None = None
    dependencies: list[str] | None = None
    execution_order: int | None = None
    execution_config: ExecutionConfig | None = None
    execution_status: ExecutionStatus | None = None

    @property
    def execution_state(self) -> ExecutionState:
        """Current execution state; an absent status means pending."""
        if self.execution_status is None:
            return ExecutionState.PENDING
        return self.execution_status.state

    @property
    def is_done(self) -> bool:
        """True when either the completed flag or the execution state says so."""
        return self.completed or self.execution_state == ExecutionState.COMPLETED

    def to_document(self) -> dict[str, Any]:
        """Serialize with camelCase keys, ISO timestamps and absent fields omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class TodoSnapshot(BaseModel):
    """Whole-store snapshot as persisted to disk."""

    model_config = _CAMEL_CONFIG

    todos: list[Todo] = Field(default_factory=list)
    next_id: int = 1

    @field_validator("next_id", mode="before")
    @classmethod
    def validate_next_id(cls, v: object) -> object:
        # A missing counter reads as 1; TodoStore bumps it past the loaded ids.
        return 1 if v is None or v == 0 else v
