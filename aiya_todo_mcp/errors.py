"""Exception hierarchy for Aiya Todo MCP.

Every error raised by the manager, resolver and persistence layer derives from
``TodoError`` so that the tool layer can render a single ``Error: ...`` reply.

Categories:
- Validation errors: empty or missing required values
- Not-found errors: a todo or group id that does not exist
- Dependency errors: unknown dependency ids or a dependency cycle
- State errors: an operation that requires a different execution state
- Persistence errors: the snapshot file could not be read or written
"""

from __future__ import annotations


class TodoError(Exception):
    """Base exception for all todo manager errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class TodoValidationError(TodoError):
    """Raised when a request carries a semantically invalid value."""


class TodoNotFoundError(TodoError):
    """Raised when a todo or group id does not exist."""

    def __init__(self, todo_id: str, message: str | None = None) -> None:
        super().__init__(message or f"Todo with ID {todo_id} not found")
        self.todo_id = todo_id


class DependencyError(TodoError):
    """Base class for dependency validation failures."""


class DependencyNotFoundError(DependencyError):
    """Raised when a declared dependency does not reference an existing todo."""

    def __init__(self, dependency_id: str, message: str | None = None) -> None:
        super().__init__(message or f"Dependency with ID {dependency_id} not found")
        self.dependency_id = dependency_id


class CircularDependencyError(DependencyError):
    """Raised when a dependency set would close a cycle through the todo."""

    def __init__(self, cycle: list[str]) -> None:
        super().__init__(f"Circular dependency detected: {' -> '.join(cycle)}")
        self.cycle = cycle


class InvalidStateError(TodoError):
    """Raised when an operation requires a different execution state."""


class PersistenceError(TodoError):
    """Raised when the snapshot file cannot be loaded or saved."""

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        super().__init__(message)
        self.original_error = original_error
