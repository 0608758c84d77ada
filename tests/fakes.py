"""Test doubles for Aiya Todo MCP tests."""

from __future__ import annotations

from aiya_todo_mcp.errors import PersistenceError
from aiya_todo_mcp.models.task import TodoSnapshot


class InMemoryPersistence:
    """
    Snapshot persistence kept in memory.

    - Captures every saved snapshot for assertions
    - Can be switched to fail saves (``fail_saves``) or loads (``fail_load``)
    """

    def __init__(self, initial: TodoSnapshot | None = None) -> None:
        self.snapshot = initial or TodoSnapshot()
        self.saved: list[TodoSnapshot] = []
        self.fail_saves = False
        self.fail_load = False

    def load(self) -> TodoSnapshot:
        if self.fail_load:
            raise PersistenceError("Failed to load todos")
        return self.snapshot.model_copy(deep=True)

    def save(self, snapshot: TodoSnapshot) -> None:
        if self.fail_saves:
            raise PersistenceError("Failed to save todos")
        self.snapshot = snapshot
        self.saved.append(snapshot)
