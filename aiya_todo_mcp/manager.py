"""Todo manager: owns the store and orchestrates resolver, state machine and persistence."""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Any

from aiya_todo_mcp import resolver
from aiya_todo_mcp.enums import ExecutionState, VerificationStatus
from aiya_todo_mcp.errors import (
    DependencyNotFoundError,
    PersistenceError,
    TodoNotFoundError,
    TodoValidationError,
)
from aiya_todo_mcp.execution import ExecutionStateMachine
from aiya_todo_mcp.models.inputs import CreateTaskGroupInput, CreateTodoInput, UpdateTodoInput
from aiya_todo_mcp.models.results import (
    GroupExecutionStats,
    MainTaskCompletion,
    StateTransitionResult,
    TaskGroup,
    TaskGroupStatus,
    TodoDependencies,
)
from aiya_todo_mcp.models.task import ExecutionStatus, Todo
from aiya_todo_mcp.persistence import JsonFilePersistence, SnapshotPersistence, SnapshotWriter
from aiya_todo_mcp.store import TodoStore

logger = logging.getLogger(__name__)


def _order_key(todo: Todo) -> tuple[bool, int]:
    # Todos without an execution order sort after ordered ones.
    return (todo.execution_order is None, todo.execution_order or 0)


class TodoManager:
    """
    Public surface for todo CRUD, task groups, verification and execution.

    Every mutation replaces the todo by id and is followed by a snapshot save.
    A failed save is logged and the in-memory change is kept; with
    ``strict_durability`` the ``PersistenceError`` is also raised to the caller.
    """

    def __init__(
        self,
        persistence: SnapshotPersistence | None = None,
        *,
        strict_durability: bool = False,
    ) -> None:
        self._persistence = persistence if persistence is not None else JsonFilePersistence()
        self._store = TodoStore()
        self._writer = SnapshotWriter(self._persistence)
        self._executions = ExecutionStateMachine()
        self.strict_durability = strict_durability

    async def initialize(self) -> None:
        """Load the persisted snapshot. Load failures propagate."""
        try:
            snapshot = await asyncio.to_thread(self._persistence.load)
        except PersistenceError:
            logger.exception("Failed to initialize TodoManager")
            raise
        self._store.load(snapshot)
        logger.info("TodoManager ready with %d todo(s), next id %d", len(self._store), self._store.next_id)

    async def close(self) -> None:
        """Flush pending snapshot writes."""
        await self._writer.close()

    # ---- internal helpers ----

    async def _save(self) -> None:
        try:
            await self._writer.save(self._store.snapshot())
        except PersistenceError as e:
            logger.error("Failed to save todos: %s", e)
            if self.strict_durability:
                raise

    def _require(self, todo_id: str) -> Todo:
        todo = self._store.get(todo_id)
        if todo is None:
            raise TodoNotFoundError(todo_id)
        return todo

    async def _apply(self, todo_id: str, updates: dict[str, Any]) -> Todo:
        """Replace a todo with a copy carrying ``updates`` and persist."""
        updated = self._require(todo_id).model_copy(update=updates)
        self._store.put(updated)
        logger.debug("Updated todo %s fields=%s", todo_id, sorted(updates))
        await self._save()
        return updated

    # ---- CRUD ----

    async def create_todo(self, request: CreateTodoInput) -> Todo:
        """
        Create a todo from a request.

        Raises:
            TodoValidationError: The title is empty after trimming
            DependencyError: A dependency is unknown or would close a cycle
        """
        todo = self._insert(request)
        await self._save()
        return todo

    def _insert(self, request: CreateTodoInput) -> Todo:
        """Validate a create request and put the new todo in the store without saving."""
        title = (request.title or "").strip()
        if not title:
            raise TodoValidationError("Todo title cannot be empty")

        if request.dependencies:
            resolver.validate_dependencies(self._store.peek_id(), request.dependencies, self._store.all())

        todo = Todo(
            id=self._store.allocate_id(),
            title=title,
            completed=bool(request.completed),
            created_at=datetime.now(timezone.utc),
            description=request.description,
            tags=list(request.tags) if request.tags is not None else None,
            group_id=request.group_id,
            verification_method=request.verification_method,
            dependencies=list(request.dependencies) if request.dependencies is not None else None,
            execution_order=request.execution_order,
            execution_config=request.execution_config.model_copy(deep=True) if request.execution_config else None,
            execution_status=request.execution_status.model_copy() if request.execution_status else None,
        )
        self._store.put(todo)
        logger.debug("Created todo %s", todo.id)
        return todo

    def get_todo(self, todo_id: str) -> Todo | None:
        return self._store.get(todo_id)

    def get_all_todos(self) -> list[Todo]:
        return self._store.all()

    def list_todos(self, completed: bool | None = None, group_id: str | None = None) -> list[Todo]:
        todos = self._store.all()
        if completed is not None:
            todos = [t for t in todos if t.completed == completed]
        if group_id is not None:
            todos = [t for t in todos if t.group_id == group_id]
        return todos

    async def update_todo(self, request: UpdateTodoInput) -> Todo:
        """
        Apply the fields set on ``request`` to an existing todo.

        Raises:
            TodoNotFoundError: No todo has this id
            TodoValidationError: The new title is empty after trimming
            DependencyError: Non-empty new dependencies are unknown or cyclic
        """
        existing = self._require(request.id)

        updates = {
            name: getattr(request, name)
            for name in request.model_fields_set
            if name != "id" and getattr(request, name) is not None
        }
        if "title" in updates:
            updates["title"] = updates["title"].strip()
            if not updates["title"]:
                raise TodoValidationError("Todo title cannot be empty")

        if updates.get("dependencies"):
            resolver.validate_dependencies(existing.id, updates["dependencies"], self._store.all())

        return await self._apply(existing.id, updates)

    async def delete_todo(self, todo_id: str) -> bool:
        """
        Delete a todo. Todos depending on it stay blocked.

        Raises:
            TodoNotFoundError: No todo has this id
        """
        self._require(todo_id)
        removed = self._store.remove(todo_id)
        logger.debug("Deleted todo %s", todo_id)
        await self._save()
        return removed

    # ---- verification ----

    async def set_verification_method(self, todo_id: str, method: str, notes: str | None = None) -> Todo:
        """Attach a verification method and mark verification as pending."""
        self._require(todo_id)
        updates: dict[str, Any] = {
            "verification_method": method,
            "verification_status": VerificationStatus.PENDING,
        }
        if notes is not None:
            updates["verification_notes"] = notes
        return await self._apply(todo_id, updates)

    async def update_verification_status(
        self, todo_id: str, status: VerificationStatus, notes: str | None = None
    ) -> Todo:
        self._require(todo_id)
        updates: dict[str, Any] = {"verification_status": status}
        if notes is not None:
            updates["verification_notes"] = notes
        return await self._apply(todo_id, updates)

    def get_todos_needing_verification(self, group_id: str | None = None) -> list[Todo]:
        """Todos with a verification method whose verification is absent or pending."""
        return [
            t
            for t in self._store.all()
            if t.verification_method
            and t.verification_status in (None, VerificationStatus.PENDING)
            and (group_id is None or t.group_id == group_id)
        ]

    # ---- dependencies ----

    def get_ready_tasks(self, group_id: str | None = None) -> list[Todo]:
        ready = resolver.get_ready_tasks(self._store.all())
        if group_id is not None:
            ready = [t for t in ready if t.group_id == group_id]
        return ready

    def get_executable_tasks(self, group_id: str | None = None, limit: int | None = None) -> list[Todo]:
        """Ready todos sorted by execution order, optionally truncated."""
        ready = sorted(self.get_ready_tasks(group_id), key=_order_key)
        if limit is not None:
            ready = ready[:limit]
        return ready

    def get_todo_dependencies(self, todo_id: str) -> TodoDependencies:
        todo = self._require(todo_id)
        all_todos = self._store.all()
        return TodoDependencies(
            todo=todo,
            blocked_by=resolver.get_blocking_tasks(todo, all_todos),
            blocks=resolver.get_dependent_tasks(todo_id, all_todos),
            missing=[d for d in todo.dependencies or [] if d not in self._store],
            ready=resolver.is_task_ready(todo, all_todos),
        )

    # ---- task groups ----

    async def create_task_group(self, request: CreateTaskGroupInput) -> TaskGroup:
        """
        Create a main task and its subtasks, all or nothing.

        Subtask dependencies are indices: 0 is the main task and k is the k-th
        subtask of this request, which must come before the dependent one. If
        any step fails, every todo created by this call is deleted again
        before the error is re-raised.
        """
        group_id = request.group_id or f"group-{int(time.time() * 1000)}"
        created: list[Todo] = []

        try:
            main = request.main_task
            created.append(
                self._insert(
                    CreateTodoInput(
                        title=main.title,
                        description=main.description,
                        tags=main.tags,
                        group_id=group_id,
                        verification_method=main.verification_method,
                        execution_order=0,
                        execution_status=ExecutionStatus(),
                    )
                )
            )
            await self._save()

            for position, subtask in enumerate(request.subtasks, start=1):
                dependency_ids: list[str] = []
                for index in subtask.dependencies or []:
                    if index < 0 or index >= position:
                        raise DependencyNotFoundError(
                            str(index),
                            f"Subtask {position} ('{subtask.title}') depends on index {index}, "
                            f"which is not the main task or an earlier subtask",
                        )
                    dependency_ids.append(created[index].id)

                created.append(
                    self._insert(
                        CreateTodoInput(
                            title=subtask.title,
                            description=subtask.description,
                            tags=subtask.tags,
                            group_id=group_id,
                            dependencies=dependency_ids or None,
                            execution_order=position,
                            execution_config=subtask.execution_config,
                            execution_status=ExecutionStatus(),
                        )
                    )
                )
                await self._save()
        except Exception:
            logger.warning("Task group %s failed after %d todo(s), rolling back", group_id, len(created))
            for todo in reversed(created):
                self._store.remove(todo.id)
            try:
                await self._save()
            except PersistenceError:
                logger.exception("Failed to save rollback of task group %s", group_id)
            raise

        logger.info("Created task group %s with %d subtask(s)", group_id, len(created) - 1)
        return TaskGroup(group_id=group_id, main_task=created[0], subtasks=created[1:])

    def get_task_group_status(self, group_id: str) -> TaskGroupStatus:
        """
        Raises:
            TodoNotFoundError: No todo belongs to the group
        """
        tasks = self.list_todos(group_id=group_id)
        if not tasks:
            raise TodoNotFoundError(group_id, f"Task group {group_id} not found")
        return TaskGroupStatus(
            group_id=group_id,
            main_task=next((t for t in tasks if t.execution_order == 0), None),
            tasks=sorted(tasks, key=_order_key),
            stats=self.get_group_execution_stats(group_id),
        )

    def get_group_execution_stats(self, group_id: str) -> GroupExecutionStats:
        return self._executions.get_group_execution_stats(group_id, self.get_all_todos)

    # ---- execution ----

    async def update_execution_status(
        self, todo_id: str, state: ExecutionState, error: str | None = None
    ) -> StateTransitionResult:
        """
        Report an execution state transition for a todo.

        An invalid transition is returned with ``success=False`` rather than
        raised. Completing a subtask of a group also runs the main-task
        auto-completion check.

        Raises:
            TodoNotFoundError: No todo has this id
        """
        todo = self._require(todo_id)
        result = await self._executions.update_execution_status(todo, state, self._apply, error)

        if (
            result.success
            and result.updated_todo.execution_state == ExecutionState.COMPLETED
            and todo.group_id is not None
            and (todo.execution_order or 0) > 0
        ):
            completion = await self.check_and_complete_main_task(todo.group_id)
            result = result.model_copy(update={"main_task_completion": completion})
        return result

    async def check_and_complete_main_task(self, group_id: str) -> MainTaskCompletion:
        return await self._executions.check_and_complete_main_task(group_id, self.get_all_todos, self._apply)

    async def reset_task_execution(self, todo_id: str, reset_dependents: bool = False) -> list[Todo]:
        """
        Raises:
            TodoNotFoundError: No todo has this id
            InvalidStateError: The todo is not in the failed state
        """
        return await self._executions.reset_failed_task(todo_id, reset_dependents, self.get_all_todos, self._apply)
