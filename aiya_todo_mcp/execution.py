"""Execution state machine for todos driven by an external executor."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from aiya_todo_mcp.enums import ExecutionState, VerificationStatus
from aiya_todo_mcp.errors import InvalidStateError, TodoNotFoundError
from aiya_todo_mcp.models.results import GroupExecutionStats, MainTaskCompletion, StateTransitionResult
from aiya_todo_mcp.models.task import ExecutionStatus, Todo

logger = logging.getLogger(__name__)

UpdateTodoFn = Callable[[str, dict[str, Any]], Awaitable[Todo]]
GetAllTodosFn = Callable[[], list[Todo]]

VALID_TRANSITIONS: dict[ExecutionState, frozenset[ExecutionState]] = {
    ExecutionState.PENDING: frozenset({ExecutionState.READY, ExecutionState.RUNNING}),
    ExecutionState.READY: frozenset({ExecutionState.RUNNING, ExecutionState.PENDING}),
    ExecutionState.RUNNING: frozenset({ExecutionState.COMPLETED, ExecutionState.FAILED, ExecutionState.PENDING}),
    ExecutionState.COMPLETED: frozenset(),
    ExecutionState.FAILED: frozenset({ExecutionState.PENDING}),
}


class ExecutionStateMachine:
    """
    Guards and applies execution state transitions.

    Transitions for the same todo id are serialized: a request arriving while
    another one for that id is in flight receives the in-flight result instead
    of being applied on its own.
    """

    def __init__(self) -> None:
        self._in_flight: dict[str, asyncio.Task[StateTransitionResult]] = {}

    @staticmethod
    def is_valid_transition(current: ExecutionState, new: ExecutionState) -> bool:
        """Check a source/destination pair against the transition table."""
        return new in VALID_TRANSITIONS[current]

    async def update_execution_status(
        self,
        todo: Todo,
        new_state: ExecutionState,
        update_fn: UpdateTodoFn,
        error: str | None = None,
    ) -> StateTransitionResult:
        """
        Transition a todo to ``new_state``.

        Args:
            todo: Current record of the todo
            new_state: Requested destination state
            update_fn: Coroutine applying a partial update by todo id
            error: Error message to record with this transition

        Returns:
            StateTransitionResult; ``success`` is False for a transition outside
            the table, in which case the todo is left unchanged
        """
        existing = self._in_flight.get(todo.id)
        if existing is not None:
            logger.debug("Coalescing transition of todo %s into in-flight request", todo.id)
            return await asyncio.shield(existing)

        task = asyncio.ensure_future(self._perform_transition(todo, new_state, update_fn, error))
        self._in_flight[todo.id] = task
        try:
            return await asyncio.shield(task)
        finally:
            if self._in_flight.get(todo.id) is task:
                del self._in_flight[todo.id]

    async def _perform_transition(
        self,
        todo: Todo,
        new_state: ExecutionState,
        update_fn: UpdateTodoFn,
        error: str | None,
    ) -> StateTransitionResult:
        current_state = todo.execution_state

        if not self.is_valid_transition(current_state, new_state):
            return StateTransitionResult(
                success=False,
                updated_todo=todo,
                message=f"Invalid state transition from {current_state.value} to {new_state.value}",
            )

        current = todo.execution_status or ExecutionStatus()
        retrying = current_state == ExecutionState.FAILED and new_state == ExecutionState.PENDING

        attempts = current.attempts or 0
        if new_state == ExecutionState.RUNNING or retrying:
            attempts += 1

        last_error = current.last_error
        if error is not None:
            last_error = error
        elif new_state == ExecutionState.COMPLETED or retrying:
            last_error = None

        status = ExecutionStatus(state=new_state, attempts=attempts, last_error=last_error)
        updated = await update_fn(todo.id, {"execution_status": status})

        logger.info("Todo %s execution %s -> %s (attempts: %d)", todo.id, current_state.value, new_state.value, attempts)
        return StateTransitionResult(
            success=True,
            updated_todo=updated,
            message=f"Execution status updated: {current_state.value} → {new_state.value} (attempts: {attempts})",
        )

    async def check_and_complete_main_task(
        self,
        group_id: str,
        get_all_fn: GetAllTodosFn,
        update_fn: UpdateTodoFn,
    ) -> MainTaskCompletion:
        """
        Complete a group's main task once every subtask is done.

        The main task is the first todo of the group with ``execution_order``
        0; subtasks are those with a positive order. A main task with a
        verification method is marked verified along with the completion.
        """
        group = [t for t in get_all_fn() if t.group_id == group_id]
        main_task = next((t for t in group if t.execution_order == 0), None)

        if main_task is None:
            return MainTaskCompletion(main_task_completed=False, message=f"No main task found in group {group_id}")

        if main_task.is_done:
            return MainTaskCompletion(
                main_task_completed=True, main_task=main_task, message="Main task is already completed"
            )

        subtasks = [t for t in group if t.execution_order is not None and t.execution_order > 0]
        if not subtasks:
            return MainTaskCompletion(
                main_task_completed=False, main_task=main_task, message="Group has no subtasks"
            )

        remaining = [t for t in subtasks if not t.is_done]
        if remaining:
            return MainTaskCompletion(
                main_task_completed=False,
                main_task=main_task,
                message=f"{len(remaining)} of {len(subtasks)} subtask(s) still incomplete",
            )

        current = main_task.execution_status or ExecutionStatus()
        updates: dict[str, Any] = {
            "completed": True,
            "execution_status": current.model_copy(update={"state": ExecutionState.COMPLETED}),
        }
        if main_task.verification_method:
            updates["verification_status"] = VerificationStatus.VERIFIED

        completed = await update_fn(main_task.id, updates)
        logger.info("Main task %s of group %s auto-completed", main_task.id, group_id)
        return MainTaskCompletion(
            main_task_completed=True,
            main_task=completed,
            message=f"All {len(subtasks)} subtask(s) completed; main task marked as completed",
        )

    @staticmethod
    def get_group_execution_stats(group_id: str, get_all_fn: GetAllTodosFn) -> GroupExecutionStats:
        """Count a group's todos per execution state."""
        stats = GroupExecutionStats()
        for todo in get_all_fn():
            if todo.group_id != group_id:
                continue
            stats.total += 1
            state = ExecutionState.COMPLETED if todo.completed else todo.execution_state
            setattr(stats, state.value, getattr(stats, state.value) + 1)
        return stats

    async def reset_failed_task(
        self,
        todo_id: str,
        reset_dependents: bool,
        get_all_fn: GetAllTodosFn,
        update_fn: UpdateTodoFn,
    ) -> list[Todo]:
        """
        Put a failed todo back to pending with a fresh attempt count.

        With ``reset_dependents``, todos that depend directly on it and are
        completed or failed are reopened the same way.

        Raises:
            TodoNotFoundError: No todo has this id
            InvalidStateError: The todo is not in the failed state
        """
        todo = next((t for t in get_all_fn() if t.id == todo_id), None)
        if todo is None:
            raise TodoNotFoundError(todo_id)
        if todo.execution_state != ExecutionState.FAILED:
            raise InvalidStateError(f"Todo {todo_id} is not in failed state")

        reset = [await update_fn(todo_id, {"execution_status": ExecutionStatus(attempts=0)})]

        if reset_dependents:
            dependents = [
                t
                for t in get_all_fn()
                if t.dependencies
                and todo_id in t.dependencies
                and (t.is_done or t.execution_state == ExecutionState.FAILED)
            ]
            for dependent in dependents:
                reset.append(
                    await update_fn(
                        dependent.id,
                        {"completed": False, "execution_status": ExecutionStatus(attempts=0)},
                    )
                )

        logger.info("Reset %d todo(s) starting from failed todo %s", len(reset), todo_id)
        return reset
