"""Dependency resolution over a snapshot of all todos.

Every function here is pure: it reads the population it is given and never
mutates it. A todo's ``dependencies`` are edges pointing from the todo to the
todos it waits on.
"""

from __future__ import annotations

from collections.abc import Iterator

from aiya_todo_mcp.enums import ExecutionState
from aiya_todo_mcp.errors import CircularDependencyError, DependencyNotFoundError
from aiya_todo_mcp.models.task import Todo


def _index(todos: list[Todo]) -> dict[str, Todo]:
    return {t.id: t for t in todos}


def is_task_ready(todo: Todo, all_todos: list[Todo]) -> bool:
    """
    Check whether every dependency of a todo is satisfied.

    A dependency is satisfied when the todo it names is completed, either by
    flag or by execution state. An id with no matching todo is unsatisfied.
    """
    if not todo.dependencies:
        return True

    by_id = _index(all_todos)
    for dep_id in todo.dependencies:
        dep = by_id.get(dep_id)
        if dep is None or not dep.is_done:
            return False
    return True


def get_ready_tasks(todos: list[Todo]) -> list[Todo]:
    """Get todos that are not completed, not running, and have all dependencies satisfied."""
    return [
        t
        for t in todos
        if not t.completed and t.execution_state != ExecutionState.RUNNING and is_task_ready(t, todos)
    ]


def get_blocked_tasks(todos: list[Todo]) -> list[Todo]:
    """Get open todos with at least one unsatisfied dependency."""
    return [t for t in todos if not t.is_done and not is_task_ready(t, todos)]


def get_blocking_tasks(todo: Todo, all_todos: list[Todo]) -> list[Todo]:
    """Get the existing todos a todo depends on, in declaration order."""
    by_id = _index(all_todos)
    return [by_id[dep_id] for dep_id in todo.dependencies or [] if dep_id in by_id]


def get_dependent_tasks(todo_id: str, all_todos: list[Todo]) -> list[Todo]:
    """Get the todos that list ``todo_id`` among their dependencies."""
    return [t for t in all_todos if t.dependencies and todo_id in t.dependencies]


def detect_circular_dependencies(todos: list[Todo]) -> list[list[str]]:
    """
    Find dependency cycles with a depth-first search.

    Each node is expanded once. When the search reaches a node already on the
    current search path, the path from that node's first occurrence to the
    repeat is recorded, so a self-dependency yields ``[id, id]``. The search
    keeps its own stack, so chain length is not bounded by the recursion limit.

    Returns:
        List of cycles, each a list of todo ids ending with its first id
    """
    by_id = _index(todos)
    cycles: list[list[str]] = []
    visited: set[str] = set()
    on_stack: set[str] = set()

    def dependencies_of(todo_id: str) -> Iterator[str]:
        todo = by_id.get(todo_id)
        return iter(todo.dependencies or []) if todo is not None else iter(())

    for root in todos:
        if root.id in visited:
            continue

        visited.add(root.id)
        on_stack.add(root.id)
        path = [root.id]
        frames = [dependencies_of(root.id)]

        while frames:
            dep_id = next(frames[-1], None)
            if dep_id is None:
                frames.pop()
                on_stack.discard(path.pop())
                continue

            if dep_id in on_stack:
                cycles.append(path[path.index(dep_id) :] + [dep_id])
            elif dep_id not in visited:
                visited.add(dep_id)
                on_stack.add(dep_id)
                path.append(dep_id)
                frames.append(dependencies_of(dep_id))

    return cycles


def validate_dependencies(todo_id: str, dependencies: list[str] | None, all_todos: list[Todo]) -> None:
    """
    Check that a todo may depend on ``dependencies``.

    The todo may or may not exist yet; a todo about to be created is checked
    through a placeholder carrying the new dependencies.

    Raises:
        DependencyNotFoundError: A dependency id does not match any todo
        CircularDependencyError: The new edges would close a cycle through ``todo_id``
    """
    if not dependencies:
        return

    known_ids = {t.id for t in all_todos}
    for dep_id in dependencies:
        if dep_id not in known_ids:
            raise DependencyNotFoundError(dep_id)

    if todo_id in known_ids:
        candidates = [
            t.model_copy(update={"dependencies": list(dependencies)}) if t.id == todo_id else t for t in all_todos
        ]
    else:
        placeholder = Todo(id=todo_id, title="temp", dependencies=list(dependencies))
        candidates = [*all_todos, placeholder]

    for cycle in detect_circular_dependencies(candidates):
        if todo_id in cycle:
            raise CircularDependencyError(cycle)
