"""In-memory todo store owned by the todo manager."""

from __future__ import annotations

from collections.abc import Iterator

from aiya_todo_mcp.models.task import Todo, TodoSnapshot


class TodoStore:
    """
    Mapping from todo id to todo record plus a strictly increasing id counter.

    Ids are decimal strings of the counter and are never handed out twice,
    even after the todo holding them is deleted. Iteration follows insertion
    (creation) order.
    """

    def __init__(self) -> None:
        self._todos: dict[str, Todo] = {}
        self._next_id = 1

    @property
    def next_id(self) -> int:
        return self._next_id

    def __len__(self) -> int:
        return len(self._todos)

    def __contains__(self, todo_id: object) -> bool:
        return todo_id in self._todos

    def __iter__(self) -> Iterator[Todo]:
        return iter(list(self._todos.values()))

    def peek_id(self) -> str:
        """Id the next created todo will receive."""
        return str(self._next_id)

    def allocate_id(self) -> str:
        todo_id = str(self._next_id)
        self._next_id += 1
        return todo_id

    def get(self, todo_id: str) -> Todo | None:
        return self._todos.get(todo_id)

    def put(self, todo: Todo) -> None:
        """Insert or replace a todo by id."""
        self._todos[todo.id] = todo

    def remove(self, todo_id: str) -> bool:
        return self._todos.pop(todo_id, None) is not None

    def all(self) -> list[Todo]:
        return list(self._todos.values())

    def load(self, snapshot: TodoSnapshot) -> None:
        """Replace the contents with a persisted snapshot."""
        self._todos = {todo.id: todo for todo in snapshot.todos}
        numeric_ids = [int(todo_id) for todo_id in self._todos if todo_id.isdecimal()]
        self._next_id = max([snapshot.next_id, *(i + 1 for i in numeric_ids)])

    def snapshot(self) -> TodoSnapshot:
        """Copy of the current contents, safe to hand to another thread."""
        return TodoSnapshot(todos=[todo.model_copy(deep=True) for todo in self._todos.values()], next_id=self._next_id)
