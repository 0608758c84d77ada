"""Tests for JSON snapshot persistence and the snapshot writer."""

import asyncio
import json

import pytest

from aiya_todo_mcp import (
    CreateTodoInput,
    ExecutionState,
    JsonFilePersistence,
    PersistenceError,
    SnapshotWriter,
    TodoManager,
    TodoSnapshot,
    TodoStore,
)
from aiya_todo_mcp.models.task import ExecutionConfig, ExecutionStatus, Todo

from .fakes import InMemoryPersistence


class TestJsonFilePersistence:
    """Tests for JsonFilePersistence."""

    def test_missing_file_is_empty(self, tmp_path):
        snapshot = JsonFilePersistence(tmp_path / "todos.json").load()
        assert snapshot.todos == []
        assert snapshot.next_id == 1

    def test_round_trip(self, tmp_path, make_todo):
        path = tmp_path / "todos.json"
        todo = make_todo(
            "1",
            tags=["a"],
            group_id="g",
            dependencies=["2"],
            execution_order=1,
            execution_config=ExecutionConfig(tools_required=["bash"], params={"x": 1}),
            execution_status=ExecutionStatus(state=ExecutionState.FAILED, attempts=2, last_error="boom"),
        )
        persistence = JsonFilePersistence(path)
        persistence.save(TodoSnapshot(todos=[todo, make_todo("2")], next_id=3))

        loaded = persistence.load()
        assert loaded.next_id == 3
        assert loaded.todos[0] == todo

    def test_document_layout(self, tmp_path, make_todo):
        path = tmp_path / "todos.json"
        JsonFilePersistence(path).save(TodoSnapshot(todos=[make_todo("1", group_id="g")], next_id=2))

        document = json.loads(path.read_text(encoding="utf-8"))
        assert document["nextId"] == 2
        assert document["todos"] == [
            {
                "id": "1",
                "title": "Todo 1",
                "completed": False,
                "createdAt": "2025-01-01T00:00:00Z",
                "groupId": "g",
            }
        ]

    def test_no_temporary_files_left(self, tmp_path, make_todo):
        path = tmp_path / "todos.json"
        JsonFilePersistence(path).save(TodoSnapshot(todos=[make_todo("1")], next_id=2))
        assert [p.name for p in tmp_path.iterdir()] == ["todos.json"]

    def test_creates_parent_directory(self, tmp_path):
        path = tmp_path / "nested" / "todos.json"
        JsonFilePersistence(path).save(TodoSnapshot())
        assert path.exists()

    def test_legacy_document(self, tmp_path):
        path = tmp_path / "todos.json"
        path.write_text(
            json.dumps({"todos": [{"id": "4", "title": "Old", "completed": True, "createdAt": "2024-05-01T10:00:00Z"}]}),
            encoding="utf-8",
        )

        snapshot = JsonFilePersistence(path).load()
        todo = snapshot.todos[0]
        assert snapshot.next_id == 1
        assert todo.completed is True
        assert todo.tags is None
        assert todo.dependencies is None
        assert todo.execution_status is None
        assert todo.execution_state == ExecutionState.PENDING

    def test_corrupt_json(self, tmp_path):
        path = tmp_path / "todos.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(PersistenceError, match="Failed to parse todos"):
            JsonFilePersistence(path).load()

    def test_wrong_shape(self, tmp_path):
        path = tmp_path / "todos.json"
        path.write_text(json.dumps({"todos": [{"title": "no id"}]}), encoding="utf-8")
        with pytest.raises(PersistenceError):
            JsonFilePersistence(path).load()

    def test_unwritable_target(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("", encoding="utf-8")
        with pytest.raises(PersistenceError) as exc_info:
            JsonFilePersistence(blocker / "todos.json").save(TodoSnapshot())
        assert isinstance(exc_info.value.original_error, OSError)

    @pytest.mark.asyncio
    async def test_manager_reload(self, tmp_path):
        path = tmp_path / "todos.json"
        first = TodoManager(JsonFilePersistence(path))
        await first.initialize()
        await first.create_todo(CreateTodoInput(title="Keep"))
        deleted = await first.create_todo(CreateTodoInput(title="Drop"))
        await first.delete_todo(deleted.id)
        await first.close()

        second = TodoManager(JsonFilePersistence(path))
        await second.initialize()
        assert [t.title for t in second.get_all_todos()] == ["Keep"]
        assert (await second.create_todo(CreateTodoInput(title="New"))).id == "3"
        await second.close()


class TestTodoStore:
    """Tests for TodoStore id handling."""

    def test_load_bumps_counter_past_ids(self):
        store = TodoStore()
        store.load(TodoSnapshot(todos=[Todo(id="3", title="a"), Todo(id="10", title="b")], next_id=2))
        assert store.peek_id() == "11"

    def test_load_keeps_higher_counter(self):
        store = TodoStore()
        store.load(TodoSnapshot(todos=[Todo(id="3", title="a")], next_id=8))
        assert store.allocate_id() == "8"
        assert store.next_id == 9

    def test_non_ascii_digit_ids_are_not_counted(self):
        store = TodoStore()
        store.load(TodoSnapshot(todos=[Todo(id="\u00b2", title="a"), Todo(id="7", title="b")], next_id=1))
        assert store.peek_id() == "8"
        assert store.get("\u00b2").title == "a"

    def test_zero_counter_reads_as_one(self):
        assert TodoSnapshot.model_validate({"todos": [], "nextId": 0}).next_id == 1

    def test_snapshot_is_a_copy(self):
        store = TodoStore()
        store.put(Todo(id="1", title="a", tags=["x"]))
        snapshot = store.snapshot()
        snapshot.todos[0].tags.append("y")
        assert store.get("1").tags == ["x"]


class TestSnapshotWriter:
    """Tests for SnapshotWriter coalescing and error delivery."""

    @pytest.mark.asyncio
    async def test_concurrent_saves_are_coalesced(self):
        persistence = InMemoryPersistence()
        writer = SnapshotWriter(persistence)
        snapshots = [TodoSnapshot(next_id=n) for n in (2, 3, 4)]

        await asyncio.gather(*(writer.save(s) for s in snapshots))

        assert writer.writes == 1
        assert persistence.saved == [snapshots[-1]]
        await writer.close()

    @pytest.mark.asyncio
    async def test_sequential_saves_each_write(self):
        persistence = InMemoryPersistence()
        writer = SnapshotWriter(persistence)

        await writer.save(TodoSnapshot(next_id=2))
        await writer.save(TodoSnapshot(next_id=3))

        assert writer.writes == 2
        assert persistence.snapshot.next_id == 3
        await writer.close()

    @pytest.mark.asyncio
    async def test_failure_reaches_every_waiter(self):
        persistence = InMemoryPersistence()
        persistence.fail_saves = True
        writer = SnapshotWriter(persistence)

        results = await asyncio.gather(
            *(writer.save(TodoSnapshot(next_id=n)) for n in (2, 3)),
            return_exceptions=True,
        )

        assert all(isinstance(r, PersistenceError) for r in results)
        assert writer.writes == 0
        await writer.close()

    @pytest.mark.asyncio
    async def test_recovers_after_failure(self):
        persistence = InMemoryPersistence()
        persistence.fail_saves = True
        writer = SnapshotWriter(persistence)

        with pytest.raises(PersistenceError):
            await writer.save(TodoSnapshot(next_id=2))

        persistence.fail_saves = False
        await writer.save(TodoSnapshot(next_id=3))
        assert persistence.snapshot.next_id == 3
        await writer.close()

    @pytest.mark.asyncio
    async def test_close_without_saves(self):
        writer = SnapshotWriter(InMemoryPersistence())
        await writer.flush()
        await writer.close()

    @pytest.mark.asyncio
    async def test_save_after_close_restarts_worker(self):
        persistence = InMemoryPersistence()
        writer = SnapshotWriter(persistence)

        await writer.save(TodoSnapshot(next_id=2))
        await writer.close()
        await writer.save(TodoSnapshot(next_id=3))

        assert writer.writes == 2
        assert persistence.snapshot.next_id == 3
        await writer.close()
