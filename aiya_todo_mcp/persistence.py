"""JSON snapshot persistence for the todo store."""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError

from aiya_todo_mcp.errors import PersistenceError
from aiya_todo_mcp.models.task import TodoSnapshot

logger = logging.getLogger(__name__)


class SnapshotPersistence(Protocol):
    """Whole-snapshot storage backend consumed by the todo manager."""

    def load(self) -> TodoSnapshot: ...

    def save(self, snapshot: TodoSnapshot) -> None: ...


class JsonFilePersistence:
    """
    Stores the todo snapshot as a single JSON document.

    Layout: ``{"todos": [...], "nextId": N}`` with camelCase keys, ISO-8601
    ``createdAt`` values and absent optional fields omitted.
    """

    def __init__(self, file_path: str | Path = "./todos.json") -> None:
        self.file_path = Path(file_path)

    def load(self) -> TodoSnapshot:
        """
        Read the snapshot from disk.

        Returns:
            The stored snapshot, or an empty one with ``next_id`` 1 when the
            file does not exist yet

        Raises:
            PersistenceError: The file cannot be read or does not hold a snapshot
        """
        try:
            raw = self.file_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.info("No todo file at %s, starting empty", self.file_path)
            return TodoSnapshot()
        except OSError as e:
            raise PersistenceError(f"Failed to load todos from {self.file_path}: {e}", original_error=e) from e

        try:
            snapshot = TodoSnapshot.model_validate(json.loads(raw))
        except (json.JSONDecodeError, ValidationError) as e:
            raise PersistenceError(f"Failed to parse todos in {self.file_path}: {e}", original_error=e) from e

        logger.info("Loaded %d todo(s) from %s", len(snapshot.todos), self.file_path)
        return snapshot

    def save(self, snapshot: TodoSnapshot) -> None:
        """
        Write the snapshot atomically (temporary file, then rename).

        Raises:
            PersistenceError: The file cannot be written
        """
        document = {
            "todos": [todo.to_document() for todo in snapshot.todos],
            "nextId": snapshot.next_id,
        }
        tmp_name: str | None = None
        try:
            self.file_path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.file_path.parent,
                prefix=f".{self.file_path.name}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_name = tmp.name
                json.dump(document, tmp, indent=2, ensure_ascii=False)
            os.replace(tmp_name, self.file_path)
        except OSError as e:
            if tmp_name is not None:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_name)
            raise PersistenceError(f"Failed to save todos to {self.file_path}: {e}", original_error=e) from e


class SnapshotWriter:
    """
    Serializes snapshot saves through a single writer task.

    Callers enqueue a snapshot and await its future. The writer takes the
    oldest request, drains every request queued behind it, writes only the
    newest snapshot and resolves all of the drained futures with the outcome,
    so a failed write is reported to every caller coalesced into it.
    """

    def __init__(self, persistence: SnapshotPersistence) -> None:
        self._persistence = persistence
        self._queue: asyncio.Queue[tuple[TodoSnapshot, asyncio.Future[None]]] | None = None
        self._worker: asyncio.Task[None] | None = None
        self.writes = 0

    def _ensure_worker(self) -> asyncio.Queue[tuple[TodoSnapshot, asyncio.Future[None]]]:
        loop = asyncio.get_running_loop()
        if (
            self._queue is None
            or self._worker is None
            or self._worker.done()
            or self._worker.get_loop() is not loop
        ):
            queue: asyncio.Queue[tuple[TodoSnapshot, asyncio.Future[None]]] = asyncio.Queue()
            self._queue = queue
            self._worker = loop.create_task(self._run(queue), name="todo-snapshot-writer")
            return queue
        return self._queue

    async def save(self, snapshot: TodoSnapshot) -> None:
        """
        Enqueue a snapshot and wait until it (or a newer one) is on disk.

        Raises:
            PersistenceError: The write this request was coalesced into failed
        """
        queue = self._ensure_worker()
        future: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        queue.put_nowait((snapshot, future))
        await future

    async def _run(self, queue: asyncio.Queue[tuple[TodoSnapshot, asyncio.Future[None]]]) -> None:
        while True:
            snapshot, future = await queue.get()
            waiters = [future]
            while not queue.empty():
                snapshot, future = queue.get_nowait()
                waiters.append(future)

            try:
                await asyncio.to_thread(self._persistence.save, snapshot)
            except Exception as e:
                logger.error("Snapshot write failed for %d request(s): %s", len(waiters), e)
                error = e if isinstance(e, PersistenceError) else PersistenceError(str(e), original_error=e)
                for waiter in waiters:
                    if not waiter.done():
                        waiter.set_exception(error)
            else:
                self.writes += 1
                for waiter in waiters:
                    if not waiter.done():
                        waiter.set_result(None)
            finally:
                for _ in waiters:
                    queue.task_done()

    async def flush(self) -> None:
        """Wait until every enqueued snapshot has been handled."""
        if self._queue is not None and self._worker is not None and not self._worker.done():
            await self._queue.join()

    async def close(self) -> None:
        """Flush pending writes and stop the writer task."""
        await self.flush()
        if self._worker is not None:
            self._worker.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._worker
            self._worker = None
            self._queue = None
