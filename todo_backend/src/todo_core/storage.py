"""
Persistence gateway: reads and writes the todo collection to a durable
key-value store.

Invariants:
    - load() never trusts the raw payload: every element is validated on its own
      and a new collection is built from the survivors
    - save() serializes immediately and writes later; a burst of saves inside the
      debounce window produces a single write of the latest snapshot
    - write failures are logged, never raised
"""
from __future__ import annotations

import json
from threading import Lock, RLock
from typing import Iterable, List, Optional, Set

import structlog
from pydantic import ValidationError as SchemaError

from .kvstore import KeyValueStore
from .models import PERSIST_DEBOUNCE_MS, Todo
from .scheduling import ScheduledCall, Scheduler, TimerScheduler
from .schemas import StoredTodo
from .settings import DEFAULT_STORAGE_KEY

log = structlog.get_logger()


class TodoStorage:
    def __init__(
        self,
        backend: KeyValueStore,
        scheduler: Optional[Scheduler] = None,
        key: str = DEFAULT_STORAGE_KEY,
        debounce_ms: int = PERSIST_DEBOUNCE_MS,
    ) -> None:
        self._backend = backend
        self._scheduler = scheduler or TimerScheduler()
        self._key = key
        self._debounce_ms = debounce_ms
        self._lock = RLock()
        self._pending: Optional[ScheduledCall] = None
        self._pending_payload: Optional[str] = None
        self._generation = 0
        self._write_lock = Lock()
        self._written_generation = 0

    @property
    def has_pending_write(self) -> bool:
        with self._lock:
            return self._pending_payload is not None

    # PUBLIC_INTERFACE
    def load(self) -> Optional[List[Todo]]:
        """
        Read the stored collection.

        Returns:
            - [] when the key is absent
            - None (corruption sentinel) when the value is not JSON or not an array
            - otherwise the list of elements that pass schema validation

        Raises:
            StorageError if the backend itself fails to read.
        """
        raw = self._backend.get_item(self._key)
        if not raw:
            return []

        try:
            parsed = json.loads(raw)
        except ValueError as e:
            log.warning("Stored todos are not valid JSON", key=self._key, error=str(e))
            return None

        if not isinstance(parsed, list):
            log.warning("Stored todos are not an array", key=self._key, kind=type(parsed).__name__)
            return None

        todos: List[Todo] = []
        seen: Set[str] = set()
        dropped = 0
        for item in parsed:
            try:
                todo = StoredTodo.model_validate(item).to_todo()
            except (SchemaError, ValueError, OverflowError):
                dropped += 1
                continue
            if todo["todo_id"] in seen:
                dropped += 1
                continue
            seen.add(todo["todo_id"])
            todos.append(todo)

        if dropped:
            log.warning("Dropped malformed stored todos", key=self._key, dropped=dropped, kept=len(todos))
        return todos

    # PUBLIC_INTERFACE
    def save(self, todos: Iterable[Todo]) -> None:
        """
        Schedule a debounced write of `todos`. Any write armed earlier and not
        yet performed is cancelled and replaced by this snapshot.
        """
        try:
            payload = json.dumps(
                [StoredTodo.from_todo(t).model_dump(by_alias=True) for t in todos],
                ensure_ascii=False,
            )
        except (TypeError, ValueError, KeyError, SchemaError) as e:
            log.error("Failed to serialize todos", key=self._key, error=str(e), exc_info=e)
            return

        with self._lock:
            if self._pending is not None:
                self._pending.cancel()
            self._generation += 1
            generation = self._generation
            self._pending_payload = payload
            self._pending = self._scheduler.call_later(
                self._debounce_ms, lambda: self._write_pending(generation)
            )

    # PUBLIC_INTERFACE
    def flush(self) -> None:
        """Perform the pending write now, if there is one."""
        with self._lock:
            if self._pending is not None:
                self._pending.cancel()
            generation = self._generation
        self._write_pending(generation)

    # PUBLIC_INTERFACE
    def clear_corrupted(self) -> None:
        """Remove the stored value outright. Used after load() returned None."""
        try:
            self._backend.remove_item(self._key)
        except Exception as e:
            log.error("Failed to clear corrupted storage", key=self._key, error=str(e), exc_info=e)
            return
        log.info("Corrupted storage data cleared", key=self._key)

    def _write_pending(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation or self._pending_payload is None:
                return
            payload = self._pending_payload
            self._pending_payload = None
            self._pending = None

        # backend I/O runs outside self._lock so save() never waits on a slow write
        with self._write_lock:
            if generation <= self._written_generation:
                return
            try:
                self._backend.set_item(self._key, payload)
            except Exception as e:
                log.error("Failed to save todos", key=self._key, error=str(e), exc_info=e)
                return
            self._written_generation = generation
            log.debug("Todos saved", key=self._key, size=len(payload))
