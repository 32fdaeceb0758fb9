from __future__ import annotations

import functools
import uuid
from datetime import datetime, timezone
from threading import RLock
from typing import Any, Callable, List, Optional

import structlog

from .errors import BusinessLogicError, ValidationError, handle_error
from .kvstore import KeyValueStore, get_key_value_store
from .models import MAX_UNFINISHED_TODOS, ResultMessage, Todo
from .notifications import NotificationQueue
from .sanitizer import validate_title
from .scheduling import Scheduler, TimerScheduler
from .settings import Settings, get_settings
from .storage import TodoStorage

log = structlog.get_logger()

TODO_CREATED = "Todo created."
TODO_FINISHED = "Todo finished."
TODO_DELETED = "Todo deleted."
TODO_NOT_FOUND = "The requested todo was not found."
TODO_ALREADY_FINISHED = "The requested todo is already finished."
STORAGE_RESET = "Saved todos could not be read and have been reset."


def _capacity_text(limit: int) -> str:
    return f"The count of unfinished todos must not be over {limit}."


def _guarded(method: Callable[..., None]) -> Callable[..., None]:
    """
    Run a store operation under the store lock and turn anything it raises
    into an error message on the queue.
    """

    @functools.wraps(method)
    def wrapper(self: "TodoStore", *args: Any, **kwargs: Any) -> None:
        with self._lock:
            try:
                method(self, *args, **kwargs)
            except Exception as e:
                self._notifications.add(handle_error(e))

    return wrapper


class TodoStore:
    """
    Owner of the live todo collection and its message queue.

    All reads return copies; the only way to change state is through
    add_todo, finish_todo, delete_todo and clear_messages. None of them
    raise: every outcome is reported as a ResultMessage.
    """

    def __init__(
        self,
        storage: TodoStorage,
        notifications: NotificationQueue,
        max_unfinished: int = MAX_UNFINISHED_TODOS,
    ) -> None:
        self._lock = RLock()
        self._storage = storage
        self._notifications = notifications
        self._max_unfinished = max_unfinished
        self._todos: List[Todo] = []

    def _now(self) -> datetime:
        return datetime.now(timezone.utc)

    @property
    def todos(self) -> List[Todo]:
        with self._lock:
            return [t.copy() for t in self._todos]

    @property
    def messages(self) -> List[ResultMessage]:
        return self._notifications.messages

    def _find(self, todo_id: str) -> Todo:
        for todo in self._todos:
            if todo["todo_id"] == todo_id:
                return todo
        raise BusinessLogicError(TODO_NOT_FOUND, code="E404", todo_id=todo_id)

    # PUBLIC_INTERFACE
    @_guarded
    def load(self) -> None:
        """
        Replace the live collection with the persisted one. A corrupted store
        is cleared and reported with a warning; the collection starts empty.
        """
        loaded = self._storage.load()
        if loaded is None:
            self._storage.clear_corrupted()
            self._todos = []
            self._notifications.warning(STORAGE_RESET)
            return
        self._todos = loaded
        log.info("Todos loaded", count=len(loaded))

    # PUBLIC_INTERFACE
    @_guarded
    def add_todo(self, raw_title: Any) -> None:
        """
        Validate raw_title and prepend a new unfinished todo.

        Validation failures emit one error per problem. The capacity rule is
        checked only once the title is valid.
        """
        result = validate_title(raw_title)
        if not result.is_valid:
            for message in result.errors:
                self._notifications.add(handle_error(ValidationError(message, field="title")))
            return

        unfinished = sum(1 for t in self._todos if not t["finished"])
        if unfinished >= self._max_unfinished:
            raise BusinessLogicError(
                _capacity_text(self._max_unfinished), code="E001", unfinished=unfinished
            )

        todo: Todo = {
            "todo_id": uuid.uuid4().hex,
            "title": result.sanitized_title,
            "finished": False,
            "created_at": self._now(),
        }
        self._todos.insert(0, todo)
        log.info("Todo created", todo_id=todo["todo_id"])
        self._notifications.success(TODO_CREATED)
        self._storage.save(self._todos)

    # PUBLIC_INTERFACE
    @_guarded
    def finish_todo(self, todo_id: str) -> None:
        """Mark an unfinished todo as finished, keeping its position."""
        todo = self._find(todo_id)
        if todo["finished"]:
            raise BusinessLogicError(TODO_ALREADY_FINISHED, code="E002", todo_id=todo_id)
        todo["finished"] = True
        log.info("Todo finished", todo_id=todo_id)
        self._notifications.success(TODO_FINISHED)
        self._storage.save(self._todos)

    # PUBLIC_INTERFACE
    @_guarded
    def delete_todo(self, todo_id: str) -> None:
        """Remove a todo, finished or not."""
        todo = self._find(todo_id)
        self._todos = [t for t in self._todos if t is not todo]
        log.info("Todo deleted", todo_id=todo_id)
        self._notifications.success(TODO_DELETED)
        self._storage.save(self._todos)

    # PUBLIC_INTERFACE
    def clear_messages(self) -> None:
        self._notifications.clear()

    def close(self) -> None:
        """Flush any pending write. Call on shutdown."""
        self._storage.flush()


# PUBLIC_INTERFACE
def create_store(
    settings: Optional[Settings] = None,
    backend: Optional[KeyValueStore] = None,
    scheduler: Optional[Scheduler] = None,
) -> TodoStore:
    """
    Build a TodoStore wired to the configured backend and hydrate it from
    durable storage. Construct one per application instance.
    """
    settings = settings or get_settings()
    scheduler = scheduler or TimerScheduler()
    storage = TodoStorage(
        backend if backend is not None else get_key_value_store(settings),
        scheduler=scheduler,
        key=settings.storage_key,
        debounce_ms=settings.persist_debounce_ms,
    )
    notifications = NotificationQueue(scheduler, success_ttl_ms=settings.success_message_ttl_ms)
    store = TodoStore(storage, notifications)
    store.load()
    return store
