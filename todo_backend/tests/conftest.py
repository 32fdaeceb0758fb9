"""Pytest configuration and shared fixtures."""
from __future__ import annotations

from typing import Callable, List, Optional

import pytest

from todo_core.errors import StorageError
from todo_core.kvstore import InMemoryKeyValueStore
from todo_core.notifications import NotificationQueue
from todo_core.scheduling import ScheduledCall, Scheduler
from todo_core.settings import DEFAULT_STORAGE_KEY
from todo_core.storage import TodoStorage
from todo_core.store import TodoStore


class _ManualCall(ScheduledCall):
    def __init__(self, due: int, seq: int, callback: Callable[[], None]) -> None:
        self.due = due
        self.seq = seq
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler(Scheduler):
    """Virtual clock: callbacks only run when the test advances time."""

    def __init__(self) -> None:
        self.now = 0
        self._seq = 0
        self._calls: List[_ManualCall] = []

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> ScheduledCall:
        self._seq += 1
        call = _ManualCall(self.now + max(delay_ms, 0), self._seq, callback)
        self._calls.append(call)
        return call

    @property
    def pending(self) -> int:
        return sum(1 for c in self._calls if not c.cancelled and not c.fired)

    def advance(self, ms: int) -> None:
        target = self.now + ms
        while True:
            due = [c for c in self._calls if not c.cancelled and not c.fired and c.due <= target]
            if not due:
                break
            call = min(due, key=lambda c: (c.due, c.seq))
            self.now = call.due
            call.fired = True
            call.callback()
        self.now = target


class RecordingKeyValueStore(InMemoryKeyValueStore):
    """In-memory backend that records every write, and can be told to fail."""

    def __init__(self, initial: Optional[dict] = None) -> None:
        super().__init__(initial)
        self.writes: List[str] = []
        self.fail_writes = False
        self.fail_reads = False

    def get_item(self, key: str) -> Optional[str]:
        if self.fail_reads:
            raise StorageError("disk unavailable", "read")
        return super().get_item(key)

    def set_item(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise OSError("QuotaExceededError: storage is full")
        self.writes.append(value)
        super().set_item(key, value)


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def backend() -> RecordingKeyValueStore:
    return RecordingKeyValueStore()


@pytest.fixture
def storage(backend: RecordingKeyValueStore, scheduler: ManualScheduler) -> TodoStorage:
    return TodoStorage(backend, scheduler=scheduler, key=DEFAULT_STORAGE_KEY, debounce_ms=500)


@pytest.fixture
def notifications(scheduler: ManualScheduler) -> NotificationQueue:
    return NotificationQueue(scheduler, success_ttl_ms=3000)


@pytest.fixture
def store(storage: TodoStorage, notifications: NotificationQueue) -> TodoStore:
    s = TodoStore(storage, notifications)
    s.load()
    return s
