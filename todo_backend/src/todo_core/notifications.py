from __future__ import annotations

import uuid
from threading import RLock
from typing import Dict, List, Optional

from .models import SUCCESS_MESSAGE_TTL_MS, MessageType, ResultMessage
from .scheduling import ScheduledCall, Scheduler, TimerScheduler


class NotificationQueue:
    """
    Ordered queue of transient result messages.

    `success` messages expire on their own after `success_ttl_ms`, removed by
    id so an unrelated message with the same text is never touched. Every
    other type stays until `clear()`.
    """

    def __init__(
        self,
        scheduler: Optional[Scheduler] = None,
        success_ttl_ms: int = SUCCESS_MESSAGE_TTL_MS,
    ) -> None:
        self._lock = RLock()
        self._scheduler = scheduler or TimerScheduler()
        self._success_ttl_ms = success_ttl_ms
        self._items: List[ResultMessage] = []
        self._expiries: Dict[str, ScheduledCall] = {}

    @property
    def messages(self) -> List[ResultMessage]:
        with self._lock:
            return [m.copy() for m in self._items]

    def add(self, message: ResultMessage) -> ResultMessage:
        """Append an already-built message and arm its expiry when it is a success."""
        with self._lock:
            self._items.append(message)
            if message["type"] == "success":
                message_id = message["id"]
                self._expiries[message_id] = self._scheduler.call_later(
                    self._success_ttl_ms, lambda: self._expire(message_id)
                )
        return message.copy()

    def push(self, type: MessageType, text: str) -> ResultMessage:
        return self.add({"id": uuid.uuid4().hex, "type": type, "text": text})

    def success(self, text: str) -> ResultMessage:
        return self.push("success", text)

    def error(self, text: str) -> ResultMessage:
        return self.push("error", text)

    def warning(self, text: str) -> ResultMessage:
        return self.push("warning", text)

    def info(self, text: str) -> ResultMessage:
        return self.push("info", text)

    def clear(self) -> None:
        with self._lock:
            for pending in self._expiries.values():
                pending.cancel()
            self._expiries.clear()
            self._items.clear()

    def _expire(self, message_id: str) -> None:
        with self._lock:
            self._expiries.pop(message_id, None)
            self._items = [m for m in self._items if m["id"] != message_id]
