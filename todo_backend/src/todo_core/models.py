from __future__ import annotations

from datetime import datetime
from typing import Literal, TypedDict

MAX_UNFINISHED_TODOS = 5
MAX_TITLE_LENGTH = 30
SUCCESS_MESSAGE_TTL_MS = 3000
PERSIST_DEBOUNCE_MS = 500

MessageType = Literal["success", "error", "warning", "info"]


# PUBLIC_INTERFACE
class Todo(TypedDict):
    """
    A lightweight domain model representing a single todo item held in memory.

    Fields:
    - todo_id: Opaque unique identifier (uuid4 hex)
    - title: Sanitized title (1..30 chars, trimmed and HTML-escaped)
    - finished: Completion flag; flips from False to True at most once
    - created_at: Timezone-aware UTC creation timestamp, immutable once set
    """

    todo_id: str
    title: str
    finished: bool
    created_at: datetime


# PUBLIC_INTERFACE
class ResultMessage(TypedDict):
    """
    A transient, user-facing outcome record of a store operation.

    Fields:
    - id: Unique identifier, used to expire this exact message
    - type: One of success, error, warning, info
    - text: Human readable text
    """

    id: str
    type: MessageType
    text: str
