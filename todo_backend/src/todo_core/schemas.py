from __future__ import annotations

from datetime import date, datetime, timezone
from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr, field_validator

from .models import ResultMessage, Todo


def parse_timestamp(value: str) -> datetime:
    """
    Parse an ISO-8601 string into an aware UTC datetime.
    - A trailing 'Z' is accepted as UTC.
    - A bare date is promoted to midnight UTC.
    - Naive datetimes are assumed to be UTC.

    Raises:
        ValueError if the string is not a valid calendar timestamp.
    """
    s = value.strip()
    if s.endswith(("Z", "z")):
        s = s[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(s)
    except ValueError:
        try:
            d = date.fromisoformat(s)
        except ValueError as e:
            raise ValueError(f"Invalid ISO-8601 timestamp: {value!r}") from e
        parsed = datetime(d.year, d.month, d.day)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    try:
        return parsed.astimezone(timezone.utc)
    except OverflowError as e:
        # offsets can push dates at the calendar edges out of range
        raise ValueError(f"Timestamp out of range: {value!r}") from e


def format_timestamp(value: datetime) -> str:
    """Format a datetime as an ISO-8601 UTC string with millisecond precision, e.g. '2025-01-31T13:45:00.000Z'."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


# PUBLIC_INTERFACE
class StoredTodo(BaseModel):
    """
    Durable wire form of a Todo. Types are strict: no coercion of
    numbers to strings or strings to booleans.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "todoId": "9f1c2d3e4b5a69788796a5b4c3d2e1f0",
                "todoTitle": "Buy groceries",
                "finished": False,
                "createdAt": "2025-01-25T10:15:30.123Z",
            }
        },
    )

    todo_id: StrictStr = Field(..., alias="todoId")
    todo_title: StrictStr = Field(..., alias="todoTitle")
    finished: StrictBool
    created_at: StrictStr = Field(..., alias="createdAt")

    @field_validator("created_at")
    @classmethod
    def validate_created_at(cls, v: str) -> str:
        """
        Reject strings that are not a valid calendar timestamp.
        """
        parse_timestamp(v)
        return v

    @classmethod
    def from_todo(cls, todo: Todo) -> "StoredTodo":
        return cls(
            todo_id=todo["todo_id"],
            todo_title=todo["title"],
            finished=todo["finished"],
            created_at=format_timestamp(todo["created_at"]),
        )

    def to_todo(self) -> Todo:
        return {
            "todo_id": self.todo_id,
            "title": self.todo_title,
            "finished": self.finished,
            "created_at": parse_timestamp(self.created_at),
        }


# PUBLIC_INTERFACE
class TodoCreate(BaseModel):
    """
    Schema for creating a new Todo item. Title rules are enforced by the store,
    which reports violations as messages rather than request errors.
    """

    model_config = ConfigDict(json_schema_extra={"example": {"title": "Buy groceries"}})

    title: str = Field(..., description="Raw title text; trimmed, validated and escaped by the store")


# PUBLIC_INTERFACE
class TodoOut(BaseModel):
    """
    Schema returned by the API for a Todo item.
    """

    id: str = Field(..., description="Unique identifier of the todo item")
    title: str = Field(..., description="Sanitized title")
    finished: bool = Field(..., description="Completion status flag")
    created_at: datetime = Field(..., description="Creation timestamp")

    @classmethod
    def from_todo(cls, todo: Todo) -> "TodoOut":
        return cls(
            id=todo["todo_id"],
            title=todo["title"],
            finished=todo["finished"],
            created_at=todo["created_at"],
        )


# PUBLIC_INTERFACE
class MessageOut(BaseModel):
    """
    Schema returned by the API for a queued result message.
    """

    id: str = Field(..., description="Unique identifier of the message")
    type: Literal["success", "error", "warning", "info"] = Field(..., description="Message severity")
    text: str = Field(..., description="User-facing text")

    @classmethod
    def from_message(cls, message: ResultMessage) -> "MessageOut":
        return cls(**message)


# PUBLIC_INTERFACE
class StateOut(BaseModel):
    """
    Snapshot of the store returned by every endpoint: the todo list in
    canonical newest-first order plus the current message queue.
    """

    todos: List[TodoOut] = Field(..., description="Todos, newest first")
    messages: List[MessageOut] = Field(..., description="Queued result messages in insertion order")
