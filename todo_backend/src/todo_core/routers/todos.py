from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from ..schemas import MessageOut, StateOut, TodoCreate, TodoOut
from ..store import TodoStore

router = APIRouter(
    prefix="/api/v1",
    tags=["todos"],
)


def get_store(request: Request) -> TodoStore:
    """
    Dependency returning the store owned by this application instance.
    """
    return request.app.state.store


def _state(store: TodoStore) -> StateOut:
    return StateOut(
        todos=[TodoOut.from_todo(t) for t in store.todos],
        messages=[MessageOut.from_message(m) for m in store.messages],
    )


# PUBLIC_INTERFACE
@router.get(
    "/todos",
    response_model=StateOut,
    summary="List Todos",
    description="Return all todos, newest first, together with the current message queue.",
)
def list_todos(store: TodoStore = Depends(get_store)) -> StateOut:
    """
    List todos and queued messages.
    """
    return _state(store)


# PUBLIC_INTERFACE
@router.post(
    "/todos",
    response_model=StateOut,
    summary="Create Todo",
    description=(
        "Create a new Todo. Validation and capacity failures do not produce an error "
        "status; they are reported as `error` entries in `messages` and nothing is created."
    ),
)
def create_todo(payload: TodoCreate, store: TodoStore = Depends(get_store)) -> StateOut:
    store.add_todo(payload.title)
    return _state(store)


# PUBLIC_INTERFACE
@router.post(
    "/todos/{todo_id}/finish",
    response_model=StateOut,
    summary="Finish Todo",
    description="Mark a Todo as finished. Unknown or already finished todos are reported in `messages`.",
)
def finish_todo(todo_id: str, store: TodoStore = Depends(get_store)) -> StateOut:
    store.finish_todo(todo_id)
    return _state(store)


# PUBLIC_INTERFACE
@router.delete(
    "/todos/{todo_id}",
    response_model=StateOut,
    summary="Delete Todo",
    description="Delete a Todo by ID. Unknown todos are reported in `messages`.",
)
def delete_todo(todo_id: str, store: TodoStore = Depends(get_store)) -> StateOut:
    store.delete_todo(todo_id)
    return _state(store)


# PUBLIC_INTERFACE
@router.delete(
    "/messages",
    response_model=StateOut,
    summary="Clear Messages",
    description="Empty the message queue.",
)
def clear_messages(store: TodoStore = Depends(get_store)) -> StateOut:
    store.clear_messages()
    return _state(store)
