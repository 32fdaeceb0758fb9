"""
Todo core package.

Holds the state layer for a single-writer todo list: title sanitization and
validation, the TodoStore and its rules, debounced persistence and the result
message queue. `todo_core.main` exposes the same store over HTTP.
"""

from .store import TodoStore, create_store  # noqa: F401
