"""
View model for the todo list screen.

Holds the signed-in user's todos as last returned by the server, plus the
view state the UI binds to: search text, filter, sort key, the id of the
todo being edited, and the last error message.  ``visible_todos`` derives
the filtered and sorted list; the mutation methods call the API and then
reconcile the held list with the record the server sent back.

Drag-and-drop reordering only rearranges the held list and is not sent to
the server, so the next ``refresh`` restores the server's order.

Key Concepts Demonstrated:
- Explicit session passing instead of ambient auth state
- Derived views computed lazily from held state
- Reconciling local state with authoritative server responses
- User-dismissable error messages, no automatic retries
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from datetime import datetime, timezone
from typing import Any

from .api import ApiError, TodoClient
from .models import PRIORITY_RANK, Session, TodoCategory, TodoPriority, deserialize_todo

logger = logging.getLogger(__name__)

STATUS_FILTERS = ("all", "completed", "pending")
FILTERS = STATUS_FILTERS + tuple(c.value for c in TodoCategory)
SORT_KEYS = ("date", "priority", "name")

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def matches_filter(todo: dict[str, Any], selection: str) -> bool:
    """Return True if *todo* passes the status or category *selection*."""
    if selection == "all":
        return True
    if selection == "completed":
        return bool(todo.get("completed"))
    if selection == "pending":
        return not todo.get("completed")
    return todo.get("category") == selection


def matches_search(todo: dict[str, Any], term: str) -> bool:
    """Case-insensitive substring match on title or description."""
    needle = term.casefold()
    return (
        needle in (todo.get("title") or "").casefold()
        or needle in (todo.get("description") or "").casefold()
    )


def _sort_key(sort_by: str):
    if sort_by == "priority":
        return lambda t: -PRIORITY_RANK.get(t.get("priority"), 0)
    if sort_by == "name":
        return lambda t: (t.get("title") or "").casefold()
    return None


def sort_todos(todos: list[dict[str, Any]], sort_by: str) -> list[dict[str, Any]]:
    """
    Order *todos* for display.

    ``date`` puts the newest first, ``priority`` goes high, medium, low
    and ``name`` sorts titles case-insensitively.  All three are stable.
    """
    if sort_by == "date":
        return sorted(todos, key=lambda t: t.get("created_at") or _EPOCH, reverse=True)
    key = _sort_key(sort_by)
    return sorted(todos, key=key) if key else list(todos)


class TodoViewModel:
    """State and actions behind the todo list screen."""

    def __init__(self, client: TodoClient, session: Session | None = None) -> None:
        self.client = client
        self.session = session
        self.todos: list[dict[str, Any]] = []
        self.search = ""
        self.filter = "all"
        self.sort_by = "date"
        self.editing_id: str | None = None
        self.error: str | None = None

    # -- session ------------------------------------------------------------

    @property
    def signed_in(self) -> bool:
        return self.session is not None

    def _require_session(self) -> Session:
        if self.session is None:
            raise RuntimeError("Not signed in")
        return self.session

    def sign_in(self, email: str, password: str) -> bool:
        """Log in and load the user's todos.  Returns False on failure."""
        try:
            payload = self.client.login(email, password)
        except ApiError as exc:
            self.error = exc.message
            return False
        self.session = Session.from_auth_response(payload)
        self.error = None
        return self.refresh()

    def sign_up(self, username: str, email: str, password: str) -> bool:
        """Register, sign in, and load the (empty) todo list."""
        try:
            payload = self.client.register(username, email, password)
        except ApiError as exc:
            self.error = exc.message
            return False
        self.session = Session.from_auth_response(payload)
        self.error = None
        return self.refresh()

    def sign_out(self) -> None:
        self.session = None
        self.todos = []
        self.editing_id = None
        self.error = None

    # -- view state ---------------------------------------------------------

    def set_search(self, term: str) -> None:
        self.search = term or ""

    def set_filter(self, selection: str) -> None:
        if selection not in FILTERS:
            raise ValueError(f"Unknown filter: {selection!r}")
        self.filter = selection

    def set_sort(self, sort_by: str) -> None:
        if sort_by not in SORT_KEYS:
            raise ValueError(f"Unknown sort key: {sort_by!r}")
        self.sort_by = sort_by

    def start_editing(self, todo_id: str) -> None:
        self.editing_id = todo_id

    def cancel_editing(self) -> None:
        self.editing_id = None

    def dismiss_error(self) -> None:
        self.error = None

    def visible_todos(self) -> Iterator[dict[str, Any]]:
        """Yield the held todos that pass the filter and search, in sort order."""
        selected = (
            todo
            for todo in self.todos
            if matches_filter(todo, self.filter) and matches_search(todo, self.search)
        )
        yield from sort_todos(list(selected), self.sort_by)

    def stats(self) -> dict[str, int]:
        """Counts over the whole held list, ignoring filter and search."""
        completed = sum(1 for t in self.todos if t.get("completed"))
        return {
            "total": len(self.todos),
            "completed": completed,
            "pending": len(self.todos) - completed,
            "high_priority": sum(1 for t in self.todos if t.get("priority") == TodoPriority.HIGH.value),
        }

    # -- server round trips -------------------------------------------------

    def _fail(self, exc: ApiError, default: str) -> bool:
        # Status 0 (unreachable server) shows the action message instead.
        self.error = exc.message if exc.status_code else default
        logger.warning("%s: %s", default, exc)
        return False

    def _replace(self, record: dict[str, Any]) -> None:
        todo = deserialize_todo(record)
        self.todos = [todo if t["id"] == todo["id"] else t for t in self.todos]

    def refresh(self) -> bool:
        """Reload the list from the server, discarding any local reordering."""
        session = self._require_session()
        try:
            records = self.client.list_todos(session.token)
        except ApiError as exc:
            return self._fail(exc, "Failed to fetch todos")
        self.todos = [deserialize_todo(r) for r in records]
        return True

    def add(
        self,
        title: str,
        description: str = "",
        category: str = TodoCategory.PERSONAL.value,
        priority: str = TodoPriority.MEDIUM.value,
    ) -> bool:
        """Create a todo and put the server's record at the top of the list."""
        if not title or not title.strip():
            return False
        session = self._require_session()
        try:
            record = self.client.create_todo(
                session.token, title, description, category=category, priority=priority
            )
        except ApiError as exc:
            return self._fail(exc, "Failed to add todo")
        self.todos = [deserialize_todo(record)] + self.todos
        return True

    def toggle(self, todo_id: str) -> bool:
        """Flip a todo's completed flag."""
        current = next((t for t in self.todos if t["id"] == todo_id), None)
        if current is None:
            return False
        return self._update(todo_id, {"completed": not current.get("completed")})

    def update(self, todo_id: str, **fields: Any) -> bool:
        """Save edits to a todo and leave editing mode on success."""
        if not self._update(todo_id, fields):
            return False
        self.editing_id = None
        return True

    def _update(self, todo_id: str, fields: dict[str, Any]) -> bool:
        session = self._require_session()
        try:
            record = self.client.update_todo(session.token, todo_id, **fields)
        except ApiError as exc:
            return self._fail(exc, "Failed to update todo")
        self._replace(record)
        return True

    def delete(self, todo_id: str) -> bool:
        session = self._require_session()
        try:
            self.client.delete_todo(session.token, todo_id)
        except ApiError as exc:
            return self._fail(exc, "Failed to delete todo")
        self.todos = [t for t in self.todos if t["id"] != todo_id]
        if self.editing_id == todo_id:
            self.editing_id = None
        return True

    # -- local only ---------------------------------------------------------

    def reorder(self, dragged_id: str, target_id: str) -> None:
        """
        Move the dragged todo to the target's position in the held list.

        No-op if the ids are equal or either is unknown.
        """
        if dragged_id == target_id:
            return
        ids = [t["id"] for t in self.todos]
        if dragged_id not in ids or target_id not in ids:
            return
        todos = list(self.todos)
        drag_index = ids.index(dragged_id)
        drop_index = ids.index(target_id)
        dragged = todos.pop(drag_index)
        todos.insert(drop_index, dragged)
        self.todos = todos
