"""PostgreSQL-backed storage of events and categories.

The store talks to the database through a small connection interface:

* ``execute(sql, *args)`` runs a statement and returns the number of rows
  it affected;
* ``query(sql, *args)`` returns an iterable of row sequences;
* ``query_row(sql, *args)`` returns one row sequence and raises
  :class:`NoRowsError` when the query produced none.

SQL uses PostgreSQL's ``$1, $2, ...`` placeholders.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from typing import Any, Protocol

from .types import Category, Event


class StoreError(Exception):
    """A storage operation failed; a wrapped error is kept as ``__cause__``."""


class NoRowsError(StoreError):
    """A query that must return a row returned none."""

    def __init__(self, message: str = "no rows in result set") -> None:
        super().__init__(message)


class _Connection(Protocol):
    def execute(self, sql: str, *args: Any) -> int: ...

    def query(self, sql: str, *args: Any) -> Iterable[Sequence[Any]]: ...

    def query_row(self, sql: str, *args: Any) -> Sequence[Any]: ...


_CREATE_EVENT = (
    "INSERT INTO events (name, description, category_id, date, time, location, price, image, source) "
    "VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9) "
    "RETURNING id, created_at, updated_at"
)
_UPDATE_EVENT = (
    "UPDATE events "
    "SET name = $1, description = $2, category_id = $3, date = $4, time = $5, "
    "location = $6, price = $7, image = $8, source = $9, updated_at = NOW() "
    "WHERE id = $10 "
    "RETURNING updated_at"
)
_SELECT_EVENTS = (
    "SELECT id, name, description, category_id, date, time, location, price, image, source, "
    "created_at, updated_at FROM events"
)
_GET_EVENT_BY_ID = _SELECT_EVENTS + " WHERE id = $1"
_GET_EVENTS_BY_CATEGORY = _SELECT_EVENTS + " WHERE category_id = $1"
_DELETE_EVENT = "DELETE FROM events WHERE id = $1"

_CREATE_CATEGORY = "INSERT INTO categories (name) VALUES ($1) RETURNING id, created_at, updated_at"
_LIST_CATEGORIES = "SELECT id, name, created_at, updated_at FROM categories"
_GET_CATEGORY_BY_ID = _LIST_CATEGORIES + " WHERE id = $1"
_CATEGORY_EXISTS = "SELECT EXISTS(SELECT 1 FROM categories WHERE id = $1)"
_UPDATE_CATEGORY = (
    "UPDATE categories SET name = $1, updated_at = NOW() WHERE id = $2 RETURNING updated_at"
)
_DELETE_CATEGORY = "DELETE FROM categories WHERE id = $1"


def _scan_event(row: Sequence[Any]) -> Event:
    (
        event_id,
        name,
        description,
        category_id,
        date,
        time,
        location,
        price,
        image,
        source,
        created_at,
        updated_at,
    ) = row
    return Event(
        id=event_id,
        name=name,
        description=description,
        category_id=category_id,
        date=date,
        time=time,
        location=location,
        price=price,
        image=image,
        source=source,
        created_at=created_at,
        updated_at=updated_at,
    )


def _scan_category(row: Sequence[Any]) -> Category:
    category_id, name, created_at, updated_at = row
    return Category(id=category_id, name=name, created_at=created_at, updated_at=updated_at)


def _iterate(rows: Iterable[Sequence[Any]], message: str) -> Iterator[Sequence[Any]]:
    """Yield rows, wrapping failures of the iteration itself."""
    it = iter(rows)
    while True:
        try:
            row = next(it)
        except StopIteration:
            return
        except Exception as exc:
            raise StoreError(f"{message}: {exc}") from exc
        yield row


def _event_values(event: Event) -> tuple[Any, ...]:
    return (
        event.name,
        event.description,
        event.category_id,
        event.date,
        event.time,
        event.location,
        event.price,
        event.image,
        event.source,
    )


class PostgresStore:
    """Event and category storage on top of a PostgreSQL connection."""

    def __init__(self, db: _Connection) -> None:
        self._db = db

    # Events

    def create_event(self, event: Event) -> Event:
        """Insert ``event`` and fill in the id and timestamps set by the database."""
        try:
            row = self._db.query_row(_CREATE_EVENT, *_event_values(event))
            event.id, event.created_at, event.updated_at = row
        except Exception as exc:
            raise StoreError(f"failed to create event: {exc}") from exc
        return event

    def update_event(self, event: Event) -> Event:
        """Write every field of ``event`` and refresh its ``updated_at``."""
        try:
            (new_updated_at,) = self._db.query_row(_UPDATE_EVENT, *_event_values(event), event.id)
        except NoRowsError as exc:
            raise StoreError(f"event with ID {event.id} not found for update: {exc}") from exc
        except Exception as exc:
            raise StoreError(f"failed to update event {event.id}: {exc}") from exc
        event.updated_at = new_updated_at
        return event

    def get_events(self) -> list[Event]:
        """Return every event."""
        try:
            rows = self._db.query(_SELECT_EVENTS)
        except Exception as exc:
            raise StoreError(f"failed to query events: {exc}") from exc
        events = []
        for row in _iterate(rows, "error iterating event rows"):
            try:
                events.append(_scan_event(row))
            except Exception as exc:
                raise StoreError(f"failed to scan event during get_events: {exc}") from exc
        return events

    def get_event_by_id(self, event_id: int) -> Event:
        """Return the event with ``event_id``."""
        try:
            return _scan_event(self._db.query_row(_GET_EVENT_BY_ID, event_id))
        except NoRowsError as exc:
            raise StoreError(f"event with ID {event_id} not found: {exc}") from exc
        except Exception as exc:
            raise StoreError(f"failed to get event by ID {event_id}: {exc}") from exc

    def delete_event(self, event_id: int) -> Event:
        """Delete the event with ``event_id`` and return what it held."""
        try:
            event = self.get_event_by_id(event_id)
        except StoreError as exc:
            raise StoreError(
                f"cannot delete event, failed to retrieve event ID {event_id}: {exc}"
            ) from exc
        try:
            affected = self._db.execute(_DELETE_EVENT, event_id)
        except Exception as exc:
            raise StoreError(f"failed to execute delete for event {event_id}: {exc}") from exc
        if affected == 0:
            raise StoreError(
                f"event with ID {event_id} was found but not deleted (0 rows affected)"
            )
        return event

    def get_events_by_category(self, category_id: int) -> list[Event]:
        """Return the events that belong to ``category_id``."""
        try:
            rows = self._db.query(_GET_EVENTS_BY_CATEGORY, category_id)
        except Exception as exc:
            raise StoreError(
                f"failed to query events by category {category_id}: {exc}"
            ) from exc
        events = []
        for row in _iterate(rows, f"error iterating event rows for category {category_id}"):
            try:
                events.append(_scan_event(row))
            except Exception as exc:
                raise StoreError(
                    f"failed to scan event during get_events_by_category: {exc}"
                ) from exc
        return events

    # Categories

    def create_category(self, category: Category) -> None:
        """Insert ``category`` and fill in its id and timestamps."""
        try:
            row = self._db.query_row(_CREATE_CATEGORY, category.name)
            category.id, category.created_at, category.updated_at = row
        except Exception as exc:
            raise StoreError(f"failed to create category: {exc}") from exc

    def list_categories(self) -> list[Category]:
        """Return every category."""
        rows = self._db.query(_LIST_CATEGORIES)
        return [_scan_category(row) for row in _iterate(rows, "error iterating category rows")]

    def get_category_by_id(self, category_id: int) -> Category:
        """Return the category with ``category_id``."""
        try:
            return _scan_category(self._db.query_row(_GET_CATEGORY_BY_ID, category_id))
        except NoRowsError:
            raise StoreError(f"category {category_id} not found") from None
        except Exception as exc:
            raise StoreError(f"failed to get category by id {category_id}: {exc}") from exc

    def update_category(self, category: Category) -> None:
        """Rename ``category`` in the database and refresh its ``updated_at``."""
        (exists,) = self._db.query_row(_CATEGORY_EXISTS, category.id)
        if not exists:
            raise StoreError(f"category with ID {category.id} not found")
        try:
            (updated_at,) = self._db.query_row(_UPDATE_CATEGORY, category.name, category.id)
        except Exception as exc:
            raise StoreError(f"failed to update category {category.id}: {exc}") from exc
        category.updated_at = updated_at

    def delete_category(self, category_id: int) -> None:
        """Delete the category with ``category_id``."""
        try:
            affected = self._db.execute(_DELETE_CATEGORY, category_id)
        except Exception as exc:
            raise StoreError(f"failed to delete category {category_id}: {exc}") from exc
        if affected == 0:
            raise StoreError(f"category with ID {category_id} not found for deletion")