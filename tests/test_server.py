import io
from datetime import datetime, timezone

import pytest

from eventsvc import logger
from eventsvc.messages import (
    CreateCategoryReq,
    CreateEventReq,
    DeleteCategoryReq,
    DeleteEventReq,
    GetCategoryReq,
    GetEventReq,
    ListCategoriesReq,
    ListEventsReq,
    UpdateCategoryReq,
    UpdateEventReq,
)
from eventsvc.server import EventServer, RpcError, StatusCode, wrap_error
from eventsvc.store import NoRowsError, PostgresStore, StoreError

CREATED = datetime(2024, 1, 1, tzinfo=timezone.utc)
UPDATED = datetime(2024, 2, 1, tzinfo=timezone.utc)


class FakeDB:
    """An in-memory stand-in for the database connection."""

    def __init__(self):
        self.events = {}
        self.categories = {}
        self.next_event_id = 1
        self.next_category_id = 1
        self.fail = False

    def execute(self, sql, *args):
        if self.fail:
            raise OSError("connection lost")
        if sql.startswith("DELETE FROM events"):
            return 1 if self.events.pop(args[0], None) is not None else 0
        if sql.startswith("DELETE FROM categories"):
            return 1 if self.categories.pop(args[0], None) is not None else 0
        raise AssertionError(sql)

    def query(self, sql, *args):
        if self.fail:
            raise OSError("connection lost")
        if "FROM events" in sql:
            rows = list(self.events.values())
            if "category_id = $1" in sql:
                rows = [row for row in rows if row[3] == args[0]]
            return [tuple(row) for row in rows]
        if "FROM categories" in sql:
            return [tuple(row) for row in self.categories.values()]
        raise AssertionError(sql)

    def query_row(self, sql, *args):
        if self.fail:
            raise OSError("connection lost")
        if sql.startswith("INSERT INTO events"):
            event_id = self.next_event_id
            self.next_event_id += 1
            self.events[event_id] = [event_id, *args, CREATED, None]
            return (event_id, CREATED, None)
        if sql.startswith("UPDATE events"):
            event_id = args[9]
            if event_id not in self.events:
                raise NoRowsError()
            row = self.events[event_id]
            row[1:10] = args[:9]
            row[11] = UPDATED
            return (UPDATED,)
        if "FROM events WHERE id" in sql:
            if args[0] not in self.events:
                raise NoRowsError()
            return tuple(self.events[args[0]])
        if sql.startswith("INSERT INTO categories"):
            category_id = self.next_category_id
            self.next_category_id += 1
            self.categories[category_id] = [category_id, args[0], CREATED, CREATED]
            return (category_id, CREATED, CREATED)
        if sql.startswith("SELECT EXISTS"):
            return (args[0] in self.categories,)
        if sql.startswith("UPDATE categories"):
            row = self.categories[args[1]]
            row[1] = args[0]
            row[3] = UPDATED
            return (UPDATED,)
        if "FROM categories WHERE id" in sql:
            if args[0] not in self.categories:
                raise NoRowsError()
            return tuple(self.categories[args[0]])
        raise AssertionError(sql)


@pytest.fixture(autouse=True)
def log_stream():
    stream = io.StringIO()
    logger.init("dev", stream)
    yield stream
    logger.init("dev")


@pytest.fixture
def db():
    return FakeDB()


@pytest.fixture
def server(db):
    return EventServer(PostgresStore(db), logger.new_logger())


def test_create_event_returns_stored_event(server, log_stream):
    res = server.create_event(CreateEventReq(name="Jazz", category_id=2, price=5.0))
    assert res.id == 1
    assert res.name == "Jazz"
    assert res.category_id == 2
    assert res.created_at == CREATED
    assert res.updated_at is None
    assert "event created successfully" in log_stream.getvalue()


def test_create_event_requires_name(server, db):
    with pytest.raises(RpcError) as info:
        server.create_event(CreateEventReq(name=""))
    assert info.value.code is StatusCode.INVALID_ARGUMENT
    assert info.value.message == "event name is required"
    assert db.events == {}


def test_get_event_round_trip(server):
    created = server.create_event(CreateEventReq(name="Expo", location="Park"))
    fetched = server.get_event(GetEventReq(id=created.id))
    assert fetched == created


def test_get_missing_event_is_not_found(server):
    with pytest.raises(RpcError) as info:
        server.get_event(GetEventReq(id=42))
    assert info.value.code is StatusCode.NOT_FOUND
    assert info.value.message == "resource not found"


def test_list_events_returns_all_in_order(server):
    server.create_event(CreateEventReq(name="a"))
    server.create_event(CreateEventReq(name="b"))
    res = server.list_events(ListEventsReq())
    assert [event.name for event in res.events] == ["a", "b"]


def test_list_events_empty(server):
    assert server.list_events(ListEventsReq()).events == []


@pytest.mark.parametrize(
    "req, message",
    [
        (UpdateEventReq(id=0, name="x"), "invalid event ID"),
        (UpdateEventReq(id=-3, name="x"), "invalid event ID"),
        (UpdateEventReq(id=1, name=""), "event name is required"),
    ],
)
def test_update_event_validation(server, req, message):
    with pytest.raises(RpcError) as info:
        server.update_event(req)
    assert info.value.code is StatusCode.INVALID_ARGUMENT
    assert info.value.message == message


def test_update_missing_event_is_not_found(server):
    with pytest.raises(RpcError) as info:
        server.update_event(UpdateEventReq(id=99, name="x"))
    assert info.value.code is StatusCode.NOT_FOUND


def test_update_event_replaces_fields(server):
    created = server.create_event(CreateEventReq(name="Old", location="A"))
    res = server.update_event(UpdateEventReq(id=created.id, name="New", location="B"))
    assert res.id == created.id
    assert res.name == "New"
    assert res.location == "B"
    assert res.created_at == CREATED
    assert res.updated_at == UPDATED
    assert server.get_event(GetEventReq(id=created.id)).name == "New"


def test_delete_event_removes_it(server):
    created = server.create_event(CreateEventReq(name="Gone"))
    assert server.delete_event(DeleteEventReq(id=created.id)) is None
    with pytest.raises(RpcError) as info:
        server.get_event(GetEventReq(id=created.id))
    assert info.value.code is StatusCode.NOT_FOUND


def test_delete_missing_event_is_not_found(server):
    with pytest.raises(RpcError) as info:
        server.delete_event(DeleteEventReq(id=5))
    assert info.value.code is StatusCode.NOT_FOUND


def test_database_failure_is_internal(server, db):
    db.fail = True
    with pytest.raises(RpcError) as info:
        server.list_events(ListEventsReq())
    assert info.value.code is StatusCode.INTERNAL
    assert info.value.message == "internal server error"


def test_create_category_requires_name(server):
    with pytest.raises(RpcError) as info:
        server.create_category(CreateCategoryReq(name=""))
    assert info.value.code is StatusCode.INVALID_ARGUMENT
    assert info.value.message == "category name is required"


def test_create_and_get_category(server):
    created = server.create_category(CreateCategoryReq(name="Music"))
    assert created.id == 1
    assert created.name == "Music"
    assert created.created_at == CREATED
    assert server.get_category(GetCategoryReq(id=created.id)) == created


def test_missing_category_is_internal_error(server):
    # The store reports a missing category without the no-rows cause.
    with pytest.raises(RpcError) as info:
        server.get_category(GetCategoryReq(id=7))
    assert info.value.code is StatusCode.INTERNAL


def test_list_categories(server):
    server.create_category(CreateCategoryReq(name="a"))
    server.create_category(CreateCategoryReq(name="b"))
    res = server.list_categories(ListCategoriesReq())
    assert [category.name for category in res.categories] == ["a", "b"]


@pytest.mark.parametrize(
    "req, message",
    [
        (UpdateCategoryReq(id=0, name="x"), "invalid category ID"),
        (UpdateCategoryReq(id=1, name=""), "category name is required"),
    ],
)
def test_update_category_validation(server, req, message):
    with pytest.raises(RpcError) as info:
        server.update_category(req)
    assert info.value.code is StatusCode.INVALID_ARGUMENT
    assert info.value.message == message


def test_update_category_renames(server):
    created = server.create_category(CreateCategoryReq(name="Old"))
    res = server.update_category(UpdateCategoryReq(id=created.id, name="New"))
    assert res.name == "New"
    assert res.updated_at == UPDATED
    assert server.get_category(GetCategoryReq(id=created.id)).name == "New"


def test_delete_category(server):
    created = server.create_category(CreateCategoryReq(name="Tmp"))
    assert server.delete_category(DeleteCategoryReq(id=created.id)) is None
    assert server.list_categories(ListCategoriesReq()).categories == []


def test_delete_missing_category_is_internal_error(server):
    with pytest.raises(RpcError) as info:
        server.delete_category(DeleteCategoryReq(id=3))
    assert info.value.code is StatusCode.INTERNAL


def test_wrap_error_maps_no_rows_through_causes():
    try:
        try:
            raise NoRowsError()
        except NoRowsError as inner:
            raise StoreError("event not found") from inner
    except StoreError as outer:
        wrapped = wrap_error(outer)
    assert wrapped.code is StatusCode.NOT_FOUND
    assert wrapped.message == "resource not found"


def test_wrap_error_other_errors_are_internal():
    wrapped = wrap_error(ValueError("boom"))
    assert wrapped.code is StatusCode.INTERNAL
    assert str(wrapped) == "internal server error"