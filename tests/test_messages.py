from datetime import datetime, timezone

from eventsvc.messages import (
    CategoryRes,
    CreateEventReq,
    EventRes,
    ListCategoriesRes,
    ListEventsRes,
    UpdateCategoryReq,
    UpdateEventReq,
)


def test_create_event_req_defaults_are_empty():
    req = CreateEventReq()
    assert req.name == ""
    assert req.category_id == 0
    assert req.price == 0.0


def test_update_event_req_carries_id_and_fields():
    req = UpdateEventReq(id=7, name="Concert", price=12.5)
    assert req.id == 7
    assert req.name == "Concert"
    assert req.price == 12.5
    assert req.location == ""


def test_event_res_timestamps_default_to_none():
    res = EventRes(id=3)
    assert res.created_at is None
    assert res.updated_at is None


def test_list_events_res_lists_are_independent():
    first = ListEventsRes()
    second = ListEventsRes()
    first.events.append(EventRes(id=1))
    assert second.events == []
    assert first.events == [EventRes(id=1)]


def test_list_categories_res_lists_are_independent():
    first = ListCategoriesRes()
    first.categories.append(CategoryRes(id=2, name="Music"))
    assert ListCategoriesRes().categories == []


def test_messages_compare_by_value():
    stamp = datetime(2024, 5, 1, tzinfo=timezone.utc)
    assert CategoryRes(1, "Art", stamp, stamp) == CategoryRes(
        id=1, name="Art", created_at=stamp, updated_at=stamp
    )
    assert UpdateCategoryReq(1, "a") != UpdateCategoryReq(1, "b")