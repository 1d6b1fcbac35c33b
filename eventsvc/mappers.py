"""Conversions between API messages and stored records."""

from __future__ import annotations

import math
import struct

from . import messages
from .types import (
    Category,
    CreateCategoryReq,
    CreateEventParams,
    Event,
    UpdateEventParams,
)


def _float32(value: float) -> float:
    """Round ``value`` to single precision, overflowing to infinity."""
    try:
        return struct.unpack("f", struct.pack("f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def proto_to_create_event_params(req: messages.CreateEventReq) -> CreateEventParams:
    """Build creation parameters from a create request."""
    return CreateEventParams(
        name=req.name,
        description=req.description,
        category_id=req.category_id,
        date=req.date,
        time=req.time,
        location=req.location,
        price=_float32(req.price),
        image=req.image,
        source=req.source,
    )


def proto_to_update_event_params(
    req: messages.UpdateEventReq,
) -> tuple[int, UpdateEventParams]:
    """Return the event id and the update parameters of an update request."""
    return req.id, UpdateEventParams(
        name=req.name,
        description=req.description,
        category_id=req.category_id,
        date=req.date,
        time=req.time,
        location=req.location,
        price=_float32(req.price),
        image=req.image,
        source=req.source,
    )


def db_event_to_proto_event_res(event: Event | None) -> messages.EventRes | None:
    """Turn a stored event into a response; ``None`` stays ``None``."""
    if event is None:
        return None
    return messages.EventRes(
        id=event.id,
        name=event.name,
        description=event.description,
        category_id=event.category_id,
        date=event.date,
        time=event.time,
        location=event.location,
        price=_float32(event.price),
        image=event.image,
        source=event.source,
        created_at=event.created_at,
        updated_at=event.updated_at,
    )


def db_events_to_proto_events_list(
    events: list[Event | None] | None,
) -> list[messages.EventRes | None] | None:
    """Convert stored events to responses, keeping their order."""
    if events is None:
        return None
    return [db_event_to_proto_event_res(event) for event in events]


def proto_to_create_category_params(req: messages.CreateCategoryReq) -> CreateCategoryReq:
    """Build a category creation request from an API request."""
    return CreateCategoryReq(name=req.name)


def proto_to_update_category_params(req: messages.UpdateCategoryReq) -> tuple[int, str]:
    """Return the category id and new name of an update request."""
    return int(req.id), req.name


def db_category_to_proto_category_res(
    category: Category | None,
) -> messages.CategoryRes | None:
    """Turn a stored category into a response; ``None`` stays ``None``."""
    if category is None:
        return None
    return messages.CategoryRes(
        id=category.id,
        name=category.name,
        created_at=category.created_at,
        updated_at=category.updated_at,
    )


def db_categories_to_proto_list(
    categories: list[Category | None] | None,
) -> list[messages.CategoryRes | None] | None:
    """Convert stored categories to responses, keeping their order."""
    if categories is None:
        return None
    return [db_category_to_proto_category_res(category) for category in categories]