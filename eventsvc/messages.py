"""Request and response messages of the event service API."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class CreateEventReq:
    """Request to create an event."""

    name: str = ""
    description: str = ""
    category_id: int = 0
    date: str = ""
    time: str = ""
    location: str = ""
    price: float = 0.0
    image: str = ""
    source: str = ""


@dataclass
class UpdateEventReq:
    """Request to replace the fields of an existing event."""

    id: int = 0
    name: str = ""
    description: str = ""
    category_id: int = 0
    date: str = ""
    time: str = ""
    location: str = ""
    price: float = 0.0
    image: str = ""
    source: str = ""


@dataclass
class GetEventReq:
    """Request for one event by id."""

    id: int = 0


@dataclass
class ListEventsReq:
    """Request for every event."""


@dataclass
class DeleteEventReq:
    """Request to delete one event by id."""

    id: int = 0


@dataclass
class EventRes:
    """An event as returned to clients."""

    id: int = 0
    name: str = ""
    description: str = ""
    category_id: int = 0
    date: str = ""
    time: str = ""
    location: str = ""
    price: float = 0.0
    image: str = ""
    source: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class ListEventsRes:
    """A list of events."""

    events: list[EventRes] = field(default_factory=list)


@dataclass
class CreateCategoryReq:
    """Request to create a category."""

    name: str = ""


@dataclass
class UpdateCategoryReq:
    """Request to rename a category."""

    id: int = 0
    name: str = ""


@dataclass
class GetCategoryReq:
    """Request for one category by id."""

    id: int = 0


@dataclass
class ListCategoriesReq:
    """Request for every category."""


@dataclass
class DeleteCategoryReq:
    """Request to delete one category by id."""

    id: int = 0


@dataclass
class CategoryRes:
    """A category as returned to clients."""

    id: int = 0
    name: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class ListCategoriesRes:
    """A list of categories."""

    categories: list[CategoryRes] = field(default_factory=list)