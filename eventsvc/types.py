"""Domain records for events and categories."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone


@dataclass
class CreateEventParams:
    """Fields supplied when creating an event."""

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
class UpdateEventParams:
    """Fields replaced when updating an event (a full update)."""

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
class Event:
    """An event stored in the system."""

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

    def apply_update(self, params: UpdateEventParams) -> None:
        """Copy the updatable fields from ``params``; id and timestamps stay."""
        self.name = params.name
        self.description = params.description
        self.category_id = params.category_id
        self.date = params.date
        self.time = params.time
        self.location = params.location
        self.price = params.price
        self.image = params.image
        self.source = params.source


@dataclass
class Category:
    """A category that events belong to."""

    id: int = 0
    name: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class CreateCategoryReq:
    """Fields supplied when creating a category."""

    name: str = ""


def new_event_from_create_request(params: CreateEventParams) -> Event:
    """Build an unsaved event; the store assigns id and timestamps."""
    return Event(
        name=params.name,
        description=params.description,
        category_id=params.category_id,
        date=params.date,
        time=params.time,
        location=params.location,
        price=params.price,
        image=params.image,
        source=params.source,
    )


def new_category(req: CreateCategoryReq) -> Category:
    """Build an unsaved category stamped with the current time."""
    now = datetime.now(timezone.utc)
    return Category(name=req.name, created_at=now, updated_at=now)