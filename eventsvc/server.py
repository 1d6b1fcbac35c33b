"""The event service: request validation, storage calls and error mapping."""

from __future__ import annotations

from enum import IntEnum

from . import messages
from .logger import Logger, new_logger
from .mappers import (
    db_categories_to_proto_list,
    db_category_to_proto_category_res,
    db_event_to_proto_event_res,
    db_events_to_proto_events_list,
    proto_to_create_category_params,
    proto_to_create_event_params,
    proto_to_update_category_params,
    proto_to_update_event_params,
)
from .store import NoRowsError, PostgresStore
from .types import new_category, new_event_from_create_request


class StatusCode(IntEnum):
    """Status codes the service answers with."""

    OK = 0
    INVALID_ARGUMENT = 3
    NOT_FOUND = 5
    INTERNAL = 13


class RpcError(Exception):
    """A failed call, carrying a status code and a client-facing message."""

    def __init__(self, code: StatusCode, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


def _is_no_rows(err: BaseException | None) -> bool:
    while err is not None:
        if isinstance(err, NoRowsError):
            return True
        err = err.__cause__
    return False


def wrap_error(err: BaseException) -> RpcError:
    """Map a storage error to a status: missing rows are NOT_FOUND, all else INTERNAL."""
    if _is_no_rows(err):
        return RpcError(StatusCode.NOT_FOUND, "resource not found")
    return RpcError(StatusCode.INTERNAL, "internal server error")


def _validate_create_event_req(req: messages.CreateEventReq) -> None:
    if not req.name:
        raise ValueError("event name is required")


def _validate_update_event_req(req: messages.UpdateEventReq) -> None:
    if req.id <= 0:
        raise ValueError("invalid event ID")
    if not req.name:
        raise ValueError("event name is required")


def _validate_create_category_req(req: messages.CreateCategoryReq) -> None:
    if not req.name:
        raise ValueError("category name is required")


def _validate_update_category_req(req: messages.UpdateCategoryReq) -> None:
    if req.id <= 0:
        raise ValueError("invalid category ID")
    if not req.name:
        raise ValueError("category name is required")


class EventServer:
    """Handles event and category calls on top of a store."""

    def __init__(self, storer: PostgresStore, log: Logger | None = None) -> None:
        self._storer = storer
        self._log = log if log is not None else new_logger()

    # Events

    def create_event(self, req: messages.CreateEventReq) -> messages.EventRes:
        self._log.info("CreateEvent request received", "method", "CreateEvent", "event_name", req.name)
        try:
            _validate_create_event_req(req)
        except ValueError as exc:
            self._log.error(
                "invalid create event request",
                "method", "CreateEvent", "error", exc, "name", req.name,
            )
            raise RpcError(StatusCode.INVALID_ARGUMENT, str(exc)) from exc

        event = new_event_from_create_request(proto_to_create_event_params(req))
        try:
            created = self._storer.create_event(event)
        except Exception as exc:
            self._log.error(
                "failed to create event",
                "method", "CreateEvent", "error", exc, "event-name", req.name,
            )
            raise wrap_error(exc) from exc

        self._log.info(
            "event created successfully",
            "method", "CreateEvent",
            "event_id", created.id,
            "name", created.name,
            "category", created.category_id,
        )
        return db_event_to_proto_event_res(created)

    def get_event(self, req: messages.GetEventReq) -> messages.EventRes:
        self._log.info("starting get event", "method", "GetEvent", "event_id", req.id)
        try:
            event = self._storer.get_event_by_id(req.id)
        except Exception as exc:
            self._log.error(
                "failed to get event", "method", "GetEvent", "event_id", req.id, "error", exc
            )
            raise wrap_error(exc) from exc

        self._log.debug(
            "event retrieved successfully",
            "method", "GetEvent", "event_id", event.id, "name", event.name,
        )
        return db_event_to_proto_event_res(event)

    def list_events(self, req: messages.ListEventsReq) -> messages.ListEventsRes:
        self._log.info("starting list events", "method", "ListEvents")
        try:
            events = self._storer.get_events()
        except Exception as exc:
            self._log.error("failed to list events", "method", "ListEvents", "error", exc)
            raise wrap_error(exc) from exc

        self._log.info("Events retrieved successfully", "count", len(events))
        return messages.ListEventsRes(events=db_events_to_proto_events_list(events))

    def update_event(self, req: messages.UpdateEventReq) -> messages.EventRes:
        self._log.info("starting update event", "method", "UpdateEvent", "event_id", req.id)
        try:
            _validate_update_event_req(req)
        except ValueError as exc:
            self._log.error(
                "invalid update event request",
                "method", "UpdateEvent", "event_id", req.id, "error", exc,
            )
            raise RpcError(StatusCode.INVALID_ARGUMENT, str(exc)) from exc

        event_id, params = proto_to_update_event_params(req)
        try:
            current = self._storer.get_event_by_id(event_id)
        except Exception as exc:
            self._log.error(
                "failed to get event for update",
                "method", "UpdateEvent", "event_id", event_id, "error", exc,
            )
            raise wrap_error(exc) from exc

        current.apply_update(params)
        try:
            updated = self._storer.update_event(current)
        except Exception as exc:
            self._log.error("Failed to update event", "id", event_id, "error", exc)
            raise wrap_error(exc) from exc

        self._log.info("event updated successfully", "method", "UpdateEvent", "event_id", updated.id)
        return db_event_to_proto_event_res(updated)

    def delete_event(self, req: messages.DeleteEventReq) -> None:
        self._log.info("starting delete event", "method", "DeleteEvent", "event_id", req.id)
        try:
            self._storer.delete_event(req.id)
        except Exception as exc:
            self._log.error(
                "failed to delete event", "method", "DeleteEvent", "event_id", req.id, "error", exc
            )
            raise wrap_error(exc) from exc
        self._log.info("event deleted successfully", "method", "DeleteEvent", "event_id", req.id)

    # Categories

    def create_category(self, req: messages.CreateCategoryReq) -> messages.CategoryRes:
        self._log.info(
            "starting create category", "method", "CreateCategory", "category_name", req.name
        )
        try:
            _validate_create_category_req(req)
        except ValueError as exc:
            self._log.error(
                "invalid create category request",
                "method", "CreateCategory", "error", exc, "name", req.name,
            )
            raise RpcError(StatusCode.INVALID_ARGUMENT, str(exc)) from exc

        category = new_category(proto_to_create_category_params(req))
        try:
            self._storer.create_category(category)
        except Exception as exc:
            self._log.error(
                "failed to create category",
                "method", "CreateCategory", "error", exc, "category_name", req.name,
            )
            raise wrap_error(exc) from exc

        self._log.info(
            "category created successfully",
            "method", "CreateCategory", "category_id", category.id, "name", category.name,
        )
        return db_category_to_proto_category_res(category)

    def get_category(self, req: messages.GetCategoryReq) -> messages.CategoryRes:
        self._log.info("starting get category", "method", "GetCategory", "category_id", req.id)
        try:
            category = self._storer.get_category_by_id(int(req.id))
        except Exception as exc:
            self._log.error(
                "failed to get category",
                "method", "GetCategory", "category_id", req.id, "error", exc,
            )
            raise wrap_error(exc) from exc

        self._log.debug(
            "category retrieved successfully",
            "method", "GetCategory", "category_id", category.id, "name", category.name,
        )
        return db_category_to_proto_category_res(category)

    def list_categories(self, req: messages.ListCategoriesReq) -> messages.ListCategoriesRes:
        self._log.info("starting list categories", "method", "ListCategories")
        try:
            categories = self._storer.list_categories()
        except Exception as exc:
            self._log.error("failed to list categories", "method", "ListCategories", "error", exc)
            raise wrap_error(exc) from exc

        self._log.info("categories retrieved successfully", "count", len(categories))
        return messages.ListCategoriesRes(categories=db_categories_to_proto_list(categories))

    def update_category(self, req: messages.UpdateCategoryReq) -> messages.CategoryRes:
        self._log.info("starting update category", "method", "UpdateCategory", "category_id", req.id)
        try:
            _validate_update_category_req(req)
        except ValueError as exc:
            self._log.error(
                "invalid update category request",
                "method", "UpdateCategory", "category_id", req.id, "error", exc,
            )
            raise RpcError(StatusCode.INVALID_ARGUMENT, str(exc)) from exc

        category_id, name = proto_to_update_category_params(req)
        try:
            current = self._storer.get_category_by_id(category_id)
        except Exception as exc:
            self._log.error(
                "failed to get category for update",
                "method", "UpdateCategory", "category_id", category_id, "error", exc,
            )
            raise wrap_error(exc) from exc

        current.name = name
        try:
            self._storer.update_category(current)
        except Exception as exc:
            self._log.error("failed to update category", "id", category_id, "error", exc)
            raise wrap_error(exc) from exc

        self._log.info(
            "category updated successfully",
            "method", "UpdateCategory", "category_id", current.id,
        )
        return db_category_to_proto_category_res(current)

    def delete_category(self, req: messages.DeleteCategoryReq) -> None:
        self._log.info("starting delete category", "method", "DeleteCategory", "category_id", req.id)
        try:
            self._storer.get_category_by_id(int(req.id))
        except Exception as exc:
            self._log.error(
                "failed to get category for deletion",
                "method", "DeleteCategory", "category_id", req.id, "error", exc,
            )
            raise wrap_error(exc) from exc

        try:
            self._storer.delete_category(int(req.id))
        except Exception as exc:
            self._log.error(
                "failed to delete category",
                "method", "DeleteCategory", "category_id", req.id, "error", exc,
            )
            raise wrap_error(exc) from exc

        self._log.info(
            "category deleted successfully", "method", "DeleteCategory", "category_id", req.id
        )