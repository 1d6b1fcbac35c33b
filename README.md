# eventsvc

A small service layer for managing events and the categories they belong to.
It has no dependencies outside the standard library.

## Modules

- **`eventsvc.types`**: the data model. It holds the dataclasses `Event` and
  `Category`, and the parameter objects `CreateEventParams`,
  `UpdateEventParams` and `CreateCategoryReq`.
  - `new_event_from_create_request(params)` builds an unsaved `Event`.
  - `Event.apply_update(params)` copies every updatable field. It leaves the
    id and the timestamps alone.
  - `new_category(req)` builds a `Category` stamped with the current UTC time.

- **`eventsvc.logger`**: structured logging. It writes one JSON object per line.
  - `init(env, stream=None)` configures the global logger. The stream defaults
    to standard output.
    - `"prod"` logs at info level and above, with a lower-case `level` field.
      Key/value arguments are used only when they come in complete pairs.
    - Any other environment also logs debug records. It reports non-string keys
      and raises `RuntimeError` on a key that has no value.
  - The level functions are `debug`, `info`, `warn`, `error`, `fatal` and
    `panic`. `fatal` exits with status 1 and `panic` raises `RuntimeError`.
  - The `*_context` variants (`info_context(ctx, msg, ...)` and so on) add
    `request_id` and `user_id` from a context mapping when those are strings.
  - `new_logger()` returns a `Logger` object that can be handed to components.
  - `with_context(ctx)` returns a `ContextLogger` that adds the fields of a
    fixed context to every entry.
  - `args_to_fields` and `extract_context_fields` are the helpers behind this.
  - `close()` flushes the output.

- **`eventsvc.store`**: `PostgresStore`, which runs the event and category
  queries, written with PostgreSQL `$n` placeholders. It works on a connection
  object that you supply. That object must offer three methods:
  - `execute(sql, *args)`, which returns the number of rows affected;
  - `query(sql, *args)`, which returns an iterable of rows;
  - `query_row(sql, *args)`, which returns one row, or raises `NoRowsError`
    when there is none.

  Store failures raise `StoreError`, and the underlying error is kept as
  `__cause__`. `NoRowsError` is a subclass of `StoreError`.

  A few errors are not wrapped:
  - errors from the query in `list_categories`;
  - errors from the existence check in `update_category`.

- **`eventsvc.messages`**: the request and response dataclasses of the service:
  - for events: `CreateEventReq`, `UpdateEventReq`, `GetEventReq`,
    `ListEventsReq`, `DeleteEventReq`, `EventRes` and `ListEventsRes`;
  - for categories: `CreateCategoryReq`, `UpdateCategoryReq`,
    `GetCategoryReq`, `ListCategoriesReq`, `DeleteCategoryReq`, `CategoryRes`
    and `ListCategoriesRes`.

- **`eventsvc.mappers`**: conversions between messages and the data model.
  Event prices are rounded to single precision.

- **`eventsvc.server`**: `EventServer(storer, log=None)`, the request handlers.
  - The event handlers are `create_event`, `get_event`, `list_events`,
    `update_event` and `delete_event`.
  - The category handlers are `create_category`, `get_category`,
    `list_categories`, `update_category` and `delete_category`.
  - Each handler validates its request, calls the store and returns a response
    message. The delete handlers return `None`.
  - On failure a handler raises `RpcError`, which has a `code` (a
    `StatusCode`) and a `message`:
    - `INVALID_ARGUMENT`, with the validation message, for a bad request;
    - `NOT_FOUND` when a `NoRowsError` is in the error's cause chain;
    - `INTERNAL` for everything else.
  - `wrap_error(err)` performs this mapping.
  - A missing category is reported by the store without a `NoRowsError` cause,
    so category lookups that find nothing answer with `INTERNAL`.

## What it does not do

- The package has no network listener and no wire protocol. `EventServer` is
  called directly with message objects.
- It ships no database driver or connection pool. You supply a connection
  object with the three methods above.
- It has no database schema or migrations.
- It has no command-line program.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Example

```python
import sys

from eventsvc import logger
from eventsvc.messages import CreateEventReq
from eventsvc.server import EventServer, RpcError
from eventsvc.store import PostgresStore

logger.init("dev", sys.stdout)

store = PostgresStore(connection)  # an object with execute, query and query_row
server = EventServer(store, logger.new_logger())

try:
    res = server.create_event(CreateEventReq(name="Concert", location="Main hall", price=10.5))
    print(res.id, res.name)
except RpcError as exc:
    print(exc.code, exc.message)
```