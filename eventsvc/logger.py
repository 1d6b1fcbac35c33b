"""Structured JSON logging with a production and a development mode.

Production mode writes lower-case levels and takes key/value pairs only
when they come in complete pairs. Development mode logs from debug up,
reports malformed pairs, and raises on a key that has no value.
"""

from __future__ import annotations

import json
import sys
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from typing import Any, TextIO

Field = tuple[str, Any]

_ODD_NUMBER_MSG = "Ignored key without a value."
_NON_STRING_KEY_MSG = "Ignored key-value pairs with non-string keys."


class _Level(IntEnum):
    DEBUG = -1
    INFO = 0
    WARN = 1
    ERROR = 2
    DPANIC = 3
    PANIC = 4
    FATAL = 5

    @property
    def label(self) -> str:
        return self.name.lower()


def _format_time(moment: datetime) -> str:
    offset = moment.utcoffset()
    if not offset:
        zone = "Z"
    else:
        minutes = int(offset.total_seconds()) // 60
        sign = "+" if minutes >= 0 else "-"
        hours, mins = divmod(abs(minutes), 60)
        zone = f"{sign}{hours:02d}{mins:02d}"
    millis = moment.microsecond // 1000
    return f"{moment:%Y-%m-%dT%H:%M:%S}.{millis:03d}{zone}"


@dataclass
class _Core:
    stream: TextIO | None
    min_level: _Level
    raw: bool
    encode_level: bool
    development: bool

    @property
    def out(self) -> TextIO:
        return self.stream if self.stream is not None else sys.stdout

    def log(self, level: _Level, msg: str, fields: Sequence[Field]) -> None:
        if level >= self.min_level:
            record: dict[str, Any] = {}
            if self.encode_level:
                record["level"] = level.label
            record["time"] = _format_time(datetime.now().astimezone())
            record["message"] = msg
            record.update(fields)
            self.out.write(json.dumps(record, default=str, ensure_ascii=False) + "\n")
        if level == _Level.FATAL:
            raise SystemExit(1)
        if level == _Level.PANIC or (level == _Level.DPANIC and self.development):
            raise RuntimeError(msg)


_core: _Core | None = None


def init(env: str, stream: TextIO | None = None) -> None:
    """Configure the global logger; ``"prod"`` selects production mode."""
    global _core
    if env == "prod":
        _core = _Core(stream, _Level.INFO, raw=True, encode_level=True, development=False)
    else:
        _core = _Core(stream, _Level.DEBUG, raw=False, encode_level=False, development=True)


def _current() -> _Core:
    if _core is None:
        init("dev")
    assert _core is not None
    return _core


def close() -> None:
    """Flush the logger's output."""
    if _core is not None:
        _core.out.flush()


def args_to_fields(args: Sequence[Any]) -> list[Field]:
    """Pair ``[k1, v1, k2, v2, ...]`` into fields, skipping non-string keys."""
    return [
        (key, value)
        for key, value in zip(args[0::2], args[1::2])
        if isinstance(key, str)
    ]


def extract_context_fields(ctx: Mapping[str, Any] | None) -> list[Any]:
    """Return the request and user ids held in ``ctx`` as key/value args."""
    if ctx is None:
        return []
    fields: list[Any] = []
    for key in ("request_id", "user_id"):
        value = ctx.get(key)
        if isinstance(value, str):
            fields.extend((key, value))
    return fields


def _sugared(core: _Core, level: _Level, msg: str, args: Sequence[Any]) -> None:
    if len(args) % 2:
        core.log(_Level.DPANIC, _ODD_NUMBER_MSG, [("ignored", args[-1])])
    fields: list[Field] = []
    invalid: list[dict[str, Any]] = []
    for index, (key, value) in enumerate(zip(args[0::2], args[1::2])):
        if isinstance(key, str):
            fields.append((key, value))
        else:
            invalid.append({"position": index * 2, "key": key, "value": value})
    if invalid:
        core.log(_Level.ERROR, _NON_STRING_KEY_MSG, [("invalid", invalid)])
    core.log(level, msg, fields)


def _log(level: _Level, msg: str, args: Sequence[Any]) -> None:
    core = _current()
    if core.raw:
        fields = args_to_fields(args) if args and len(args) % 2 == 0 else []
        core.log(level, msg, fields)
    else:
        _sugared(core, level, msg, args)


def _log_with_context(
    ctx: Mapping[str, Any] | None, level: _Level, msg: str, args: Sequence[Any]
) -> None:
    all_args = [*extract_context_fields(ctx), *args]
    core = _current()
    if core.raw:
        core.log(level, msg, args_to_fields(all_args))
    else:
        _sugared(core, level, msg, all_args)


def debug(msg: str, *args: Any) -> None:
    _log(_Level.DEBUG, msg, args)


def info(msg: str, *args: Any) -> None:
    _log(_Level.INFO, msg, args)


def warn(msg: str, *args: Any) -> None:
    _log(_Level.WARN, msg, args)


def error(msg: str, *args: Any) -> None:
    _log(_Level.ERROR, msg, args)


def fatal(msg: str, *args: Any) -> None:
    """Log and exit the process with status 1."""
    _log(_Level.FATAL, msg, args)


def panic(msg: str, *args: Any) -> None:
    """Log and raise ``RuntimeError`` carrying the message."""
    _log(_Level.PANIC, msg, args)


def debug_context(ctx: Mapping[str, Any] | None, msg: str, *args: Any) -> None:
    _log_with_context(ctx, _Level.DEBUG, msg, args)


def info_context(ctx: Mapping[str, Any] | None, msg: str, *args: Any) -> None:
    _log_with_context(ctx, _Level.INFO, msg, args)


def warn_context(ctx: Mapping[str, Any] | None, msg: str, *args: Any) -> None:
    _log_with_context(ctx, _Level.WARN, msg, args)


def error_context(ctx: Mapping[str, Any] | None, msg: str, *args: Any) -> None:
    _log_with_context(ctx, _Level.ERROR, msg, args)


def fatal_context(ctx: Mapping[str, Any] | None, msg: str, *args: Any) -> None:
    _log_with_context(ctx, _Level.FATAL, msg, args)


def panic_context(ctx: Mapping[str, Any] | None, msg: str, *args: Any) -> None:
    _log_with_context(ctx, _Level.PANIC, msg, args)


class Logger:
    """A handle on the global logger that can be passed to components."""

    def debug(self, msg: str, *args: Any) -> None:
        debug(msg, *args)

    def info(self, msg: str, *args: Any) -> None:
        info(msg, *args)

    def warn(self, msg: str, *args: Any) -> None:
        warn(msg, *args)

    def error(self, msg: str, *args: Any) -> None:
        error(msg, *args)

    def fatal(self, msg: str, *args: Any) -> None:
        fatal(msg, *args)

    def panic(self, msg: str, *args: Any) -> None:
        panic(msg, *args)

    def debug_context(self, ctx: Mapping[str, Any] | None, msg: str, *args: Any) -> None:
        debug_context(ctx, msg, *args)

    def info_context(self, ctx: Mapping[str, Any] | None, msg: str, *args: Any) -> None:
        info_context(ctx, msg, *args)

    def warn_context(self, ctx: Mapping[str, Any] | None, msg: str, *args: Any) -> None:
        warn_context(ctx, msg, *args)

    def error_context(self, ctx: Mapping[str, Any] | None, msg: str, *args: Any) -> None:
        error_context(ctx, msg, *args)

    def fatal_context(self, ctx: Mapping[str, Any] | None, msg: str, *args: Any) -> None:
        fatal_context(ctx, msg, *args)

    def panic_context(self, ctx: Mapping[str, Any] | None, msg: str, *args: Any) -> None:
        panic_context(ctx, msg, *args)


@dataclass
class ContextLogger:
    """A logger that adds fields from a fixed context to every entry."""

    ctx: Mapping[str, Any] | None
    logger: Logger = field(default_factory=Logger)

    def debug(self, msg: str, *args: Any) -> None:
        self.logger.debug_context(self.ctx, msg, *args)

    def info(self, msg: str, *args: Any) -> None:
        self.logger.info_context(self.ctx, msg, *args)

    def warn(self, msg: str, *args: Any) -> None:
        self.logger.warn_context(self.ctx, msg, *args)

    def error(self, msg: str, *args: Any) -> None:
        self.logger.error_context(self.ctx, msg, *args)

    def fatal(self, msg: str, *args: Any) -> None:
        self.logger.fatal_context(self.ctx, msg, *args)

    def panic(self, msg: str, *args: Any) -> None:
        self.logger.panic_context(self.ctx, msg, *args)

    def debug_context(self, ctx: Mapping[str, Any] | None, msg: str, *args: Any) -> None:
        self.logger.debug_context(ctx, msg, *args)

    def info_context(self, ctx: Mapping[str, Any] | None, msg: str, *args: Any) -> None:
        self.logger.info_context(ctx, msg, *args)

    def warn_context(self, ctx: Mapping[str, Any] | None, msg: str, *args: Any) -> None:
        self.logger.warn_context(ctx, msg, *args)

    def error_context(self, ctx: Mapping[str, Any] | None, msg: str, *args: Any) -> None:
        self.logger.error_context(ctx, msg, *args)

    def fatal_context(self, ctx: Mapping[str, Any] | None, msg: str, *args: Any) -> None:
        self.logger.fatal_context(ctx, msg, *args)

    def panic_context(self, ctx: Mapping[str, Any] | None, msg: str, *args: Any) -> None:
        self.logger.panic_context(ctx, msg, *args)


def new_logger() -> Logger:
    """Return a logger handle for passing to components."""
    return Logger()


def with_context(ctx: Mapping[str, Any] | None) -> ContextLogger:
    """Return a logger that adds the fields found in ``ctx``."""
    return ContextLogger(ctx, new_logger())