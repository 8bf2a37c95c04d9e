"""Call-scoped loggers carried in a call context."""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, MutableMapping, Optional

_DEFAULT_LOGGER_NAME = "admincore"


class _FieldLogger(logging.LoggerAdapter):
    """A logger adapter that attaches its fields to every record as ``fields``."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        extra = dict(kwargs.get("extra") or {})
        extra["fields"] = dict(self.extra)
        kwargs["extra"] = extra
        return msg, kwargs

    def with_fields(self, fields: Mapping[str, Any]) -> _FieldLogger:
        """Return a logger carrying these fields and ``fields``."""
        return _FieldLogger(self.logger, {**self.extra, **fields})

    def emit(self, level: int, msg: str, err: Optional[BaseException] = None) -> None:
        """Log ``msg`` at ``level``, followed by ``err`` when there is one."""
        if err is None:
            self.log(level, "%s", msg)
        else:
            self.log(level, "%s %s", msg, err)


def _wrap(logger: Any) -> _FieldLogger:
    if isinstance(logger, _FieldLogger):
        return logger
    if isinstance(logger, logging.LoggerAdapter):
        return _FieldLogger(logger.logger, dict(logger.extra or {}))
    return _FieldLogger(logger, {})


@dataclass
class _CallLogger:
    logger: _FieldLogger
    fields: dict[str, Any] = field(default_factory=dict)


_MARKER = object()


@dataclass(frozen=True)
class CallContext:
    """The context of one call: incoming metadata, deadline, tags and values."""

    metadata: Mapping[str, Any] = field(default_factory=dict)
    deadline: Optional[datetime] = None
    tags: Mapping[str, Any] = field(default_factory=dict)
    values: Mapping[Any, Any] = field(default_factory=dict)

    def with_value(self, key: Any, value: Any) -> CallContext:
        """Return a context that also holds ``value`` under ``key``."""
        return dataclasses.replace(self, values={**self.values, key: value})

    def value(self, key: Any) -> Any:
        """Return the value under ``key``, or None."""
        return self.values.get(key)


def _holder(ctx: CallContext) -> Optional[_CallLogger]:
    holder = ctx.values.get(_MARKER)
    return holder if isinstance(holder, _CallLogger) else None


def add_fields(ctx: CallContext, fields: Mapping[str, Any]) -> None:
    """Add ``fields`` to the call logger of ``ctx``; does nothing without one."""
    holder = _holder(ctx)
    if holder is not None:
        holder.fields.update(fields)


def extract(ctx: CallContext) -> _FieldLogger:
    """Return the call logger of ``ctx`` with its tags and added fields.

    Without a call logger the default logger is returned.
    """
    holder = _holder(ctx)
    if holder is None:
        return _FieldLogger(logging.getLogger(_DEFAULT_LOGGER_NAME), {})
    fields = dict(ctx.tags)
    fields.update(holder.fields)
    return holder.logger.with_fields(fields)


def to_context(ctx: CallContext, logger: Any) -> CallContext:
    """Return a context carrying ``logger`` as its call logger."""
    return ctx.with_value(_MARKER, _CallLogger(_wrap(logger)))


def debug(ctx: CallContext, msg: str, fields: Mapping[str, Any]) -> None:
    extract(ctx).with_fields(fields).emit(logging.DEBUG, msg)


def info(ctx: CallContext, msg: str, fields: Mapping[str, Any]) -> None:
    extract(ctx).with_fields(fields).emit(logging.INFO, msg)


def warn(ctx: CallContext, msg: str, fields: Mapping[str, Any]) -> None:
    extract(ctx).with_fields(fields).emit(logging.WARNING, msg)


def error(ctx: CallContext, msg: str, fields: Mapping[str, Any]) -> None:
    extract(ctx).with_fields(fields).emit(logging.ERROR, msg)