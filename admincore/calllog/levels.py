"""Call status codes, log levels and the options of the call loggers."""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from datetime import timedelta
from enum import IntEnum
from typing import Any, Callable, Optional, Union

from admincore.calllog.ctxlog import CallContext, extract
from admincore.calllog.fields import Fields

RFC3339 = "rfc3339"

DurationLike = Union[timedelta, int, float]


class Code(IntEnum):
    """Status codes of a remote call."""

    OK = 0
    CANCELLED = 1
    UNKNOWN = 2
    INVALID_ARGUMENT = 3
    DEADLINE_EXCEEDED = 4
    NOT_FOUND = 5
    ALREADY_EXISTS = 6
    PERMISSION_DENIED = 7
    RESOURCE_EXHAUSTED = 8
    FAILED_PRECONDITION = 9
    ABORTED = 10
    OUT_OF_RANGE = 11
    UNIMPLEMENTED = 12
    INTERNAL = 13
    UNAVAILABLE = 14
    DATA_LOSS = 15
    UNAUTHENTICATED = 16

    def __str__(self) -> str:
        if self is Code.OK:
            return "OK"
        if self is Code.CANCELLED:
            return "Canceled"
        return "".join(part.capitalize() for part in self.name.split("_"))


class Level(IntEnum):
    """Log levels, valued as the standard logging levels."""

    TRACE = 5
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARN = logging.WARNING
    ERROR = logging.ERROR
    FATAL = logging.CRITICAL


class StatusError(Exception):
    """An error that carries a call status code."""

    def __init__(self, code: Code, message: str = "") -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    def __str__(self) -> str:
        return f"rpc error: code = {self.code} desc = {self.message}"


_SERVER_LEVELS = {
    Code.OK: Level.INFO,
    Code.CANCELLED: Level.INFO,
    Code.UNKNOWN: Level.ERROR,
    Code.INVALID_ARGUMENT: Level.INFO,
    Code.DEADLINE_EXCEEDED: Level.WARN,
    Code.NOT_FOUND: Level.INFO,
    Code.ALREADY_EXISTS: Level.INFO,
    Code.PERMISSION_DENIED: Level.WARN,
    Code.UNAUTHENTICATED: Level.INFO,
    Code.RESOURCE_EXHAUSTED: Level.WARN,
    Code.FAILED_PRECONDITION: Level.WARN,
    Code.ABORTED: Level.WARN,
    Code.OUT_OF_RANGE: Level.WARN,
    Code.UNIMPLEMENTED: Level.ERROR,
    Code.INTERNAL: Level.ERROR,
    Code.UNAVAILABLE: Level.WARN,
    Code.DATA_LOSS: Level.ERROR,
}

_CLIENT_LEVELS = {
    Code.OK: Level.DEBUG,
    Code.CANCELLED: Level.DEBUG,
    Code.UNKNOWN: Level.INFO,
    Code.INVALID_ARGUMENT: Level.DEBUG,
    Code.DEADLINE_EXCEEDED: Level.INFO,
    Code.NOT_FOUND: Level.DEBUG,
    Code.ALREADY_EXISTS: Level.DEBUG,
    Code.PERMISSION_DENIED: Level.INFO,
    Code.UNAUTHENTICATED: Level.INFO,
    Code.RESOURCE_EXHAUSTED: Level.DEBUG,
    Code.FAILED_PRECONDITION: Level.DEBUG,
    Code.ABORTED: Level.DEBUG,
    Code.OUT_OF_RANGE: Level.DEBUG,
    Code.UNIMPLEMENTED: Level.WARN,
    Code.INTERNAL: Level.WARN,
    Code.UNAVAILABLE: Level.WARN,
    Code.DATA_LOSS: Level.WARN,
}


def default_code_to_level(code: Code) -> Level:
    """Map a status code to the server-side log level."""
    return _SERVER_LEVELS.get(code, Level.ERROR)


def default_client_code_to_level(code: Code) -> Level:
    """Map a status code to the client-side log level."""
    return _CLIENT_LEVELS.get(code, Level.INFO)


def default_error_to_code(err: Optional[BaseException]) -> Code:
    """Return OK for no error, the code of a ``StatusError``, else UNKNOWN."""
    if err is None:
        return Code.OK
    if isinstance(err, StatusError):
        return err.code
    return Code.UNKNOWN


def default_decider(full_method: str, err: Optional[BaseException]) -> bool:
    """Log every call."""
    return True


def _as_timedelta(duration: DurationLike) -> timedelta:
    return duration if isinstance(duration, timedelta) else timedelta(seconds=duration)


def duration_to_time_millis_field(duration: DurationLike) -> Fields:
    """Express the duration in milliseconds under ``grpc.time_ms``."""
    micros = _as_timedelta(duration) // timedelta(microseconds=1)
    return Fields({"grpc.time_ms": micros / 1000})


def duration_to_duration_field(duration: DurationLike) -> dict[str, Any]:
    """Keep the duration itself under ``grpc.duration``."""
    return {"grpc.duration": _as_timedelta(duration)}


def default_message_producer(
    ctx: CallContext,
    msg: str,
    level: Level,
    code: Code,
    err: Optional[BaseException],
    duration: Fields,
) -> None:
    """Log ``msg`` through the call logger with the code and duration fields."""
    fields = duration.copy()
    fields.set("grpc.code", str(code))
    extract(ctx).with_fields(fields.as_dict()).emit(int(level), msg, err)


@dataclass(frozen=True)
class Options:
    """How the call loggers decide, classify and report a call."""

    level_func: Callable[[Code], Level] = default_code_to_level
    should_log: Callable[[str, Optional[BaseException]], bool] = default_decider
    code_func: Callable[[Optional[BaseException]], Code] = default_error_to_code
    duration_func: Callable[[timedelta], Fields] = duration_to_time_millis_field
    message_func: Callable[..., None] = default_message_producer
    timestamp_format: str = RFC3339


def evaluate_server_options(**kwargs: Any) -> Options:
    """Options for server-side logging, overridden by ``kwargs``."""
    return dataclasses.replace(Options(level_func=default_code_to_level), **kwargs)


def evaluate_client_options(**kwargs: Any) -> Options:
    """Options for client-side logging, overridden by ``kwargs``."""
    return dataclasses.replace(Options(level_func=default_client_code_to_level), **kwargs)