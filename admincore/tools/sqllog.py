"""Logger for SQL statements with levels, slow-query warnings and colours."""

from __future__ import annotations

import copy
import dataclasses
import inspect
import logging
import os
import time
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Callable, Mapping, Optional

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

RESET = "\033[0m"
RED = "\033[31m"
GREEN = "\033[32m"
YELLOW = "\033[33m"
BLUE = "\033[34m"
MAGENTA = "\033[35m"
CYAN = "\033[36m"
WHITE = "\033[37m"
BLUE_BOLD = "\033[34;1m"
MAGENTA_BOLD = "\033[35;1m"
RED_BOLD = "\033[31;1m"
YELLOW_BOLD = "\033[33;1m"

REQUEST_ID_CONTEXT_KEY = "X-Request-Id"

_THIS_FILE = os.path.normcase(os.path.abspath(__file__))


class LogLevel(IntEnum):
    """How much the SQL logger reports."""

    SILENT = 1
    ERROR = 2
    WARN = 3
    INFO = 4


@dataclass(frozen=True)
class LoggerConfig:
    """Settings of a SQL logger; ``slow_threshold`` is in seconds, 0 disables it."""

    slow_threshold: float = 0.0
    colorful: bool = False
    log_level: LogLevel = LogLevel.SILENT


def _same_file(filename: str) -> bool:
    return os.path.normcase(os.path.abspath(filename)) == _THIS_FILE


def _caller_location() -> str:
    frame = inspect.currentframe()
    try:
        while frame is not None and _same_file(frame.f_code.co_filename):
            frame = frame.f_back
        if frame is None:
            return ""
        return f"{frame.f_code.co_filename}:{frame.f_lineno}"
    finally:
        del frame


def _format_duration(seconds: float) -> str:
    if seconds >= 1:
        return f"{seconds:g}s"
    if seconds >= 1e-3:
        return f"{seconds * 1e3:g}ms"
    if seconds >= 1e-6:
        return f"{seconds * 1e6:g}µs"
    return f"{seconds * 1e9:g}ns"


class SqlLogger:
    """Reports SQL messages and statements through a standard logger."""

    def __init__(self, config: Optional[LoggerConfig] = None, logger: Optional[Any] = None) -> None:
        self.config = config if config is not None else LoggerConfig()
        self.logger = logger if logger is not None else logging.getLogger("admincore.sql")
        if self.config.colorful:
            self._info_str = GREEN + "%s\n" + RESET + GREEN + "[info] " + RESET
            self._warn_str = BLUE_BOLD + "%s\n" + RESET + MAGENTA + "[warn] " + RESET
            self._err_str = MAGENTA + "%s\n" + RESET + RED + "[error] " + RESET
            self._trace_str = (
                GREEN + "%s\n" + RESET + YELLOW + "[%.3fms] " + BLUE_BOLD + "[rows:%s]" + RESET + " %s\n"
            )
            self._trace_warn_str = (
                GREEN + "%s " + YELLOW + "%s\n" + RESET + RED_BOLD + "[%.3fms] "
                + YELLOW + "[rows:%s]" + MAGENTA + " %s" + RESET
            )
            self._trace_err_str = (
                RED_BOLD + "%s " + MAGENTA_BOLD + "%s\n" + RESET + YELLOW + "[%.3fms] "
                + BLUE_BOLD + "[rows:%s]" + RESET + " %s"
            )
        else:
            self._info_str = "%s\n[info] "
            self._warn_str = "%s\n[warn] "
            self._err_str = "%s\n[error] "
            self._trace_str = "%s\n[%.3fms] [rows:%s] %s\n"
            self._trace_warn_str = "%s %s\n[%.3fms] [rows:%s] %s\n"
            self._trace_err_str = "%s %s\n[%.3fms] [rows:%s] %s\n"

    @property
    def level(self) -> LogLevel:
        return self.config.log_level

    def _logger_for(self, context: Optional[Mapping[str, Any]]) -> Any:
        request_id = context.get(REQUEST_ID_CONTEXT_KEY) if context else None
        if request_id is not None:
            return logging.LoggerAdapter(self.logger, {"x-request-id": request_id})
        return self.logger

    def with_level(self, level: LogLevel) -> SqlLogger:
        """Return a copy of this logger reporting at ``level``."""
        clone = copy.copy(self)
        clone.config = dataclasses.replace(self.config, log_level=level)
        return clone

    def info(self, context: Optional[Mapping[str, Any]], msg: str, *args: Any) -> None:
        if self.level >= LogLevel.INFO:
            self._logger_for(context).log(logging.INFO, self._info_str + msg, _caller_location(), *args)

    def warn(self, context: Optional[Mapping[str, Any]], msg: str, *args: Any) -> None:
        if self.level >= LogLevel.WARN:
            self._logger_for(context).log(logging.WARNING, self._warn_str + msg, _caller_location(), *args)

    def error(self, context: Optional[Mapping[str, Any]], msg: str, *args: Any) -> None:
        if self.level >= LogLevel.ERROR:
            self._logger_for(context).log(logging.ERROR, self._err_str + msg, _caller_location(), *args)

    def trace(
        self,
        context: Optional[Mapping[str, Any]],
        begin: float,
        fc: Callable[[], tuple[str, int]],
        err: Optional[BaseException],
    ) -> None:
        """Report a statement that started at ``begin`` (a ``time.monotonic`` value).

        ``fc`` returns the SQL text and the affected row count, -1 if unknown.
        """
        if self.level <= LogLevel.SILENT:
            return
        log = self._logger_for(context)
        elapsed = time.monotonic() - begin
        millis = elapsed * 1000
        threshold = self.config.slow_threshold
        if err is not None and self.level >= LogLevel.ERROR:
            sql, rows = fc()
            log.log(TRACE, self._trace_err_str, _caller_location(), err, millis, _rows(rows), sql)
        elif threshold and elapsed > threshold and self.level >= LogLevel.WARN:
            sql, rows = fc()
            slow = f"SLOW SQL >= {_format_duration(threshold)}"
            log.log(TRACE, self._trace_warn_str, _caller_location(), slow, millis, _rows(rows), sql)
        elif self.level == LogLevel.INFO:
            sql, rows = fc()
            log.log(TRACE, self._trace_str, _caller_location(), millis, _rows(rows), sql)


def _rows(rows: int) -> Any:
    return "-" if rows == -1 else rows


@dataclass
class TraceRecorder:
    """Records the last traced statement instead of logging it."""

    interface: Any = None
    begin_at: float = field(default_factory=time.monotonic)
    sql: str = ""
    rows_affected: int = 0
    err: Optional[BaseException] = None

    def __getattr__(self, name: str) -> Any:
        if name == "interface":
            raise AttributeError(name)
        if self.interface is None:
            raise AttributeError(name)
        return getattr(self.interface, name)

    def trace(
        self,
        context: Optional[Mapping[str, Any]],
        begin: float,
        fc: Callable[[], tuple[str, int]],
        err: Optional[BaseException],
    ) -> None:
        self.begin_at = begin
        self.sql, self.rows_affected = fc()
        self.err = err