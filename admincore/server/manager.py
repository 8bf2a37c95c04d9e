"""Starts a set of runnables together and stops them within a grace period."""

from __future__ import annotations

import logging
import threading
import time
from abc import ABC, abstractmethod
from typing import Optional

_log = logging.getLogger(__name__)

DEFAULT_GRACEFUL_SHUTDOWN_TIMEOUT = 5.0
_POLL_INTERVAL = 0.05


class Runnable(ABC):
    """A service that the server can start; ``str()`` gives its name."""

    @abstractmethod
    def start(self, stop_event: threading.Event) -> None:
        """Run the service; it should return once ``stop_event`` is set."""

    @abstractmethod
    def attempt(self) -> bool:
        """Tell whether the service may be started."""


class ShutdownTimeoutError(TimeoutError):
    """Raised when runnables do not end within the grace period."""


class Server:
    """Runs every added runnable in its own thread until told to stop.

    ``graceful_shutdown_timeout`` is in seconds: 0 does not wait for the
    runnables to end at all, None or a negative value waits without limit.
    """

    def __init__(self, graceful_shutdown_timeout: Optional[float] = DEFAULT_GRACEFUL_SHUTDOWN_TIMEOUT) -> None:
        self.graceful_shutdown_timeout = graceful_shutdown_timeout
        self._services: dict[str, Runnable] = {}
        self._lock = threading.Lock()

    def add(self, *args: Runnable) -> None:
        """Add runnables, keyed by name; a later one replaces an earlier of the same name."""
        for runnable in args:
            self._services[str(runnable)] = runnable

    def start(self, stop_event: threading.Event) -> None:
        """Start all runnables and block until ``stop_event`` is set or one fails.

        The first error a runnable raises before the stop is re-raised here.
        """
        with self._lock:
            internal = threading.Event()
            guard = threading.Lock()
            failures: list[BaseException] = []
            threads: list[threading.Thread] = []

            def run(runnable: Runnable) -> None:
                try:
                    runnable.start(internal)
                except Exception as exc:
                    with guard:
                        if internal.is_set() or stop_event.is_set():
                            _log.error("error received after stop sequence was engaged: %s", exc)
                        else:
                            failures.append(exc)
                            internal.set()

            error: Optional[BaseException] = None
            try:
                services = list(self._services.values())
                if not all(runnable.attempt() for runnable in services):
                    raise RuntimeError(
                        "can't accept new runnable as stop procedure is already engaged"
                    )
                for runnable in services:
                    thread = threading.Thread(
                        target=run, args=(runnable,), name=str(runnable), daemon=True
                    )
                    threads.append(thread)
                    thread.start()
                while not internal.wait(_POLL_INTERVAL):
                    if stop_event.is_set():
                        internal.set()
                with guard:
                    if failures:
                        raise failures[0]
            except Exception as exc:
                error = exc

            stop_error = self._engage_stop(internal, threads)
            if stop_error is not None:
                if error is not None:
                    raise ShutdownTimeoutError(f"{stop_error}, {error}") from error
                raise stop_error
            if error is not None:
                raise error

    def _engage_stop(
        self, internal: threading.Event, threads: list[threading.Thread]
    ) -> Optional[ShutdownTimeoutError]:
        internal.set()
        timeout = self.graceful_shutdown_timeout
        if timeout == 0:
            return None
        deadline = None if timeout is None or timeout < 0 else time.monotonic() + timeout
        for thread in threads:
            remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
            thread.join(remaining)
        if any(thread.is_alive() for thread in threads):
            return ShutdownTimeoutError(
                "failed waiting for all runnables to end within grace period of "
                f"{timeout:g}s: deadline exceeded"
            )
        return None