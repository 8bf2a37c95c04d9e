"""HTTP listener runnable serving a WSGI application."""

from __future__ import annotations

import logging
import socketserver
import ssl
import threading
from typing import Any, Callable, Iterable, Optional
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer

from admincore.server.manager import Runnable

_log = logging.getLogger(__name__)

WSGIApp = Callable[[dict, Callable[..., Any]], Iterable[bytes]]


def _ok(environ: dict, start_response: Callable[..., Any]) -> Iterable[bytes]:
    start_response("200 OK", [])
    return [b""]


def _single_route(path: str) -> WSGIApp:
    def app(environ: dict, start_response: Callable[..., Any]) -> Iterable[bytes]:
        if environ.get("PATH_INFO") == path:
            start_response("200 OK", [])
            return [b""]
        start_response("404 Not Found", [("Content-Type", "text/plain; charset=utf-8")])
        return [b"404 page not found\n"]

    return app


def _split_addr(addr: str) -> tuple[str, int]:
    host, _, port = addr.rpartition(":")
    host = host.strip("[]")
    return host, int(port) if port else 0


class _Server(socketserver.ThreadingMixIn, WSGIServer):
    daemon_threads = True

    def server_bind(self) -> None:
        socketserver.TCPServer.server_bind(self)
        host, port = self.server_address[:2]
        self.server_name = host or "localhost"
        self.server_port = port
        self.setup_environ()


class _QuietHandler(WSGIRequestHandler):
    def log_message(self, format: str, *args: Any) -> None:
        _log.debug(format, *args)


class HttpListener(Runnable):
    """An HTTP server that runs until its stop event is set."""

    def __init__(
        self,
        name: str,
        addr: str = ":8080",
        handler: Optional[WSGIApp] = None,
        cert_file: str = "",
        key_file: str = "",
        started_hook: Optional[Callable[[], Any]] = None,
        end_hook: Optional[Callable[[], Any]] = None,
    ) -> None:
        self.name = name
        self.addr = addr
        self.handler = handler if handler is not None else _ok
        self.cert_file = cert_file
        self.key_file = key_file
        self.started_hook = started_hook
        self.end_hook = end_hook
        self.started = False
        self._server: Optional[_Server] = None
        self._closed = False
        self._close_lock = threading.Lock()

    def __str__(self) -> str:
        return self.name

    @property
    def address(self) -> tuple[str, int]:
        """The address the listener is bound to."""
        if self._server is None:
            raise RuntimeError(f"{self.name} server is not started")
        host, port = self._server.server_address[:2]
        return host, port

    def start(self, stop_event: threading.Event) -> None:
        """Bind, serve in the background, and shut down once ``stop_event`` is set."""
        server = _Server(_split_addr(self.addr), _QuietHandler)
        server.set_app(self.handler)
        if self.cert_file and self.key_file:
            context = ssl.create_default_context(ssl.Purpose.CLIENT_AUTH)
            context.load_cert_chain(self.cert_file, self.key_file)
            server.socket = context.wrap_socket(server.socket, server_side=True)
        self._server = server
        self._closed = False
        self.started = True
        host, port = self.address
        _log.info("%s Server listening on %s:%d", self.name, host, port)

        threading.Thread(target=self._serve, args=(server,), daemon=True).start()
        threading.Thread(target=self._stop_on, args=(stop_event,), daemon=True).start()
        if self.started_hook is not None:
            self.started_hook()

    def _serve(self, server: _Server) -> None:
        try:
            server.serve_forever()
        except Exception as exc:
            _log.error("%s Server start error: %s", self.name, exc)

    def _stop_on(self, stop_event: threading.Event) -> None:
        stop_event.wait()
        try:
            self.shutdown()
        except Exception as exc:
            _log.error("%s Server shutdown error: %s", self.name, exc)

    def attempt(self) -> bool:
        return not self.started

    def shutdown(self) -> None:
        """Stop serving, close the socket and run the end hook once."""
        if self._server is None:
            raise RuntimeError(f"{self.name} server is not started")
        with self._close_lock:
            if self._closed:
                return
            self._closed = True
            self._server.shutdown()
            self._server.server_close()
        if self.end_hook is not None:
            self.end_hook()


def _preset(name: str, addr: str, path: str, kwargs: dict[str, Any]) -> HttpListener:
    options: dict[str, Any] = {"name": name, "addr": addr, "handler": _single_route(path)}
    options.update(kwargs)
    return HttpListener(**options)


def new_healthz(**kwargs: Any) -> HttpListener:
    """A listener answering 200 on ``/healthz``."""
    return _preset("healthz", ":4000", "/healthz", kwargs)


def new_readyz(**kwargs: Any) -> HttpListener:
    """A listener answering 200 on ``/readyz``."""
    return _preset("readyz", ":2000", "/readyz", kwargs)