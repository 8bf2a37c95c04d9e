"""Interceptors that log the outcome of remote calls."""

from __future__ import annotations

import posixpath
import time
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional

from admincore.calllog.ctxlog import CallContext, extract, to_context
from admincore.calllog.fields import Fields
from admincore.calllog.levels import (
    RFC3339,
    Options,
    evaluate_client_options,
    evaluate_server_options,
)
from admincore.tools.utils import REQUEST_ID_KEY, get_request_id

SYSTEM_FIELD = Fields({"system": "grpc"})
SERVER_FIELD = Fields({"span.kind": "server"})
CLIENT_FIELD = Fields({"span.kind": "client"})

ServerHandler = Callable[[CallContext, Any], Any]
ClientInvoker = Callable[[CallContext, str, Any], Any]


def _format_time(moment: datetime, fmt: str) -> str:
    if fmt != RFC3339:
        return moment.strftime(fmt)
    text = moment.isoformat(timespec="seconds")
    if moment.utcoffset() == timedelta(0):
        text = text[: -len("+00:00")] + "Z"
    return text


def _call_fields(full_method: str, kind: Fields) -> Fields:
    fields = SYSTEM_FIELD.copy()
    fields.merge(kind)
    fields.set("grpc.service", posixpath.dirname(full_method)[1:])
    fields.set("grpc.method", posixpath.basename(full_method))
    return fields


def server_call_fields(full_method: str) -> Fields:
    """Fields describing a server call to ``/service/method``."""
    return _call_fields(full_method, SERVER_FIELD)


def client_call_fields(full_method: str) -> Fields:
    """Fields describing a client call to ``/service/method``."""
    return _call_fields(full_method, CLIENT_FIELD)


def new_logger_for_call(
    ctx: CallContext,
    full_method: str,
    start: datetime,
    timestamp_format: str = RFC3339,
) -> CallContext:
    """Return a context holding a call logger and the call's request id."""
    fields = server_call_fields(full_method)
    fields.set("grpc.start_time", _format_time(start, timestamp_format))
    if ctx.deadline is not None:
        fields.set("grpc.request.deadline", _format_time(ctx.deadline, timestamp_format))
    request_id = get_request_id(ctx.metadata)
    fields.set(REQUEST_ID_KEY, request_id)
    call_log = extract(ctx).with_fields(fields.as_dict())
    return to_context(ctx.with_value(REQUEST_ID_KEY, request_id), call_log)


def unary_server_interceptor(**kwargs: Any) -> Callable[[CallContext, Any, str, ServerHandler], Any]:
    """Return an interceptor that runs a handler and logs how the call ended.

    The interceptor is called as ``interceptor(ctx, request, full_method,
    handler)``; the handler gets the context with the call logger.
    """
    options: Options = evaluate_server_options(**kwargs)

    def interceptor(ctx: CallContext, request: Any, full_method: str, handler: ServerHandler) -> Any:
        started = time.monotonic()
        new_ctx = new_logger_for_call(
            ctx, full_method, datetime.now(timezone.utc), options.timestamp_format
        )
        err: Optional[BaseException] = None
        response: Any = None
        try:
            response = handler(new_ctx, request)
        except Exception as exc:
            err = exc
        if options.should_log(full_method, err):
            code = options.code_func(err)
            level = options.level_func(code)
            duration = options.duration_func(timedelta(seconds=time.monotonic() - started))
            options.message_func(
                new_ctx, f"finished unary call with code {code}", level, code, err, duration
            )
        if err is not None:
            raise err
        return response

    return interceptor


def unary_client_interceptor(**kwargs: Any) -> Callable[[CallContext, str, Any, ClientInvoker], Any]:
    """Return an interceptor that invokes a call and logs how it ended.

    The interceptor is called as ``interceptor(ctx, method, request, invoker)``.
    """
    options: Options = evaluate_client_options(**kwargs)

    def interceptor(ctx: CallContext, method: str, request: Any, invoker: ClientInvoker) -> Any:
        fields = client_call_fields(method)
        started = time.monotonic()
        err: Optional[BaseException] = None
        response: Any = None
        try:
            response = invoker(ctx, method, request)
        except Exception as exc:
            err = exc
        code = options.code_func(err)
        level = options.level_func(code)
        duration = options.duration_func(timedelta(seconds=time.monotonic() - started))
        duration.set("grpc.code", code)
        (
            extract(ctx)
            .with_fields(fields.as_dict())
            .with_fields(duration.as_dict())
            .emit(int(level), "finished client unary call", err)
        )
        if err is not None:
            raise err
        return response

    return interceptor