import logging
from datetime import datetime, timezone

import pytest

from admincore.calllog.ctxlog import CallContext, extract, to_context
from admincore.calllog.interceptors import (
    SYSTEM_FIELD,
    client_call_fields,
    new_logger_for_call,
    server_call_fields,
    unary_client_interceptor,
    unary_server_interceptor,
)
from admincore.calllog.levels import Code, StatusError
from admincore.tools.utils import REQUEST_ID_KEY

LOGGER_NAME = "tests.interceptors"
START = datetime(2021, 6, 7, 12, 0, 0, tzinfo=timezone.utc)


def _records(caplog):
    return [r for r in caplog.records if r.name == LOGGER_NAME]


def _ctx(**kwargs):
    return to_context(CallContext(**kwargs), logging.getLogger(LOGGER_NAME))


def test_server_call_fields():
    assert server_call_fields("/pkg.Svc/Method").as_dict() == {
        "system": "grpc",
        "span.kind": "server",
        "grpc.service": "pkg.Svc",
        "grpc.method": "Method",
    }


def test_client_call_fields():
    fields = client_call_fields("/pkg.Svc/Method").as_dict()
    assert fields["span.kind"] == "client"
    assert fields["grpc.method"] == "Method"


def test_call_fields_do_not_change_system_field():
    server_call_fields("/pkg.Svc/Method")
    assert SYSTEM_FIELD.as_dict() == {"system": "grpc"}


def test_new_logger_for_call_uses_request_id():
    ctx = _ctx(metadata={REQUEST_ID_KEY: "abc"})
    new_ctx = new_logger_for_call(ctx, "/pkg.Svc/Method", START)
    extra = extract(new_ctx).extra
    assert new_ctx.value(REQUEST_ID_KEY) == "abc"
    assert extra[REQUEST_ID_KEY] == "abc"
    assert extra["grpc.start_time"] == "2021-06-07T12:00:00Z"
    assert "grpc.request.deadline" not in extra


def test_new_logger_for_call_records_deadline():
    ctx = _ctx(deadline=START)
    extra = extract(new_logger_for_call(ctx, "/pkg.Svc/Method", START)).extra
    assert extra["grpc.request.deadline"] == extra["grpc.start_time"]


def test_new_logger_for_call_generates_request_id():
    new_ctx = new_logger_for_call(_ctx(), "/pkg.Svc/Method", START, "%Y")
    request_id = new_ctx.value(REQUEST_ID_KEY)
    assert len(request_id) == 36
    assert extract(new_ctx).extra[REQUEST_ID_KEY] == request_id
    assert extract(new_ctx).extra["grpc.start_time"] == "2021"


def test_unary_server_interceptor_success(caplog):
    caplog.set_level(logging.DEBUG)
    seen = {}

    def handler(ctx, request):
        seen["id"] = ctx.value(REQUEST_ID_KEY)
        return request * 2

    interceptor = unary_server_interceptor()
    ctx = _ctx(metadata={REQUEST_ID_KEY: "abc"})
    assert interceptor(ctx, 21, "/pkg.Svc/Method", handler) == 42
    assert seen["id"] == "abc"
    records = _records(caplog)
    assert len(records) == 1
    assert records[0].getMessage() == "finished unary call with code OK"
    assert records[0].levelno == logging.INFO
    assert records[0].fields["grpc.code"] == "OK"
    assert records[0].fields[REQUEST_ID_KEY] == "abc"


def test_unary_server_interceptor_error(caplog):
    caplog.set_level(logging.DEBUG)

    def handler(ctx, request):
        raise StatusError(Code.INTERNAL, "boom")

    interceptor = unary_server_interceptor()
    with pytest.raises(StatusError):
        interceptor(_ctx(), None, "/pkg.Svc/Method", handler)
    records = _records(caplog)
    assert len(records) == 1
    assert records[0].levelno == logging.ERROR
    assert records[0].fields["grpc.code"] == "Internal"


def test_unary_server_interceptor_decider_silences(caplog):
    caplog.set_level(logging.DEBUG)
    interceptor = unary_server_interceptor(should_log=lambda method, err: False)
    assert interceptor(_ctx(), 1, "/pkg.Svc/Method", lambda ctx, req: req) == 1
    assert _records(caplog) == []


def test_unary_client_interceptor_success(caplog):
    caplog.set_level(logging.DEBUG)
    ctx = _ctx()
    calls = []

    def invoker(call_ctx, method, request):
        calls.append((call_ctx, method, request))
        return "reply"

    interceptor = unary_client_interceptor()
    assert interceptor(ctx, "/pkg.Svc/Method", "req", invoker) == "reply"
    assert calls == [(ctx, "/pkg.Svc/Method", "req")]
    records = _records(caplog)
    assert len(records) == 1
    assert records[0].levelno == logging.DEBUG
    assert records[0].fields["span.kind"] == "client"
    assert records[0].fields["grpc.code"] is Code.OK


def test_unary_client_interceptor_error(caplog):
    caplog.set_level(logging.DEBUG)

    def invoker(call_ctx, method, request):
        raise StatusError(Code.UNAVAILABLE, "down")

    interceptor = unary_client_interceptor()
    with pytest.raises(StatusError) as info:
        interceptor(_ctx(), "/pkg.Svc/Method", None, invoker)
    assert info.value.code is Code.UNAVAILABLE
    records = _records(caplog)
    assert [r.levelno for r in records] == [logging.WARNING]
    assert records[0].getMessage().startswith("finished client unary call")