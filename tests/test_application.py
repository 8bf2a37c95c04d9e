import logging
from types import SimpleNamespace

import pytest

from admincore.runtime.application import Application, Registry, Router
from admincore.storage.memory_cache import MemoryCache
from admincore.storage.types import PREFIX_KEY, LockerAdapter, QueueAdapter


class RecordingQueue(QueueAdapter):
    def __init__(self):
        self.appended = []

    def __str__(self):
        return "recording"

    def append(self, message):
        self.appended.append(message)

    def register(self, name, consumer):
        pass

    def run(self):
        pass

    def shutdown(self):
        pass


class RecordingLocker(LockerAdapter):
    def __init__(self):
        self.keys = []

    def lock(self, key, ttl, options):
        self.keys.append(key)
        return key


def test_registry_wildcard_wins():
    reg = Registry(wildcard=True)
    reg["a"] = 1
    reg["*"] = 2
    assert reg.lookup("a") == 2
    assert reg.lookup("zzz") == 2


def test_registry_without_wildcard():
    reg = Registry(wildcard=False)
    reg["a"] = 1
    reg["*"] = 2
    assert reg.lookup("a") == 1
    assert reg.lookup("zzz") is None


def test_registry_snapshot_is_a_copy():
    reg = Registry(wildcard=True)
    reg["a"] = 1
    snap = reg.snapshot()
    snap["b"] = 2
    assert reg.snapshot() == {"a": 1}
    assert len(reg) == 1


def test_db_lookup_by_key():
    app = Application()
    app.dbs["tenant"] = "db-object"
    assert app.dbs.lookup("tenant") == "db-object"
    assert app.dbs.lookup("other") is None


def test_middleware_has_no_wildcard():
    app = Application()
    app.middlewares["*"] = "all"
    assert app.middlewares.lookup("auth") is None


def test_config_values():
    app = Application()
    app.set_config("t1", "site", "demo")
    assert app.config("t1", "site") == "demo"
    assert app.config("t1", "missing") is None
    assert app.config("nobody", "site") is None
    assert app.tenant_config("t1") == {"site": "demo"}


def test_tenant_config_replaced():
    app = Application()
    app.set_config("t1", "a", 1)
    app.set_tenant_config("t1", {"b": 2})
    assert app.tenant_config("t1") == {"b": 2}
    assert app.tenant_config("t2") is None


def test_cache_prefix_scopes_keys():
    app = Application()
    store = MemoryCache()
    app.cache_adapter = store
    app.cache("tenant").set("key", "value", 60)
    assert store.get("tenantkey") == "value"
    assert app.cache().get("tenantkey") == "value"


def test_queue_prefix_tags_message():
    app = Application()
    backend = RecordingQueue()
    app.queue_adapter = backend
    message = app.stream_message("", "stream", {"k": "v"})
    app.queue("tenant").append(message)
    assert backend.appended[0].values == {"k": "v", PREFIX_KEY: "tenant"}
    assert str(app.queue()) == "recording"


def test_locker_prefix():
    app = Application()
    backend = RecordingLocker()
    app.locker_adapter = backend
    app.locker("tenant").lock("job", 5, None)
    assert backend.keys == ["tenantjob"]


def test_memory_queue_is_memory():
    app = Application()
    assert str(app.memory_queue("x")) == "memory"


def test_stream_message_fields():
    app = Application()
    message = app.stream_message("id1", "s1", {"a": 1})
    assert (message.id, message.stream, message.values) == ("id1", "s1", {"a": 1})


def test_handlers_by_key():
    app = Application()
    first, second = (lambda r: None), (lambda r: None)
    app.add_handler("api", first)
    app.add_handler("api", second)
    assert app.handlers("api") == [first, second]
    assert app.handlers("none") == []
    assert app.handlers() == {"api": [first, second]}


def test_before_and_app_routers_keep_order():
    app = Application()
    f, g = (lambda: 1), (lambda: 2)
    app.add_before(f)
    app.add_before(g)
    app.add_app_router(g)
    assert app.before == [f, g]
    assert app.app_routers == [g]


def test_routes_from_engine_accumulate():
    app = Application()
    info = SimpleNamespace(method="GET", path="/ping", handler="main.ping")
    app.engine = SimpleNamespace(routes=lambda: [info])
    first = app.routes()
    assert first == [Router("GET", "/ping", "main.ping")]
    assert len(app.routes()) == 2


def test_routes_without_engine():
    assert Application().routes() == []


def test_logger_is_shared():
    original = Application().logger
    replacement = logging.getLogger("replacement")
    try:
        Application().logger = replacement
        assert Application().logger is replacement
    finally:
        Application().logger = original


@pytest.mark.parametrize("registry_name", ["dbs", "casbins", "crontabs", "apps", "casbin_excludes"])
def test_wildcard_registries(registry_name):
    app = Application()
    registry = getattr(app, registry_name)
    registry["*"] = "shared"
    assert registry.lookup("any") == "shared"