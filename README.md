# admincore

Building blocks for the back end of an admin application:

- **Storage adapters** (`admincore.storage`): the abstract interfaces
  `CacheAdapter`, `QueueAdapter` and `LockerAdapter`; an in-process cache with
  per-key expiry (`MemoryCache`); a Redis-backed cache (`RedisCache`); an
  in-process message queue whose consumers retry failed messages
  (`MemoryQueue`); a Redis lock provider (`RedisLocker`); and the queue
  `Message` dataclass.
- **Tenant scoping** (`admincore.runtime.scoped`): `PrefixedCache`,
  `PrefixedQueue` and `PrefixedLocker` put a tenant prefix in front of every
  key, or tag every appended message with it, so one store can serve many
  tenants.
- **Application registry** (`admincore.runtime.application`): `Application`
  keeps databases, enforcers, crontabs, apps, middleware, handlers and
  per-tenant configuration in `Registry` objects and lists, and hands out
  tenant-scoped caches, queues and lockers.
- **Service base** (`admincore.service`): `Service` holds shared resources and
  accumulates errors with `add_error`.
- **Runnable manager** (`admincore.server`): `Server` starts a set of
  `Runnable` objects in threads and stops them within a grace period;
  `HttpListener`, `new_healthz` and `new_readyz` are small WSGI-serving HTTP
  runnables.
- **Tools** (`admincore.tools`): `parse_accept_language` for
  `Accept-Language` headers, `resolve_search_query` for turning tagged query
  dataclasses into SQL conditions, `convert_num_to_chars` for spreadsheet
  column names, request-id helpers, and `SqlLogger` / `TraceRecorder` for SQL
  statement logging.
- **Call logging** (`admincore.calllog`): `Fields`, context-scoped loggers
  carried in a `CallContext`, status-code to log-level mapping, and
  interceptors that log each call with its method, duration and status code.

## Requirements

Python 3.10 or later. `RedisCache` and `RedisLocker` use the `redis` client
library, which is installed with the package, and need a reachable Redis
server (`RedisCache` pings it when created).

## Caching

```python
from admincore.storage.memory_cache import MemoryCache
from admincore.runtime.scoped import PrefixedCache

store = MemoryCache()
store.set("visits", 0, 60)          # expires after 60 seconds
store.increase("visits")
print(store.get("visits"))          # "1"

tenant = PrefixedCache("tenant-a:", store, "")
tenant.set("greeting", "hello", 60) # stored as "tenant-a:greeting"
print(store.get("tenant-a:greeting"))
```

Values are stored as strings. `get` raises `KeyError` for a key that is
missing or has expired. Increasing, decreasing or setting the expiry of a key
that does not exist raises `KeyError`; increasing a value that is not an
integer raises `ValueError`.

`PrefixedCache.put_token` stores a token mapping as JSON until 200 seconds
before its `expires_in`, and `token` reads it back.

## Queues

```python
import threading

from admincore.storage.memory_queue import MemoryQueue
from admincore.storage.message import Message

q = MemoryQueue(100)
q.register("events", lambda message: print(message.values))
q.append(Message(stream="events", values={"key": "value"}))
```

Each appended message is copied, given a fresh UUID as its id and delivered
from a background thread. A consumer that raises has its message put back,
up to three times, waiting one second longer each time. `run` blocks until
`shutdown` is called.

`PrefixedQueue.append` stores its prefix in the message values under the key
`"__host"`, which `Message.prefix` reads back.

## Application registry and tenant configuration

```python
from admincore.runtime.application import Application
from admincore.storage.memory_cache import MemoryCache

app = Application()
app.set_config("tenant-a", "site_name", "Example")
print(app.config("tenant-a", "site_name"))   # "Example"

app.cache_adapter = MemoryCache()
app.cache("tenant-a:").set("k", "v", 60)
```

The registries (`dbs`, `casbins`, `crontabs`, `apps`, `casbin_excludes`)
answer every `lookup` with the `"*"` entry when one is set; `middlewares`
does not.

## Running services

```python
import threading

from admincore.server.manager import Server
from admincore.server.listener import new_healthz

stop = threading.Event()
server = Server(graceful_shutdown_timeout=5.0)
server.add(new_healthz(addr="127.0.0.1:4000"))
server.start(stop)   # blocks until stop is set or a runnable fails
```

`new_healthz` answers 200 on `/healthz` (default address `:4000`) and
`new_readyz` on `/readyz` (default `:2000`); other paths get 404. If the
runnables do not end within the grace period, `Server.start` raises
`ShutdownTimeoutError`.

## Accept-Language

```python
from admincore.tools.language import parse_accept_language

parse_accept_language("en-US,en;q=0.8", [])  # ["en-us", "en"]
parse_accept_language("fr,de;q=0.5", ["de"]) # ["de"]
```

Languages without a quality value are ranked by their position in the header.

## Search conditions

```python
from dataclasses import dataclass, field

from admincore.tools.search import Condition, resolve_search_query

@dataclass
class UserQuery:
    name: str = field(default="", metadata={"search": "type:icontains;column:name;table:user"})

condition = Condition()
resolve_search_query("mysql", UserQuery(name="ann"), condition)
# condition.where == {"`user`.`name` like ?": ["%ann%"]}
```

With the driver `"postgres"` names are not quoted and the case-insensitive
types use `ilike`. Fields left at their zero value are skipped.

## Spreadsheet columns and request ids

```python
from admincore.tools.utils import convert_num_to_chars, get_request_id

convert_num_to_chars(0)   # "A"
convert_num_to_chars(26)  # "AA"
get_request_id({"x-request-id": "abc"})  # "abc"; a new UUID when absent
```

## What this package does not do

- It has no Redis- or message-broker-backed queue; `MemoryQueue` is the only
  `QueueAdapter` implementation.
- It does not open database connections or configure read/write splitting;
  `Application` only stores whatever database objects it is given.
- It does not run an RPC server or client. The interceptors in
  `admincore.calllog.interceptors` are plain callables that wrap a handler or
  invoker function and log the result.
- It does not write spreadsheet files; `convert_num_to_chars` only names
  columns.
- It has no command-line program.

## Running the tests

Install the `test` extra and run pytest from the project directory.