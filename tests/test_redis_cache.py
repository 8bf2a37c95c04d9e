from datetime import timedelta

import pytest
import redis

from admincore.storage.redis_cache import RedisCache


class FakeRedis:
    def __init__(self, ping_error=None):
        self.data = {}
        self.hashes = {}
        self.calls = []
        self.ping_error = ping_error

    def ping(self):
        if self.ping_error is not None:
            raise self.ping_error
        return True

    def get(self, name):
        return self.data.get(name)

    def set(self, name, value, ex=None):
        self.calls.append(("set", name, value, ex))
        self.data[name] = str(value).encode()

    def delete(self, name):
        self.data.pop(name, None)

    def hget(self, name, key):
        return self.hashes.get(name, {}).get(key)

    def hdel(self, name, key):
        self.hashes.get(name, {}).pop(key, None)

    def incr(self, name):
        self.data[name] = str(int(self.data.get(name, b"0")) + 1).encode()

    def decr(self, name):
        self.data[name] = str(int(self.data.get(name, b"0")) - 1).encode()

    def expire(self, name, time):
        self.calls.append(("expire", name, time))


@pytest.fixture
def fake():
    return FakeRedis()


@pytest.fixture
def cache(fake):
    return RedisCache(fake)


def test_str_is_redis(cache):
    assert str(cache) == "redis"


def test_client_is_exposed(cache, fake):
    assert cache.client is fake


def test_ping_failure_propagates():
    err = redis.exceptions.ConnectionError("down")
    with pytest.raises(redis.exceptions.ConnectionError):
        RedisCache(FakeRedis(ping_error=err))


def test_set_and_get_round_trip(cache):
    cache.set("name", "value", 10)
    assert cache.get("name") == "value"


def test_get_missing_raises(cache):
    with pytest.raises(KeyError):
        cache.get("missing")


def test_set_passes_expiry(cache):
    cache.set("a", "1", 10)
    assert cache.client.calls[-1] == ("set", "a", "1", 10)
    assert cache.get("a") == "1"


def test_set_without_expiry(cache):
    cache.set("a", "1", 0)
    assert cache.client.calls[-1] == ("set", "a", "1", None)
    assert cache.get("a") == "1"


def test_delete(cache):
    cache.set("a", "1", 10)
    cache.delete("a")
    with pytest.raises(KeyError):
        cache.get("a")


def test_hash_get_and_delete(cache, fake):
    fake.hashes["h"] = {"k": b"v"}
    assert cache.hash_get("h", "k") == "v"
    cache.hash_delete("h", "k")
    with pytest.raises(KeyError):
        cache.hash_get("h", "k")


def test_increase_and_decrease(cache):
    cache.set("n", 5, 10)
    cache.increase("n")
    cache.increase("n")
    cache.decrease("n")
    assert cache.get("n") == "6"


def test_expire_converts_seconds(cache):
    cache.set("a", "1", 10)
    cache.expire("a", 30)
    assert cache.client.calls[-1] == ("expire", "a", timedelta(seconds=30))
    assert cache.get("a") == "1"


def test_expire_keeps_timedelta(cache, fake):
    cache.expire("a", timedelta(minutes=1))
    assert fake.calls[-1] == ("expire", "a", timedelta(minutes=1))