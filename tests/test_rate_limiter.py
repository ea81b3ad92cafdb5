import pytest
import redis
from fastapi import HTTPException
from starlette.requests import Request

from therapist_scheduler.cache import Cache
from therapist_scheduler.rate_limiter import caller_key, consume, create_rate_limiter


class FakeRedis:
    """Just enough of redis.Redis for counters and cached payloads."""

    def __init__(self):
        self.values = {}
        self.ttls = {}

    def incr(self, key):
        self.values[key] = int(self.values.get(key, 0)) + 1
        return self.values[key]

    def expire(self, key, seconds):
        self.ttls[key] = seconds
        return True

    def ttl(self, key):
        if key not in self.values:
            return -2
        return self.ttls.get(key, -1)

    def get(self, key):
        return self.values.get(key)

    def setex(self, key, ttl, value):
        self.values[key] = value
        self.ttls[key] = ttl
        return True


def make_request(client_host="9.9.9.9", forwarded=None):
    headers = [(b"x-forwarded-for", forwarded.encode())] if forwarded else []
    return Request({"type": "http", "headers": headers, "client": (client_host, 5000)})


def unreachable():
    raise redis.ConnectionError("connection refused")


class TestCallerKey:
    def test_uses_client_address(self):
        assert caller_key(make_request(), "geocode") == "geocode:9.9.9.9"

    def test_prefers_first_forwarded_address(self):
        request = make_request(forwarded="1.2.3.4, 10.0.0.1")
        assert caller_key(request, "geocode") == "geocode:1.2.3.4"

    def test_global_bucket(self):
        assert caller_key(make_request(), "geocode", use_ip=False) == "geocode:global"


class TestConsume:
    def test_window_expiry_set_on_first_hit(self):
        client = FakeRedis()

        assert consume(client, "k", limit=2, window_seconds=60) == (True, 0)
        assert client.ttls["k"] == 60

    def test_over_limit_reports_retry_after(self):
        client = FakeRedis()
        consume(client, "k", 2, 60)
        consume(client, "k", 2, 60)
        client.ttls["k"] = 42

        assert consume(client, "k", 2, 60) == (False, 42)

    def test_counter_without_expiry_is_repaired(self):
        client = FakeRedis()
        client.values["k"] = 5

        assert consume(client, "k", 2, 30) == (False, 30)
        assert client.ttls["k"] == 30


class TestRateLimiterDependency:
    async def test_allows_then_rejects(self):
        client = FakeRedis()
        limiter = create_rate_limiter(1, 60, "geocode", client_factory=lambda: client)

        await limiter(make_request())
        with pytest.raises(HTTPException) as exc:
            await limiter(make_request())

        assert exc.value.status_code == 429
        assert exc.value.headers["Retry-After"] == "60"
        assert exc.value.detail["errorType"] == "rate_limited"

    async def test_other_callers_have_their_own_window(self):
        client = FakeRedis()
        limiter = create_rate_limiter(1, 60, "geocode", client_factory=lambda: client)

        await limiter(make_request("1.1.1.1"))
        await limiter(make_request("2.2.2.2"))

    async def test_fails_closed_without_redis(self):
        limiter = create_rate_limiter(10, 60, "geocode", client_factory=unreachable)

        with pytest.raises(HTTPException) as exc:
            await limiter(make_request())

        assert exc.value.status_code == 503


class TestCache:
    def test_round_trip(self):
        client = FakeRedis()
        cache = Cache(prefix="geocode", client_factory=lambda: client)
        key = cache.key("123 Main St")

        assert cache.set(key, {"status": "OK"}, ttl=120)
        assert cache.get(key) == {"status": "OK"}
        assert client.ttls[key] == 120

    def test_key_ignores_case_and_padding(self):
        cache = Cache(prefix="geocode", client_factory=FakeRedis)
        assert cache.key("  123 Main St ") == cache.key("123 MAIN ST")
        assert cache.key("123 Main St").startswith("geocode:")

    def test_unreachable_redis_is_a_miss(self):
        calls = []

        def factory():
            calls.append(1)
            unreachable()

        cache = Cache(prefix="geocode", client_factory=factory)

        assert cache.get("geocode:abc") is None
        assert cache.set("geocode:abc", {"status": "OK"}) is False
        # Connection is not retried on every call
        assert len(calls) == 1
