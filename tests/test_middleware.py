"""Tests for middleware — security headers, request IDs, rate limiting.

Rate limiting is skipped when Redis isn't initialised (the normal test
setup), so the limiter tests install a small in-memory stand-in.
"""

import pytest

from declutter import cache
from declutter.middleware.rate_limit import is_auth_attempt


class FakeRedis:
    def __init__(self):
        self.counts: dict[str, int] = {}

    async def incr(self, key):
        self.counts[key] = self.counts.get(key, 0) + 1
        return self.counts[key]

    async def expire(self, key, seconds):
        return True


@pytest.mark.asyncio
async def test_security_headers(client):
    r = await client.get("/quotes")
    assert r.status_code == 401
    assert r.headers["X-Content-Type-Options"] == "nosniff"
    assert r.headers["X-Frame-Options"] == "DENY"
    assert r.headers["Referrer-Policy"] == "strict-origin-when-cross-origin"
    assert "Cache-Control" not in r.headers


@pytest.mark.asyncio
async def test_auth_responses_are_not_cached(client):
    r = await client.get("/auth/verify")
    assert r.headers["Cache-Control"] == "no-store"


@pytest.mark.asyncio
async def test_no_hsts_on_http(client):
    r = await client.get("/quotes")
    assert "Strict-Transport-Security" not in r.headers


@pytest.mark.asyncio
async def test_request_id_generated(client):
    r1 = await client.get("/quotes")
    r2 = await client.get("/quotes")
    assert r1.headers["X-Request-ID"] != r2.headers["X-Request-ID"]


@pytest.mark.asyncio
async def test_request_id_propagated(client):
    r = await client.get("/quotes", headers={"X-Request-ID": "trace-12345"})
    assert r.headers["X-Request-ID"] == "trace-12345"


@pytest.mark.asyncio
async def test_validation_errors_use_error_envelope(client, employee):
    _, headers = employee
    r = await client.get("/quotes/not-a-number", headers=headers)
    assert r.status_code == 400
    assert "error" in r.json()


@pytest.mark.parametrize(
    "path, expected",
    [
        ("/auth/customer/login", True),
        ("/auth/manager/register", True),
        ("/auth/verify", False),
        ("/auth/logout", False),
        ("/quotes", False),
    ],
)
def test_is_auth_attempt(path, expected):
    assert is_auth_attempt(path) is expected


@pytest.mark.asyncio
async def test_login_rate_limited(client, monkeypatch):
    monkeypatch.setattr(cache, "_redis", FakeRedis())
    creds = {"email": "ghost@example.com", "password": "whatever"}

    for _ in range(10):
        r = await client.post("/auth/customer/login", json=creds)
        assert r.status_code == 401
        assert r.headers["X-RateLimit-Limit"] == "10"

    r = await client.post("/auth/customer/login", json=creds)
    assert r.status_code == 429
    assert r.json() == {"error": "Rate limit exceeded. Try again later."}
    assert r.headers["Retry-After"] == "60"

    # Other endpoints have their own, larger bucket
    r = await client.get("/quotes")
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_unknown_route_uses_error_envelope(client):
    r = await client.get("/no-such-route")
    assert r.status_code == 404
    assert r.json() == {"error": "Not Found"}
