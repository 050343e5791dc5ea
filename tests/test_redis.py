"""
tests/test_redis.py
Tests for the Redis-backed rate limiter and the unauthenticated request limit.
"""

import pytest
from httpx import AsyncClient

from config.redis_client import RedisCache
from shared.models.models import Customer
from tests.conftest import FakeRedis, auth_headers


@pytest.mark.asyncio
async def test_rate_limit_blocks_after_limit_within_window():
    cache = RedisCache(FakeRedis())

    assert await cache.check_rate_limit("k", 2, window_seconds=2)
    assert await cache.check_rate_limit("k", 2, window_seconds=2)
    assert not await cache.check_rate_limit("k", 2, window_seconds=2)


@pytest.mark.asyncio
async def test_rate_limit_window_is_not_extended_by_later_hits():
    fake = FakeRedis()
    cache = RedisCache(fake)

    assert await cache.check_rate_limit("k", 2, window_seconds=2)
    fake.now = 1.5
    assert await cache.check_rate_limit("k", 2, window_seconds=2)
    fake.now = 2.5
    assert await cache.check_rate_limit("k", 2, window_seconds=2)
    assert fake.values["k"] == "1"


@pytest.mark.asyncio
async def test_unauthenticated_requests_are_limited(client: AsyncClient, fake_redis: FakeRedis):
    for _ in range(20):
        assert (await client.get("/")).status_code == 200

    response = await client.get("/")
    assert response.status_code == 429
    assert response.json() == {"message": "Rate limit exceeded. Please slow down."}
    assert response.headers["Retry-After"] == "60"

    fake_redis.now = 60
    assert (await client.get("/")).status_code == 200


@pytest.mark.asyncio
async def test_steady_traffic_recovers_after_window(client: AsyncClient, fake_redis: FakeRedis):
    for second in range(0, 120, 3):
        fake_redis.now = second
        response = await client.get("/")
        assert response.status_code == 200, f"blocked at t={second}s"


@pytest.mark.asyncio
async def test_bearer_requests_skip_the_limit(
    client: AsyncClient, fake_redis: FakeRedis, customer: Customer
):
    for _ in range(25):
        response = await client.get("/me", headers=auth_headers(customer))
        assert response.status_code == 200
    assert fake_redis.values == {}
