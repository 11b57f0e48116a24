# tests/integration/conftest.py
import os

import pytest
import pytest_asyncio
from redis.asyncio import Redis

from tests.integration.db_fixtures import database_url, pg_pool  # noqa: F401


@pytest_asyncio.fixture
async def redis_client():
    url = os.getenv("REDIS_URL")
    if not url:
        pytest.skip("REDIS_URL not set")
    r = Redis.from_url(url, encoding="utf-8", decode_responses=True)
    try:
        yield r
    finally:
        await r.aclose()
