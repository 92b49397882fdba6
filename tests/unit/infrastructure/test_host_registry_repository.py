"""
Unit tests for the Redis host registry repository.

The connection factory is replaced with a stub yielding a mocked client.
"""

import json
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock

import pytest

from cdnsync.domain.cache.value_objects import HostKey
from cdnsync.infrastructure.redis.exceptions import (
    RedisConnectionException,
    RedisOperationException,
)
from cdnsync.infrastructure.repositories.host_registry_repository import (
    UPSERT_SCRIPT,
    RedisHostRegistryRepository,
)


class StubConnectionFactory:
    """Yields a fixed client from get_connection."""

    def __init__(self, client):
        self.client = client

    @asynccontextmanager
    async def get_connection(self):
        yield self.client


@pytest.fixture
def redis_client():
    client = MagicMock()
    client.script = AsyncMock(return_value=1700000000000)
    client.register_script = MagicMock(return_value=client.script)
    client.hgetall = AsyncMock(return_value={})
    return client


@pytest.fixture
def repository(redis_client):
    return RedisHostRegistryRepository(StubConnectionFactory(redis_client))


class TestRedisHostRegistryRepository:
    """Test RedisHostRegistryRepository."""

    @pytest.mark.asyncio
    async def test_upsert_runs_server_timestamp_script(self, repository, redis_client):
        """Test upsert writes under cacheDomains with the host key."""
        key = HostKey.for_host("a.com")

        await repository.upsert(key, "a.com")

        redis_client.register_script.assert_called_once_with(UPSERT_SCRIPT)
        redis_client.script.assert_awaited_once_with(
            keys=["cacheDomains"], args=[key.value, "a.com"]
        )

    def test_upsert_script_uses_server_clock(self):
        """Test the script stamps lastSeen from Redis TIME."""
        assert "redis.call('TIME')" in UPSERT_SCRIPT
        assert "lastSeen" in UPSERT_SCRIPT

    @pytest.mark.asyncio
    async def test_upsert_wraps_errors(self, repository, redis_client):
        """Test store failures surface as RedisOperationException."""
        redis_client.script.side_effect = RuntimeError("READONLY")

        with pytest.raises(RedisOperationException) as exc_info:
            await repository.upsert(HostKey.for_host("a.com"), "a.com")

        assert exc_info.value.details["operation"] == "upsert"
        assert exc_info.value.details["key"].startswith("cacheDomains/")

    @pytest.mark.asyncio
    async def test_upsert_passes_through_redis_exceptions(self, repository, redis_client):
        """Test connection exceptions are not re-wrapped."""
        redis_client.script.side_effect = RedisConnectionException()

        with pytest.raises(RedisConnectionException):
            await repository.upsert(HostKey.for_host("a.com"), "a.com")

    @pytest.mark.asyncio
    async def test_list_all(self, repository, redis_client):
        """Test list_all parses every stored record."""
        redis_client.hgetall.return_value = {
            HostKey.for_host("a.com").value: json.dumps(
                {"domain": "a.com", "lastSeen": 1}
            ),
            HostKey.for_host("b.com").value: json.dumps(
                {"domain": "b.com", "lastSeen": 2}
            ),
        }

        domains = await repository.list_all()

        redis_client.hgetall.assert_awaited_once_with("cacheDomains")
        assert {(d.domain, d.last_seen) for d in domains} == {("a.com", 1), ("b.com", 2)}

    @pytest.mark.asyncio
    async def test_list_all_skips_malformed(self, repository, redis_client):
        """Test malformed entries are skipped, not fatal."""
        redis_client.hgetall.return_value = {
            "k1": json.dumps({"domain": "a.com", "lastSeen": 1}),
            "k2": "{not json",
            "k3": json.dumps({"lastSeen": 3}),
        }

        domains = await repository.list_all()

        assert [d.domain for d in domains] == ["a.com"]

    @pytest.mark.asyncio
    async def test_list_all_wraps_errors(self, repository, redis_client):
        """Test read failures surface as RedisOperationException."""
        redis_client.hgetall.side_effect = RuntimeError("LOADING")

        with pytest.raises(RedisOperationException):
            await repository.list_all()

    @pytest.mark.asyncio
    async def test_custom_registry_path(self, redis_client):
        """Test the registry hash name is configurable."""
        repository = RedisHostRegistryRepository(
            StubConnectionFactory(redis_client), registry_path="staging/cacheDomains"
        )

        await repository.list_all()

        redis_client.hgetall.assert_awaited_once_with("staging/cacheDomains")
