"""
Host Registry Repository Implementations

Redis-backed persistence for the host registry, plus an in-memory
implementation for tests and single-process runs.
"""

import logging
import time
from typing import Dict, List, Optional

from opentelemetry import trace

from ...constants import HOST_REGISTRY_PATH
from ...domain.cache.entities import CachedDomain
from ...domain.cache.repository_interfaces import HostRegistryRepository
from ...domain.cache.value_objects import HostKey
from ..redis.connection_factory import RedisConnectionFactory, redis_connection_factory
from ..redis.exceptions import RedisException, RedisOperationException

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


# Stamps lastSeen with the server clock so that every writer agrees on time.
UPSERT_SCRIPT = """
local now = redis.call('TIME')
local last_seen = tonumber(now[1]) * 1000 + math.floor(tonumber(now[2]) / 1000)
local record = cjson.encode({domain = ARGV[2], lastSeen = last_seen})
redis.call('HSET', KEYS[1], ARGV[1], record)
return last_seen
"""


class RedisHostRegistryRepository(HostRegistryRepository):
    """
    Redis implementation of the host registry.

    All entries live in one hash named after the registry path; the field is
    the host key and the value is the JSON record ``{domain, lastSeen}``.
    """

    def __init__(
        self,
        connection_factory: Optional[RedisConnectionFactory] = None,
        registry_path: str = HOST_REGISTRY_PATH,
    ):
        self._factory = connection_factory or redis_connection_factory
        self.registry_path = registry_path

    async def upsert(self, key: HostKey, domain: str) -> None:
        """Blind overwrite of the entry at ``key``."""
        with tracer.start_as_current_span("host_registry.upsert") as span:
            span.set_attribute("host.key", key.value)
            span.set_attribute("host.domain", domain)

            try:
                async with self._factory.get_connection() as redis_client:
                    upsert = redis_client.register_script(UPSERT_SCRIPT)
                    last_seen = await upsert(
                        keys=[self.registry_path], args=[key.value, domain]
                    )

                logger.debug(
                    f"Registered host {domain}",
                    extra={"key": key.value, "last_seen": last_seen},
                )

            except RedisException:
                raise
            except Exception as e:
                logger.exception(f"Failed to register host {domain}: {e}")
                raise RedisOperationException(
                    "upsert", key=f"{self.registry_path}/{key.value}", original_error=e
                ) from e

    async def list_all(self) -> List[CachedDomain]:
        """Read the whole registry, skipping malformed entries."""
        with tracer.start_as_current_span("host_registry.list_all") as span:
            try:
                async with self._factory.get_connection() as redis_client:
                    records = await redis_client.hgetall(self.registry_path)
            except RedisException:
                raise
            except Exception as e:
                logger.exception(f"Failed to read host registry: {e}")
                raise RedisOperationException(
                    "list_all", key=self.registry_path, original_error=e
                ) from e

            domains = []
            for field_key, record in records.items():
                cached = CachedDomain.from_record(record)
                if cached is None:
                    logger.warning(
                        f"Skipping malformed registry entry {field_key}",
                        extra={"key": field_key},
                    )
                    continue
                domains.append(cached)

            span.set_attribute("host.count", len(domains))
            return domains


class InMemoryHostRegistryRepository(HostRegistryRepository):
    """Process-local host registry. ``last_seen`` never decreases per key."""

    def __init__(self):
        self._entries: Dict[str, dict] = {}

    async def upsert(self, key: HostKey, domain: str) -> None:
        previous = self._entries.get(key.value) or {}
        now_ms = int(time.time() * 1000)
        last_seen = max(now_ms, previous.get("lastSeen") or 0)
        self._entries[key.value] = {"domain": domain, "lastSeen": last_seen}

    async def list_all(self) -> List[CachedDomain]:
        domains = []
        for field_key, record in list(self._entries.items()):
            cached = CachedDomain.from_record(record)
            if cached is None:
                logger.warning(f"Skipping malformed registry entry {field_key}")
                continue
            domains.append(cached)
        return domains

    def get(self, key: HostKey) -> Optional[dict]:
        """Raw stored record at ``key``."""
        return self._entries.get(key.value)
