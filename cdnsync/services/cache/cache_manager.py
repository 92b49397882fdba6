"""
Cache Manager Service

Wires the host registry, CDN client, invalidator, warmer, header provider
and event dispatcher into one object with a managed lifecycle.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from opentelemetry import trace

from ...core.config import Settings, get_settings
from ...domain.cache.domain_services import (
    CacheHeaderProvider,
    CacheInvalidator,
    CacheWarmer,
    HostRegistry,
)
from ...domain.cache.repository_interfaces import CdnGateway, HostRegistryRepository
from ...domain.content.repository_interfaces import ContentRepository
from ...infrastructure.cdn.client import CdnClient
from ...infrastructure.redis.connection_factory import RedisConnectionFactory
from ...infrastructure.repositories.content_repository import InMemoryContentRepository
from ...infrastructure.repositories.host_registry_repository import (
    InMemoryHostRegistryRepository,
    RedisHostRegistryRepository,
)
from .event_dispatcher import CacheEventDispatcher

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


class CacheManager:
    """
    High-level cache service.

    Owns the CDN client and, for the Redis backend, the connection factory.
    Collaborators can be injected for tests or alternative stores.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        repository: Optional[HostRegistryRepository] = None,
        gateway: Optional[CdnGateway] = None,
        content_repository: Optional[ContentRepository] = None,
        header_provider: Optional[CacheHeaderProvider] = None,
    ):
        self.settings = settings or get_settings()
        self._connection_factory: Optional[RedisConnectionFactory] = None

        if repository is None:
            if self.settings.REGISTRY_BACKEND == "memory":
                repository = InMemoryHostRegistryRepository()
            else:
                self._connection_factory = RedisConnectionFactory(self.settings)
                repository = RedisHostRegistryRepository(self._connection_factory)

        self.repository = repository
        self.gateway = gateway or CdnClient(self.settings)
        self.content_repository = content_repository or InMemoryContentRepository()
        self.header_provider = header_provider or CacheHeaderProvider(
            lambda: self.settings.CACHE_CONFIG
        )

        self.registry = HostRegistry(
            repository,
            default_domain=self.settings.DEFAULT_DOMAIN,
            functions_domain_suffix=self.settings.FUNCTIONS_DOMAIN_SUFFIX,
        )
        self.invalidator = CacheInvalidator(self.registry, self.gateway)
        self.warmer = CacheWarmer(
            self.registry,
            self.gateway,
            default_delay=self.settings.heat_delay_seconds,
        )
        self.dispatcher = CacheEventDispatcher(
            self.registry,
            self.invalidator,
            self.warmer,
            self.content_repository,
        )

    async def initialize(self) -> None:
        """Open the registry store connection, if any."""
        if self._connection_factory is not None:
            try:
                await self._connection_factory.initialize()
            except Exception as e:
                # Registry faults are tolerated at runtime; start anyway.
                logger.error(f"Host registry store unavailable at startup: {e}")
        logger.info(
            "Cache manager initialized",
            extra={"registry_backend": self.settings.REGISTRY_BACKEND},
        )

    async def close(self) -> None:
        """Release the CDN client and the store connection."""
        if isinstance(self.gateway, CdnClient):
            await self.gateway.close()
        if self._connection_factory is not None:
            await self._connection_factory.close()

    async def health_check(self) -> Dict[str, Any]:
        """Report registry store health."""
        with tracer.start_as_current_span("cache_manager.health_check"):
            if self._connection_factory is None:
                registry_health = {"status": "healthy", "backend": "memory"}
            else:
                registry_health = await self._connection_factory.health_check()
                registry_health["backend"] = "redis"

            return {
                "status": registry_health["status"],
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "registry": registry_health,
            }
