"""
Cache Domain Services

Business logic for the CDN cache domain.
Combines path variants, the host registry snapshot and the CDN gateway to
broadcast purge and warm operations across every known host.
"""

import asyncio
import logging
from typing import Any, Callable, List, Mapping, Optional

from opentelemetry import trace

from ...constants import DEFAULT_HEAT_DELAY_MS
from ...core.config import get_settings
from .entities import CachedDomain
from .repository_interfaces import CdnGateway, HostRegistryRepository
from .value_objects import (
    CacheConfig,
    CdnMethod,
    CdnOutcome,
    FanOutResult,
    HostKey,
    expand_path,
)

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


ConfigSource = Callable[[], Optional[Mapping[str, Any]]]


def _settings_cache_config() -> Mapping[str, Any]:
    return get_settings().CACHE_CONFIG


class CacheHeaderProvider:
    """
    Computes the Cache-Control header value.

    The configuration source is read on every call; the merged result is
    never cached.
    """

    def __init__(self, config_source: Optional[ConfigSource] = None):
        self._config_source = config_source or _settings_cache_config

    def get_config(self) -> CacheConfig:
        return CacheConfig.merged(self._config_source())

    def get_cache_header(self) -> str:
        config = self.get_config()
        logger.debug(
            "Cache header configuration",
            extra={"max_age": config.max_age, "s_max_age": config.s_max_age},
        )
        return config.header_value()


class HostRegistry:
    """
    Durable record of every hostname that served this deployment.

    Hosts under the function-hosting suffix are aliases of the default
    domain, so registering one also refreshes the default domain.
    """

    def __init__(
        self,
        repository: HostRegistryRepository,
        default_domain: str,
        functions_domain_suffix: str = ".cloudfunctions.net",
    ):
        self.repository = repository
        self.default_domain = default_domain
        self.functions_domain_suffix = functions_domain_suffix

    def hosts_for(self, host: str) -> List[str]:
        """Hosts that a request to ``host`` must register."""
        hosts = [host]
        if (
            self.functions_domain_suffix
            and host.endswith(self.functions_domain_suffix)
            and self.default_domain not in hosts
        ):
            hosts.append(self.default_domain)
        return hosts

    async def register(self, host: str) -> None:
        """
        Upsert ``host`` (and its alias, if any) concurrently.

        Completes once every upsert has been acknowledged. If any upsert
        failed, the first failure is raised after all have settled.
        """
        with tracer.start_as_current_span("host_registry.register") as span:
            span.set_attribute("host", host)
            hosts = self.hosts_for(host)

            for current_host in hosts:
                logger.info(f"Register request host={current_host}")

            results = await asyncio.gather(
                *(
                    self.repository.upsert(HostKey.for_host(current_host), current_host)
                    for current_host in hosts
                ),
                return_exceptions=True,
            )

            errors = [result for result in results if isinstance(result, BaseException)]
            if errors:
                span.set_status(trace.Status(trace.StatusCode.ERROR, str(errors[0])))
                raise errors[0]

    async def list_all(self) -> List[CachedDomain]:
        """Snapshot of the registry at call time."""
        return await self.repository.list_all()


class _CacheBroadcaster:
    """Expands a path and calls the CDN for every (host, variant) pair."""

    method: CdnMethod

    def __init__(self, registry: HostRegistry, gateway: CdnGateway):
        self.registry = registry
        self.gateway = gateway

    def _call(self, host: str, path: str):
        if self.method is CdnMethod.PURGE:
            return self.gateway.purge_one(host, path)
        return self.gateway.warm_one(host, path)

    async def _broadcast(self, path: str) -> FanOutResult:
        variants = expand_path(path)
        result = FanOutResult(path=path, method=self.method, variants=variants)

        try:
            domains = await self.registry.list_all()
        except Exception as e:
            logger.error(
                f"Could not read host registry, skipping {self.method.value} of {path}: {e}"
            )
            return result

        pairs = [
            (cached.domain, variant)
            for cached in domains
            for variant in sorted(variants)
        ]
        responses = await asyncio.gather(
            *(self._call(host, variant) for host, variant in pairs),
            return_exceptions=True,
        )

        for (host, variant), response in zip(pairs, responses):
            if isinstance(response, BaseException):
                response = CdnOutcome(
                    host=host,
                    path=variant,
                    method=self.method,
                    error=f"{type(response).__name__}: {response}",
                )
            result.outcomes.append(response)

        logger.info(
            f"{self.method.value} {path} finished",
            extra=result.summary(),
        )
        return result


class CacheInvalidator(_CacheBroadcaster):
    """Purges every variant of a path from every registered host."""

    method = CdnMethod.PURGE

    async def purge(self, path: str) -> FanOutResult:
        """
        Broadcast PURGE for ``path``.

        Completes once every call has resolved. Never fails.
        """
        with tracer.start_as_current_span("cache.purge") as span:
            span.set_attribute("path", path)
            result = await self._broadcast(path)
            span.set_attribute("calls", result.total)
            span.set_attribute("failed", result.failed)
            return result


class CacheWarmer(_CacheBroadcaster):
    """Re-fetches every variant of a path on every registered host."""

    method = CdnMethod.GET

    def __init__(
        self,
        registry: HostRegistry,
        gateway: CdnGateway,
        default_delay: float = DEFAULT_HEAT_DELAY_MS / 1000,
    ):
        super().__init__(registry, gateway)
        self.default_delay = default_delay

    async def heat(self, path: str, delay: Optional[float] = None) -> FanOutResult:
        """
        Wait ``delay`` seconds, then broadcast GET for ``path``.

        The wait lets the origin regenerate the content first and does not
        block other work on the event loop.
        """
        delay = self.default_delay if delay is None else delay
        logger.info(f"Heat cache path={path}, delay={delay} seconds")
        await asyncio.sleep(delay)

        with tracer.start_as_current_span("cache.heat") as span:
            span.set_attribute("path", path)
            span.set_attribute("delay_seconds", delay)
            result = await self._broadcast(path)
            span.set_attribute("calls", result.total)
            span.set_attribute("failed", result.failed)
            return result
