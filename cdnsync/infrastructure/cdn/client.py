"""
CDN Client

Issues single PURGE or GET requests against one CDN host.

Every call resolves to a ``CdnOutcome``; non-success statuses and transport
errors are logged and returned, never raised. No timeout is applied, so a
stalled connection stalls only its own call.
"""

from typing import Optional

import httpx
import structlog

from ...core.config import Settings, get_settings
from ...domain.cache.repository_interfaces import CdnGateway
from ...domain.cache.value_objects import CdnMethod, CdnOutcome

logger = structlog.get_logger(__name__)

# No pool cap: every in-flight (host, variant) call holds its own connection.
CDN_POOL_LIMITS = httpx.Limits(max_connections=None, max_keepalive_connections=None)


class CdnClient(CdnGateway):
    """HTTP client for per-host CDN purge and warm calls."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = settings or get_settings()
        self.scheme = settings.CDN_SCHEME
        self.port = settings.CDN_PORT
        self._client = httpx.AsyncClient(
            transport=transport,
            timeout=None,
            limits=CDN_POOL_LIMITS,
            follow_redirects=False,
        )

    def build_url(self, host: str, path: str) -> str:
        return f"{self.scheme}://{host}:{self.port}{path}"

    async def purge_one(self, host: str, path: str) -> CdnOutcome:
        """Ask ``host`` to evict its cached copy of ``path``."""
        return await self._send(CdnMethod.PURGE, host, path)

    async def warm_one(self, host: str, path: str) -> CdnOutcome:
        """Fetch ``path`` through ``host`` so the edge caches a fresh copy."""
        return await self._send(CdnMethod.GET, host, path)

    async def _send(self, method: CdnMethod, host: str, path: str) -> CdnOutcome:
        log = logger.bind(method=method.value, host=host, path=path)
        log.info("CDN request started")

        try:
            response = await self._client.request(
                method.value, self.build_url(host, path)
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            log.warning("CDN request failed", error=str(e))
            return CdnOutcome(
                host=host, path=path, method=method, error=f"{type(e).__name__}: {e}"
            )
        except Exception as e:
            log.exception("CDN request raised unexpectedly")
            return CdnOutcome(
                host=host, path=path, method=method, error=f"{type(e).__name__}: {e}"
            )

        log.info(
            "CDN request finished",
            status_code=response.status_code,
            reason=response.reason_phrase,
        )
        return CdnOutcome(
            host=host,
            path=path,
            method=method,
            status_code=response.status_code,
            reason=response.reason_phrase,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "CdnClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
