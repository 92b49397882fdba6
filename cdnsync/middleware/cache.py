"""
Cache Host Middleware

Every inbound request reveals a hostname the CDN may be caching under.
The host is registered in the background so that future purges and warms
reach it, and successful GET responses get the configured Cache-Control.
"""

from typing import Callable

import structlog
from starlette.background import BackgroundTask
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from ..domain.cache.value_objects import CacheConfigError

logger = structlog.get_logger(__name__)


def request_host(request: Request) -> str:
    """Host header without port."""
    host = request.headers.get("host", "")
    if host.startswith("["):
        return host.split("]", 1)[0] + "]"
    return host.split(":", 1)[0]


class CacheHostMiddleware(BaseHTTPMiddleware):
    """Register request hosts and stamp Cache-Control on GET responses."""

    def __init__(self, app, exclude_prefixes=("/events", "/cache", "/health")):
        super().__init__(app)
        self.exclude_prefixes = tuple(exclude_prefixes)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        if request.url.path.startswith(self.exclude_prefixes):
            return response

        manager = request.app.state.cache_manager
        host = request_host(request)

        if host:
            registration = BackgroundTask(manager.dispatcher.register_host, host)
            if response.background is None:
                response.background = registration
            else:
                previous = response.background

                async def run_both() -> None:
                    await previous()
                    await registration()

                response.background = BackgroundTask(run_both)

        if (
            request.method == "GET"
            and 200 <= response.status_code < 300
            and "cache-control" not in response.headers
        ):
            try:
                response.headers["Cache-Control"] = (
                    manager.header_provider.get_cache_header()
                )
            except CacheConfigError as e:
                logger.error("Invalid cache configuration", error=str(e))

        return response
