"""
Unit tests for the CDN client.

Uses httpx.MockTransport so no network traffic is generated.
"""

import asyncio

import httpx
import pytest

from cdnsync.core.config import Settings
from cdnsync.domain.cache.value_objects import CdnMethod
from cdnsync.infrastructure.cdn.client import CdnClient


def make_client(handler) -> CdnClient:
    return CdnClient(Settings(), transport=httpx.MockTransport(handler))


class TestCdnClient:
    """Test CdnClient requests and outcomes."""

    @pytest.mark.asyncio
    async def test_purge_request_shape(self):
        """Test PURGE goes to the host over HTTPS with the exact path."""
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200)

        async with make_client(handler) as client:
            outcome = await client.purge_one("a.com", "/about/")

        request = seen[0]
        assert request.method == "PURGE"
        assert request.url.scheme == "https"
        assert request.url.host == "a.com"
        assert request.url.path == "/about/"
        assert request.headers["host"] == "a.com"
        assert request.content == b""
        assert outcome.method is CdnMethod.PURGE
        assert outcome.status_code == 200
        assert outcome.ok is True

    @pytest.mark.asyncio
    async def test_warm_uses_get(self):
        """Test warm issues GET."""
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.method)
            return httpx.Response(200, text="<html></html>")

        async with make_client(handler) as client:
            outcome = await client.warm_one("a.com", "/x.html")

        assert seen == ["GET"]
        assert outcome.method is CdnMethod.GET

    def test_url_uses_configured_port(self):
        """Test URLs carry the configured CDN port."""
        client = CdnClient(
            Settings(CDN_PORT=8443),
            transport=httpx.MockTransport(lambda r: httpx.Response(200)),
        )
        assert client.build_url("a.com", "/x") == "https://a.com:8443/x"

    @pytest.mark.asyncio
    async def test_non_success_status_is_recorded(self):
        """Test non-2xx statuses are returned, not raised."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503)

        async with make_client(handler) as client:
            outcome = await client.purge_one("a.com", "/x.html")

        assert outcome.status_code == 503
        assert outcome.reason == "Service Unavailable"
        assert outcome.ok is False
        assert outcome.error is None

    @pytest.mark.asyncio
    async def test_connection_error_is_recorded(self):
        """Test transport errors become outcomes with the error text."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with make_client(handler) as client:
            outcome = await client.warm_one("down.com", "/x.html")

        assert outcome.status_code is None
        assert outcome.error.startswith("ConnectError")
        assert outcome.ok is False

    @pytest.mark.asyncio
    async def test_unexpected_error_is_recorded(self):
        """Test any other exception is also contained."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise RuntimeError("boom")

        async with make_client(handler) as client:
            outcome = await client.purge_one("a.com", "/x.html")

        assert outcome.error == "RuntimeError: boom"

    @pytest.mark.asyncio
    async def test_stalled_edges_do_not_block_other_calls(self):
        """Test more stalled calls than httpx's default pool size leave others free."""
        stalled_count = 120
        release = asyncio.Event()
        arrived = asyncio.Event()
        seen = []

        async def handle(reader, writer):
            request_line = await reader.readline()
            while (await reader.readline()) not in (b"\r\n", b""):
                pass
            if b"/stall" in request_line:
                seen.append(request_line)
                if len(seen) == stalled_count:
                    arrived.set()
                await release.wait()
            writer.write(
                b"HTTP/1.1 200 OK\r\nContent-Length: 0\r\nConnection: close\r\n\r\n"
            )
            await writer.drain()
            writer.close()

        server = await asyncio.start_server(handle, "127.0.0.1", 0)
        port = server.sockets[0].getsockname()[1]
        client = CdnClient(Settings(CDN_SCHEME="http", CDN_PORT=port))

        stalled = [
            asyncio.create_task(client.purge_one("127.0.0.1", f"/stall/{i}"))
            for i in range(stalled_count)
        ]
        try:
            await asyncio.wait_for(arrived.wait(), 10)

            outcome = await asyncio.wait_for(
                client.purge_one("127.0.0.1", "/fresh.html"), 5
            )

            assert outcome.status_code == 200
            assert all(not task.done() for task in stalled)
        finally:
            release.set()
            await asyncio.gather(*stalled)
            await client.close()
            server.close()
            await server.wait_closed()
