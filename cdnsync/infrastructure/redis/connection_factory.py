"""
Redis Connection Factory

Connection management for the Redis-backed host registry.
Provides a shared connection pool with lazy initialization.
"""

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional
from urllib.parse import urlparse

from redis.asyncio import ConnectionPool, Redis
from redis.exceptions import (
    AuthenticationError as RedisAuthError,
    ConnectionError as RedisConnectionError,
    TimeoutError as RedisTimeoutError,
)

from ...core.config import Settings, get_settings
from .exceptions import RedisConfigurationException, RedisConnectionException

logger = logging.getLogger(__name__)


class RedisConnectionFactory:
    """
    Factory for creating and managing Redis connections.

    A single pool is shared by every registry operation. The pool is created
    on first use and verified with a PING.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self._settings = settings
        self._pool: Optional[ConnectionPool] = None
        self._initialized = False
        self._lock = asyncio.Lock()

    @property
    def settings(self) -> Settings:
        return self._settings or get_settings()

    async def initialize(self) -> None:
        """Create the connection pool and test it."""
        if self._initialized:
            return

        async with self._lock:
            if self._initialized:
                return

            try:
                parsed_url = urlparse(self.settings.REDIS_URL)
                connection_kwargs = {
                    "host": parsed_url.hostname or "localhost",
                    "port": parsed_url.port or 6379,
                    "username": parsed_url.username,
                    "password": parsed_url.password,
                    "encoding": "utf-8",
                    "decode_responses": True,
                    "socket_connect_timeout": self.settings.REDIS_CONNECTION_TIMEOUT,
                    "max_connections": self.settings.REDIS_MAX_CONNECTIONS,
                }

                pool = ConnectionPool(**connection_kwargs)
                await self._test_connection(pool)
                self._pool = pool

                self._initialized = True
                logger.info(
                    "Redis connection factory initialized",
                    extra={
                        "host": connection_kwargs["host"],
                        "port": connection_kwargs["port"],
                        "max_connections": connection_kwargs["max_connections"],
                    },
                )

            except RedisConnectionException:
                raise
            except Exception as e:
                logger.error(f"Failed to initialize Redis connection factory: {e}")
                raise RedisConfigurationException(
                    message=f"Redis connection factory initialization failed: {str(e)}",
                    original_error=e,
                ) from e

    async def _test_connection(self, pool: ConnectionPool) -> None:
        """Test connection pool with a ping."""
        try:
            redis_client = Redis(connection_pool=pool)
            await redis_client.ping()
            logger.debug("Redis connection test successful")
        except (RedisConnectionError, RedisAuthError, RedisTimeoutError) as e:
            raise RedisConnectionException(
                message="Redis connection test failed", original_error=e
            ) from e

    @asynccontextmanager
    async def get_connection(self):
        """
        Get a Redis client bound to the shared pool.

        Yields:
            Redis client instance

        Raises:
            RedisConnectionException: If the connection fails
        """
        await self.initialize()

        try:
            yield Redis(connection_pool=self._pool)
        except (RedisConnectionError, RedisAuthError, RedisTimeoutError) as e:
            logger.error(f"Redis connection error: {e}")
            raise RedisConnectionException(
                message=f"Redis connection failed: {str(e)}", original_error=e
            ) from e

    async def health_check(self) -> Dict[str, Any]:
        """Ping the store and report latency."""
        health_status: Dict[str, Any] = {"status": "unhealthy", "timestamp": time.time()}

        try:
            async with self.get_connection() as redis_client:
                start_time = time.time()
                await redis_client.ping()
                health_status["status"] = "healthy"
                health_status["response_time_ms"] = round(
                    (time.time() - start_time) * 1000, 2
                )
        except Exception as e:
            logger.warning(f"Redis health check failed: {e}")
            health_status["error"] = str(e)

        return health_status

    async def close(self) -> None:
        """Close the connection pool."""
        async with self._lock:
            if self._pool is not None:
                try:
                    await self._pool.disconnect()
                except Exception as e:
                    logger.warning(f"Error closing Redis pool: {e}")

            self._pool = None
            self._initialized = False
            logger.info("Redis connection factory closed")


# Global connection factory instance
redis_connection_factory = RedisConnectionFactory()
