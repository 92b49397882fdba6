"""
Redis Infrastructure Module

Connection pooling and exceptions for the Redis-backed host registry.
"""

from .connection_factory import RedisConnectionFactory, redis_connection_factory
from .exceptions import (
    RedisException,
    RedisConnectionException,
    RedisConfigurationException,
    RedisOperationException,
    RedisHTTPException,
)

__all__ = [
    "RedisConnectionFactory",
    "redis_connection_factory",
    "RedisException",
    "RedisConnectionException",
    "RedisConfigurationException",
    "RedisOperationException",
    "RedisHTTPException",
]
