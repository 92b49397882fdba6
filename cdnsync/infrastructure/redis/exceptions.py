"""
Redis Infrastructure Exceptions

Store faults raised by the host registry backend. Each carries a stable
error code and a details mapping that the API layer returns as-is.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException


class RedisException(Exception):
    """Base class for host registry store faults."""

    error_code = "REDIS_ERROR"
    default_message = "Redis error"

    def __init__(
        self,
        message: Optional[str] = None,
        original_error: Optional[BaseException] = None,
        **details: Any,
    ):
        self.message = message or self.default_message
        self.details: Dict[str, Any] = {
            name: value for name, value in details.items() if value is not None
        }
        if original_error is not None:
            self.details["original_error"] = str(original_error)
            self.details["original_error_type"] = type(original_error).__name__
        super().__init__(self.message)


class RedisConnectionException(RedisException):
    """The store could not be reached or dropped the connection."""

    error_code = "REDIS_CONNECTION_ERROR"
    default_message = "Redis connection failed"


class RedisConfigurationException(RedisException):
    """The connection pool could not be built from the settings."""

    error_code = "REDIS_CONFIGURATION_ERROR"
    default_message = "Redis configuration is invalid"


class RedisOperationException(RedisException):
    """A registry command failed on a reachable store."""

    error_code = "REDIS_OPERATION_ERROR"

    def __init__(
        self,
        operation: str,
        key: Optional[str] = None,
        original_error: Optional[BaseException] = None,
    ):
        self.operation = operation
        super().__init__(
            f"Redis operation '{operation}' failed",
            original_error=original_error,
            operation=operation,
            key=key,
        )


class RedisHTTPException(HTTPException):
    """Registry fault surfaced on an operator endpoint."""

    def __init__(self, redis_exception: RedisException, status_code: int = 503):
        self.redis_exception = redis_exception
        super().__init__(
            status_code=status_code,
            detail={
                "error": redis_exception.error_code,
                "message": redis_exception.message,
                "details": redis_exception.details,
            },
        )
