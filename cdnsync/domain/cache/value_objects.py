"""
Cache Value Objects

Immutable value objects for the CDN cache domain.
Covers cacheable paths and their variants, registry keys, header
configuration, and the outcome of individual CDN calls.
"""

import hashlib
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, FrozenSet, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ...constants import INDEX_DOCUMENT


class CdnMethod(str, Enum):
    """HTTP methods used against CDN edges."""

    PURGE = "PURGE"
    GET = "GET"


class CacheConfigError(ValueError):
    """Raised when cache header configuration cannot be applied."""


@dataclass(frozen=True)
class CachePath:
    """
    Absolute URL path of a cacheable resource.

    A CDN may cache an index document under its explicit filename and under
    the implied directory form, with and without trailing slash. Every form is
    a distinct cache key.
    """

    value: str

    def __post_init__(self) -> None:
        """Validate path format."""
        if not self.value:
            raise ValueError("Cache path cannot be empty")
        if not self.value.startswith("/"):
            raise ValueError(f"Cache path must be absolute: {self.value}")

    def variants(self) -> FrozenSet[str]:
        """Return every CDN-cacheable form of this path."""
        return expand_path(self.value)

    def __str__(self) -> str:
        return self.value


def expand_path(path: str) -> FrozenSet[str]:
    """
    Expand a path into its set of CDN-cacheable variants.

    "/about/index.html" -> {"/about/index.html", "/about", "/about/"}
    Anything else maps to itself.
    """
    if path.endswith("/" + INDEX_DOCUMENT):
        directory = path[: -len(INDEX_DOCUMENT)]
        return frozenset({path, directory[:-1], directory})
    return frozenset({path})


@dataclass(frozen=True)
class HostKey:
    """Registry key of a host: lowercase hex SHA-256 of the hostname."""

    value: str

    @classmethod
    def for_host(cls, host: str) -> "HostKey":
        """Create key for hostname as received."""
        if not host:
            raise ValueError("Host cannot be empty")
        return cls(hashlib.sha256(host.encode("utf-8")).hexdigest().lower())

    def __str__(self) -> str:
        return self.value


class CacheConfig(BaseModel):
    """Cache-Control lifetimes, in seconds."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    max_age: int = Field(default=600, ge=0, description="Browser cache lifetime")
    s_max_age: int = Field(
        default=31536000, ge=0, description="Shared (CDN) cache lifetime"
    )

    @classmethod
    def merged(cls, overrides: Optional[Mapping[str, Any]] = None) -> "CacheConfig":
        """Merge overrides shallowly over defaults. Unknown keys are ignored."""
        data = dict(cls().model_dump())
        data.update(overrides or {})
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise CacheConfigError(f"Invalid cache configuration: {e}") from e

    def header_value(self) -> str:
        """Render the Cache-Control header value."""
        return f"public, max-age={self.max_age}, s-maxage={self.s_max_age}"


@dataclass(frozen=True)
class CdnOutcome:
    """
    Result of a single CDN call.

    Recorded for observability only. A call that never received a response
    carries the error text instead of a status code.
    """

    host: str
    path: str
    method: CdnMethod
    status_code: Optional[int] = None
    reason: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status_code is not None and 200 <= self.status_code < 300

    def to_dict(self) -> dict:
        return {
            "host": self.host,
            "path": self.path,
            "method": self.method.value,
            "status_code": self.status_code,
            "reason": self.reason,
            "error": self.error,
        }


@dataclass
class FanOutResult:
    """Aggregate of one purge or heat broadcast."""

    path: str
    method: CdnMethod
    variants: FrozenSet[str] = frozenset()
    outcomes: List[CdnOutcome] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def succeeded(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.ok)

    @property
    def failed(self) -> int:
        return self.total - self.succeeded

    def summary(self) -> dict:
        """Summary for logs and API responses."""
        return {
            "path": self.path,
            "method": self.method.value,
            "variants": sorted(self.variants),
            "total": self.total,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "failures": [
                outcome.to_dict() for outcome in self.outcomes if not outcome.ok
            ],
        }
