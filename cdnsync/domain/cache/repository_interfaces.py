"""
Cache Repository Interfaces

Abstract repository interfaces following the Repository pattern.
Defines the contract for host registry persistence.
"""

from abc import ABC, abstractmethod
from typing import List

from .entities import CachedDomain
from .value_objects import CdnOutcome, HostKey


class HostRegistryRepository(ABC):
    """
    Abstract repository for the host registry.

    Writes are blind upserts keyed by ``HostKey``; the store assigns
    ``last_seen``. Entries are never deleted.
    """

    @abstractmethod
    async def upsert(self, key: HostKey, domain: str) -> None:
        """Create or refresh the entry for ``domain`` at ``key``."""
        pass

    @abstractmethod
    async def list_all(self) -> List[CachedDomain]:
        """Snapshot of every well-formed entry. No ordering guarantee."""
        pass


class CdnGateway(ABC):
    """
    Contract for single-host CDN calls.

    Implementations must resolve to an outcome for every call, including
    failed ones, rather than raising.
    """

    @abstractmethod
    async def purge_one(self, host: str, path: str) -> CdnOutcome:
        """Evict ``path`` from ``host``."""
        pass

    @abstractmethod
    async def warm_one(self, host: str, path: str) -> CdnOutcome:
        """Fetch ``path`` through ``host``."""
        pass
