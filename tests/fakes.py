"""
Test doubles shared across test modules.
"""

from typing import List, Optional, Set, Tuple

from cdnsync.domain.cache.repository_interfaces import CdnGateway
from cdnsync.domain.cache.value_objects import CdnMethod, CdnOutcome


class RecordingGateway(CdnGateway):
    """CDN gateway that records calls instead of sending them."""

    def __init__(self, failing_hosts: Optional[Set[str]] = None, status_code: int = 200):
        self.calls: List[Tuple[str, str, str]] = []
        self.failing_hosts = failing_hosts or set()
        self.status_code = status_code

    async def purge_one(self, host: str, path: str) -> CdnOutcome:
        return self._record(CdnMethod.PURGE, host, path)

    async def warm_one(self, host: str, path: str) -> CdnOutcome:
        return self._record(CdnMethod.GET, host, path)

    def _record(self, method: CdnMethod, host: str, path: str) -> CdnOutcome:
        self.calls.append((method.value, host, path))
        if host in self.failing_hosts:
            return CdnOutcome(
                host=host, path=path, method=method, error="ConnectError: refused"
            )
        return CdnOutcome(
            host=host,
            path=path,
            method=method,
            status_code=self.status_code,
            reason="OK" if self.status_code == 200 else "Error",
        )

    def calls_for(self, method: str) -> List[Tuple[str, str]]:
        return [(host, path) for m, host, path in self.calls if m == method]
