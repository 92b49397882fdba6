"""
Cache Domain Entities

Registry entry for a hostname that has served this deployment's traffic.
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .value_objects import HostKey


@dataclass
class CachedDomain:
    """
    A hostname observed serving traffic.

    ``last_seen`` is milliseconds since the epoch as assigned by the store
    at write time. Entries are only ever created or refreshed.
    """

    domain: str
    last_seen: Optional[int] = None

    @property
    def key(self) -> HostKey:
        """Registry key for this entry."""
        return HostKey.for_host(self.domain)

    def to_record(self) -> Dict[str, Any]:
        """Serialize to the stored record shape."""
        return {"domain": self.domain, "lastSeen": self.last_seen}

    @classmethod
    def from_record(cls, record: Any) -> Optional["CachedDomain"]:
        """
        Build an entry from a stored record.

        Returns None for anything that is not a mapping with a non-empty
        string ``domain``.
        """
        if isinstance(record, (str, bytes)):
            try:
                record = json.loads(record)
            except ValueError:
                return None

        if not isinstance(record, dict):
            return None

        domain = record.get("domain")
        if not isinstance(domain, str) or not domain:
            return None

        last_seen = record.get("lastSeen")
        if not isinstance(last_seen, int) or isinstance(last_seen, bool):
            last_seen = None

        return cls(domain=domain, last_seen=last_seen)
