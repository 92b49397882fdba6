"""
Content Repository Interfaces

Read-only view of the content store needed to invalidate a whole site.
"""

from abc import ABC, abstractmethod
from typing import List

from .events import ContentSnapshot, StorageObject


class ContentRepository(ABC):
    """Abstract access to documents and theme assets."""

    @abstractmethod
    async def get_all_documents(self) -> List[ContentSnapshot]:
        """Every existing content record."""
        pass

    @abstractmethod
    async def get_theme_files(self, theme: str) -> List[StorageObject]:
        """Every asset file belonging to ``theme``."""
        pass


def storage_public_path(name: str) -> str:
    """Default mapping from a storage object name to its public URL path."""
    return "/" + name.lstrip("/")
