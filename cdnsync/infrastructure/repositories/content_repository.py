"""
In-memory content repository.

Stands in for the document and theme-asset stores when the service runs
without them attached, and backs the tests.
"""

from collections import defaultdict
from typing import Dict, Iterable, List, Optional

from ...domain.content.events import ContentSnapshot, StorageObject
from ...domain.content.repository_interfaces import ContentRepository


class InMemoryContentRepository(ContentRepository):
    """Documents and theme files held in process memory."""

    def __init__(
        self,
        documents: Optional[Iterable[ContentSnapshot]] = None,
        theme_files: Optional[Dict[str, Iterable[str]]] = None,
    ):
        self._documents: List[ContentSnapshot] = list(documents or [])
        self._theme_files: Dict[str, List[StorageObject]] = defaultdict(list)
        for theme, names in (theme_files or {}).items():
            for name in names:
                self.add_theme_file(theme, name)

    def add_document(self, document: ContentSnapshot) -> None:
        self._documents.append(document)

    def add_theme_file(self, theme: str, name: str) -> None:
        self._theme_files[theme].append(StorageObject(name=name))

    async def get_all_documents(self) -> List[ContentSnapshot]:
        return list(self._documents)

    async def get_theme_files(self, theme: str) -> List[StorageObject]:
        return list(self._theme_files.get(theme, []))
