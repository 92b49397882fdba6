"""
Cache Event Dispatcher

Translates content, theme and storage events into purge and heat calls,
and feeds the host registry from inbound request traffic.

Every reaction is best effort: failures are logged and the reaction still
completes normally, so the invoking platform always sees success.
"""

import asyncio
import functools
from typing import Callable, List

import structlog

from ...constants import SITEMAP_PATH
from ...domain.cache.domain_services import CacheInvalidator, CacheWarmer, HostRegistry
from ...domain.cache.value_objects import FanOutResult
from ...domain.content.events import ContentChange, StorageObject, ThemeChange
from ...domain.content.repository_interfaces import (
    ContentRepository,
    storage_public_path,
)

logger = structlog.get_logger(__name__)


def best_effort(default: Callable[[], object] = list):
    """Log and swallow any exception raised by the wrapped reaction."""

    def decorator(reaction):
        @functools.wraps(reaction)
        async def wrapper(self, *args, **kwargs):
            try:
                return await reaction(self, *args, **kwargs)
            except Exception as e:
                logger.exception(
                    "Cache reaction failed", reaction=reaction.__name__, error=str(e)
                )
                return default()

        return wrapper

    return decorator


class CacheEventDispatcher:
    """Reactive entry points of the cache subsystem."""

    def __init__(
        self,
        registry: HostRegistry,
        invalidator: CacheInvalidator,
        warmer: CacheWarmer,
        content_repository: ContentRepository,
        public_path: Callable[[str], str] = storage_public_path,
    ):
        self.registry = registry
        self.invalidator = invalidator
        self.warmer = warmer
        self.content_repository = content_repository
        self.public_path = public_path

    @best_effort(default=lambda: False)
    async def register_host(self, host: str) -> bool:
        """Record that ``host`` served a request."""
        await self.registry.register(host)
        return True

    @best_effort()
    async def on_content_write(self, change: ContentChange) -> List[FanOutResult]:
        """
        Purge the old location and the sitemap, then heat the new location.

        Only the first path of each snapshot is used.
        """
        results: List[FanOutResult] = []

        before_path = change.before.primary_path if change.before else None
        if before_path:
            logger.info("Content changed, purging previous path", path=before_path)
            # Sitemap is purged only, never heated.
            results.extend(
                await asyncio.gather(
                    self.invalidator.purge(SITEMAP_PATH),
                    self.invalidator.purge(before_path),
                )
            )

        after_path = change.after.primary_path if change.after else None
        if after_path:
            results.append(await self.warmer.heat(after_path))

        return results

    @best_effort()
    async def on_theme_change(self, change: ThemeChange) -> List[FanOutResult]:
        """Purge every asset of the previous theme and every document."""
        if change.before is None:
            logger.info("Nothing to do when setting theme for the first time")
            return []

        previous_theme = change.before
        logger.info("Clearing cache for theme assets", theme=previous_theme)

        theme_files, documents = await asyncio.gather(
            self.content_repository.get_theme_files(previous_theme),
            self.content_repository.get_all_documents(),
        )

        paths = [self.public_path(theme_file.name) for theme_file in theme_files]
        paths.extend(
            document.primary_path for document in documents if document.primary_path
        )

        return list(await asyncio.gather(*(self.invalidator.purge(p) for p in paths)))

    @best_effort()
    async def on_storage_finalize(self, obj: StorageObject) -> List[FanOutResult]:
        """Purge then heat an updated storage object."""
        file_path = self.public_path(obj.name)
        logger.info("File updated", name=obj.name, path=file_path)

        purged = await self.invalidator.purge(file_path)
        heated = await self.warmer.heat(file_path)
        return [purged, heated]

    @best_effort()
    async def on_storage_delete(self, obj: StorageObject) -> List[FanOutResult]:
        """Purge a deleted storage object. Deleted files are never heated."""
        file_path = self.public_path(obj.name)
        logger.info("File deleted", name=obj.name, path=file_path)

        return [await self.invalidator.purge(file_path)]

