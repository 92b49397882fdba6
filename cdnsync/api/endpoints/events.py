"""
Content event webhooks.

The content, theme and storage sources post their change events here.
Reactions run in the background and the webhook always answers 202.
"""

from typing import Dict

from fastapi import APIRouter, BackgroundTasks, Depends, status
import structlog

from ...domain.content.events import ContentChange, StorageObject, ThemeChange
from ...services.cache.event_dispatcher import CacheEventDispatcher
from ..dependencies import dispatcher_provider

logger = structlog.get_logger(__name__)
router = APIRouter(prefix="/events", tags=["events"])

ACCEPTED = {"status": "accepted"}


@router.post("/content", status_code=status.HTTP_202_ACCEPTED)
async def content_written(
    change: ContentChange,
    background_tasks: BackgroundTasks,
    dispatcher: CacheEventDispatcher = Depends(dispatcher_provider),
) -> Dict[str, str]:
    """A content record was created, updated or deleted."""
    background_tasks.add_task(dispatcher.on_content_write, change)
    return ACCEPTED


@router.post("/theme", status_code=status.HTTP_202_ACCEPTED)
async def theme_changed(
    change: ThemeChange,
    background_tasks: BackgroundTasks,
    dispatcher: CacheEventDispatcher = Depends(dispatcher_provider),
) -> Dict[str, str]:
    """The site theme was set or swapped."""
    logger.info("Theme change received", before=change.before, after=change.after)
    background_tasks.add_task(dispatcher.on_theme_change, change)
    return ACCEPTED


@router.post("/storage/finalize", status_code=status.HTTP_202_ACCEPTED)
async def storage_finalized(
    obj: StorageObject,
    background_tasks: BackgroundTasks,
    dispatcher: CacheEventDispatcher = Depends(dispatcher_provider),
) -> Dict[str, str]:
    """A storage object was written."""
    background_tasks.add_task(dispatcher.on_storage_finalize, obj)
    return ACCEPTED


@router.post("/storage/delete", status_code=status.HTTP_202_ACCEPTED)
async def storage_deleted(
    obj: StorageObject,
    background_tasks: BackgroundTasks,
    dispatcher: CacheEventDispatcher = Depends(dispatcher_provider),
) -> Dict[str, str]:
    """A storage object was deleted."""
    background_tasks.add_task(dispatcher.on_storage_delete, obj)
    return ACCEPTED
