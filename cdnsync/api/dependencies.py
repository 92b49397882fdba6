from fastapi import Request

from ..services.cache.cache_manager import CacheManager
from ..services.cache.event_dispatcher import CacheEventDispatcher


def cache_manager_provider(request: Request) -> CacheManager:
    return request.app.state.cache_manager


def dispatcher_provider(request: Request) -> CacheEventDispatcher:
    return request.app.state.cache_manager.dispatcher
