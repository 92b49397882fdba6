"""
Cache administration endpoints.

Registry inspection, explicit host registration, and manual purge/heat
for operators (for example to rewarm a site after a theme swap).
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
import structlog

from ...domain.cache.value_objects import CacheConfigError, CachePath
from ...infrastructure.redis.exceptions import RedisException, RedisHTTPException
from ...services.cache.cache_manager import CacheManager
from ..dependencies import cache_manager_provider

logger = structlog.get_logger(__name__)
router = APIRouter(prefix="/cache", tags=["cache"])


class HostRegistration(BaseModel):
    host: str = Field(..., min_length=1, description="Hostname as received")


class PathRequest(BaseModel):
    path: str = Field(..., description="Absolute URL path")


class HeatRequest(PathRequest):
    delay_ms: Optional[int] = Field(
        None, ge=0, description="Settle window before warming; default when omitted"
    )


class CachedDomainResponse(BaseModel):
    domain: str
    last_seen: Optional[int] = None


def _validated_path(path: str) -> str:
    try:
        return CachePath(path).value
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.get("/domains", response_model=List[CachedDomainResponse])
async def list_domains(
    manager: CacheManager = Depends(cache_manager_provider),
) -> List[CachedDomainResponse]:
    """Every host currently in the registry."""
    try:
        domains = await manager.registry.list_all()
    except RedisException as e:
        raise RedisHTTPException(e)

    return [
        CachedDomainResponse(domain=cached.domain, last_seen=cached.last_seen)
        for cached in domains
    ]


@router.post("/hosts", status_code=status.HTTP_202_ACCEPTED)
async def register_host(
    registration: HostRegistration,
    manager: CacheManager = Depends(cache_manager_provider),
) -> Dict[str, Any]:
    """Explicitly register a host."""
    registered = await manager.dispatcher.register_host(registration.host)
    return {"host": registration.host, "registered": registered}


@router.post("/purge")
async def purge(
    request: PathRequest,
    manager: CacheManager = Depends(cache_manager_provider),
) -> Dict[str, Any]:
    """Purge a path from every registered host."""
    result = await manager.invalidator.purge(_validated_path(request.path))
    return result.summary()


@router.post("/heat")
async def heat(
    request: HeatRequest,
    manager: CacheManager = Depends(cache_manager_provider),
) -> Dict[str, Any]:
    """Warm a path on every registered host after the settle window."""
    delay = None if request.delay_ms is None else request.delay_ms / 1000
    result = await manager.warmer.heat(_validated_path(request.path), delay)
    return result.summary()


@router.get("/header")
async def cache_header(
    manager: CacheManager = Depends(cache_manager_provider),
) -> Dict[str, str]:
    """Current Cache-Control value."""
    try:
        return {"cache_control": manager.header_provider.get_cache_header()}
    except CacheConfigError as e:
        logger.error("Invalid cache configuration", error=str(e))
        raise HTTPException(status_code=500, detail=str(e))
