"""
Health check endpoints.
"""

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends

from ...core.config import get_settings
from ...services.cache.cache_manager import CacheManager
from ..dependencies import cache_manager_provider

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health_check() -> Dict[str, Any]:
    """Basic liveness for load balancers."""
    settings = get_settings()
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": settings.OTEL_SERVICE_NAME,
        "version": settings.OTEL_SERVICE_VERSION,
        "environment": settings.ENVIRONMENT,
    }


@router.get("/ready")
async def readiness_check(
    manager: CacheManager = Depends(cache_manager_provider),
) -> Dict[str, Any]:
    """Readiness including the host registry store."""
    return await manager.health_check()
