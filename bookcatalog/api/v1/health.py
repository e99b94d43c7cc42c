"""
Health check endpoints
"""
from datetime import datetime
from typing import Any, Dict

from fastapi import APIRouter

from bookcatalog.core.config import settings
from bookcatalog.schemas.common import HealthCheckResponse

router = APIRouter()


@router.get("/health", response_model=HealthCheckResponse)
async def health_check() -> HealthCheckResponse:
    """Basic health check"""
    return HealthCheckResponse(
        status="ok",
        timestamp=datetime.utcnow().isoformat(),
        version=settings.VERSION,
        environment=settings.ENVIRONMENT,
        catalog_api=settings.catalog_api_url,
    )


@router.get("/health/live", response_model=Dict[str, Any])
async def liveness_probe() -> Dict[str, Any]:
    """Kubernetes liveness probe"""
    return {"status": "ok", "timestamp": datetime.utcnow().isoformat()}
