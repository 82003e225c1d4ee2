"""Health check endpoints for monitoring."""

from fastapi import APIRouter

from src.api.core.dependencies import SessionFactoryDep
from src.modules.health.service import HealthService, OverallHealthStatus

router = APIRouter(prefix="/health", tags=["health"])


@router.get("/")
async def health_check(session_factory: SessionFactoryDep) -> OverallHealthStatus:
    """Health check for the components owned by this service."""
    health_service = HealthService(session_factory)
    return await health_service.run_all_checks()


@router.get("/liveness")
async def liveness_check():
    """Simple liveness check - indicates if service is running."""
    return {"status": "alive", "service": "institution-service"}
