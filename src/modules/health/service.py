import asyncio
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Literal

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class HealthCheckResult:
    """Result of a health check."""

    service: str
    status: Literal["healthy", "unhealthy", "degraded"]
    connected: bool
    details: dict
    error: str | None = None


@dataclass
class OverallHealthStatus:
    """Overall health status with individual service results."""

    status: Literal["healthy", "degraded", "unhealthy"]
    services: dict[str, HealthCheckResult]
    timestamp: str


class HealthService:
    """Checks the components this service owns.

    The User service is not checked: it is only needed for institution creation
    and its failures are already handled there.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def check_database_health(self) -> HealthCheckResult:
        try:
            async with self.session_factory() as session:
                result = await session.execute(text("SELECT 1 as test"))
                test_value = result.scalar()

            return HealthCheckResult(
                service="database",
                status="healthy",
                connected=True,
                details={"test_query_result": test_value},
            )
        except Exception as e:
            logger.error(f"Database health check error: {e}")
            return HealthCheckResult(
                service="database",
                status="unhealthy",
                connected=False,
                details={},
                error=str(e),
            )

    async def run_all_checks(self) -> OverallHealthStatus:
        results = await asyncio.gather(self.check_database_health())

        services = {result.service: result for result in results}
        overall_status: Literal["healthy", "degraded", "unhealthy"] = "healthy"
        if any(result.status == "unhealthy" for result in results):
            overall_status = "unhealthy"
        elif any(result.status == "degraded" for result in results):
            overall_status = "degraded"

        return OverallHealthStatus(
            status=overall_status,
            services=services,
            timestamp=datetime.now(timezone.utc).isoformat(),
        )
