import time
import uuid

import structlog
from fastapi import Request

from src.utils.logger import get_logger

logger = get_logger(__name__)

# Health checks are not logged
UNLOGGED_PATH_PREFIX = "/health"


def client_address(request: Request) -> str | None:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        # First hop is the original client
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


async def logging_middleware(request: Request, call_next):
    if request.url.path.startswith(UNLOGGED_PATH_PREFIX):
        return await call_next(request)

    start_time = time.perf_counter()
    structlog.contextvars.clear_contextvars()
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    structlog.contextvars.bind_contextvars(
        request_id=request_id,
        method=request.method,
        path=request.url.path,
        ip_address=client_address(request),
    )

    try:
        response = await call_next(request)
    except Exception:
        logger.exception(
            "request failed",
            duration_ms=int((time.perf_counter() - start_time) * 1000),
        )
        raise

    response.headers["X-Request-ID"] = request_id
    log = logger.warning if response.status_code >= 500 else logger.info
    log(
        "request",
        status_code=response.status_code,
        duration_ms=int((time.perf_counter() - start_time) * 1000),
    )
    return response
