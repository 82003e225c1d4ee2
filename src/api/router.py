from fastapi import APIRouter

from src.api.classroom.router import router as classroom_router
from src.api.health.router import router as health_router
from src.api.institution.router import router as institution_router

# V1 API router
v1_router = APIRouter(prefix="/v1")

# Include domain routers
v1_router.include_router(institution_router)
v1_router.include_router(classroom_router)

# Main API router
api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(v1_router)
