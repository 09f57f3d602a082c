"""API v1 router aggregation."""

from datetime import UTC, datetime

from fastapi import APIRouter

from app.api.v1.ai import router as ai_router
from app.api.v1.auth import router as auth_router
from app.api.v1.documents import router as documents_router
from app.api.v1.features import router as features_router
from app.api.v1.projects import router as projects_router
from app.api.v1.tasks import router as tasks_router

api_router = APIRouter()

# Include all routers
api_router.include_router(auth_router, prefix="/auth", tags=["Authentication"])
api_router.include_router(documents_router, prefix="/docs", tags=["Documents"])
api_router.include_router(tasks_router, prefix="/projects", tags=["Tasks"])
api_router.include_router(projects_router, prefix="/projects", tags=["Projects"])
api_router.include_router(features_router, prefix="/features", tags=["Features"])
api_router.include_router(ai_router, prefix="/ai", tags=["AI"])


@api_router.get("/health", tags=["Health"])
async def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "OK", "timestamp": datetime.now(UTC).isoformat()}
