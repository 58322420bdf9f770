"""HTTP routes."""

from fastapi import APIRouter

from app.api.routes import health, opportunities, promises

router = APIRouter()
router.include_router(health.router, tags=["health"])
router.include_router(opportunities.router, prefix="/api/opportunities", tags=["opportunities"])
router.include_router(promises.router, prefix="/api/promises", tags=["promises"])
