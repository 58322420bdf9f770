"""Liveness endpoint for load balancers."""

from fastapi import APIRouter

from app.schemas.health import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
def get_health() -> HealthResponse:
    """Return {"ok": true} while the process is serving requests."""
    return HealthResponse(ok=True)
