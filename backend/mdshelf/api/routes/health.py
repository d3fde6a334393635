"""Health check — unauthenticated liveness endpoints."""

from fastapi import APIRouter

from mdshelf import __version__
from mdshelf.schemas.system import HealthResponse
from mdshelf.services import get_scheduler

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Lightweight connectivity check."""
    scheduler = get_scheduler()
    return HealthResponse(
        version=__version__,
        retention_enabled=scheduler is not None and scheduler.running,
    )


@router.get("/ping")
async def ping():
    """Ultra-lightweight ping."""
    return {"status": "ok"}
