"""Health check endpoints."""

from fastapi import APIRouter

from swapengine.chains import get_supported_chain_ids
from swapengine.config import get_settings

router = APIRouter()


@router.get("/health")
async def health_check():
    """Basic health check endpoint."""
    return {"status": "healthy", "service": "swapengine"}


@router.get("/health/detailed")
async def detailed_health():
    """Detailed health check with configuration info."""
    settings = get_settings()
    return {
        "status": "healthy",
        "service": "swapengine",
        "version": "0.1.0",
        "supported_chains": get_supported_chain_ids(),
        "config": settings.get_safe_dict(),
    }
