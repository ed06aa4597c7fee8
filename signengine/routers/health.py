"""
Health check endpoints.
"""
from fastapi import APIRouter, Depends

from signengine import __version__
from signengine.config import Settings, get_settings

router = APIRouter(tags=["health"])


def health_payload(settings: Settings) -> dict:
    return {
        "status": "healthy",
        "version": __version__,
        "environment": settings.environment,
        "storage": settings.storage_backend,
        "audit": settings.audit_backend,
    }


@router.get("/health")
async def health_check(settings: Settings = Depends(get_settings)):
    """Health check endpoint for Cloud Run."""
    return health_payload(settings)


@router.get("/api/health")
async def api_health_check(settings: Settings = Depends(get_settings)):
    """Health check under the API prefix, for clients behind a path-based proxy."""
    return health_payload(settings)
