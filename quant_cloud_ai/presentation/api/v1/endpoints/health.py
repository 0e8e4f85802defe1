"""Health check endpoint — no dependencies, always available."""

from fastapi import APIRouter

from quant_cloud_ai.config import get_settings

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check() -> dict:
    """Returns the application health and whether the provider is configured."""
    settings = get_settings()
    return {
        "status": "healthy",
        "version": settings.app_version,
        "environment": settings.app_env,
        "platform": settings.platform,
        "configured": bool(settings.access_token_key and settings.organization_id),
    }
