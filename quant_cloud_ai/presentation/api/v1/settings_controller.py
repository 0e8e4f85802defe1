"""Settings API controller — runtime provider configuration."""

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from quant_cloud_ai.application.services import ProviderService
from quant_cloud_ai.application.services.settings_service import (
    get_provider_settings,
    update_provider_settings,
)
from quant_cloud_ai.config import OVERRIDABLE_KEYS, PLATFORM_DASHBOARD_URLS
from quant_cloud_ai.infrastructure.dependencies import get_provider_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/settings", tags=["settings"])


# ── Schemas ──────────────────────────────────────────────────────────

class ProviderSettingsResponse(BaseModel):
    settings: dict[str, Any]
    platforms: list[str]


class ProviderSettingsUpdate(BaseModel):
    settings: dict[str, Any]


class AvailableModel(BaseModel):
    id: str
    name: str


# ── Endpoints ────────────────────────────────────────────────────────

@router.get("", response_model=ProviderSettingsResponse)
async def get_provider_config():
    return ProviderSettingsResponse(
        settings=get_provider_settings(),
        platforms=sorted(PLATFORM_DASHBOARD_URLS),
    )


@router.put("", response_model=ProviderSettingsResponse)
async def put_provider_config(body: ProviderSettingsUpdate):
    """Update runtime settings. Only overridable keys are accepted."""
    unknown = set(body.settings) - OVERRIDABLE_KEYS
    if unknown:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Unknown setting keys: {', '.join(sorted(unknown))}",
        )

    platform = body.settings.get("platform")
    if platform is not None and platform not in PLATFORM_DASHBOARD_URLS:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Unknown platform: {platform}",
        )

    return ProviderSettingsResponse(
        settings=update_provider_settings(body.settings),
        platforms=sorted(PLATFORM_DASHBOARD_URLS),
    )


@router.get("/models", response_model=list[AvailableModel])
async def get_available_models(
    operation_type: str | None = None,
    provider_service: ProviderService = Depends(get_provider_service),
):
    """List models for the configuration screen, optionally for one operation type."""
    models = await provider_service.get_configured_models(operation_type)
    return [AvailableModel(id=model_id, name=name) for model_id, name in models.items()]


class ModelLimitsResponse(BaseModel):
    model_id: str
    max_input_tokens: int
    max_output_tokens: int


@router.get("/models/{model_id}/limits", response_model=ModelLimitsResponse)
async def get_model_limits(
    model_id: str,
    provider_service: ProviderService = Depends(get_provider_service),
):
    return ModelLimitsResponse(
        model_id=model_id,
        max_input_tokens=await provider_service.get_max_input_tokens(model_id),
        max_output_tokens=await provider_service.get_max_output_tokens(model_id),
    )
