"""V1 API router — aggregates all v1 endpoint routers."""

from fastapi import APIRouter

from quant_cloud_ai.presentation.api.v1.endpoints.health import router as health_router
from quant_cloud_ai.presentation.api.v1.endpoints.chat import router as chat_router
from quant_cloud_ai.presentation.api.v1.endpoints.generation import router as generation_router
from quant_cloud_ai.presentation.api.v1.oauth_controller import router as oauth_router
from quant_cloud_ai.presentation.api.v1.settings_controller import router as settings_router
from quant_cloud_ai.presentation.api.v1.vector_controller import router as vector_router

router = APIRouter(prefix="/v1")
router.include_router(health_router)
router.include_router(chat_router)
router.include_router(generation_router)
router.include_router(oauth_router)
router.include_router(settings_router)
router.include_router(vector_router)
