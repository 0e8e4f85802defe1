"""Application service for the remote model catalog.

Model metadata changes rarely, so the list is cached per feature filter
for an hour. When the catalog cannot be fetched a small built-in list is
returned instead so configuration screens keep working offline.
"""

import logging
from typing import Any

from quant_cloud_ai.application.interfaces.cache_backend import CacheBackend
from quant_cloud_ai.config import Settings
from quant_cloud_ai.domain.entities import (
    FEATURE_CAPABILITIES,
    OPERATION_CAPABILITIES,
    ModelDescriptor,
    OperationType,
)
from quant_cloud_ai.domain.exceptions import QuantCloudError
from quant_cloud_ai.infrastructure.quant_cloud.dashboard_client import DashboardClient

logger = logging.getLogger(__name__)

CACHE_LIFETIME = 3600  # seconds

# Feature filters that get a cache entry; clear_cache() drops all of them.
CACHED_FEATURES = ("all", *FEATURE_CAPABILITIES)

FALLBACK_MODELS: list[dict[str, Any]] = [
    {
        "id": "amazon.nova-lite-v1:0",
        "name": "Amazon Nova Lite",
        "provider": "Amazon",
        "description": "Fast and cost-effective model",
        "contextWindow": 300000,
        "maxOutputTokens": 5000,
        "supportedFeatures": ["chat"],
    },
    {
        "id": "anthropic.claude-3-5-sonnet-20241022-v2:0",
        "name": "Claude 3.5 Sonnet v2",
        "provider": "Anthropic",
        "description": "Latest Claude model",
        "contextWindow": 200000,
        "maxOutputTokens": 8192,
        "supportedFeatures": ["chat"],
    },
    {
        "id": "amazon.titan-embed-text-v2:0",
        "name": "Titan Text Embeddings v2",
        "provider": "Amazon",
        "description": "Text embeddings",
        "contextWindow": 8192,
        "maxOutputTokens": 0,
        "supportedFeatures": ["embeddings"],
    },
    {
        "id": "amazon.nova-canvas-v1:0",
        "name": "Amazon Nova Canvas",
        "provider": "Amazon",
        "description": "Text to image generation",
        "contextWindow": 0,
        "maxOutputTokens": 0,
        "supportedFeatures": ["image_generation"],
    },
]


class ModelsService:
    """Fetches, caches and filters the list of available models."""

    def __init__(self, transport: DashboardClient, cache: CacheBackend, settings: Settings):
        self._transport = transport
        self._cache = cache
        self._namespace = settings.state_namespace

    def _cache_key(self, feature: str | None) -> str:
        return f"{self._namespace}:models:{feature or 'all'}"

    async def get_models(
        self, feature: str | None = None, bypass_cache: bool = False
    ) -> list[ModelDescriptor]:
        """Return the models supporting ``feature`` (all models when None).

        A cache hit makes no network call. ``bypass_cache`` forces a fetch
        and refreshes the cache entry. Features outside CACHED_FEATURES are
        always fetched. On failure the fallback list is returned, filtered
        by the same feature, and nothing is cached.
        """
        cache_key = self._cache_key(feature)

        if not bypass_cache:
            cached = self._cache.get(cache_key)
            if cached:
                return cached

        try:
            params = {"feature": feature} if feature else None
            response = await self._transport.get("models", params)
        except QuantCloudError as exc:
            logger.error("Failed to fetch models from API: %s", exc)
            return self.get_fallback_models(feature)

        models = [
            ModelDescriptor.from_api(entry)
            for entry in response.get("models", [])
            if isinstance(entry, dict) and entry.get("id")
        ]
        if (feature or "all") in CACHED_FEATURES:
            self._cache.set(cache_key, models, CACHE_LIFETIME)

        logger.info(
            "Fetched %d models from Quant Cloud API (feature: %s)",
            len(models),
            feature or "all",
        )
        return models

    async def get_model_details(
        self, model_id: str, bypass_cache: bool = False
    ) -> ModelDescriptor | None:
        """Look a model up in the (cached) full list; there is no single-model endpoint."""
        for model in await self.get_models(None, bypass_cache):
            if model.id == model_id:
                return model

        logger.debug("Model %s not found in cached list", model_id)
        return None

    async def get_models_for_operation(
        self, operation_type: OperationType | str
    ) -> dict[str, str]:
        """Map model id → display name for the models serving an operation type."""
        try:
            operation = OperationType(operation_type)
        except ValueError:
            feature = None
        else:
            feature = OPERATION_CAPABILITIES[operation].value

        return {model.id: model.name for model in await self.get_models(feature)}

    @staticmethod
    def get_fallback_models(feature: str | None = None) -> list[ModelDescriptor]:
        models = [ModelDescriptor.from_api(entry) for entry in FALLBACK_MODELS]
        if feature is None:
            return models
        capability = FEATURE_CAPABILITIES.get(feature)
        return [m for m in models if capability is not None and m.supports(capability)]

    def clear_cache(self) -> None:
        self._cache.delete_many([self._cache_key(f) for f in CACHED_FEATURES])
        logger.info("Cleared Quant Cloud models cache")
