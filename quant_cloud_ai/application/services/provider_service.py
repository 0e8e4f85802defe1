"""Provider capability surface — what the host framework asks before calling.

Answers whether the provider is configured, which operation types it
serves, which models to offer and the token limits of a model. Limits
come from the model catalog and fall back to known values per model.
"""

import logging

from quant_cloud_ai.application.services.models_service import ModelsService
from quant_cloud_ai.config import Settings
from quant_cloud_ai.domain.entities import OperationType
from quant_cloud_ai.infrastructure.quant_cloud.quant_cloud_embedding_provider import (
    MAX_EMBEDDINGS_INPUT,
)

logger = logging.getLogger(__name__)

SUPPORTED_OPERATION_TYPES = (
    OperationType.CHAT,
    OperationType.EMBEDDINGS,
    OperationType.TEXT_TO_IMAGE,
)

DEFAULT_MAX_INPUT_TOKENS = 100000
DEFAULT_MAX_OUTPUT_TOKENS = 4096

MAX_INPUT_TOKENS: dict[str, int] = {
    "amazon.nova-lite-v1:0": 300000,
    "amazon.nova-pro-v1:0": 300000,
    "amazon.nova-micro-v1:0": 128000,
    "anthropic.claude-3-5-sonnet-20241022-v2:0": 200000,
    "anthropic.claude-3-5-sonnet-20240620-v1:0": 200000,
    "anthropic.claude-3-opus-20240229-v1:0": 200000,
    "anthropic.claude-3-sonnet-20240229-v1:0": 200000,
    "anthropic.claude-3-haiku-20240307-v1:0": 200000,
    "amazon.titan-embed-text-v2:0": 8192,
    "amazon.titan-embed-text-v1": 8192,
}

MAX_OUTPUT_TOKENS: dict[str, int] = {
    "amazon.nova-lite-v1:0": 5000,
    "amazon.nova-pro-v1:0": 5000,
    "amazon.nova-micro-v1:0": 5000,
    "anthropic.claude-3-5-sonnet-20241022-v2:0": 8192,
    "anthropic.claude-3-5-sonnet-20240620-v1:0": 8192,
    "anthropic.claude-3-opus-20240229-v1:0": 4096,
    "anthropic.claude-3-sonnet-20240229-v1:0": 4096,
    "anthropic.claude-3-haiku-20240307-v1:0": 4096,
    "amazon.titan-embed-text-v2:0": 0,
    "amazon.titan-embed-text-v1": 0,
}


class ProviderService:
    def __init__(self, settings: Settings, models_service: ModelsService):
        self._settings = settings
        self._models = models_service

    def supported_operation_types(self) -> list[OperationType]:
        return list(SUPPORTED_OPERATION_TYPES)

    def is_usable(self, operation_type: OperationType | str | None = None) -> bool:
        """Configured (token, organisation, platform) and able to serve the operation."""
        settings = self._settings
        if not settings.access_token_key or not settings.organization_id:
            return False
        if not settings.platform:
            return False

        if operation_type is None:
            return True
        try:
            return OperationType(operation_type) in SUPPORTED_OPERATION_TYPES
        except ValueError:
            return False

    async def get_configured_models(
        self, operation_type: OperationType | str | None = None
    ) -> dict[str, str]:
        """Model id → display name, optionally restricted to an operation type."""
        if operation_type is not None:
            return await self._models.get_models_for_operation(operation_type)
        return {model.id: model.name for model in await self._models.get_models()}

    async def get_max_input_tokens(self, model_id: str) -> int:
        model = await self._models.get_model_details(model_id)
        if model is not None and model.context_window > 0:
            return model.context_window
        return MAX_INPUT_TOKENS.get(model_id, DEFAULT_MAX_INPUT_TOKENS)

    async def get_max_output_tokens(self, model_id: str) -> int:
        model = await self._models.get_model_details(model_id)
        if model is not None and model.max_output_tokens > 0:
            return model.max_output_tokens
        return MAX_OUTPUT_TOKENS.get(model_id, DEFAULT_MAX_OUTPUT_TOKENS)

    @staticmethod
    def max_embeddings_input(model_id: str = "") -> int:
        return MAX_EMBEDDINGS_INPUT
