"""Quant Cloud embedding provider — calls the /ai/embeddings endpoint.

Uses the same DashboardClient transport as the chat client.
Default model: amazon.titan-embed-text-v2:0 (1024 dimensions).
"""

import logging
from typing import Any

from quant_cloud_ai.application.interfaces.embedding_provider import EmbeddingProvider
from quant_cloud_ai.infrastructure.quant_cloud.dashboard_client import DashboardClient

logger = logging.getLogger(__name__)

# Maximum number of texts embedded in a single request.
MAX_EMBEDDINGS_INPUT = 96


class QuantCloudEmbeddingProvider(EmbeddingProvider):
    """Infrastructure adapter — generates embeddings via Quant Cloud."""

    def __init__(
        self,
        transport: DashboardClient,
        model: str | None = None,
        model_dimensions: int | None = None,
        normalize: bool | None = None,
    ):
        settings = transport.settings
        self._transport = transport
        self._model = model or settings.embedding_model
        self._dimensions = model_dimensions or settings.embedding_dimensions
        self._normalize = settings.embedding_normalize if normalize is None else normalize

    @property
    def dimensions(self) -> int:
        return self._dimensions

    async def generate_embeddings(self, texts: list[str]) -> list[list[float]]:
        """Generate embeddings for a batch of texts, in input order."""
        if not texts:
            return []
        if len(texts) > MAX_EMBEDDINGS_INPUT:
            raise ValueError(
                f"At most {MAX_EMBEDDINGS_INPUT} texts per embeddings request, got {len(texts)}"
            )

        payload: dict[str, Any] = {
            "input": texts,
            "modelId": self._model,
            "dimensions": self._dimensions,
            "normalize": self._normalize,
        }
        data = await self._transport.post("embeddings", payload)

        embeddings_data = list(data.get("embeddings", []))
        # Sort by index to ensure correct ordering
        embeddings_data.sort(key=lambda x: x.get("index", 0))
        result = [item["embedding"] for item in embeddings_data]

        logger.info(
            "Generated %d embeddings (model=%s, dims=%d)",
            len(result),
            self._model,
            len(result[0]) if result else 0,
        )
        return result

    async def generate_query_embedding(self, query: str) -> list[float]:
        """Generate a single embedding for a search query."""
        results = await self.generate_embeddings([query])
        return results[0]
