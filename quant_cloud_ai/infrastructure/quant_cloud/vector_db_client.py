"""Quant Cloud VectorDB client.

Manages vector collections and runs similarity queries through the
``/ai/vector-db/`` part of the Dashboard API.
"""

import logging
from typing import Any

from quant_cloud_ai.domain.entities import (
    VectorCollection,
    VectorDocument,
    VectorSearchMatch,
)
from quant_cloud_ai.infrastructure.quant_cloud.dashboard_client import DashboardClient

logger = logging.getLogger(__name__)

MIN_QUERY_LIMIT = 1
MAX_QUERY_LIMIT = 20


def clamp_limit(limit: int) -> int:
    return min(max(limit, MIN_QUERY_LIMIT), MAX_QUERY_LIMIT)


class QuantCloudVectorDbClient:
    """Infrastructure adapter — collection CRUD, uploads and queries."""

    def __init__(self, transport: DashboardClient):
        self._transport = transport

    @staticmethod
    def _path(path: str) -> str:
        return f"vector-db/{path.lstrip('/')}"

    # ── Collections ────────────────────────────────────────────────

    async def create_collection(
        self,
        name: str,
        description: str | None = None,
        embedding_model: str | None = None,
        dimensions: int | None = None,
    ) -> VectorCollection:
        """Create a collection; the server derives dimensions from the model when omitted."""
        data: dict[str, Any] = {"name": name}
        if description is not None:
            data["description"] = description
        if embedding_model is not None:
            data["embeddingModel"] = embedding_model
        if dimensions is not None:
            data["dimensions"] = dimensions

        response = await self._transport.post(self._path("collections"), data)
        collection = response.get("collection", response)
        return VectorCollection.from_api({"name": name, **collection})

    async def list_collections(self) -> list[VectorCollection]:
        response = await self._transport.get(self._path("collections"))
        return [VectorCollection.from_api(c) for c in response.get("collections", [])]

    async def get_collection(self, collection_id: str) -> VectorCollection:
        response = await self._transport.get(self._path(f"collections/{collection_id}"))
        return VectorCollection.from_api(response.get("collection", response))

    async def delete_collection(self, collection_id: str) -> dict[str, Any]:
        return await self._transport.delete(self._path(f"collections/{collection_id}"))

    # ── Documents ──────────────────────────────────────────────────

    async def upload_documents(
        self, collection_id: str, documents: list[VectorDocument]
    ) -> list[str]:
        """Upload documents in one batched call and return their document ids.

        The batch succeeds or fails as a whole.
        """
        response = await self._transport.post(
            self._path(f"collections/{collection_id}/documents"),
            {"documents": [doc.to_api() for doc in documents]},
        )
        document_ids = response.get("documentIds", [])
        logger.debug(
            "Uploaded %d document(s) to %s (%s chunks)",
            len(documents),
            collection_id,
            response.get("chunksCreated", "?"),
        )
        return document_ids

    async def delete_documents_by_metadata(
        self, collection_id: str, field: str, values: list[str]
    ) -> int:
        """Delete every document whose metadata ``field`` is one of ``values``."""
        response = await self._transport.post(
            self._path(f"collections/{collection_id}/documents/delete"),
            {"metadata": {"field": field, "values": values}},
        )
        return int(response.get("deletedCount", 0) or 0)

    async def purge_documents(self, collection_id: str) -> int:
        """Delete all documents but keep the collection itself."""
        response = await self._transport.delete(
            self._path(f"collections/{collection_id}/documents")
        )
        return int(response.get("deletedCount", 0) or 0)

    # ── Queries ────────────────────────────────────────────────────

    async def query_by_text(
        self,
        collection_id: str,
        query: str,
        limit: int = 5,
        threshold: float = 0.7,
        include_embeddings: bool = False,
    ) -> list[VectorSearchMatch]:
        """Semantic search; the server embeds the query text."""
        return await self._query(
            collection_id,
            {
                "query": query,
                "limit": clamp_limit(limit),
                "threshold": threshold,
                "includeEmbeddings": include_embeddings,
            },
        )

    async def query_by_vector(
        self,
        collection_id: str,
        vector: list[float],
        limit: int = 5,
        threshold: float = 0.7,
        include_embeddings: bool = False,
    ) -> list[VectorSearchMatch]:
        """Similarity search with a precomputed embedding."""
        return await self._query(
            collection_id,
            {
                "vector": vector,
                "limit": clamp_limit(limit),
                "threshold": threshold,
                "includeEmbeddings": include_embeddings,
            },
        )

    async def _query(self, collection_id: str, body: dict[str, Any]) -> list[VectorSearchMatch]:
        response = await self._transport.post(
            self._path(f"collections/{collection_id}/query"), body
        )
        return [VectorSearchMatch.from_api(r) for r in response.get("results", [])]
