"""Domain entities for the remote vector database."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class VectorCollection:
    """A named remote index of embedded documents."""

    id: str
    name: str
    embedding_model: str = ""
    description: str = ""
    dimensions: int | None = None
    document_count: int = 0

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "VectorCollection":
        collection_id = data.get("collectionId") or data.get("id") or ""
        return cls(
            id=collection_id,
            name=data.get("name") or collection_id,
            embedding_model=data.get("embeddingModel") or "",
            description=data.get("description") or "",
            dimensions=data.get("dimensions"),
            document_count=int(data.get("documentCount") or 0),
        )


@dataclass
class VectorDocument:
    """A document to upload; the vector is optional (server embeds otherwise)."""

    content: str
    metadata: dict[str, Any] = field(default_factory=dict)
    vector: list[float] | None = None

    def to_api(self) -> dict[str, Any]:
        document: dict[str, Any] = {"content": self.content, "metadata": self.metadata}
        if self.vector:
            document["vector"] = self.vector
        return document


@dataclass
class VectorSearchMatch:
    """A single similarity search hit."""

    document_id: str
    score: float = 0.0
    content: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "VectorSearchMatch":
        return cls(
            document_id=data.get("documentId") or data.get("id") or "",
            score=float(data.get("score") or data.get("similarity") or 0.0),
            content=data.get("content") or "",
            metadata=data.get("metadata") or {},
        )


@dataclass
class IndexedItem:
    """An item handed over by the host search index for insertion."""

    long_id: str  # Caller-supplied id, e.g. "entity:node/12:en:0"
    entity_id: str | None = None
    content: str | None = None
    vector: list[float] | None = None
    extra_metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class IndexSearchResult:
    """A search hit translated back to host ids."""

    id: str
    entity_id: str | None
    score: float
