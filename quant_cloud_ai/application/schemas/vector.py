"""Pydantic v2 schemas (DTOs) for the vector index endpoints."""

from typing import Any

from pydantic import BaseModel, Field

from quant_cloud_ai.domain.entities import IndexedItem


class CreateCollectionRequest(BaseModel):
    name: str = Field(..., min_length=1)
    dimension: int = Field(default=1024, gt=0)
    metric: str = "cosine_similarity"


class IndexedItemSchema(BaseModel):
    """A host item to index, identified by its long id."""

    long_id: str = Field(..., min_length=1, examples=["entity:node/12:en:0"])
    entity_id: str | None = None
    content: str | None = None
    vector: list[float] | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    def to_entity(self) -> IndexedItem:
        return IndexedItem(
            long_id=self.long_id,
            entity_id=self.entity_id,
            content=self.content,
            vector=self.vector,
            extra_metadata=self.metadata,
        )


class InsertItemsRequest(BaseModel):
    items: list[IndexedItemSchema] = Field(..., min_length=1)


class InsertItemsResponse(BaseModel):
    document_ids: list[str]


class DeleteItemsRequest(BaseModel):
    long_ids: list[str] = Field(..., min_length=1)


class PurgeResponse(BaseModel):
    deleted: int


class SearchRequest(BaseModel):
    """Either ``query`` (server-side embedding) or ``vector`` must be given."""

    query: str | None = None
    vector: list[float] | None = None
    limit: int = Field(default=10, ge=1)
    threshold: float | None = Field(default=None, ge=0.0, le=1.0)


class SearchResultSchema(BaseModel):
    id: str
    entity_id: str | None = None
    score: float


class VdbIdsRequest(BaseModel):
    long_ids: list[str]


class VdbIdsResponse(BaseModel):
    document_ids: list[str]
