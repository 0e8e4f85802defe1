"""Pydantic v2 schemas (DTOs) for embeddings and image generation."""

from pydantic import BaseModel, Field

from quant_cloud_ai.infrastructure.quant_cloud.quant_cloud_embedding_provider import (
    MAX_EMBEDDINGS_INPUT,
)


class EmbeddingsRequest(BaseModel):
    input: list[str] = Field(..., min_length=1, max_length=MAX_EMBEDDINGS_INPUT)
    model: str | None = None
    dimensions: int | None = Field(default=None, gt=0)
    normalize: bool | None = None


class EmbeddingsResponse(BaseModel):
    model: str
    dimensions: int
    embeddings: list[list[float]]


class ImageGenerationRequest(BaseModel):
    prompt: str = Field(..., min_length=1)
    model: str = "amazon.nova-canvas-v1:0"
    count: int = Field(default=1, ge=1, le=5)
    width: int | None = Field(default=None, gt=0)
    height: int | None = Field(default=None, gt=0)
    negative_prompt: str | None = None
    seed: int | None = None


class ImageGenerationResponse(BaseModel):
    model: str
    images: list[str]  # base64-encoded
