"""Embeddings and image generation endpoints."""

import base64

from fastapi import APIRouter, Depends, HTTPException, status

from quant_cloud_ai.application.schemas import (
    EmbeddingsRequest,
    EmbeddingsResponse,
    ImageGenerationRequest,
    ImageGenerationResponse,
)
from quant_cloud_ai.domain.exceptions import ConfigurationError, TransportError
from quant_cloud_ai.infrastructure.dependencies import (
    get_dashboard_client,
    get_image_provider,
)
from quant_cloud_ai.infrastructure.quant_cloud import (
    DashboardClient,
    QuantCloudEmbeddingProvider,
    QuantCloudImageProvider,
)

router = APIRouter(tags=["Generation"])


def _http_error(e: ConfigurationError | TransportError) -> HTTPException:
    if isinstance(e, ConfigurationError):
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    code = e.status_code if e.status_code and 400 <= e.status_code < 600 else 502
    return HTTPException(status_code=code, detail=f"[{e.operation}] {e.message}")


@router.post("/embeddings", response_model=EmbeddingsResponse)
async def create_embeddings(
    request: EmbeddingsRequest,
    transport: DashboardClient = Depends(get_dashboard_client),
) -> EmbeddingsResponse:
    """Embed up to 96 texts in one request."""
    provider = QuantCloudEmbeddingProvider(
        transport,
        model=request.model,
        model_dimensions=request.dimensions,
        normalize=request.normalize,
    )
    try:
        embeddings = await provider.generate_embeddings(request.input)
    except (ConfigurationError, TransportError) as e:
        raise _http_error(e)

    return EmbeddingsResponse(
        model=request.model or transport.settings.embedding_model,
        dimensions=provider.dimensions,
        embeddings=embeddings,
    )


@router.post("/images", response_model=ImageGenerationResponse)
async def generate_images(
    request: ImageGenerationRequest,
    provider: QuantCloudImageProvider = Depends(get_image_provider),
) -> ImageGenerationResponse:
    try:
        images = await provider.generate_images(
            request.prompt,
            request.model,
            count=request.count,
            width=request.width,
            height=request.height,
            negative_prompt=request.negative_prompt,
            seed=request.seed,
        )
    except (ConfigurationError, TransportError) as e:
        raise _http_error(e)

    return ImageGenerationResponse(
        model=request.model,
        images=[base64.b64encode(image).decode("ascii") for image in images],
    )
