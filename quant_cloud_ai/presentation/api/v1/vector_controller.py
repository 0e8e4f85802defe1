"""Vector index API controller — collections, indexing and search."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from quant_cloud_ai.application.schemas import (
    CreateCollectionRequest,
    DeleteItemsRequest,
    InsertItemsRequest,
    InsertItemsResponse,
    PurgeResponse,
    SearchRequest,
    SearchResultSchema,
    VdbIdsRequest,
    VdbIdsResponse,
)
from quant_cloud_ai.application.services import VectorIndexService
from quant_cloud_ai.domain.exceptions import (
    CollectionNotFoundError,
    ConfigurationError,
    TransportError,
)
from quant_cloud_ai.infrastructure.dependencies import get_vector_index_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/vector", tags=["vector"])


def _http_error(exc: Exception) -> HTTPException:
    if isinstance(exc, CollectionNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, ConfigurationError):
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc))
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))


@router.get("/status")
async def vector_status(service: VectorIndexService = Depends(get_vector_index_service)) -> dict:
    return {"setup": service.is_setup(), "reachable": await service.ping()}


@router.get("/collections", response_model=list[str])
async def list_collections(service: VectorIndexService = Depends(get_vector_index_service)):
    return await service.get_collections()


@router.post("/collections", status_code=status.HTTP_201_CREATED)
async def create_collection(
    body: CreateCollectionRequest,
    service: VectorIndexService = Depends(get_vector_index_service),
) -> dict:
    try:
        await service.create_collection(body.name, body.dimension, body.metric)
    except (ConfigurationError, TransportError) as exc:
        raise _http_error(exc)
    return {"name": body.name}


@router.delete("/collections/{name}", status_code=status.HTTP_204_NO_CONTENT)
async def drop_collection(
    name: str,
    service: VectorIndexService = Depends(get_vector_index_service),
) -> None:
    try:
        await service.drop_collection(name)
    except (CollectionNotFoundError, ConfigurationError, TransportError) as exc:
        raise _http_error(exc)


@router.post("/collections/{name}/items", response_model=InsertItemsResponse)
async def insert_items(
    name: str,
    body: InsertItemsRequest,
    service: VectorIndexService = Depends(get_vector_index_service),
):
    """Index a batch of items; the whole batch fails together."""
    try:
        document_ids = await service.insert_into_collection(
            name, [item.to_entity() for item in body.items]
        )
    except (CollectionNotFoundError, ConfigurationError, TransportError) as exc:
        raise _http_error(exc)
    return InsertItemsResponse(document_ids=document_ids)


@router.post("/collections/{name}/items/delete", status_code=status.HTTP_204_NO_CONTENT)
async def delete_items(
    name: str,
    body: DeleteItemsRequest,
    service: VectorIndexService = Depends(get_vector_index_service),
) -> None:
    await service.delete_from_collection(name, body.long_ids)


@router.delete("/collections/{name}/items", response_model=PurgeResponse)
async def purge_items(
    name: str,
    service: VectorIndexService = Depends(get_vector_index_service),
):
    try:
        deleted = await service.purge(name)
    except (CollectionNotFoundError, ConfigurationError, TransportError) as exc:
        raise _http_error(exc)
    return PurgeResponse(deleted=deleted)


@router.post("/collections/{name}/search", response_model=list[SearchResultSchema])
async def search(
    name: str,
    body: SearchRequest,
    service: VectorIndexService = Depends(get_vector_index_service),
):
    if body.vector is None and not body.query:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Either query or vector is required",
        )

    try:
        if body.vector is not None:
            results = await service.vector_search(
                name, body.vector, limit=body.limit, threshold=body.threshold or 0.0
            )
        else:
            results = await service.text_search(
                name,
                body.query or "",
                limit=body.limit,
                threshold=body.threshold if body.threshold is not None else 0.7,
            )
    except (CollectionNotFoundError, ConfigurationError) as exc:
        raise _http_error(exc)

    return [
        SearchResultSchema(id=r.id, entity_id=r.entity_id, score=r.score)
        for r in results
    ]


@router.post("/collections/{name}/vdb-ids", response_model=VdbIdsResponse)
async def vdb_ids(
    name: str,
    body: VdbIdsRequest,
    service: VectorIndexService = Depends(get_vector_index_service),
):
    return VdbIdsResponse(document_ids=await service.get_vdb_ids(name, body.long_ids))
