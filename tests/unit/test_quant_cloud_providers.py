"""Unit tests for the embeddings, image and VectorDB clients."""

import base64
import json

import httpx
import pytest

from quant_cloud_ai.application.interfaces import SecretStore
from quant_cloud_ai.config import Settings
from quant_cloud_ai.domain.entities import VectorDocument
from quant_cloud_ai.infrastructure.quant_cloud import (
    DashboardClient,
    QuantCloudEmbeddingProvider,
    QuantCloudImageProvider,
    QuantCloudVectorDbClient,
)
from quant_cloud_ai.infrastructure.quant_cloud.quant_cloud_embedding_provider import (
    MAX_EMBEDDINGS_INPUT,
)
from quant_cloud_ai.infrastructure.quant_cloud.vector_db_client import clamp_limit


# ── Helpers ──


class FakeSecretStore(SecretStore):
    async def get_value(self, key_id: str) -> str | None:
        return "secret-token"

    async def set_value(self, key_id: str, value: str) -> None:
        raise AssertionError("not expected")

    async def delete(self, key_id: str) -> None:
        raise AssertionError("not expected")


def _transport(handler) -> DashboardClient:
    settings = Settings(
        organization_id="acme",
        access_token_key="quant_token",
        enable_logging=False,
    )
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return DashboardClient(settings, FakeSecretStore(), http_client=http_client)


def _recording_handler(response: dict, captured: list[httpx.Request]):
    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(200, json=response)

    return handler


# ── Embeddings ──


@pytest.mark.asyncio
async def test_embeddings_payload_and_order():
    captured: list[httpx.Request] = []
    handler = _recording_handler(
        {
            "embeddings": [
                {"index": 1, "embedding": [0.3, 0.4]},
                {"index": 0, "embedding": [0.1, 0.2]},
            ]
        },
        captured,
    )
    provider = QuantCloudEmbeddingProvider(_transport(handler))

    result = await provider.generate_embeddings(["first", "second"])

    assert result == [[0.1, 0.2], [0.3, 0.4]]
    body = json.loads(captured[0].content)
    assert body == {
        "input": ["first", "second"],
        "modelId": "amazon.titan-embed-text-v2:0",
        "dimensions": 1024,
        "normalize": True,
    }
    assert captured[0].url.path == "/api/v3/organisations/acme/ai/embeddings"


@pytest.mark.asyncio
async def test_embeddings_reject_oversized_batch():
    provider = QuantCloudEmbeddingProvider(_transport(lambda r: httpx.Response(200)))
    with pytest.raises(ValueError):
        await provider.generate_embeddings(["x"] * (MAX_EMBEDDINGS_INPUT + 1))


@pytest.mark.asyncio
async def test_embeddings_empty_input_makes_no_call():
    captured: list[httpx.Request] = []
    provider = QuantCloudEmbeddingProvider(_transport(_recording_handler({}, captured)))

    assert await provider.generate_embeddings([]) == []
    assert captured == []


# ── Images ──


@pytest.mark.asyncio
async def test_image_generation_decodes_images():
    captured: list[httpx.Request] = []
    png = b"\x89PNG\r\n"
    handler = _recording_handler(
        {"images": [base64.b64encode(png).decode(), {"base64": base64.b64encode(b"two").decode()}]},
        captured,
    )

    images = await QuantCloudImageProvider(_transport(handler)).generate_images(
        "a lighthouse", "amazon.nova-canvas-v1:0", count=2, width=512, height=512, seed=7
    )

    assert images == [png, b"two"]
    body = json.loads(captured[0].content)
    assert body["prompt"] == "a lighthouse"
    assert body["numberOfImages"] == 2
    assert body["width"] == 512
    assert body["seed"] == 7
    assert "negativePrompt" not in body


# ── VectorDB ──


def test_clamp_limit():
    assert clamp_limit(0) == 1
    assert clamp_limit(-5) == 1
    assert clamp_limit(5) == 5
    assert clamp_limit(20) == 20
    assert clamp_limit(100) == 20


@pytest.mark.asyncio
async def test_query_by_text_clamps_limit():
    captured: list[httpx.Request] = []
    handler = _recording_handler(
        {
            "results": [
                {
                    "documentId": "doc-1",
                    "content": "hello",
                    "score": 0.91,
                    "metadata": {"drupal_long_id": "entity:node/1:en:0"},
                }
            ]
        },
        captured,
    )
    client = QuantCloudVectorDbClient(_transport(handler))

    matches = await client.query_by_text("col-1", "hello", limit=50)

    assert matches[0].document_id == "doc-1"
    assert matches[0].score == 0.91
    assert matches[0].metadata["drupal_long_id"] == "entity:node/1:en:0"
    body = json.loads(captured[0].content)
    assert body == {"query": "hello", "limit": 20, "threshold": 0.7, "includeEmbeddings": False}
    assert captured[0].url.path.endswith("/ai/vector-db/collections/col-1/query")


@pytest.mark.asyncio
async def test_upload_documents_is_one_batched_call():
    captured: list[httpx.Request] = []
    handler = _recording_handler({"documentIds": ["d1", "d2"], "chunksCreated": 2}, captured)
    client = QuantCloudVectorDbClient(_transport(handler))

    ids = await client.upload_documents(
        "col-1",
        [
            VectorDocument(content="a", metadata={"k": 1}, vector=[0.1]),
            VectorDocument(content="b"),
        ],
    )

    assert ids == ["d1", "d2"]
    assert len(captured) == 1
    assert json.loads(captured[0].content) == {
        "documents": [
            {"content": "a", "metadata": {"k": 1}, "vector": [0.1]},
            {"content": "b", "metadata": {}},
        ]
    }


@pytest.mark.asyncio
async def test_create_collection_omits_unset_fields():
    captured: list[httpx.Request] = []
    handler = _recording_handler({"collectionId": "c-1", "name": "docs"}, captured)
    client = QuantCloudVectorDbClient(_transport(handler))

    collection = await client.create_collection("docs", embedding_model="amazon.titan-embed-text-v2:0")

    assert collection.id == "c-1"
    assert json.loads(captured[0].content) == {
        "name": "docs",
        "embeddingModel": "amazon.titan-embed-text-v2:0",
    }


@pytest.mark.asyncio
async def test_delete_by_metadata_and_purge():
    captured: list[httpx.Request] = []
    client = QuantCloudVectorDbClient(_transport(_recording_handler({"deletedCount": 3}, captured)))

    assert await client.delete_documents_by_metadata("c-1", "drupal_long_id", ["a", "b"]) == 3
    assert await client.purge_documents("c-1") == 3

    assert captured[0].method == "POST"
    assert captured[0].url.path.endswith("/collections/c-1/documents/delete")
    assert json.loads(captured[0].content) == {
        "metadata": {"field": "drupal_long_id", "values": ["a", "b"]}
    }
    assert captured[1].method == "DELETE"
    assert captured[1].url.path.endswith("/collections/c-1/documents")


@pytest.mark.asyncio
async def test_get_collection_reads_nested_collection():
    captured: list[httpx.Request] = []
    client = QuantCloudVectorDbClient(
        _transport(
            _recording_handler(
                {"collection": {"collectionId": "c-1", "name": "articles", "documentCount": 3}},
                captured,
            )
        )
    )

    collection = await client.get_collection("c-1")

    assert captured[0].url.path.endswith("/ai/vector-db/collections/c-1")
    assert collection.id == "c-1"
    assert collection.document_count == 3


@pytest.mark.asyncio
async def test_query_embedding_is_single_vector():
    captured: list[httpx.Request] = []
    provider = QuantCloudEmbeddingProvider(
        _transport(_recording_handler({"embeddings": [{"index": 0, "embedding": [0.5]}]}, captured))
    )

    assert await provider.generate_query_embedding("hello") == [0.5]
    assert json.loads(captured[0].content)["input"] == ["hello"]
