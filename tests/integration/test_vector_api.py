"""Vector index endpoints against a mocked VectorDB API."""

import json
from typing import Any

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from quant_cloud_ai.application.interfaces import SecretStore, StateStore
from quant_cloud_ai.application.services import VectorIndexService
from quant_cloud_ai.config import Settings
from quant_cloud_ai.infrastructure.dependencies import get_vector_index_service
from quant_cloud_ai.infrastructure.quant_cloud import DashboardClient, QuantCloudVectorDbClient
from quant_cloud_ai.main import app


# ── Helpers ──


class FakeSecretStore(SecretStore):
    async def get_value(self, key_id: str) -> str | None:
        return "secret-token"

    async def set_value(self, key_id: str, value: str) -> None:
        raise NotImplementedError

    async def delete(self, key_id: str) -> None:
        raise NotImplementedError


class FakeStateStore(StateStore):
    def __init__(self):
        self.data: dict[str, Any] = {}

    async def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    async def set(self, key: str, value: Any) -> None:
        self.data[key] = value

    async def delete(self, key: str) -> None:
        self.data.pop(key, None)


COLLECTION_ID = "0b7c5a52-4d0e-4c57-9b7f-2f4a1f0c3a11"
BASE = "/api/v3/organisations/acme/ai/vector-db/collections"


def _handler(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if path == BASE and request.method == "GET":
        return httpx.Response(200, json={"collections": [{"collectionId": COLLECTION_ID, "name": "articles"}]})
    if path == f"{BASE}/{COLLECTION_ID}/documents" and request.method == "POST":
        documents = json.loads(request.content)["documents"]
        return httpx.Response(200, json={"documentIds": [f"doc-{i}" for i in range(len(documents))]})
    if path == f"{BASE}/{COLLECTION_ID}/query":
        return httpx.Response(
            200,
            json={
                "results": [
                    {
                        "documentId": "doc-0",
                        "score": 0.91,
                        "metadata": {"drupal_long_id": "entity:node/1:en:0", "drupal_entity_id": "node/1"},
                    }
                ]
            },
        )
    return httpx.Response(404, json={"error": "not found"})


@pytest.fixture
def vector_env():
    state = FakeStateStore()
    settings = Settings(organization_id="acme", access_token_key="quant_token", enable_logging=False)

    async def override():
        transport = DashboardClient(
            settings,
            FakeSecretStore(),
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(_handler)),
        )
        yield VectorIndexService(QuantCloudVectorDbClient(transport), state, settings)

    app.dependency_overrides[get_vector_index_service] = override
    yield state
    app.dependency_overrides.pop(get_vector_index_service, None)


# ── Tests ──


@pytest.mark.asyncio
async def test_insert_then_lookup_document_ids(vector_env):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.post(
            "/api/v1/vector/collections/articles/items",
            json={"items": [{"long_id": "entity:node/1:en:0", "entity_id": "node/1", "content": "Hello"}]},
        )
        assert response.status_code == 200
        assert response.json() == {"document_ids": ["doc-0"]}

        response = await client.post(
            "/api/v1/vector/collections/articles/vdb-ids",
            json={"long_ids": ["entity:node/1:en:0", "entity:node/2:en:0"]},
        )

    assert response.json() == {"document_ids": ["doc-0"]}


@pytest.mark.asyncio
async def test_search_returns_caller_ids(vector_env):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.post(
            "/api/v1/vector/collections/articles/search",
            json={"query": "hello", "limit": 50},
        )

    assert response.status_code == 200
    assert response.json() == [{"id": "entity:node/1:en:0", "entity_id": "node/1", "score": 0.91}]


@pytest.mark.asyncio
async def test_search_requires_query_or_vector(vector_env):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.post("/api/v1/vector/collections/articles/search", json={})

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_unknown_collection_is_404(vector_env):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.post(
            "/api/v1/vector/collections/missing/items",
            json={"items": [{"long_id": "a"}]},
        )

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_collections_listing(vector_env):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/api/v1/vector/collections")

    assert response.json() == ["articles"]
