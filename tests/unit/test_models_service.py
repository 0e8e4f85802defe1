"""Unit tests for ModelsService caching and fallback behaviour."""

import httpx
import pytest

from quant_cloud_ai.application.interfaces import SecretStore
from quant_cloud_ai.application.services.models_service import CACHE_LIFETIME, ModelsService
from quant_cloud_ai.config import Settings
from quant_cloud_ai.domain.entities import Capability, OperationType
from quant_cloud_ai.infrastructure.cache import InMemoryCacheBackend
from quant_cloud_ai.infrastructure.quant_cloud import DashboardClient


# ── Helpers ──


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class FakeSecretStore(SecretStore):
    async def get_value(self, key_id: str) -> str | None:
        return "secret-token"

    async def set_value(self, key_id: str, value: str) -> None:
        pass

    async def delete(self, key_id: str) -> None:
        pass


CATALOG = {
    "models": [
        {
            "id": "amazon.nova-pro-v1:0",
            "name": "Amazon Nova Pro",
            "provider": "Amazon",
            "contextWindow": 300000,
            "maxOutputTokens": 5000,
            "supportedFeatures": ["chat", "vision", "streaming", "unknown_feature"],
        },
        {
            "id": "amazon.titan-embed-text-v2:0",
            "name": "Titan Text Embeddings v2",
            "supportedFeatures": ["embeddings"],
        },
    ]
}


def _make_service(handler, clock: FakeClock | None = None) -> tuple[ModelsService, InMemoryCacheBackend]:
    settings = Settings(organization_id="acme", access_token_key="k", enable_logging=False)
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    transport = DashboardClient(settings, FakeSecretStore(), http_client=http_client)
    cache = InMemoryCacheBackend(clock=clock or FakeClock())
    return ModelsService(transport, cache, settings), cache


def _counting_handler(calls: list[httpx.Request], payload: dict = CATALOG):
    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json=payload)

    return handler


# ── Tests ──


@pytest.mark.asyncio
async def test_get_models_parses_catalog():
    calls: list[httpx.Request] = []
    service, _ = _make_service(_counting_handler(calls))

    models = await service.get_models()

    assert [m.id for m in models] == ["amazon.nova-pro-v1:0", "amazon.titan-embed-text-v2:0"]
    nova = models[0]
    assert nova.context_window == 300000
    assert nova.capabilities == frozenset(
        {Capability.CHAT, Capability.VISION, Capability.STREAMING}
    )
    assert calls[0].url.path == "/api/v3/organisations/acme/ai/models"


@pytest.mark.asyncio
async def test_cache_hit_makes_no_network_call():
    calls: list[httpx.Request] = []
    service, _ = _make_service(_counting_handler(calls))

    first = await service.get_models("chat")
    second = await service.get_models("chat")

    assert first == second
    assert len(calls) == 1
    assert calls[0].url.params["feature"] == "chat"


@pytest.mark.asyncio
async def test_feature_filters_have_separate_cache_entries():
    calls: list[httpx.Request] = []
    service, cache = _make_service(_counting_handler(calls))

    await service.get_models()
    await service.get_models("chat")

    assert len(calls) == 2
    assert cache.get("ai_provider_quant_cloud:models:all") is not None
    assert cache.get("ai_provider_quant_cloud:models:chat") is not None


@pytest.mark.asyncio
async def test_bypass_cache_always_fetches():
    calls: list[httpx.Request] = []
    service, _ = _make_service(_counting_handler(calls))

    await service.get_models()
    await service.get_models(bypass_cache=True)

    assert len(calls) == 2


@pytest.mark.asyncio
async def test_cache_expires_after_one_hour():
    calls: list[httpx.Request] = []
    clock = FakeClock()
    service, _ = _make_service(_counting_handler(calls), clock)

    await service.get_models()
    clock.now += CACHE_LIFETIME - 1
    await service.get_models()
    assert len(calls) == 1

    clock.now += 1
    await service.get_models()
    assert len(calls) == 2


@pytest.mark.asyncio
async def test_failure_returns_filtered_fallback_without_caching():
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(503, json={"message": "unavailable"})

    service, cache = _make_service(handler)

    models = await service.get_models("embeddings")

    assert [m.id for m in models] == ["amazon.titan-embed-text-v2:0"]
    assert cache.get("ai_provider_quant_cloud:models:embeddings") is None

    await service.get_models("embeddings")
    assert len(calls) == 2


@pytest.mark.asyncio
async def test_fallback_without_feature_has_four_models():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("down", request=request)

    service, _ = _make_service(handler)
    models = await service.get_models()

    assert [m.id for m in models] == [
        "amazon.nova-lite-v1:0",
        "anthropic.claude-3-5-sonnet-20241022-v2:0",
        "amazon.titan-embed-text-v2:0",
        "amazon.nova-canvas-v1:0",
    ]


@pytest.mark.asyncio
async def test_get_model_details_uses_cached_list():
    calls: list[httpx.Request] = []
    service, _ = _make_service(_counting_handler(calls))

    model = await service.get_model_details("amazon.titan-embed-text-v2:0")
    missing = await service.get_model_details("nope")

    assert model is not None and model.name == "Titan Text Embeddings v2"
    assert missing is None
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_models_for_operation_maps_to_feature():
    calls: list[httpx.Request] = []
    service, _ = _make_service(_counting_handler(calls))

    models = await service.get_models_for_operation(OperationType.TEXT_TO_IMAGE)

    assert calls[0].url.params["feature"] == "image_generation"
    assert models == {
        "amazon.nova-pro-v1:0": "Amazon Nova Pro",
        "amazon.titan-embed-text-v2:0": "Titan Text Embeddings v2",
    }


@pytest.mark.asyncio
async def test_clear_cache_forces_refetch():
    calls: list[httpx.Request] = []
    service, _ = _make_service(_counting_handler(calls))

    await service.get_models("chat")
    service.clear_cache()
    await service.get_models("chat")

    assert len(calls) == 2


@pytest.mark.asyncio
async def test_clear_cache_covers_every_feature_filter():
    calls: list[httpx.Request] = []
    service, _ = _make_service(_counting_handler(calls))
    features = ["tools", "streaming", "structured_output", "function_calling"]

    for feature in features:
        await service.get_models(feature)
    service.clear_cache()
    for feature in features:
        await service.get_models(feature)

    assert len(calls) == 2 * len(features)


@pytest.mark.asyncio
async def test_unknown_feature_is_not_cached():
    calls: list[httpx.Request] = []
    service, cache = _make_service(_counting_handler(calls))

    await service.get_models("telepathy")
    await service.get_models("telepathy")

    assert len(calls) == 2
    assert cache.get(service._cache_key("telepathy")) is None
