"""End-to-end OAuth connect/callback/disconnect through the HTTP API."""

import json
from typing import Any
from urllib.parse import parse_qs, urlparse

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from quant_cloud_ai import config
from quant_cloud_ai.application.interfaces import SecretStore, StateStore
from quant_cloud_ai.application.services import AuthService
from quant_cloud_ai.application.services.auth_service import ACCESS_TOKEN_KEY_ID
from quant_cloud_ai.config import Settings
from quant_cloud_ai.infrastructure.dependencies import get_auth_service
from quant_cloud_ai.main import app


# ── Helpers ──


class FakeSecretStore(SecretStore):
    def __init__(self):
        self.values: dict[str, str] = {}

    async def get_value(self, key_id: str) -> str | None:
        return self.values.get(key_id)

    async def set_value(self, key_id: str, value: str) -> None:
        self.values[key_id] = value

    async def delete(self, key_id: str) -> None:
        self.values.pop(key_id, None)


class FakeStateStore(StateStore):
    def __init__(self):
        self.data: dict[str, Any] = {}

    async def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    async def set(self, key: str, value: Any) -> None:
        self.data[key] = value

    async def delete(self, key: str) -> None:
        self.data.pop(key, None)


def _dashboard_handler(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/oauth/token":
        form = parse_qs(request.content.decode())
        if form.get("code") != ["good-code"]:
            return httpx.Response(400, json={"error": "invalid_grant"})
        return httpx.Response(
            200,
            json={"access_token": "access-1", "refresh_token": "refresh-1", "expires_in": 3600},
        )
    if request.url.path == "/api/v2/organizations":
        if request.headers.get("Authorization") != "Bearer access-1":
            return httpx.Response(401)
        return httpx.Response(200, json=[{"name": "Acme", "machine_name": "acme"}])
    return httpx.Response(404)


@pytest.fixture
def oauth_env(tmp_path, monkeypatch):
    monkeypatch.setattr(config, "SETTINGS_FILE", tmp_path / "settings.json")
    config.get_settings.cache_clear()

    secrets = FakeSecretStore()
    state = FakeStateStore()
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(_dashboard_handler))

    async def override_auth_service():
        yield AuthService(config.get_settings(), secrets, state, http_client=http_client)

    app.dependency_overrides[get_auth_service] = override_auth_service
    yield secrets, state
    app.dependency_overrides.pop(get_auth_service, None)
    config.get_settings.cache_clear()


# ── Tests ──


@pytest.mark.asyncio
async def test_connect_callback_status_disconnect(oauth_env):
    secrets, state = oauth_env
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/api/v1/oauth/connect")
        assert response.status_code == 302

        location = urlparse(response.headers["location"])
        query = parse_qs(location.query)
        assert location.path == "/oauth/authorize"
        assert query["redirect_uri"] == ["http://test/api/v1/oauth/callback"]
        oauth_state = query["state"][0]

        response = await client.get(
            "/api/v1/oauth/callback", params={"code": "good-code", "state": oauth_state}
        )
        assert response.status_code == 200
        assert response.json()["status"] == "connected"
        assert secrets.values[ACCESS_TOKEN_KEY_ID] == "access-1"
        assert config.get_settings().auth_method == "oauth"

        response = await client.get("/api/v1/oauth/status")
        assert response.status_code == 200
        body = response.json()
        assert body["valid"] is True
        assert body["organizations"] == [{"name": "Acme", "machine_name": "acme"}]

        response = await client.post("/api/v1/oauth/disconnect")
        assert response.json()["status"] == "disconnected"

    assert secrets.values == {}
    assert json.loads(config.SETTINGS_FILE.read_text()) == {
        "auth_method": "manual",
        "access_token_key": "",
    }


@pytest.mark.asyncio
async def test_callback_rejects_unknown_state(oauth_env):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get(
            "/api/v1/oauth/callback", params={"code": "good-code", "state": "forged"}
        )

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_callback_reports_provider_error(oauth_env):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get(
            "/api/v1/oauth/callback",
            params={"error": "access_denied", "error_description": "User said no"},
        )

    assert response.status_code == 400
    assert "User said no" in response.json()["detail"]


@pytest.mark.asyncio
async def test_status_without_token_is_invalid(oauth_env):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/api/v1/oauth/status")

    body = response.json()
    assert body["valid"] is False
    assert body["token_generation_url"].endswith("/account/api-tokens")
