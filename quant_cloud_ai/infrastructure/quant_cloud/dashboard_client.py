"""HTTP transport for the Quant Cloud Dashboard AI API.

Every endpoint lives under ``{dashboard}/api/v3/organisations/{orgId}/ai/``
and takes a Bearer token plus a JSON body. Streaming endpoints answer with
a ``text/event-stream`` body that is handed out as raw byte chunks.
"""

import json
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import httpx

from quant_cloud_ai.application.interfaces.secret_store import SecretStore
from quant_cloud_ai.config import Settings
from quant_cloud_ai.domain.exceptions import (
    ConfigurationError,
    StreamReadError,
    TransportError,
)

logger = logging.getLogger(__name__)

_CONNECT_TIMEOUT = 10.0


class DashboardClient:
    """Infrastructure adapter — authenticated JSON calls against the dashboard API.

    Uses an injected ``httpx.AsyncClient`` when given (tests, connection
    pooling); otherwise opens a short-lived client per call.
    """

    def __init__(
        self,
        settings: Settings,
        secret_store: SecretStore,
        http_client: httpx.AsyncClient | None = None,
    ):
        self._settings = settings
        self._secret_store = secret_store
        self._http_client = http_client

    @property
    def settings(self) -> Settings:
        return self._settings

    async def get_access_token(self) -> str | None:
        """Read the bearer token from the secret store, if one is configured."""
        key_id = self._settings.access_token_key
        if not key_id:
            return None
        return await self._secret_store.get_value(key_id)

    def get_organization_id(self) -> str:
        org_id = self._settings.organization_id
        if not org_id:
            raise ConfigurationError("organization_id", "Organization ID not configured")
        return org_id

    def build_url(self, path: str) -> str:
        """Full URL for a path relative to ``/api/v3/organisations/{orgId}/ai/``."""
        dashboard_url = self._settings.resolved_dashboard_url
        org_id = self.get_organization_id()
        return f"{dashboard_url}/api/v3/organisations/{org_id}/ai/{path.lstrip('/')}"

    async def _get_headers(self, accept: str = "application/json") -> dict[str, str]:
        access_token = await self.get_access_token()
        if not access_token:
            raise ConfigurationError("access_token_key", "Access token not configured")
        return {
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/json",
            "Accept": accept,
        }

    def _timeout(self, seconds: float | None = None) -> httpx.Timeout:
        return httpx.Timeout(seconds or self._settings.timeout, connect=_CONNECT_TIMEOUT)

    async def _get_client(self) -> httpx.AsyncClient:
        """Return the injected client or create a new one."""
        if self._http_client is not None:
            return self._http_client
        return httpx.AsyncClient()

    # ── JSON request/response ──────────────────────────────────────

    async def request(
        self,
        method: str,
        path: str,
        *,
        json_body: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> dict[str, Any]:
        """Send one JSON request and return the decoded response body.

        Raises:
            ConfigurationError: Organization id or access token missing.
            TransportError: Network failure or non-2xx response.
        """
        # Resolve configuration before touching the network.
        url = self.build_url(path)
        headers = await self._get_headers()

        if self._settings.enable_logging:
            logger.info("Quant Dashboard AI request: %s %s", method, url)

        client = await self._get_client()
        should_close = self._http_client is None

        try:
            response = await client.request(
                method,
                url,
                headers=headers,
                json=json_body,
                params=params or None,
                timeout=self._timeout(timeout),
            )
        except httpx.HTTPError as exc:
            logger.error("Quant Dashboard AI request failed: %s", exc)
            raise TransportError(path, f"AI API request failed: {exc}") from exc
        finally:
            if should_close:
                await client.aclose()

        if self._settings.enable_logging:
            logger.info("Quant Dashboard AI response: %d", response.status_code)

        if response.status_code >= 400:
            self._raise_transport_error(path, response.status_code, response.content)

        return self._decode_body(path, response.content)

    async def post(
        self, path: str, data: dict[str, Any], *, timeout: float | None = None
    ) -> dict[str, Any]:
        return await self.request("POST", path, json_body=data, timeout=timeout)

    async def get(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        return await self.request("GET", path, params=params)

    async def delete(self, path: str) -> dict[str, Any]:
        return await self.request("DELETE", path)

    # ── Streaming ──────────────────────────────────────────────────

    @asynccontextmanager
    async def stream(
        self, path: str, data: dict[str, Any]
    ) -> AsyncIterator[AsyncIterator[bytes]]:
        """POST data and expose the SSE response body as raw byte chunks.

        Usage:
            async with transport.stream("chat/stream", payload) as body:
                async for event in decode_events(body):
                    ...

        The streaming timeout applies instead of the regular one.
        """
        url = self.build_url(path)
        headers = await self._get_headers(accept="text/event-stream")

        if self._settings.enable_logging:
            logger.info("Quant Dashboard AI request: %s %s (stream)", "POST", url)

        client = await self._get_client()
        should_close = self._http_client is None

        try:
            try:
                async with client.stream(
                    "POST",
                    url,
                    headers=headers,
                    json=data,
                    timeout=self._timeout(self._settings.streaming_timeout),
                ) as response:
                    if response.status_code >= 400:
                        body = await response.aread()
                        self._raise_transport_error(path, response.status_code, body)

                    yield self._iter_body(path, response)
            except httpx.HTTPError as exc:
                logger.error("Streaming request failed: %s", exc)
                raise TransportError(path, f"Streaming failed: {exc}") from exc
        finally:
            if should_close:
                await client.aclose()

    @staticmethod
    async def _iter_body(path: str, response: httpx.Response) -> AsyncIterator[bytes]:
        try:
            async for chunk in response.aiter_bytes():
                yield chunk
        except httpx.HTTPError as exc:
            logger.error("Stream read failed: %s", exc)
            raise StreamReadError(path, f"Stream read failed: {exc}") from exc

    # ── Helpers ────────────────────────────────────────────────────

    @staticmethod
    def _decode_body(path: str, body: bytes) -> dict[str, Any]:
        if not body:
            return {}
        try:
            result = json.loads(body)
        except json.JSONDecodeError as exc:
            raise TransportError(path, f"Invalid JSON in response: {exc}") from exc
        return result if result is not None else {}

    @staticmethod
    def _raise_transport_error(path: str, status_code: int, body: bytes) -> None:
        """Raise TransportError from a non-2xx response body."""
        try:
            data = json.loads(body)
            error = data.get("error") or data.get("message") or body.decode()
            if isinstance(error, dict):
                error = error.get("message", json.dumps(error))
            message = str(error)
        except Exception:
            message = body.decode(errors="replace")

        logger.error("Quant Dashboard AI error %d on %s: %s", status_code, path, message[:500])
        raise TransportError(path, message, status_code=status_code)
