"""OAuth2 authorization-code flow and token management for Quant Cloud.

The dashboard acts as the authorization server:

    GET  {dashboard}/oauth/authorize   — user consent, redirects back with ?code
    POST {dashboard}/oauth/token       — code / refresh-token exchange
    GET  {dashboard}/api/v2/organizations — organisations of the token owner

Tokens are kept in the SecretStore; the expiry timestamp and the pending
CSRF state live in the StateStore.
"""

import logging
import secrets
import time
from typing import Any
from urllib.parse import urlencode

import httpx

from quant_cloud_ai.application.interfaces.secret_store import SecretStore
from quant_cloud_ai.application.interfaces.state_store import StateStore
from quant_cloud_ai.application.services.settings_service import update_provider_settings
from quant_cloud_ai.config import Settings
from quant_cloud_ai.domain.entities import OAuthToken, Organization
from quant_cloud_ai.domain.exceptions import OAuthError

logger = logging.getLogger(__name__)

ACCESS_TOKEN_KEY_ID = "quant_cloud_oauth_access_token"
REFRESH_TOKEN_KEY_ID = "quant_cloud_oauth_refresh_token"

OAUTH_SCOPES = "ai:read ai:write models:read usage:read"

_ORGANIZATIONS_TIMEOUT = 10.0
_TOKEN_TIMEOUT = 30.0
# Refresh slightly before the server-side expiry.
_EXPIRY_MARGIN = 60


class AuthService:
    """Application service — OAuth connect/disconnect and access-token lookup."""

    def __init__(
        self,
        settings: Settings,
        secret_store: SecretStore,
        state_store: StateStore,
        http_client: httpx.AsyncClient | None = None,
    ):
        self._settings = settings
        self._secret_store = secret_store
        self._state = state_store
        self._http_client = http_client

    @property
    def dashboard_url(self) -> str:
        return self._settings.resolved_dashboard_url

    def _state_key(self, name: str) -> str:
        return f"{self._settings.state_namespace}.{name}"

    async def _get_client(self) -> httpx.AsyncClient:
        """Return the injected client or create a new one."""
        if self._http_client is not None:
            return self._http_client
        return httpx.AsyncClient()

    # ── Tokens ─────────────────────────────────────────────────────

    async def get_access_token(self) -> str | None:
        key_id = self._settings.access_token_key
        if not key_id:
            return None
        return await self._secret_store.get_value(key_id)

    async def get_organizations(self) -> list[Organization]:
        """List the organisations of the token owner; [] on any failure."""
        token = await self.get_access_token()
        if not token:
            return []

        client = await self._get_client()
        should_close = self._http_client is None
        try:
            response = await client.get(
                f"{self.dashboard_url}/api/v2/organizations",
                headers={
                    "Authorization": f"Bearer {token}",
                    "Accept": "application/json",
                },
                timeout=_ORGANIZATIONS_TIMEOUT,
            )
        except httpx.HTTPError as exc:
            logger.error("Error fetching organizations: %s", exc)
            return []
        finally:
            if should_close:
                await client.aclose()

        if response.status_code != 200:
            logger.warning("Failed to fetch organizations: status %d", response.status_code)
            return []

        try:
            data = response.json()
        except ValueError as exc:
            logger.error("Error fetching organizations: %s", exc)
            return []

        # The endpoint returns a bare list: [{"name": ..., "machine_name": ...}]
        organizations = [
            Organization(name=org.get("name") or "", machine_name=org.get("machine_name") or "")
            for org in data
            if isinstance(org, dict)
        ] if isinstance(data, list) else []

        if organizations:
            logger.info("Successfully fetched %d organizations", len(organizations))
        return organizations

    async def validate_token(self) -> bool:
        """A token is valid when it can list at least one organisation."""
        return bool(await self.get_organizations())

    def get_token_generation_url(self) -> str:
        return f"{self.dashboard_url}/account/api-tokens"

    # ── Authorization-code flow ────────────────────────────────────

    def get_authorization_url(self, state: str, redirect_uri: str) -> str:
        params = {
            "client_id": self._settings.oauth_client_id,
            "response_type": "code",
            "redirect_uri": redirect_uri,
            "state": state,
            "scope": OAUTH_SCOPES,
        }
        return f"{self.dashboard_url}/oauth/authorize?{urlencode(params)}"

    async def begin_authorization(self, redirect_uri: str) -> str:
        """Generate and remember a CSRF state, then return the consent URL."""
        state = secrets.token_hex(16)
        await self._state.set(self._state_key("oauth_state"), state)
        return self.get_authorization_url(state, redirect_uri)

    async def verify_state(self, state: str | None) -> None:
        """Check ``state`` against the remembered one; the stored value is single-use."""
        key = self._state_key("oauth_state")
        stored = await self._state.get(key)
        await self._state.delete(key)

        if not stored or not state or not secrets.compare_digest(str(stored), state):
            raise OAuthError("Invalid OAuth state. Possible CSRF attack detected.")

    async def _request_token(self, form: dict[str, Any], action: str) -> OAuthToken | None:
        client = await self._get_client()
        should_close = self._http_client is None
        try:
            response = await client.post(
                f"{self.dashboard_url}/oauth/token",
                data=form,
                headers={"Accept": "application/json"},
                timeout=_TOKEN_TIMEOUT,
            )
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Failed to %s: %s", action, exc)
            return None
        finally:
            if should_close:
                await client.aclose()

        if not isinstance(data, dict) or not data.get("access_token"):
            logger.error("Failed to %s: no access_token in response", action)
            return None
        return OAuthToken.from_api(data)

    async def exchange_code_for_token(self, code: str, redirect_uri: str) -> OAuthToken | None:
        """Exchange an authorization code for tokens (public client, no secret)."""
        token = await self._request_token(
            {
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": redirect_uri,
                "client_id": self._settings.oauth_client_id,
            },
            "exchange OAuth code",
        )
        if token is not None:
            logger.info("Successfully exchanged OAuth code for access token")
        return token

    async def refresh_token(self, refresh_token: str) -> OAuthToken | None:
        form = {
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
            "client_id": self._settings.oauth_client_id,
        }
        if self._settings.oauth_client_secret:
            form["client_secret"] = self._settings.oauth_client_secret

        token = await self._request_token(form, "refresh token")
        if token is not None:
            logger.info("Successfully refreshed access token")
        return token

    async def complete_authorization(
        self,
        *,
        code: str | None,
        state: str | None,
        redirect_uri: str,
        error: str | None = None,
        error_description: str | None = None,
    ) -> OAuthToken:
        """Handle the OAuth callback: validate, exchange and store the tokens.

        Raises:
            OAuthError: Authorization denied, state mismatch, missing code
                or failed exchange.
        """
        if error:
            raise OAuthError(
                f"OAuth authorization failed: {error} - {error_description or 'Unknown error'}"
            )

        await self.verify_state(state)

        if not code:
            raise OAuthError("No authorization code received from Quant Cloud.")

        token = await self.exchange_code_for_token(code, redirect_uri)
        if token is None:
            raise OAuthError("Failed to exchange authorization code for access token.")

        await self.store_tokens(token)
        return token

    async def store_tokens(self, token: OAuthToken, now: float | None = None) -> None:
        """Persist tokens and switch the provider to OAuth authentication."""
        await self._secret_store.set_value(ACCESS_TOKEN_KEY_ID, token.access_token)
        if token.refresh_token:
            await self._secret_store.set_value(REFRESH_TOKEN_KEY_ID, token.refresh_token)

        issued_at = time.time() if now is None else now
        await self._state.set(
            self._state_key("oauth_expires_at"), int(issued_at + token.expires_in)
        )

        update_provider_settings(
            {"auth_method": "oauth", "access_token_key": ACCESS_TOKEN_KEY_ID}
        )
        logger.info("Stored Quant Cloud OAuth tokens")

    async def refresh_if_expired(self, now: float | None = None) -> bool:
        """Refresh the access token when it is (about to be) expired.

        Returns True when a new token was stored.
        """
        expires_at = await self._state.get(self._state_key("oauth_expires_at"))
        current = time.time() if now is None else now
        if not expires_at or current < float(expires_at) - _EXPIRY_MARGIN:
            return False

        refresh_token = await self._secret_store.get_value(REFRESH_TOKEN_KEY_ID)
        if not refresh_token:
            logger.warning("OAuth access token expired and no refresh token is stored")
            return False

        token = await self.refresh_token(refresh_token)
        if token is None:
            return False

        if not token.refresh_token:
            token.refresh_token = refresh_token
        await self.store_tokens(token, now=current)
        return True

    async def disconnect(self) -> None:
        """Remove stored OAuth tokens and fall back to manual authentication."""
        await self._secret_store.delete(ACCESS_TOKEN_KEY_ID)
        await self._secret_store.delete(REFRESH_TOKEN_KEY_ID)
        await self._state.delete(self._state_key("oauth_expires_at"))

        update_provider_settings({"auth_method": "manual", "access_token_key": ""})
        logger.info("Disconnected from Quant Cloud; tokens removed")
