"""OAuth API controller — connect the provider to a Quant Cloud account."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import RedirectResponse
from pydantic import BaseModel

from quant_cloud_ai.application.services import AuthService
from quant_cloud_ai.domain.exceptions import OAuthError
from quant_cloud_ai.infrastructure.dependencies import get_auth_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/oauth", tags=["oauth"])


# ── Schemas ──────────────────────────────────────────────────────────

class ConnectionStatus(BaseModel):
    status: str                      # "connected" | "disconnected"
    message: str


class OrganizationResponse(BaseModel):
    name: str
    machine_name: str


class TokenStatusResponse(BaseModel):
    valid: bool
    organizations: list[OrganizationResponse]
    token_generation_url: str


# ── Endpoints ────────────────────────────────────────────────────────

@router.get("/connect", status_code=status.HTTP_302_FOUND)
async def connect(
    request: Request,
    auth_service: AuthService = Depends(get_auth_service),
) -> RedirectResponse:
    """Redirect the user to the dashboard consent screen."""
    callback_url = str(request.url_for("oauth_callback"))
    authorization_url = await auth_service.begin_authorization(callback_url)
    return RedirectResponse(authorization_url, status_code=status.HTTP_302_FOUND)


@router.get("/callback", response_model=ConnectionStatus, name="oauth_callback")
async def callback(
    request: Request,
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
    error_description: str | None = None,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Exchange the authorization code and store the resulting tokens."""
    try:
        await auth_service.complete_authorization(
            code=code,
            state=state,
            redirect_uri=str(request.url_for("oauth_callback")),
            error=error,
            error_description=error_description,
        )
    except OAuthError as exc:
        logger.warning("OAuth callback rejected: %s", exc)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))

    return ConnectionStatus(
        status="connected",
        message="Successfully connected to Quant Cloud! Your access token has been stored securely.",
    )


@router.post("/disconnect", response_model=ConnectionStatus)
async def disconnect(auth_service: AuthService = Depends(get_auth_service)):
    await auth_service.disconnect()
    return ConnectionStatus(
        status="disconnected",
        message="Disconnected from Quant Cloud. Your tokens have been removed.",
    )


@router.get("/status", response_model=TokenStatusResponse)
async def token_status(auth_service: AuthService = Depends(get_auth_service)):
    """Report whether the configured token works and which organisations it sees."""
    organizations = await auth_service.get_organizations()
    return TokenStatusResponse(
        valid=bool(organizations),
        organizations=[
            OrganizationResponse(name=o.name, machine_name=o.machine_name)
            for o in organizations
        ],
        token_generation_url=auth_service.get_token_generation_url(),
    )
