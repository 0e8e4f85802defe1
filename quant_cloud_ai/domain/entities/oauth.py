"""OAuth token and organization entities."""

from dataclasses import dataclass
from typing import Any


@dataclass
class OAuthToken:
    """Token response from the dashboard's /oauth/token endpoint."""

    access_token: str
    refresh_token: str | None = None
    expires_in: int = 3600
    token_type: str = "Bearer"
    scope: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "OAuthToken":
        return cls(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token"),
            expires_in=int(data.get("expires_in") or 3600),
            token_type=data.get("token_type") or "Bearer",
            scope=data.get("scope"),
        )


@dataclass
class Organization:
    """An organization the authenticated user belongs to."""

    name: str
    machine_name: str
