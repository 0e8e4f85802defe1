import json
import logging
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache

_config_logger = logging.getLogger(__name__)

SETTINGS_FILE = Path("data/settings.json")
_PACKAGE_DIR = Path(__file__).resolve().parents[1]
_ENV_FILES = (
    _PACKAGE_DIR / ".env",
    ".env",
)

# Keys that may be changed at runtime (settings screen, OAuth callback).
OVERRIDABLE_KEYS = frozenset({
    "platform",
    "organization_id",
    "auth_method",
    "access_token_key",
    "default_model",
    "temperature",
    "max_tokens",
    "timeout",
    "enable_logging",
})

PLATFORM_DASHBOARD_URLS: dict[str, str] = {
    "quantcdn": "https://dashboard.quantcdn.io",
    "quantgov": "https://dash.quantgov.cloud",
    "quantcdn_staging": "https://portal.stage.quantcdn.io",
    "quantgov_staging": "https://dash.stage.quantgov.cloud",
}
DEFAULT_PLATFORM = "quantcdn"


class Settings(BaseSettings):
    """Provider settings loaded from environment variables (QUANT_CLOUD_*)."""

    app_title: str = "Quant Cloud AI Provider"
    app_version: str = "0.1.0"
    app_env: str = "development"
    cors_origins: list[str] = ["http://localhost:3000"]

    # Platform & authentication
    platform: str = DEFAULT_PLATFORM
    dashboard_url: str = ""                  # Overrides the platform URL when set
    organization_id: str = ""
    auth_method: str = "manual"              # "manual" | "oauth"
    access_token_key: str = ""               # Secret-store key holding the bearer token
    oauth_client_id: str = "drupal-ai-provider"
    oauth_client_secret: str = ""

    # Model defaults
    default_model: str = "amazon.nova-lite-v1:0"
    temperature: float = 0.7
    max_tokens: int = 1000
    completion_temperature: float = 0.3
    completion_max_tokens: int = 500

    # Embeddings
    embedding_model: str = "amazon.titan-embed-text-v2:0"
    embedding_dimensions: int = 1024
    embedding_normalize: bool = True

    # Advanced
    timeout: float = 30.0
    streaming_timeout: float = 60.0
    enable_logging: bool = True

    # Persistent state (key/value table) and its key namespace
    state_namespace: str = "ai_provider_quant_cloud"
    database_url: str = "sqlite:///data/quant_cloud_ai.db"

    # Per-category log levels (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    log_level: str = "INFO"                  # Root / app-wide
    log_level_sql: str = "WARNING"           # sqlalchemy.engine SQL queries
    log_level_http: str = "WARNING"          # httpx / httpcore outbound HTTP
    log_level_uvicorn: str = "INFO"          # uvicorn.access / uvicorn.error
    log_level_quant_cloud: str = "INFO"      # Quant Cloud API clients

    model_config = SettingsConfigDict(
        env_prefix="QUANT_CLOUD_",
        env_file=_ENV_FILES,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def model_post_init(self, __context: object) -> None:
        """Merge runtime overrides from data/settings.json into the settings."""
        if SETTINGS_FILE.exists():
            try:
                overrides = json.loads(SETTINGS_FILE.read_text("utf-8"))
                for key in OVERRIDABLE_KEYS:
                    if key in overrides and overrides[key] is not None:
                        object.__setattr__(self, key, overrides[key])
            except Exception as exc:
                _config_logger.warning("Could not load settings overrides: %s", exc)

    @property
    def resolved_dashboard_url(self) -> str:
        """Dashboard base URL for the configured platform, without trailing slash."""
        if self.dashboard_url:
            return self.dashboard_url.rstrip("/")
        url = PLATFORM_DASHBOARD_URLS.get(
            self.platform or DEFAULT_PLATFORM,
            PLATFORM_DASHBOARD_URLS[DEFAULT_PLATFORM],
        )
        return url.rstrip("/")


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance — reads .env once."""
    return Settings()
