"""Logging setup for the provider and its HTTP surface.

Every module logs through ``logging.getLogger(__name__)``. This module
only decides levels: one for the root logger and one per category, so
SQL statements or raw HTTP traffic can be turned up independently of the
Quant Cloud API clients.

Usage:
    from quant_cloud_ai.infrastructure.logging.log_config import setup_logging
    setup_logging()   # once at startup (FastAPI lifespan)
"""

import logging
import sys

from quant_cloud_ai.config import Settings, get_settings


# Settings field → logger names it controls.
_CATEGORY_MAP: dict[str, list[str]] = {
    "log_level_sql": [
        "sqlalchemy.engine",
        "sqlalchemy.pool",
        "aiosqlite",
    ],
    "log_level_http": [
        "httpx",
        "httpcore",
    ],
    "log_level_uvicorn": [
        "uvicorn",
        "uvicorn.access",
        "uvicorn.error",
    ],
    "log_level_quant_cloud": [
        "quant_cloud_ai.infrastructure.quant_cloud",
        "quant_cloud_ai.application.services",
    ],
}


def setup_logging(settings: Settings | None = None) -> None:
    settings = settings or get_settings()

    root = logging.getLogger()
    root.setLevel(_parse_level(settings.log_level))

    # uvicorn installs its own handlers; scripts and tests may not have any.
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(levelname)-8s %(name)s — %(message)s"))
        root.addHandler(handler)

    for settings_field, logger_names in _CATEGORY_MAP.items():
        level = _parse_level(getattr(settings, settings_field, "INFO"))
        for name in logger_names:
            logging.getLogger(name).setLevel(level)

    logging.getLogger(__name__).debug(
        "Logging configured — root=%s, sql=%s, http=%s, quant_cloud=%s",
        settings.log_level,
        settings.log_level_sql,
        settings.log_level_http,
        settings.log_level_quant_cloud,
    )


def _parse_level(raw: str) -> int:
    """Level name → logging constant; unknown names mean INFO."""
    numeric = getattr(logging, str(raw).upper(), None)
    if isinstance(numeric, int):
        return numeric
    return logging.INFO
