"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from quant_cloud_ai.config import get_settings
from quant_cloud_ai.infrastructure.database import Base, engine
from quant_cloud_ai.infrastructure.database.session import ensure_sqlite_directory
from quant_cloud_ai.infrastructure.logging.log_config import setup_logging
from quant_cloud_ai.presentation.api.router import router as api_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan — configure logging and create the key/value table."""
    settings = get_settings()
    setup_logging(settings)

    ensure_sqlite_directory(settings.database_url)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info(
        "Quant Cloud AI provider started (platform=%s, dashboard=%s)",
        settings.platform,
        settings.resolved_dashboard_url,
    )

    yield

    await engine.dispose()


def create_app() -> FastAPI:
    """Factory function that builds and configures the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_title,
        version=settings.app_version,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "quant_cloud_ai.main:app",
        host="0.0.0.0",
        port=8020,
        reload=True,
    )
