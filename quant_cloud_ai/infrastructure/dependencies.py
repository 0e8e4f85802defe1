"""FastAPI dependency injection — wires infrastructure to application layer."""

from collections.abc import AsyncGenerator

from fastapi import Depends

from quant_cloud_ai.config import get_settings
from quant_cloud_ai.application.interfaces import CacheBackend, SecretStore, StateStore
from quant_cloud_ai.application.services import (
    AuthService,
    MappingLocks,
    ModelsService,
    ProviderService,
    VectorIndexService,
)
from quant_cloud_ai.infrastructure.cache import InMemoryCacheBackend
from quant_cloud_ai.infrastructure.database.session import async_session_factory
from quant_cloud_ai.infrastructure.database.repositories import (
    SQLAlchemySecretStore,
    SQLAlchemyStateStore,
)
from quant_cloud_ai.infrastructure.quant_cloud import (
    DashboardClient,
    QuantCloudClient,
    QuantCloudImageProvider,
    QuantCloudVectorDbClient,
)
from quant_cloud_ai.infrastructure.secrets import EnvironmentSecretStore

# Process-wide model cache shared by every request.
_cache_backend = InMemoryCacheBackend()

# Process-wide locks guarding the vector id-mapping tables.
_mapping_locks = MappingLocks()


def get_cache_backend() -> CacheBackend:
    return _cache_backend


def get_mapping_locks() -> MappingLocks:
    return _mapping_locks


async def get_state_store() -> AsyncGenerator[StateStore, None]:
    """Provides the key/value state store (id mappings, OAuth state)."""
    yield SQLAlchemyStateStore(async_session_factory)


async def get_secret_store() -> AsyncGenerator[SecretStore, None]:
    """Provides the secret store: environment first, then the database."""
    yield EnvironmentSecretStore(fallback=SQLAlchemySecretStore(async_session_factory))


async def get_auth_service(
    secret_store: SecretStore = Depends(get_secret_store),
    state_store: StateStore = Depends(get_state_store),
) -> AsyncGenerator[AuthService, None]:
    yield AuthService(get_settings(), secret_store, state_store)


async def get_dashboard_client(
    secret_store: SecretStore = Depends(get_secret_store),
    auth_service: AuthService = Depends(get_auth_service),
) -> AsyncGenerator[DashboardClient, None]:
    """Provides the Dashboard API transport, refreshing an expired OAuth token first."""
    if get_settings().auth_method == "oauth":
        await auth_service.refresh_if_expired()
    # Settings may have been rewritten by the refresh.
    yield DashboardClient(get_settings(), secret_store)


async def get_chat_client(
    transport: DashboardClient = Depends(get_dashboard_client),
) -> AsyncGenerator[QuantCloudClient, None]:
    yield QuantCloudClient(transport)


async def get_models_service(
    transport: DashboardClient = Depends(get_dashboard_client),
    cache: CacheBackend = Depends(get_cache_backend),
) -> AsyncGenerator[ModelsService, None]:
    yield ModelsService(transport, cache, transport.settings)


async def get_provider_service(
    models_service: ModelsService = Depends(get_models_service),
) -> AsyncGenerator[ProviderService, None]:
    yield ProviderService(get_settings(), models_service)


async def get_vector_index_service(
    transport: DashboardClient = Depends(get_dashboard_client),
    state_store: StateStore = Depends(get_state_store),
    locks: MappingLocks = Depends(get_mapping_locks),
) -> AsyncGenerator[VectorIndexService, None]:
    """Provides the vector index service with the persistent id-mapping table."""
    yield VectorIndexService(
        QuantCloudVectorDbClient(transport),
        state_store,
        transport.settings,
        locks,
    )


async def get_image_provider(
    transport: DashboardClient = Depends(get_dashboard_client),
) -> AsyncGenerator[QuantCloudImageProvider, None]:
    yield QuantCloudImageProvider(transport)
