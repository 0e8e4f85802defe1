from .auth_service import AuthService
from .models_service import ModelsService
from .provider_service import ProviderService
from .vector_index_service import MappingLocks, VectorIndexService

__all__ = [
    "AuthService",
    "MappingLocks",
    "ModelsService",
    "ProviderService",
    "VectorIndexService",
]
