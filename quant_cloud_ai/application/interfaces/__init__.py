from .cache_backend import CacheBackend
from .chat_provider import ChatProvider
from .embedding_provider import EmbeddingProvider
from .image_provider import ImageProvider
from .secret_store import SecretStore
from .state_store import StateStore

__all__ = [
    "CacheBackend",
    "ChatProvider",
    "EmbeddingProvider",
    "ImageProvider",
    "SecretStore",
    "StateStore",
]
