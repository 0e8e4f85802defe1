from .memory_cache import InMemoryCacheBackend

__all__ = ["InMemoryCacheBackend"]
