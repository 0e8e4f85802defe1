"""Abstract interface (port) for a short-term cache."""

from abc import ABC, abstractmethod
from typing import Any


class CacheBackend(ABC):
    """Port — time-boxed cache of computed or fetched values."""

    @abstractmethod
    def get(self, key: str) -> Any | None:
        """Return the cached value, or None on a miss or after expiry."""
        ...

    @abstractmethod
    def set(self, key: str, value: Any, ttl: float) -> None:
        """Store value under key for ttl seconds."""
        ...

    @abstractmethod
    def delete_many(self, keys: list[str]) -> None:
        """Drop the given keys; missing keys are ignored."""
        ...
