"""Abstract interface (port) for persistent key/value state."""

from abc import ABC, abstractmethod
from typing import Any


class StateStore(ABC):
    """Port — process-wide persistent state with no expiry.

    Values are JSON-serialisable. Entries stay until explicitly deleted.
    """

    @abstractmethod
    async def get(self, key: str, default: Any = None) -> Any:
        """Return the value stored under key, or default."""
        ...

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        """Create or replace the value stored under key."""
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove key; a missing key is not an error."""
        ...
