"""Abstract interface (port) for secret storage."""

from abc import ABC, abstractmethod


class SecretStore(ABC):
    """Port — looks up secrets (access tokens, refresh tokens) by key id."""

    @abstractmethod
    async def get_value(self, key_id: str) -> str | None:
        """Return the secret stored under key_id, or None if there is none."""
        ...

    @abstractmethod
    async def set_value(self, key_id: str, value: str) -> None:
        """Create or replace the secret stored under key_id."""
        ...

    @abstractmethod
    async def delete(self, key_id: str) -> None:
        """Remove the secret; a missing key is not an error."""
        ...
