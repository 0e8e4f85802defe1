"""Abstract interface (port) for text-to-image generation."""

from abc import ABC, abstractmethod


class ImageProvider(ABC):
    """Port for generating images from a text prompt."""

    @abstractmethod
    async def generate_images(
        self,
        prompt: str,
        model: str,
        *,
        count: int = 1,
        width: int | None = None,
        height: int | None = None,
        negative_prompt: str | None = None,
        seed: int | None = None,
    ) -> list[bytes]:
        """Generate images and return their raw (decoded) bytes."""
        ...
