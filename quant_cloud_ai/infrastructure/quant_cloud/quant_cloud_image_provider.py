"""Quant Cloud image generation — calls the /ai/image-generation endpoint."""

import base64
import logging
from typing import Any

from quant_cloud_ai.application.interfaces.image_provider import ImageProvider
from quant_cloud_ai.infrastructure.quant_cloud.dashboard_client import DashboardClient

logger = logging.getLogger(__name__)


class QuantCloudImageProvider(ImageProvider):
    """Infrastructure adapter — text-to-image via Quant Cloud."""

    def __init__(self, transport: DashboardClient):
        self._transport = transport

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
        payload: dict[str, Any] = {
            "prompt": prompt,
            "modelId": model,
            "numberOfImages": max(count, 1),
        }
        if width is not None:
            payload["width"] = width
        if height is not None:
            payload["height"] = height
        if negative_prompt:
            payload["negativePrompt"] = negative_prompt
        if seed is not None:
            payload["seed"] = seed

        data = await self._transport.post("image-generation", payload)

        images: list[bytes] = []
        for item in data.get("images", []):
            encoded = item.get("base64") if isinstance(item, dict) else item
            if encoded:
                images.append(base64.b64decode(encoded))

        logger.info("Generated %d image(s) with %s", len(images), model)
        return images
