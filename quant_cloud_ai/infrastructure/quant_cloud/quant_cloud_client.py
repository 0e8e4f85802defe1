"""Quant Cloud chat client — implements the ChatProvider interface.

Talks to the Dashboard AI API (``/ai/chat`` and ``/ai/chat/stream``)
through the DashboardClient transport. Supports multimodal input, tool
calling and JSON-schema constrained output.
"""

import logging
from collections.abc import AsyncIterator
from typing import Any

from quant_cloud_ai.application.interfaces.chat_provider import ChatProvider
from quant_cloud_ai.config import Settings
from quant_cloud_ai.domain.entities import (
    ChatCompletionResult,
    ChatMessage,
    StreamedChatChunk,
    ToolDefinition,
)
from quant_cloud_ai.infrastructure.quant_cloud.chat_mapper import (
    build_chat_payload,
    parse_chat_response,
)
from quant_cloud_ai.infrastructure.quant_cloud.dashboard_client import DashboardClient
from quant_cloud_ai.infrastructure.quant_cloud.sse_decoder import (
    decode_events,
    iter_chat_chunks,
)

logger = logging.getLogger(__name__)


class QuantCloudClient(ChatProvider):
    """Infrastructure adapter — chat completions against Quant Cloud.

    Buffered calls return one ChatCompletionResult; streaming calls return
    a lazy, single-pass sequence of StreamedChatChunk.
    """

    def __init__(self, transport: DashboardClient):
        self._transport = transport
        self._settings = transport.settings

    @property
    def provider_name(self) -> str:
        return "quant_cloud"

    @property
    def settings(self) -> Settings:
        return self._settings

    def _build_payload(
        self,
        messages: list[ChatMessage],
        model: str,
        *,
        temperature: float | None,
        max_tokens: int | None,
        tools: list[ToolDefinition] | None,
        response_format: dict[str, Any] | None,
        system_prompt: str | None,
    ) -> dict[str, Any]:
        return build_chat_payload(
            messages,
            model,
            temperature=temperature if temperature is not None else self._settings.temperature,
            max_tokens=max_tokens if max_tokens is not None else self._settings.max_tokens,
            tools=tools,
            response_format=response_format,
            system_prompt=system_prompt,
        )

    async def complete(
        self,
        messages: list[ChatMessage],
        model: str,
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
        tools: list[ToolDefinition] | None = None,
        response_format: dict[str, Any] | None = None,
        system_prompt: str | None = None,
    ) -> ChatCompletionResult:
        """Send a buffered chat completion to ``/ai/chat``."""
        payload = self._build_payload(
            messages,
            model,
            temperature=temperature,
            max_tokens=max_tokens,
            tools=tools,
            response_format=response_format,
            system_prompt=system_prompt,
        )
        data = await self._transport.post("chat", payload)
        result = parse_chat_response(data, model, tools)

        if result.tool_calls:
            logger.info(
                "Model %s requested %d tool call(s): %s",
                model,
                len(result.tool_calls),
                ", ".join(call.name for call in result.tool_calls),
            )
        return result

    async def stream(
        self,
        messages: list[ChatMessage],
        model: str,
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
        tools: list[ToolDefinition] | None = None,
        response_format: dict[str, Any] | None = None,
        system_prompt: str | None = None,
    ) -> AsyncIterator[StreamedChatChunk]:
        """Stream a chat completion from ``/ai/chat/stream``.

        Nothing is sent until the first chunk is requested. The connection
        is closed once the server signals completion, the body ends, or
        the consumer stops iterating.
        """
        payload = self._build_payload(
            messages,
            model,
            temperature=temperature,
            max_tokens=max_tokens,
            tools=tools,
            response_format=response_format,
            system_prompt=system_prompt,
        )
        async with self._transport.stream("chat/stream", payload) as body:
            async for chunk in iter_chat_chunks(decode_events(body, tools)):
                yield chunk

    async def complete_text(
        self,
        prompt: str,
        model: str,
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        """Text-to-text completion; the dashboard serves it through the chat endpoint."""
        result = await self.complete(
            [ChatMessage(role="user", text=prompt)],
            model,
            temperature=(
                temperature if temperature is not None
                else self._settings.completion_temperature
            ),
            max_tokens=(
                max_tokens if max_tokens is not None
                else self._settings.completion_max_tokens
            ),
        )
        return result.content

    async def stream_text(self, prompt: str, model: str) -> str:
        """Stream a text completion and return the accumulated text."""
        parts: list[str] = []
        async for chunk in self.stream([ChatMessage(role="user", text=prompt)], model):
            parts.append(chunk.text)
        return "".join(parts)
