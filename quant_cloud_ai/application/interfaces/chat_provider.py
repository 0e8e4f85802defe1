"""Abstract chat provider interface — port for AI provider adapters."""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from typing import Any

from quant_cloud_ai.domain.entities import (
    ChatCompletionResult,
    ChatMessage,
    StreamedChatChunk,
    ToolDefinition,
)


class ChatProvider(ABC):
    """Port — defines what callers need from any chat provider."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Unique name identifying this provider (e.g. 'quant_cloud')."""
        ...

    @abstractmethod
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
        """Send a buffered chat completion request.

        Args:
            messages: The conversation history.
            model: The model identifier (e.g. 'amazon.nova-lite-v1:0').
            temperature: Sampling temperature; defaults from settings.
            max_tokens: Maximum tokens in the response; defaults from settings.
            tools: Functions the model may call.
            response_format: JSON-schema constraint for structured output.
            system_prompt: System instructions.

        Returns:
            A ChatCompletionResult with the assistant message and usage.

        Raises:
            TransportError: If the provider call fails.
        """
        ...

    @abstractmethod
    def stream(
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
        """Send a streaming chat completion request.

        Yields chunks lazily as the server produces them. The returned
        iterator is single-pass.

        Raises:
            TransportError: If the request cannot be sent.
            StreamReadError: If the connection fails mid-stream.
        """
        ...
