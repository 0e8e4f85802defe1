"""Pydantic v2 schemas (DTOs) for the chat endpoints."""

import base64
import binascii
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from quant_cloud_ai.domain.entities import (
    ChatCompletionResult,
    ChatMessage,
    MediaBlock,
    StreamedChatChunk,
    ToolCall,
    ToolDefinition,
)


# ── Message parts ──


class AttachmentSchema(BaseModel):
    """An image, video or document, inline (base64) or by URI."""

    mime_type: str = Field(..., examples=["image/png", "application/pdf"])
    data: str | None = Field(default=None, description="Base64-encoded file content")
    uri: str | None = Field(default=None, description="Remote location, e.g. s3://bucket/key")
    name: str | None = None

    @field_validator("data")
    @classmethod
    def _valid_base64(cls, value: str | None) -> str | None:
        if value is not None:
            try:
                base64.b64decode(value, validate=True)
            except (binascii.Error, ValueError) as exc:
                raise ValueError("data must be valid base64") from exc
        return value

    @model_validator(mode="after")
    def _one_source(self) -> "AttachmentSchema":
        if (self.data is None) == (self.uri is None):
            raise ValueError("exactly one of data or uri is required")
        return self

    def to_entity(self) -> MediaBlock:
        if self.uri is not None:
            return MediaBlock.from_uri(self.uri, self.mime_type, self.name)
        return MediaBlock.from_bytes(base64.b64decode(self.data or ""), self.mime_type, self.name)


class ToolCallSchema(BaseModel):
    id: str
    name: str
    arguments: str = "{}"  # JSON-encoded


class ToolSchema(BaseModel):
    name: str
    description: str = ""
    parameters: dict[str, Any] | None = None

    def to_entity(self) -> ToolDefinition:
        return ToolDefinition(
            name=self.name,
            description=self.description,
            parameters_schema=self.parameters,
        )


class ChatMessageSchema(BaseModel):
    role: str = Field(..., pattern=r"^(system|user|assistant|tool)$")
    content: str = ""
    attachments: list[AttachmentSchema] = Field(default_factory=list)
    tool_calls: list[ToolCallSchema] = Field(default_factory=list)
    tool_call_id: str | None = None

    def to_entity(self) -> ChatMessage:
        return ChatMessage(
            role=self.role,
            text=self.content,
            attachments=[a.to_entity() for a in self.attachments],
            tool_calls=[
                ToolCall(id=c.id, name=c.name, arguments=c.arguments)
                for c in self.tool_calls
            ],
            tool_call_id=self.tool_call_id,
        )


# ── Request / Response ──


class ChatCompletionRequest(BaseModel):
    """Request schema for the chat completion endpoints."""

    model: str | None = Field(
        default=None, description="Model identifier; defaults to the configured model"
    )
    messages: list[ChatMessageSchema] = Field(..., min_length=1)
    temperature: float | None = Field(default=None, ge=0.0, le=1.0)
    max_tokens: int | None = Field(default=None, gt=0)
    system_prompt: str | None = None
    tools: list[ToolSchema] = Field(default_factory=list)
    response_format: dict[str, Any] | None = None


class TokenUsageResponse(BaseModel):
    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0


class ChatCompletionResponse(BaseModel):
    model: str
    content: str
    stop_reason: str | None = None
    usage: TokenUsageResponse
    tool_calls: list[ToolCallSchema] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: ChatCompletionResult) -> "ChatCompletionResponse":
        return cls(
            model=result.model,
            content=result.content,
            stop_reason=result.stop_reason,
            usage=TokenUsageResponse(
                input_tokens=result.usage.input_tokens,
                output_tokens=result.usage.output_tokens,
                total_tokens=result.usage.total_tokens,
            ),
            tool_calls=[
                ToolCallSchema(id=c.id, name=c.name, arguments=c.arguments)
                for c in result.tool_calls
            ],
        )


class StreamChunkResponse(BaseModel):
    """One SSE ``data:`` payload emitted by the streaming endpoint."""

    role: str
    text: str = ""
    usage: dict[str, Any] = Field(default_factory=dict)
    tool_calls: list[ToolCallSchema] = Field(default_factory=list)

    @classmethod
    def from_chunk(cls, chunk: StreamedChatChunk) -> "StreamChunkResponse":
        return cls(
            role=chunk.role,
            text=chunk.text,
            usage=chunk.usage or {},
            tool_calls=[
                ToolCallSchema(id=c.id, name=c.name, arguments=c.arguments)
                for c in chunk.tool_calls
            ],
        )
