"""Domain entities for chat messages — framework-independent, multimodal."""

import json
from dataclasses import dataclass, field
from typing import Any

# MIME type → vendor format tag. Anything not listed falls back to the subtype.
_MIME_FORMATS: dict[str, str] = {
    "image/jpeg": "jpeg",
    "image/jpg": "jpeg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
    "video/mp4": "mp4",
    "video/quicktime": "mov",
    "video/x-matroska": "mkv",
    "video/webm": "webm",
    "video/x-flv": "flv",
    "video/mpeg": "mpeg",
    "video/3gpp": "three_gp",
    "application/pdf": "pdf",
    "text/plain": "txt",
    "text/markdown": "md",
    "text/csv": "csv",
    "text/html": "html",
    "application/msword": "doc",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": "docx",
    "application/vnd.ms-excel": "xls",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": "xlsx",
}


def media_kind(mime_type: str) -> str:
    """Classify a MIME type as "image", "video" or "document"."""
    major = mime_type.split("/", 1)[0].lower()
    if major in ("image", "video"):
        return major
    return "document"


def media_format(mime_type: str) -> str:
    """Derive the vendor format tag from a MIME type."""
    normalized = mime_type.split(";", 1)[0].strip().lower()
    if normalized in _MIME_FORMATS:
        return _MIME_FORMATS[normalized]
    return normalized.rsplit("/", 1)[-1]


@dataclass(frozen=True)
class MediaBlock:
    """An image, video or document attached to a chat message.

    Holds either inline bytes (sent base64-encoded) or the URI of content
    that already lives in remote storage — never both.
    """

    kind: str  # "image" | "video" | "document"
    format: str  # e.g. "png", "pdf", "mp4"
    data: bytes | None = None
    uri: str | None = None
    name: str | None = None  # Documents need a display name on the wire

    def __post_init__(self) -> None:
        if (self.data is None) == (self.uri is None):
            raise ValueError("MediaBlock needs exactly one of data or uri")

    @classmethod
    def from_bytes(cls, data: bytes, mime_type: str, name: str | None = None) -> "MediaBlock":
        return cls(
            kind=media_kind(mime_type),
            format=media_format(mime_type),
            data=data,
            name=name,
        )

    @classmethod
    def from_uri(cls, uri: str, mime_type: str, name: str | None = None) -> "MediaBlock":
        return cls(
            kind=media_kind(mime_type),
            format=media_format(mime_type),
            uri=uri,
            name=name,
        )

    @property
    def is_remote(self) -> bool:
        return self.uri is not None


@dataclass
class ToolDefinition:
    """A function the model may call, described by a JSON schema."""

    name: str
    description: str = ""
    parameters_schema: dict[str, Any] | None = None


@dataclass
class ToolCall:
    """A tool call requested by the model in an assistant turn."""

    id: str
    name: str
    arguments: str = "{}"  # JSON-encoded arguments string
    definition: ToolDefinition | None = None  # The offered tool this call targets

    def parsed_arguments(self) -> Any:
        """Decode the arguments string; invalid or empty JSON yields {}."""
        if not self.arguments:
            return {}
        try:
            return json.loads(self.arguments)
        except json.JSONDecodeError:
            return {}


@dataclass
class ChatMessage:
    """A single message in a chat conversation.

    Attachments (images, video, documents) travel alongside the text.
    Assistant turns may carry tool calls; the following tool-result turn
    sets role="tool" and tool_call_id to the id of the call it answers.
    """

    role: str  # "system" | "user" | "assistant" | "tool"
    text: str = ""
    attachments: list[MediaBlock] = field(default_factory=list)
    tool_calls: list[ToolCall] = field(default_factory=list)
    tool_call_id: str | None = None  # Required when role == "tool"

    def __post_init__(self) -> None:
        if self.role in ("tool", "tool_result") and not self.tool_call_id:
            raise ValueError("Tool result messages must carry a tool_call_id")


@dataclass
class TokenUsage:
    """Token usage statistics from a completion."""

    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0

    @classmethod
    def from_api(cls, usage: dict[str, Any] | None) -> "TokenUsage":
        usage = usage or {}
        input_tokens = int(usage.get("inputTokens", 0) or 0)
        output_tokens = int(usage.get("outputTokens", 0) or 0)
        total = usage.get("totalTokens")
        return cls(
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            total_tokens=int(total) if total is not None else input_tokens + output_tokens,
        )


@dataclass
class ChatCompletionResult:
    """Result from a buffered chat completion call."""

    model: str
    message: ChatMessage
    stop_reason: str | None = None  # "end_turn" | "tool_use" | "max_tokens" | ...
    usage: TokenUsage = field(default_factory=TokenUsage)
    raw: dict[str, Any] = field(default_factory=dict)

    @property
    def content(self) -> str:
        return self.message.text

    @property
    def tool_calls(self) -> list[ToolCall]:
        return self.message.tool_calls


@dataclass
class StreamedChatChunk:
    """One caller-visible piece of a streamed chat response."""

    role: str = "assistant"
    text: str = ""
    usage: dict[str, Any] = field(default_factory=dict)
    tool_calls: list[ToolCall] = field(default_factory=list)
