"""Events decoded from a streamed chat transcript. Never persisted."""

from dataclasses import dataclass, field
from typing import Any, Union

from .chat_message import ToolCall


@dataclass(frozen=True)
class TextDelta:
    """A fragment of assistant text."""

    text: str
    role: str = "assistant"
    usage: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ToolUse:
    """The model asked for a tool to be invoked."""

    tool: ToolCall
    role: str = "assistant"
    stop_reason: str | None = None
    content: Any = ""


@dataclass(frozen=True)
class Complete:
    """The server signalled the end of the transcript."""


StreamEvent = Union[TextDelta, ToolUse, Complete]
