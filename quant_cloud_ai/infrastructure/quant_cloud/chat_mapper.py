"""Mapping between domain chat messages and the Quant Cloud chat wire format.

Outbound, a conversation becomes a list of ``{role, content}`` entries
where content is either a plain string or a list of content blocks
(``text``, ``image``/``video``/``document``, ``toolUse``, ``toolResult``).
Inbound, the assistant turn is read from ``response`` (current shape) or
from the top level (legacy shape).
"""

import base64
import json
import logging
import uuid
from typing import Any

from quant_cloud_ai.domain.entities import (
    ChatCompletionResult,
    ChatMessage,
    MediaBlock,
    TokenUsage,
    ToolCall,
    ToolDefinition,
)

logger = logging.getLogger(__name__)

# Vendor APIs reject empty text blocks inside a tool result.
TOOL_RESULT_PLACEHOLDER = "Tool Result"

_TOOL_RESULT_ROLES = frozenset({"tool", "tool_result"})


def generate_tool_use_id() -> str:
    return f"tooluse_{uuid.uuid4().hex}"


# ── Outbound ────────────────────────────────────────────────────────


def map_media_block(block: MediaBlock) -> dict[str, Any]:
    """Serialize an attachment as an image/video/document content block."""
    if block.is_remote:
        source: dict[str, Any] = {"s3Location": {"uri": block.uri}}
    else:
        source = {"bytes": base64.b64encode(block.data or b"").decode("ascii")}

    body: dict[str, Any] = {"format": block.format, "source": source}
    if block.kind == "document":
        body["name"] = block.name or "document"
    return {block.kind: body}


def map_message(message: ChatMessage) -> dict[str, Any]:
    """Convert one domain message to its wire form."""
    # Tool result → user turn with a single toolResult block
    if message.role in _TOOL_RESULT_ROLES or message.tool_call_id:
        return {
            "role": "user",
            "content": [
                {
                    "toolResult": {
                        "toolUseId": message.tool_call_id,
                        "content": [{"text": message.text or TOOL_RESULT_PLACEHOLDER}],
                    }
                }
            ],
        }

    # Assistant turn requesting tool calls
    if message.role == "assistant" and message.tool_calls:
        blocks: list[dict[str, Any]] = []
        if message.text:
            blocks.append({"text": message.text})
        for call in message.tool_calls:
            blocks.append(
                {
                    "toolUse": {
                        "toolUseId": call.id,
                        "name": call.name,
                        "input": call.parsed_arguments(),
                    }
                }
            )
        return {"role": "assistant", "content": blocks}

    # Multimodal message: attachments first, then the text
    if message.attachments:
        blocks = [map_media_block(block) for block in message.attachments]
        if message.text:
            blocks.append({"text": message.text})
        return {"role": message.role, "content": blocks}

    return {"role": message.role, "content": message.text}


def map_messages(messages: list[ChatMessage]) -> tuple[list[dict[str, Any]], str | None]:
    """Convert a conversation to wire messages plus a system prompt.

    System messages are not part of the vendor message list; their text is
    lifted out and returned separately (None when there are none).
    """
    mapped: list[dict[str, Any]] = []
    system_parts: list[str] = []
    seen_tool_ids: set[str] = set()

    for message in messages:
        if message.role == "system":
            if message.text:
                system_parts.append(message.text)
            continue

        if message.role == "assistant":
            seen_tool_ids.update(call.id for call in message.tool_calls)
        elif message.tool_call_id and message.tool_call_id not in seen_tool_ids:
            logger.warning(
                "Tool result %s does not answer any earlier tool call",
                message.tool_call_id,
            )

        mapped.append(map_message(message))

    system_prompt = "\n\n".join(system_parts) if system_parts else None
    return mapped, system_prompt


def map_tools(tools: list[ToolDefinition]) -> list[dict[str, Any]]:
    """Convert tool definitions to ``toolSpec`` entries."""
    return [
        {
            "toolSpec": {
                "name": tool.name,
                "description": tool.description,
                "inputSchema": {"json": tool.parameters_schema or {"type": "object"}},
            }
        }
        for tool in tools
    ]


def build_chat_payload(
    messages: list[ChatMessage],
    model: str,
    *,
    temperature: float,
    max_tokens: int,
    tools: list[ToolDefinition] | None = None,
    response_format: dict[str, Any] | None = None,
    system_prompt: str | None = None,
) -> dict[str, Any]:
    """Build the request body for the chat and chat/stream endpoints."""
    mapped, lifted_system = map_messages(messages)

    payload: dict[str, Any] = {
        "messages": mapped,
        "modelId": model,
        "temperature": temperature,
        "maxTokens": max_tokens,
    }
    if response_format is not None:
        payload["responseFormat"] = response_format
    if tools:
        payload["toolConfig"] = {"tools": map_tools(tools)}

    prompts = [p for p in (system_prompt, lifted_system) if p]
    if prompts:
        payload["systemPrompt"] = "\n\n".join(prompts)
    return payload


# ── Inbound ─────────────────────────────────────────────────────────


def parse_tool_uses(
    raw: Any, tools: list[ToolDefinition] | None = None
) -> list[ToolCall]:
    """Normalize one tool-use object or a list of them into ToolCalls.

    Each call is paired by name with the offered tool definition. Entries
    without a ``toolUseId`` get a generated id.
    """
    if raw is None:
        return []
    entries = raw if isinstance(raw, list) else [raw]
    definitions = {tool.name: tool for tool in tools or []}

    calls: list[ToolCall] = []
    for entry in entries:
        if not isinstance(entry, dict):
            logger.warning("Ignoring malformed toolUse entry: %r", entry)
            continue
        name = entry.get("name") or ""
        definition = definitions.get(name)
        if tools and definition is None:
            logger.warning("Model called tool '%s' which was not offered", name)

        arguments = entry.get("input")
        if isinstance(arguments, str):
            encoded = arguments
        else:
            encoded = json.dumps(arguments if arguments is not None else {})

        calls.append(
            ToolCall(
                id=entry.get("toolUseId") or generate_tool_use_id(),
                name=name,
                arguments=encoded,
                definition=definition,
            )
        )
    return calls


def _split_content(content: Any) -> tuple[str, list[Any]]:
    """Extract text and embedded toolUse entries from string or block content."""
    if content is None:
        return "", []
    if isinstance(content, str):
        return content, []
    if not isinstance(content, list):
        return str(content), []

    texts: list[str] = []
    tool_uses: list[Any] = []
    for block in content:
        if isinstance(block, str):
            texts.append(block)
        elif isinstance(block, dict):
            if "text" in block:
                texts.append(str(block["text"]))
            if "toolUse" in block:
                tool_uses.append(block["toolUse"])
    return "".join(texts), tool_uses


def parse_assistant_turn(
    turn: dict[str, Any], tools: list[ToolDefinition] | None = None
) -> ChatMessage:
    """Build the assistant ChatMessage from a (nested or flat) response turn."""
    text, embedded_tool_uses = _split_content(turn.get("content"))
    tool_calls = parse_tool_uses(turn.get("toolUse"), tools)
    tool_calls.extend(parse_tool_uses(embedded_tool_uses, tools))
    return ChatMessage(
        role=turn.get("role") or "assistant",
        text=text,
        tool_calls=tool_calls,
    )


def parse_chat_response(
    data: dict[str, Any],
    model: str,
    tools: list[ToolDefinition] | None = None,
) -> ChatCompletionResult:
    """Parse a chat endpoint response into a ChatCompletionResult.

    The assistant turn is read from ``response`` when present and from the
    top-level object otherwise.
    """
    turn = data.get("response")
    if not isinstance(turn, dict):
        turn = data

    return ChatCompletionResult(
        model=data.get("modelId") or data.get("model") or model,
        message=parse_assistant_turn(turn, tools),
        stop_reason=data.get("stopReason") or turn.get("stopReason"),
        usage=TokenUsage.from_api(data.get("usage") or turn.get("usage")),
        raw=data,
    )
