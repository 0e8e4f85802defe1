"""Server-Sent Events decoder for the chat/stream endpoint.

The server writes one record per line, each data record prefixed with
``data: `` and followed by a JSON document:

    data: {"delta": "Hel", "role": "assistant"}
    data: {"delta": "lo"}
    data: {"toolUse": {"toolUseId": "t1", "name": "lookup", "input": {}}, "stopReason": "tool_use"}
    data: {"complete": true, "response": {...}, "usage": {...}}

``decode_events`` turns the raw byte stream into typed StreamEvents;
``iter_chat_chunks`` re-maps those events to caller-visible chunks.
"""

import json
import logging
from collections.abc import AsyncIterable, AsyncIterator
from typing import Any

from quant_cloud_ai.domain.entities import (
    Complete,
    StreamedChatChunk,
    StreamEvent,
    TextDelta,
    ToolDefinition,
    ToolUse,
)
from quant_cloud_ai.infrastructure.quant_cloud.chat_mapper import parse_tool_uses

logger = logging.getLogger(__name__)

DATA_PREFIX = "data: "


async def iter_lines(chunks: AsyncIterable[bytes]) -> AsyncIterator[str]:
    """Split a byte stream into trimmed text lines.

    Transport chunk boundaries carry no meaning: a line (or a multi-byte
    character) may arrive split across several chunks. A trailing line
    without a newline is still yielded at end of stream.
    """
    buffer = b""
    async for chunk in chunks:
        if not chunk:
            continue
        buffer += chunk
        while True:
            newline = buffer.find(b"\n")
            if newline < 0:
                break
            raw, buffer = buffer[:newline], buffer[newline + 1:]
            yield raw.decode("utf-8", errors="replace").strip()
    if buffer:
        yield buffer.decode("utf-8", errors="replace").strip()


def _events_from_frame(
    frame: dict[str, Any], tools: list[ToolDefinition] | None = None
) -> list[StreamEvent]:
    events: list[StreamEvent] = []

    if "delta" in frame and frame["delta"] is not None:
        events.append(
            TextDelta(
                text=str(frame["delta"]),
                role=frame.get("role") or "assistant",
                usage=frame.get("usage") or {},
            )
        )

    response = frame.get("response")
    if frame.get("toolUse") is not None:
        tool_uses = frame["toolUse"]
        role = frame.get("role") or "assistant"
        content = frame.get("content", "")
    elif isinstance(response, dict) and response.get("toolUse") is not None:
        # Terminal "done" event carrying the whole assistant turn.
        tool_uses = response["toolUse"]
        role = "assistant"
        content = response.get("content", "")
    else:
        tool_uses = None

    if tool_uses is not None:
        for tool in parse_tool_uses(tool_uses, tools):
            events.append(
                ToolUse(
                    tool=tool,
                    role=role,
                    stop_reason=frame.get("stopReason"),
                    content=content if content is not None else "",
                )
            )

    if frame.get("complete"):
        events.append(Complete())

    return events


async def decode_events(
    chunks: AsyncIterable[bytes], tools: list[ToolDefinition] | None = None
) -> AsyncIterator[StreamEvent]:
    """Decode an SSE byte stream into StreamEvents, lazily and in order.

    Non-``data:`` lines (keep-alives, comments, blank separators) are
    ignored. A frame that is not valid JSON is logged and skipped. The
    first frame with a truthy ``complete`` yields Complete and ends the
    sequence without reading further; end of stream without it ends the
    sequence too. Tool uses are paired by name with the offered ``tools``.
    """
    async for line in iter_lines(chunks):
        logger.debug("SSE line: %s", line)

        if not line.startswith(DATA_PREFIX):
            continue

        raw_json = line[len(DATA_PREFIX):]
        try:
            frame = json.loads(raw_json)
        except json.JSONDecodeError as exc:
            logger.warning("Failed to decode SSE JSON data: %s", exc)
            continue

        if not isinstance(frame, dict):
            logger.warning("Ignoring SSE frame that is not a JSON object: %.100s", raw_json)
            continue

        for event in _events_from_frame(frame, tools):
            yield event
            if isinstance(event, Complete):
                return


async def iter_chat_chunks(events: AsyncIterable[StreamEvent]) -> AsyncIterator[StreamedChatChunk]:
    """Re-map decoded events to the chat-chunk abstraction callers consume."""
    async for event in events:
        if isinstance(event, TextDelta):
            yield StreamedChatChunk(role=event.role, text=event.text, usage=event.usage)
        elif isinstance(event, ToolUse):
            yield StreamedChatChunk(role=event.role, text="", tool_calls=[event.tool])
        elif isinstance(event, Complete):
            return
