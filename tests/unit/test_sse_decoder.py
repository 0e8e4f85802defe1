"""Unit tests for the SSE transcript decoder."""

import json
import logging

import pytest

from quant_cloud_ai.domain.entities import Complete, TextDelta, ToolUse
from quant_cloud_ai.infrastructure.quant_cloud.sse_decoder import (
    decode_events,
    iter_chat_chunks,
    iter_lines,
)


# ── Helpers ──


async def _chunks(*parts: bytes):
    for part in parts:
        yield part


def _frame(data: dict) -> bytes:
    return f"data: {json.dumps(data)}\n".encode()


async def _collect(aiter) -> list:
    return [item async for item in aiter]


# ── Tests ──


@pytest.mark.asyncio
async def test_deltas_then_complete():
    body = (
        b'data: {"delta":"Hel","role":"assistant"}\n'
        b'data: {"delta":"lo"}\n'
        b'data: {"complete":true}\n'
    )
    events = await _collect(decode_events(_chunks(body)))

    assert events == [
        TextDelta(text="Hel", role="assistant"),
        TextDelta(text="lo", role="assistant"),
        Complete(),
    ]


@pytest.mark.asyncio
async def test_line_split_across_chunks():
    """Chunk boundaries inside a line or a multi-byte character are irrelevant."""
    text = "data: {\"delta\": \"café\"}\n".encode("utf-8")
    split_at = text.index(b"\xc3") + 1  # inside the two-byte é
    events = await _collect(decode_events(_chunks(text[:7], text[7:split_at], text[split_at:])))

    assert events == [TextDelta(text="café")]


@pytest.mark.asyncio
async def test_malformed_frame_logs_one_warning_and_continues(caplog):
    body = (
        b'data: {"delta":"a"}\n'
        b"data: {not json\n"
        b'data: {"delta":"b"}\n'
    )
    with caplog.at_level(logging.DEBUG):
        events = await _collect(decode_events(_chunks(body)))

    assert [e.text for e in events] == ["a", "b"]
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 1
    assert "Failed to decode SSE JSON data" in warnings[0].getMessage()


@pytest.mark.asyncio
async def test_non_data_lines_are_ignored():
    body = (
        b": keep-alive\n"
        b"\n"
        b"event: message\n"
        b'data: {"delta":"x"}\n'
        b"data:{\"delta\":\"no space\"}\n"
    )
    events = await _collect(decode_events(_chunks(body)))

    assert events == [TextDelta(text="x")]


@pytest.mark.asyncio
async def test_end_of_stream_without_complete_is_implicit_completion():
    events = await _collect(decode_events(_chunks(_frame({"delta": "only"}))))
    assert events == [TextDelta(text="only")]


@pytest.mark.asyncio
async def test_trailing_line_without_newline_is_processed():
    events = await _collect(decode_events(_chunks(b'data: {"delta":"tail"}')))
    assert events == [TextDelta(text="tail")]


@pytest.mark.asyncio
async def test_stops_reading_after_complete():
    consumed: list[bytes] = []

    async def tracked():
        for part in (_frame({"delta": "a"}), _frame({"complete": True}), _frame({"delta": "late"})):
            consumed.append(part)
            yield part

    events = await _collect(decode_events(tracked()))

    assert events == [TextDelta(text="a"), Complete()]
    assert len(consumed) == 2


@pytest.mark.asyncio
async def test_tool_use_frame():
    body = _frame(
        {
            "toolUse": {"toolUseId": "t1", "name": "lookup", "input": {"q": "x"}},
            "stopReason": "tool_use",
        }
    )
    events = await _collect(decode_events(_chunks(body)))

    assert len(events) == 1
    event = events[0]
    assert isinstance(event, ToolUse)
    assert event.role == "assistant"
    assert event.stop_reason == "tool_use"
    assert event.tool.id == "t1"
    assert event.tool.name == "lookup"
    assert event.tool.parsed_arguments() == {"q": "x"}


@pytest.mark.asyncio
async def test_tool_use_list_in_done_event_gets_generated_ids():
    body = _frame(
        {
            "complete": True,
            "response": {
                "role": "user",
                "content": "calling tools",
                "toolUse": [{"name": "a", "input": {}}, {"name": "b", "input": {}}],
            },
        }
    )
    events = await _collect(decode_events(_chunks(body)))

    assert [type(e) for e in events] == [ToolUse, ToolUse, Complete]
    assert [e.tool.name for e in events[:2]] == ["a", "b"]
    assert all(e.tool.id.startswith("tooluse_") for e in events[:2])
    assert events[0].tool.id != events[1].tool.id
    assert events[0].role == "assistant"
    assert events[0].content == "calling tools"


@pytest.mark.asyncio
async def test_delta_defaults():
    events = await _collect(decode_events(_chunks(_frame({"delta": "", "usage": None}))))
    assert events == [TextDelta(text="", role="assistant", usage={})]


@pytest.mark.asyncio
async def test_non_object_json_is_skipped(caplog):
    with caplog.at_level(logging.WARNING):
        events = await _collect(decode_events(_chunks(b"data: [1, 2]\n", _frame({"delta": "ok"}))))

    assert events == [TextDelta(text="ok")]
    assert len(caplog.records) == 1


@pytest.mark.asyncio
async def test_iteration_is_single_pass():
    stream = decode_events(_chunks(_frame({"delta": "once"})))

    first = await _collect(stream)
    second = await _collect(stream)

    assert first == [TextDelta(text="once")]
    assert second == []


@pytest.mark.asyncio
async def test_iter_lines_trims_whitespace():
    lines = await _collect(iter_lines(_chunks(b"  data: x \r\n", b"\r\n")))
    assert lines == ["data: x", ""]


@pytest.mark.asyncio
async def test_chat_chunks_from_events():
    body = (
        _frame({"delta": "Hi", "usage": {"inputTokens": 3}})
        + _frame({"toolUse": {"toolUseId": "t9", "name": "search", "input": {}}})
        + _frame({"complete": True})
        + _frame({"delta": "ignored"})
    )
    chunks = await _collect(iter_chat_chunks(decode_events(_chunks(body))))

    assert len(chunks) == 2
    assert chunks[0].text == "Hi"
    assert chunks[0].usage == {"inputTokens": 3}
    assert chunks[1].text == ""
    assert [c.id for c in chunks[1].tool_calls] == ["t9"]
