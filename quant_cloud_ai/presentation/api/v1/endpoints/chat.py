"""Chat completion endpoints — buffered and streaming."""

import json

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import StreamingResponse

from quant_cloud_ai.application.schemas import (
    ChatCompletionRequest,
    ChatCompletionResponse,
    StreamChunkResponse,
)
from quant_cloud_ai.domain.entities import ChatMessage
from quant_cloud_ai.domain.exceptions import ConfigurationError, TransportError
from quant_cloud_ai.infrastructure.dependencies import get_chat_client
from quant_cloud_ai.infrastructure.quant_cloud import QuantCloudClient

router = APIRouter(prefix="/chat", tags=["Chat Completions"])


def _to_messages(request: ChatCompletionRequest) -> list[ChatMessage]:
    try:
        return [m.to_entity() for m in request.messages]
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))


def _raise_http(e: Exception) -> None:
    if isinstance(e, ConfigurationError):
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    if isinstance(e, TransportError):
        code = e.status_code if e.status_code and 400 <= e.status_code < 600 else 502
        raise HTTPException(status_code=code, detail=f"[{e.operation}] {e.message}")
    raise e


@router.post("/completions", response_model=ChatCompletionResponse)
async def chat_completion(
    request: ChatCompletionRequest,
    client: QuantCloudClient = Depends(get_chat_client),
) -> ChatCompletionResponse:
    """Execute a buffered chat completion, optionally with tools or multimodal input."""
    messages = _to_messages(request)
    model = request.model or client.settings.default_model
    try:
        result = await client.complete(
            messages,
            model,
            temperature=request.temperature,
            max_tokens=request.max_tokens,
            tools=[t.to_entity() for t in request.tools] or None,
            response_format=request.response_format,
            system_prompt=request.system_prompt,
        )
    except (ConfigurationError, TransportError) as e:
        _raise_http(e)

    return ChatCompletionResponse.from_result(result)


@router.post("/completions/stream")
async def chat_completion_stream(
    request: ChatCompletionRequest,
    client: QuantCloudClient = Depends(get_chat_client),
) -> StreamingResponse:
    """Execute a streaming chat completion via Server-Sent Events (SSE).

    Each chunk is sent as a ``data: {...}`` line; the stream ends with
    ``data: [DONE]``.
    """
    messages = _to_messages(request)
    model = request.model or client.settings.default_model

    async def event_generator():
        try:
            async for chunk in client.stream(
                messages,
                model,
                temperature=request.temperature,
                max_tokens=request.max_tokens,
                tools=[t.to_entity() for t in request.tools] or None,
                response_format=request.response_format,
                system_prompt=request.system_prompt,
            ):
                yield f"data: {StreamChunkResponse.from_chunk(chunk).model_dump_json()}\n\n"
        except (ConfigurationError, TransportError) as e:
            error_data = json.dumps(
                {"error": {"code": getattr(e, "status_code", None), "message": str(e)}}
            )
            yield f"data: {error_data}\n\n"
        yield "data: [DONE]\n\n"

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )
