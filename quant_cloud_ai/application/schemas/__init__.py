from .chat import (
    AttachmentSchema,
    ChatCompletionRequest,
    ChatCompletionResponse,
    ChatMessageSchema,
    StreamChunkResponse,
    TokenUsageResponse,
    ToolCallSchema,
    ToolSchema,
)
from .generation import (
    EmbeddingsRequest,
    EmbeddingsResponse,
    ImageGenerationRequest,
    ImageGenerationResponse,
)
from .vector import (
    CreateCollectionRequest,
    DeleteItemsRequest,
    IndexedItemSchema,
    InsertItemsRequest,
    InsertItemsResponse,
    PurgeResponse,
    SearchRequest,
    SearchResultSchema,
    VdbIdsRequest,
    VdbIdsResponse,
)

__all__ = [
    "AttachmentSchema",
    "ChatCompletionRequest",
    "ChatCompletionResponse",
    "ChatMessageSchema",
    "StreamChunkResponse",
    "TokenUsageResponse",
    "ToolCallSchema",
    "ToolSchema",
    "EmbeddingsRequest",
    "EmbeddingsResponse",
    "ImageGenerationRequest",
    "ImageGenerationResponse",
    "CreateCollectionRequest",
    "DeleteItemsRequest",
    "IndexedItemSchema",
    "InsertItemsRequest",
    "InsertItemsResponse",
    "PurgeResponse",
    "SearchRequest",
    "SearchResultSchema",
    "VdbIdsRequest",
    "VdbIdsResponse",
]
