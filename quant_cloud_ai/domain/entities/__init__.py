from .chat_message import (
    ChatMessage,
    ChatCompletionResult,
    MediaBlock,
    StreamedChatChunk,
    TokenUsage,
    ToolCall,
    ToolDefinition,
)
from .stream_event import Complete, StreamEvent, TextDelta, ToolUse
from .model_descriptor import (
    FEATURE_CAPABILITIES,
    OPERATION_CAPABILITIES,
    Capability,
    ModelDescriptor,
    OperationType,
)
from .vector_collection import (
    IndexedItem,
    IndexSearchResult,
    VectorCollection,
    VectorDocument,
    VectorSearchMatch,
)
from .oauth import OAuthToken, Organization

__all__ = [
    "ChatMessage",
    "ChatCompletionResult",
    "MediaBlock",
    "StreamedChatChunk",
    "TokenUsage",
    "ToolCall",
    "ToolDefinition",
    "Complete",
    "StreamEvent",
    "TextDelta",
    "ToolUse",
    "FEATURE_CAPABILITIES",
    "OPERATION_CAPABILITIES",
    "Capability",
    "ModelDescriptor",
    "OperationType",
    "IndexedItem",
    "IndexSearchResult",
    "VectorCollection",
    "VectorDocument",
    "VectorSearchMatch",
    "OAuthToken",
    "Organization",
]
