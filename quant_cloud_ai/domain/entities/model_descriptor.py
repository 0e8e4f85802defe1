"""AI model metadata sourced from the remote model catalog."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Capability(Enum):
    """What a model can do."""

    CHAT = "chat"
    EMBEDDINGS = "embeddings"
    VISION = "vision"
    IMAGE_GENERATION = "image_generation"
    STREAMING = "streaming"
    TOOLS = "tools"
    STRUCTURED_OUTPUT = "structured_output"


class OperationType(Enum):
    """Operation types a host framework asks the provider for."""

    CHAT = "chat"
    EMBEDDINGS = "embeddings"
    TEXT_TO_IMAGE = "text_to_image"
    IMAGE_TO_IMAGE = "image_to_image"


# Vendor "supportedFeatures" strings → Capability.
FEATURE_CAPABILITIES: dict[str, Capability] = {
    "chat": Capability.CHAT,
    "embeddings": Capability.EMBEDDINGS,
    "vision": Capability.VISION,
    "image_generation": Capability.IMAGE_GENERATION,
    "streaming": Capability.STREAMING,
    "tools": Capability.TOOLS,
    "function_calling": Capability.TOOLS,
    "structured_output": Capability.STRUCTURED_OUTPUT,
}

# Host operation → capability a model needs to serve it.
OPERATION_CAPABILITIES: dict[OperationType, Capability] = {
    OperationType.CHAT: Capability.CHAT,
    OperationType.EMBEDDINGS: Capability.EMBEDDINGS,
    OperationType.TEXT_TO_IMAGE: Capability.IMAGE_GENERATION,
    OperationType.IMAGE_TO_IMAGE: Capability.IMAGE_GENERATION,
}


@dataclass(frozen=True)
class ModelDescriptor:
    """An available AI model with its limits and capability flags."""

    id: str
    name: str
    provider: str = ""
    description: str = ""
    context_window: int = 0
    max_output_tokens: int = 0
    capabilities: frozenset[Capability] = field(default_factory=frozenset)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "ModelDescriptor":
        """Build a descriptor from a catalog entry; unknown features are dropped."""
        features = data.get("supportedFeatures") or []
        capabilities = frozenset(
            FEATURE_CAPABILITIES[f] for f in features if f in FEATURE_CAPABILITIES
        )
        model_id = data["id"]
        return cls(
            id=model_id,
            name=data.get("name") or model_id,
            provider=data.get("provider") or "",
            description=data.get("description") or "",
            context_window=int(data.get("contextWindow") or 0),
            max_output_tokens=int(data.get("maxOutputTokens") or 0),
            capabilities=capabilities,
        )

    def supports(self, capability: Capability) -> bool:
        return capability in self.capabilities
