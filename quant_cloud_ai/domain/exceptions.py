"""Domain-specific exceptions — framework-independent."""


class QuantCloudError(Exception):
    """Base class for all errors raised by the Quant Cloud provider."""


class ConfigurationError(QuantCloudError):
    """Raised before any network call when required settings are missing."""

    def __init__(self, setting: str, message: str | None = None):
        self.setting = setting
        super().__init__(message or f"{setting} not configured")


class TransportError(QuantCloudError):
    """Raised when a call to the Quant Cloud API fails.

    Network failures are chained (``raise ... from exc``) so the original
    httpx exception stays reachable through ``__cause__``. Non-2xx
    responses carry their status code.
    """

    def __init__(self, operation: str, message: str, status_code: int | None = None):
        self.operation = operation
        self.status_code = status_code
        self.message = message
        if status_code is not None:
            super().__init__(f"[{operation}] {status_code}: {message}")
        else:
            super().__init__(f"[{operation}] {message}")


class StreamReadError(TransportError):
    """Raised when reading a streamed response body fails mid-stream."""


class EntityNotFoundError(QuantCloudError):
    """Raised when a requested entity does not exist."""

    def __init__(self, entity_type: str, entity_id: int | str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with id '{entity_id}' not found")


class CollectionNotFoundError(EntityNotFoundError):
    """Raised when a vector collection name cannot be resolved to an id."""

    def __init__(self, collection_name: str):
        self.collection_name = collection_name
        QuantCloudError.__init__(self, f"Collection not found: {collection_name}")
        self.entity_type = "Collection"
        self.entity_id = collection_name


class OAuthError(QuantCloudError):
    """Raised when the OAuth authorization-code flow cannot complete."""
