"""Quant Cloud infrastructure package."""

from .dashboard_client import DashboardClient
from .quant_cloud_client import QuantCloudClient
from .quant_cloud_embedding_provider import QuantCloudEmbeddingProvider
from .quant_cloud_image_provider import QuantCloudImageProvider
from .vector_db_client import QuantCloudVectorDbClient

__all__ = [
    "DashboardClient",
    "QuantCloudClient",
    "QuantCloudEmbeddingProvider",
    "QuantCloudImageProvider",
    "QuantCloudVectorDbClient",
]
