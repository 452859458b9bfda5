"""
Configuration management module.

Provides centralized, type-safe configuration using Pydantic Settings.
All config modules support environment variable mapping with validation.
"""

from knowledge_backend.configs.blob_store import BlobStoreSettings
from knowledge_backend.configs.embeddings import EmbeddingSettings
from knowledge_backend.configs.ingestion import IngestionSettings
from knowledge_backend.configs.settings import Settings, get_settings
from knowledge_backend.configs.vector_index import VectorIndexSettings

__all__ = [
    "BlobStoreSettings",
    "EmbeddingSettings",
    "IngestionSettings",
    "Settings",
    "VectorIndexSettings",
    "get_settings",
]
