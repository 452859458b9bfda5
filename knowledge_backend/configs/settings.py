"""
Unified application settings.

Aggregates all configuration modules into a single Settings class.
Provides dependency injection factory for FastAPI.

Dependencies: All config modules
System role: Central configuration aggregator for the application
"""

from functools import lru_cache

from pydantic import Field

from knowledge_backend.configs.base import BaseSettings
from knowledge_backend.configs.blob_store import BlobStoreSettings
from knowledge_backend.configs.embeddings import EmbeddingSettings
from knowledge_backend.configs.ingestion import IngestionSettings
from knowledge_backend.configs.vector_index import VectorIndexSettings


class Settings(BaseSettings):
    """Unified application settings aggregating all config modules."""

    blob_store: BlobStoreSettings = Field(default_factory=BlobStoreSettings)
    embeddings: EmbeddingSettings = Field(default_factory=EmbeddingSettings)
    vector_index: VectorIndexSettings = Field(default_factory=VectorIndexSettings)
    ingestion: IngestionSettings = Field(default_factory=IngestionSettings)


@lru_cache
def get_settings() -> Settings:
    """
    Get application settings singleton.

    Returns Settings instance, cached for dependency injection.
    Environment variables loaded once at startup.

    Returns:
        Settings: Application settings instance

    Usage:
        from knowledge_backend.configs import get_settings
        settings = get_settings()
    """
    return Settings()
