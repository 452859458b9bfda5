"""
Vector index configuration settings.

Manages S3 Vectors (production) and local FAISS (development) index settings.

Dependencies: pydantic, pydantic_settings
System role: Vector index configuration for ingestion and retrieval
"""

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class VectorIndexSettings(BaseSettings):
    """Vector index configuration (FAISS for dev, S3 Vectors for prod)."""

    model_config = SettingsConfigDict(
        env_prefix="VECTOR_INDEX_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    backend: str = Field(
        default="s3vectors",
        description="Index backend: 'faiss' for local dev, 's3vectors' for production",
    )
    vectors_bucket: str = Field(
        default="",
        description="S3 Vectors bucket name",
    )
    index_name: str = Field(
        default="knowledge-base",
        description="Index name within the vectors bucket",
    )
    region: str = Field(
        default="us-east-1",
        validation_alias=AliasChoices("VECTOR_INDEX_REGION", "AWS_REGION", "AWS_DEFAULT_REGION"),
        description="AWS region for S3 Vectors",
    )
    distance_metric: str = Field(
        default="cosine",
        description="Distance metric used when the index is created",
    )
    faiss_persist_dir: str = Field(
        default="",
        description="Directory for FAISS persistence; empty keeps the index in memory",
    )
    upsert_batch_size: int = Field(
        default=500,
        description="Maximum documents per put call",
    )
