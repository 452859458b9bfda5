"""
Ingestion pipeline configuration.

Caps, chunking parameters, HTTP fetch settings, and the replace strategy
used when a source is re-indexed.

Dependencies: pydantic, pydantic_settings
System role: Crawl/index/pipeline limits
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class IngestionSettings(BaseSettings):
    """Settings for crawling, extraction, chunking and indexing."""

    model_config = SettingsConfigDict(
        env_prefix="INGESTION_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    chunk_size: int = Field(default=1200, description="Maximum chunk size in characters")

    # Crawl caps
    max_seed_urls: int = Field(default=10, description="Seeds beyond this are ignored")
    default_max_pages: int = Field(default=15)
    max_pages_limit: int = Field(default=50)
    default_max_depth: int = Field(default=1)
    max_depth_limit: int = Field(default=4)

    # Batch caps
    default_index_files: int = Field(default=25, description="Default maxFiles for blob indexing")
    default_pipeline_files: int = Field(default=15, description="Default maxFiles for pipeline runs")
    max_files_limit: int = Field(default=50)
    max_index_urls: int = Field(default=30)

    # HTTP fetch
    http_timeout_seconds: float = Field(default=20.0)
    user_agent: str = Field(default="KnowledgeBaseCrawler/1.0")

    replace_strategy: str = Field(
        default="delete_then_insert",
        description="'delete_then_insert' or 'upsert_then_prune'",
    )
