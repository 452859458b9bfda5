"""
Result models for the indexing pipeline.

Dependencies: pydantic
System role: Return types for KnowledgeIndexingPipeline and Crawler
"""

from pydantic import BaseModel, Field


class SavedPage(BaseModel):
    """A crawled page persisted to the blob store."""

    url: str = Field(description="Final page URL after redirects")
    key: str = Field(description="Blob key the raw HTML was written to")


class CrawlResult(BaseModel):
    """Outcome of a crawl."""

    saved_count: int = Field(default=0, description="Pages persisted")
    saved: list[SavedPage] = Field(default_factory=list)
    visited_count: int = Field(default=0, description="Distinct canonical URLs dequeued and fetched")
    allowed_hosts: list[str] = Field(default_factory=list)


class BlobIndexResult(BaseModel):
    """Outcome of indexing a blob prefix."""

    processed_files: int = 0
    indexed_chunks: int = 0
    total_files: int = 0


class UrlIndexOutcome(BaseModel):
    """Per-URL indexing outcome; error is set only when ok is False."""

    url: str
    ok: bool
    indexed_chunks: int | None = None
    error: str | None = None


class PipelineRunResult(BaseModel):
    """Outcome of a raw -> cleaned -> curated pipeline run."""

    processed_raw: int = 0
    wrote_cleaned: int = 0
    wrote_curated: int = 0
    indexed_chunks: int = 0
    total_raw_files: int = 0
    failed_files: int = 0
    raw_prefix: str
    cleaned_prefix: str
    curated_prefix: str
