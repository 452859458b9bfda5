"""
Knowledge base API schemas.

Request/response contracts for the /kb routes. Bodies accept camelCase
or snake_case; responses are serialized in camelCase.

Dependencies: pydantic
System role: Knowledge base API contracts
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema with camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ScopedRequest(CamelModel):
    """Fields shared by requests that target an index partition."""

    scope: str = Field(default="global", description="'global' or 'tenant'")
    tenant_id: str | None = Field(default=None, description="Required when scope=tenant")


# -- requests ----------------------------------------------------------------


class SignedUploadRequest(CamelModel):
    """Request a presigned PUT URL for a new object."""

    bucket: str = ""
    prefix: str = ""
    filename: str = ""
    content_type: str | None = None


class CrawlRequest(CamelModel):
    """Crawl seed URLs into a raw prefix."""

    bucket: str = ""
    raw_prefix: str = ""
    start_urls: list[str] = Field(default_factory=list)
    max_pages: int | None = None
    max_depth: int | None = None
    allowed_hosts: list[str] | None = None


class PipelineRunRequest(ScopedRequest):
    """Run raw -> cleaned -> curated and index."""

    bucket: str = ""
    raw_prefix: str = ""
    cleaned_prefix: str = ""
    curated_prefix: str = ""
    max_files: int | None = None


class ListRequest(CamelModel):
    """List objects under a prefix."""

    bucket: str = ""
    prefix: str = ""
    max_files: int | None = None


class IndexUrlRequest(ScopedRequest):
    """Index a list of URLs."""

    urls: list[str] = Field(default_factory=list)


class IndexRequest(ScopedRequest):
    """Index objects under a blob prefix."""

    bucket: str = ""
    prefix: str = ""
    max_files: int | None = None


class QueryRequest(ScopedRequest):
    """Nearest-neighbour query."""

    query: str = ""
    k: int | None = Field(default=8, description="Maximum hits, floored at 1")
    threshold: float | None = Field(default=0.0, description="Minimum score, floored at 0")


# -- responses ---------------------------------------------------------------


class DiagResponse(CamelModel):
    """Configuration diagnostics; never includes secrets."""

    ok: bool
    missing: list[str]
    region: str | None
    vector_index_backend: str
    vector_index_configured: bool
    embeddings_provider: str | None
    bedrock_embed_model: str


class SignedUploadResponse(CamelModel):
    bucket: str
    key: str
    signed_upload_url: str


class SavedPageResponse(CamelModel):
    url: str
    key: str


class CrawlResponse(CamelModel):
    saved_count: int
    saved: list[SavedPageResponse]
    visited_count: int
    allowed_hosts: list[str]


class PipelineRunResponse(CamelModel):
    processed_raw: int
    wrote_cleaned: int
    wrote_curated: int
    indexed_chunks: int
    total_raw_files: int
    failed_files: int
    raw_prefix: str
    cleaned_prefix: str
    curated_prefix: str


class ListedFile(CamelModel):
    key: str
    name: str
    size: int
    last_modified: datetime | None = None
    signed_get_url: str | None = Field(default=None, description="Null when presigning failed")


class ListResponse(CamelModel):
    files: list[ListedFile]


class IndexUrlResult(CamelModel):
    """Per-URL outcome; indexedChunks on success, error on failure."""

    url: str
    ok: bool
    indexed_chunks: int | None = None
    error: str | None = None


class IndexUrlResponse(CamelModel):
    results: list[IndexUrlResult]


class IndexResponse(CamelModel):
    processed_files: int
    indexed_chunks: int
    total_files: int


class QueryHit(CamelModel):
    id: str
    content: str
    score: float
    source: str
    chunk_index: int | None = None
    scope: str | None = None
    tenant_id: str | None = None


class QueryResponse(CamelModel):
    results: list[QueryHit]
