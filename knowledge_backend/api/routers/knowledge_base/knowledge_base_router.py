"""
Knowledge base API endpoints.

Routes:
- GET /kb/diag - Configuration diagnostics
- POST /kb/signed-upload - Presigned PUT URL for a new raw file
- POST /kb/crawl - Crawl seed URLs into a raw prefix
- POST /kb/pipeline/run - raw -> cleaned -> curated and index
- POST /kb/list - List stored files with signed GET URLs
- POST /kb/index-url - Fetch and index URLs
- POST /kb/index - Index files under a blob prefix
- POST /kb/query - Scoped nearest-neighbour query

Blocking work runs in the threadpool so the event loop stays free.

Dependencies: knowledge_backend.core, knowledge_backend.models
System role: Knowledge base HTTP API
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool

from knowledge_backend.api.deps import (
    get_blob_client,
    get_crawler,
    get_indexing_pipeline,
    get_retriever,
    get_settings_dependency,
)
from knowledge_backend.boundary.aws.s3_client import S3BlobStoreClient
from knowledge_backend.configs import Settings
from knowledge_backend.core.ingestion import KnowledgeIndexingPipeline
from knowledge_backend.core.ingestion.tasks import Crawler
from knowledge_backend.core.retriever import Retriever
from knowledge_backend.models.knowledge import (
    CrawlRequest,
    CrawlResponse,
    DiagResponse,
    IndexRequest,
    IndexResponse,
    IndexUrlRequest,
    IndexUrlResponse,
    ListRequest,
    ListResponse,
    PipelineRunRequest,
    PipelineRunResponse,
    QueryRequest,
    QueryResponse,
    SignedUploadRequest,
    SignedUploadResponse,
)

from .diag_handler import build_diagnostics
from .kb_error_handling import handle_kb_errors
from .presigned_url_handler import handle_list_request, handle_signed_upload_request

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/kb", tags=["knowledge-base"])


@router.get("/diag", response_model=DiagResponse)
@handle_kb_errors
async def diagnostics(settings: Settings = Depends(get_settings_dependency)) -> DiagResponse:
    """Report missing configuration; never returns secret values."""
    return await run_in_threadpool(build_diagnostics, settings)


@router.post("/signed-upload", response_model=SignedUploadResponse)
@handle_kb_errors
async def create_signed_upload(
    request: SignedUploadRequest,
    blob_client: S3BlobStoreClient = Depends(get_blob_client),
    settings: Settings = Depends(get_settings_dependency),
) -> SignedUploadResponse:
    """
    Generate a presigned URL for direct upload into the raw prefix.

    Raises:
        HTTPException(400): bucket, prefix or filename missing
        HTTPException(502): Presigning failed
    """
    return await run_in_threadpool(
        handle_signed_upload_request, request, blob_client, settings.blob_store
    )


@router.post("/crawl", response_model=CrawlResponse)
@handle_kb_errors
async def crawl(
    request: CrawlRequest,
    crawler: Crawler = Depends(get_crawler),
) -> CrawlResponse:
    """
    Crawl public pages from seed URLs and store the raw HTML.

    Raises:
        HTTPException(400): Missing bucket/prefix or no valid seed
    """
    result = await run_in_threadpool(
        crawler.crawl,
        request.bucket,
        request.raw_prefix,
        request.start_urls,
        max_pages=request.max_pages,
        max_depth=request.max_depth,
        allowed_hosts=request.allowed_hosts,
    )
    return CrawlResponse.model_validate(result.model_dump())


@router.post("/pipeline/run", response_model=PipelineRunResponse)
@handle_kb_errors
async def run_pipeline(
    request: PipelineRunRequest,
    pipeline: KnowledgeIndexingPipeline = Depends(get_indexing_pipeline),
) -> PipelineRunResponse:
    """
    Extract, clean, curate and index every raw file under rawPrefix.

    Raises:
        HTTPException(400): Bad scope/tenant or missing prefixes
        HTTPException(409): Embedding dimension does not match the index
    """
    result = await run_in_threadpool(
        pipeline.run_pipeline,
        request.scope,
        request.tenant_id,
        request.bucket,
        request.raw_prefix,
        request.cleaned_prefix,
        request.curated_prefix,
        max_files=request.max_files,
    )
    return PipelineRunResponse.model_validate(result.model_dump())


@router.post("/list", response_model=ListResponse)
@handle_kb_errors
async def list_files(
    request: ListRequest,
    blob_client: S3BlobStoreClient = Depends(get_blob_client),
    settings: Settings = Depends(get_settings_dependency),
) -> ListResponse:
    """List files under a prefix with signed download URLs."""
    return await run_in_threadpool(handle_list_request, request, blob_client, settings.blob_store)


@router.post("/index-url", response_model=IndexUrlResponse, response_model_exclude_none=True)
@handle_kb_errors
async def index_urls(
    request: IndexUrlRequest,
    pipeline: KnowledgeIndexingPipeline = Depends(get_indexing_pipeline),
) -> IndexUrlResponse:
    """
    Fetch and index each URL; per-URL failures are reported, not raised.

    Raises:
        HTTPException(400): Bad scope/tenant or empty urls
    """
    outcomes = await run_in_threadpool(
        pipeline.index_from_urls, request.scope, request.tenant_id, request.urls
    )
    return IndexUrlResponse.model_validate({"results": [o.model_dump() for o in outcomes]})


@router.post("/index", response_model=IndexResponse)
@handle_kb_errors
async def index_blobs(
    request: IndexRequest,
    pipeline: KnowledgeIndexingPipeline = Depends(get_indexing_pipeline),
) -> IndexResponse:
    """
    Index files under a blob prefix.

    Raises:
        HTTPException(400): Bad scope/tenant or missing bucket/prefix
        HTTPException(502): Listing failed
    """
    result = await run_in_threadpool(
        pipeline.index_from_blobs,
        request.scope,
        request.tenant_id,
        request.bucket,
        request.prefix,
        max_files=request.max_files,
    )
    return IndexResponse.model_validate(result.model_dump())


@router.post("/query", response_model=QueryResponse)
@handle_kb_errors
async def query(
    request: QueryRequest,
    retriever: Retriever = Depends(get_retriever),
) -> QueryResponse:
    """
    Retrieve the chunks closest to the query text.

    Raises:
        HTTPException(400): Empty query or bad scope/tenant
        HTTPException(502): Embedding or index failure
        HTTPException(409): Query dimension does not match the index
    """
    hits = await run_in_threadpool(
        retriever.query,
        request.scope,
        request.tenant_id,
        request.query,
        k=request.k,
        threshold=request.threshold,
    )
    return QueryResponse.model_validate({"results": [hit.model_dump() for hit in hits]})
