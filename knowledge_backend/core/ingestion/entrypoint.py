"""
Knowledge indexing pipeline orchestrator.

Coordinates blob listing, extraction, chunking, embedding and the index
replace for blob prefixes, URL lists and the raw -> cleaned -> curated
pipeline run. Crawling is delegated to the Crawler.

Per-item failures inside a batch are logged and skipped so one bad file
or URL never aborts the rest of the batch.

Dependencies: All task modules, configs, boundary clients
System role: Pipeline orchestration (coordinates only)
"""

import json
import logging
from urllib.parse import urlsplit

from knowledge_backend.boundary.aws.s3_client import BlobObject, S3BlobStoreClient
from knowledge_backend.boundary.embeddings import EmbeddingProvider
from knowledge_backend.boundary.vdb import IndexDocument, Scope
from knowledge_backend.configs import IngestionSettings
from knowledge_backend.core.exceptions import (
    KnowledgeBaseException,
    UpstreamFetchError,
    ValidationError,
)
from knowledge_backend.core.ingestion.key_utils import ensure_prefix, relative_key, replace_ext
from knowledge_backend.core.ingestion.models import (
    BlobIndexResult,
    CrawlResult,
    PipelineRunResult,
    UrlIndexOutcome,
)
from knowledge_backend.core.ingestion.tasks import (
    ChunkingTask,
    Crawler,
    FetchTask,
    TextExtractor,
    VectorIndexManager,
    sniff_kind,
)
from knowledge_backend.core.ingestion.url_safety import UnsafeURLError, validate_public_url
from knowledge_backend.core.scoping import resolve_scope
from knowledge_backend.observability.log_utils import log_exception_with_context, log_with_context

logger = logging.getLogger(__name__)

CLEANED_CONTENT_TYPE = "text/plain; charset=utf-8"
CURATED_CONTENT_TYPE = "application/jsonl; charset=utf-8"


def blob_source(bucket: str, key: str) -> str:
    return f"s3://{bucket}/{key}"


class KnowledgeIndexingPipeline:
    """Orchestrate ingestion: fetch/list -> extract -> chunk -> embed -> replace."""

    def __init__(
        self,
        settings: IngestionSettings,
        blob_client: S3BlobStoreClient,
        embedding_provider: EmbeddingProvider,
        index_manager: VectorIndexManager,
        fetcher: FetchTask | None = None,
        crawler: Crawler | None = None,
    ) -> None:
        """
        Initialize pipeline with its collaborators.

        Args:
            settings: Ingestion caps and chunk size
            blob_client: Blob store client
            embedding_provider: Embedding backend
            index_manager: Vector index manager
            fetcher: URL fetcher (built from settings if None)
            crawler: Crawler (built from settings if None)
        """
        self._settings = settings
        self._blob_client = blob_client
        self._embedding_provider = embedding_provider
        self._index_manager = index_manager
        self._fetcher = fetcher or FetchTask(
            timeout=settings.http_timeout_seconds,
            user_agent=settings.user_agent,
        )
        self._crawler = crawler or Crawler(blob_client, settings, fetcher=self._fetcher)
        self._extractor = TextExtractor()
        self._chunking_task = ChunkingTask(chunk_size=settings.chunk_size)

    # -- shared stages ------------------------------------------------------

    def _index_text(
        self,
        scope: Scope,
        tenant_id: str | None,
        source: str,
        text: str,
    ) -> list[IndexDocument]:
        """
        Chunk, embed and replace one source.

        All embeddings are computed before the index is touched, so an
        embedding failure leaves the previous generation in place.
        """
        chunks = self._chunking_task.chunk(text)
        vectors = [self._embedding_provider.embed(chunk) for chunk in chunks]
        for vector in vectors:
            self._index_manager.ensure_index(len(vector))
        return self._index_manager.replace_source(scope, tenant_id, source, chunks, vectors)

    def _list_targets(self, bucket: str, prefix: str, limit: int) -> list[BlobObject]:
        objects = self._blob_client.list_objects(bucket, prefix, max_keys=min(200, limit))
        return [obj for obj in objects if obj.key and not obj.key.endswith("/")][:limit]

    def _clamp_files(self, max_files: int | None, default: int) -> int:
        limit = default if not max_files else int(max_files)
        return max(1, min(self._settings.max_files_limit, limit))

    # -- operations ---------------------------------------------------------

    def index_from_blobs(
        self,
        scope: Scope | str,
        tenant_id: str | None,
        bucket: str,
        prefix: str,
        max_files: int | None = None,
    ) -> BlobIndexResult:
        """
        Index every object under a blob prefix.

        Args:
            scope: 'global' or 'tenant'
            tenant_id: Required for tenant scope
            bucket: Source bucket
            prefix: Source prefix
            max_files: File cap, clamped to [1, max_files_limit]

        Returns:
            BlobIndexResult: Files processed, chunks indexed, files considered

        Raises:
            ValidationError: Bad scope/tenant or missing bucket/prefix
            BlobStoreError: Listing failed
        """
        resolved, tenant = resolve_scope(scope, tenant_id)
        if not bucket or not prefix:
            raise ValidationError("bucket and prefix are required")
        limit = self._clamp_files(max_files, self._settings.default_index_files)

        targets = self._list_targets(bucket, prefix, limit)
        result = BlobIndexResult(total_files=len(targets))

        for obj in targets:
            source = blob_source(bucket, obj.key)
            try:
                data = self._blob_client.get_object(bucket, obj.key)
                text = self._extractor.extract(data, sniff_kind(obj.key))
                if not text:
                    logger.info(f"{__name__}:index_from_blobs - No text in {obj.key}, skipping")
                    continue
                documents = self._index_text(resolved, tenant, source, text)
            except KnowledgeBaseException as e:
                log_exception_with_context(
                    logger, f"{__name__}:index_from_blobs - File skipped", e, source=source
                )
                continue

            result.processed_files += 1
            result.indexed_chunks += len(documents)

        log_with_context(
            logger, logging.INFO, f"{__name__}:index_from_blobs - Completed", **result.model_dump()
        )
        return result

    def index_from_urls(
        self,
        scope: Scope | str,
        tenant_id: str | None,
        urls: list[str],
    ) -> list[UrlIndexOutcome]:
        """
        Fetch and index a list of URLs directly.

        Outcomes are independent; a failing URL is reported with its error
        and does not affect the others.

        Args:
            scope: 'global' or 'tenant'
            tenant_id: Required for tenant scope
            urls: URLs; blanks are ignored, only the first max_index_urls used

        Returns:
            list[UrlIndexOutcome]: One outcome per non-blank URL

        Raises:
            ValidationError: Bad scope/tenant or empty url list
        """
        resolved, tenant = resolve_scope(scope, tenant_id)
        if not urls:
            raise ValidationError("urls[] required", field="urls")

        outcomes: list[UrlIndexOutcome] = []
        for candidate in urls[: self._settings.max_index_urls]:
            url = str(candidate or "").strip()
            if not url:
                continue
            try:
                documents = self._index_url(resolved, tenant, url)
            except (KnowledgeBaseException, UnsafeURLError) as e:
                message = e.message if isinstance(e, KnowledgeBaseException) else str(e)
                log_exception_with_context(
                    logger, f"{__name__}:index_from_urls - URL failed", e, url=url
                )
                outcomes.append(UrlIndexOutcome(url=url, ok=False, error=message))
                continue
            outcomes.append(UrlIndexOutcome(url=url, ok=True, indexed_chunks=len(documents)))
        return outcomes

    def _index_url(self, scope: Scope, tenant_id: str | None, url: str) -> list[IndexDocument]:
        validate_public_url(url)
        page = self._fetcher.fetch(url)
        if not page.ok:
            raise UpstreamFetchError(
                f"Fetch failed with HTTP {page.status_code}", url=url, status_code=page.status_code
            )

        kind = sniff_kind(urlsplit(page.url).path, page.content_type)
        if kind == "unknown":
            kind = "html" if "html" in page.content_type.lower() else "text"
        text = self._extractor.extract(page.content, kind)
        if not text:
            raise ValidationError("No text extracted")
        return self._index_text(scope, tenant_id, url, text)

    def run_pipeline(
        self,
        scope: Scope | str,
        tenant_id: str | None,
        bucket: str,
        raw_prefix: str,
        cleaned_prefix: str,
        curated_prefix: str,
        max_files: int | None = None,
    ) -> PipelineRunResult:
        """
        Run raw -> cleaned -> curated for a prefix and index each file.

        For each raw file with extractable text: write the text to the
        cleaned prefix, index it, then write a JSONL audit of the chunk
        metadata (no vectors) to the curated prefix.

        Returns:
            PipelineRunResult: Counters and the normalized prefixes

        Raises:
            ValidationError: Bad scope/tenant or missing bucket/prefixes
            BlobStoreError: Listing failed
        """
        resolved, tenant = resolve_scope(scope, tenant_id)
        if not bucket or not raw_prefix or not cleaned_prefix or not curated_prefix:
            raise ValidationError("bucket, rawPrefix, cleanedPrefix, curatedPrefix are required")

        raw_p = ensure_prefix(raw_prefix)
        cleaned_p = ensure_prefix(cleaned_prefix)
        curated_p = ensure_prefix(curated_prefix)
        limit = self._clamp_files(max_files, self._settings.default_pipeline_files)

        targets = self._list_targets(bucket, raw_p, limit)
        result = PipelineRunResult(
            total_raw_files=len(targets),
            raw_prefix=raw_p,
            cleaned_prefix=cleaned_p,
            curated_prefix=curated_p,
        )

        for obj in targets:
            try:
                data = self._blob_client.get_object(bucket, obj.key)
                text = self._extractor.extract(data, sniff_kind(obj.key))
                if not text:
                    continue
                result.processed_raw += 1

                rel = relative_key(obj.key, raw_p)
                self._blob_client.put_object(
                    bucket, f"{cleaned_p}{replace_ext(rel, '.txt')}", text, CLEANED_CONTENT_TYPE
                )
                result.wrote_cleaned += 1

                documents = self._index_text(resolved, tenant, blob_source(bucket, obj.key), text)
                result.indexed_chunks += len(documents)

                self._blob_client.put_object(
                    bucket,
                    f"{curated_p}{replace_ext(rel, '.jsonl')}",
                    self._to_jsonl(documents),
                    CURATED_CONTENT_TYPE,
                )
                result.wrote_curated += 1
            except KnowledgeBaseException as e:
                result.failed_files += 1
                log_exception_with_context(
                    logger, f"{__name__}:run_pipeline - File failed", e, key=obj.key
                )

        log_with_context(
            logger, logging.INFO, f"{__name__}:run_pipeline - Completed", **result.model_dump()
        )
        return result

    def crawl(
        self,
        bucket: str,
        raw_prefix: str,
        start_urls: list[str],
        max_pages: int | None = None,
        max_depth: int | None = None,
        allowed_hosts: list[str] | None = None,
    ) -> CrawlResult:
        return self._crawler.crawl(
            bucket,
            raw_prefix,
            start_urls,
            max_pages=max_pages,
            max_depth=max_depth,
            allowed_hosts=allowed_hosts,
        )

    @staticmethod
    def _to_jsonl(documents: list[IndexDocument]) -> str:
        return "\n".join(json.dumps(doc.metadata()) for doc in documents)
