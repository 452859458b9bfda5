"""
Dependency injection container.

Factory functions for FastAPI dependencies.

Dependencies: knowledge_backend.configs, knowledge_backend.boundary, knowledge_backend.core
System role: DI container for service injection
"""

import logging
from collections.abc import Callable
from typing import TypeVar

from fastapi import HTTPException, status

from knowledge_backend.boundary.aws.s3_client import S3BlobStoreClient
from knowledge_backend.configs import Settings, get_settings
from knowledge_backend.core.exceptions import NotConfiguredError
from knowledge_backend.core.ingestion import KnowledgeIndexingPipeline
from knowledge_backend.core.retriever import Retriever

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ServiceCache:
    """Container for cached service instances."""

    def __init__(self, settings: Settings | None = None):
        self._settings = settings
        self._blob_client = None
        self._embedding_provider = None
        self._vector_index = None
        self._index_manager = None
        self._crawler = None
        self._pipeline = None
        self._retriever = None

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    @property
    def blob_client(self) -> S3BlobStoreClient:
        """Get cached S3 blob store client."""
        if self._blob_client is None:
            self._blob_client = S3BlobStoreClient(region=self.settings.blob_store.region)
        return self._blob_client

    @property
    def embedding_provider(self):
        """Get cached embedding provider (raises NotConfiguredError without credentials)."""
        if self._embedding_provider is None:
            from knowledge_backend.boundary.embeddings import get_embedding_provider
            self._embedding_provider = get_embedding_provider(self.settings.embeddings)
        return self._embedding_provider

    @property
    def vector_index(self):
        """Get cached vector index backend."""
        if self._vector_index is None:
            from knowledge_backend.boundary.vdb import get_vector_index
            self._vector_index = get_vector_index(self.settings.vector_index)
        return self._vector_index

    @property
    def index_manager(self):
        """Get cached index manager; shares the ensure-index cache process-wide."""
        if self._index_manager is None:
            from knowledge_backend.core.ingestion.tasks import VectorIndexManager
            self._index_manager = VectorIndexManager(
                self.vector_index,
                replace_strategy=self.settings.ingestion.replace_strategy,
            )
        return self._index_manager

    @property
    def crawler(self):
        """Get cached crawler; needs only the blob store."""
        if self._crawler is None:
            from knowledge_backend.core.ingestion.tasks import Crawler
            self._crawler = Crawler(self.blob_client, self.settings.ingestion)
        return self._crawler

    @property
    def pipeline(self) -> KnowledgeIndexingPipeline:
        """Get cached indexing pipeline."""
        if self._pipeline is None:
            self._pipeline = KnowledgeIndexingPipeline(
                settings=self.settings.ingestion,
                blob_client=self.blob_client,
                embedding_provider=self.embedding_provider,
                index_manager=self.index_manager,
                crawler=self.crawler,
            )
        return self._pipeline

    @property
    def retriever(self) -> Retriever:
        """Get cached retriever."""
        if self._retriever is None:
            self._retriever = Retriever(self.embedding_provider, self.index_manager)
        return self._retriever

    def clear(self) -> None:
        """Clear all cached instances."""
        self._blob_client = None
        self._embedding_provider = None
        self._vector_index = None
        self._index_manager = None
        self._crawler = None
        self._pipeline = None
        self._retriever = None


# Global service cache
_service_cache = ServiceCache()


def get_service_cache() -> ServiceCache:
    """Get service cache singleton."""
    return _service_cache


def _require(build: Callable[[], T]) -> T:
    """Build a service, mapping missing or invalid configuration to 503."""
    try:
        return build()
    except NotConfiguredError as e:
        logger.warning(f"{__name__}:_require - Service not configured: {e}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.message)
    except ValueError as e:
        logger.error(f"{__name__}:_require - Service misconfigured: {e}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))


def get_settings_dependency() -> Settings:
    """Get settings singleton."""
    return get_service_cache().settings


def get_blob_client() -> S3BlobStoreClient:
    """
    Get S3 blob store client for listing and presigned URL generation.

    Returns:
        S3BlobStoreClient: Client for knowledge base buckets
    """
    return get_service_cache().blob_client


def get_crawler():
    """Get crawler for the /crawl route."""
    return get_service_cache().crawler


def get_indexing_pipeline() -> KnowledgeIndexingPipeline:
    """
    Get indexing pipeline.

    Returns:
        KnowledgeIndexingPipeline: Pipeline wired to the configured embedding
        provider and vector index

    Raises:
        HTTPException(503): Embedding or vector index backend not configured
    """
    return _require(lambda: get_service_cache().pipeline)


def get_retriever() -> Retriever:
    """
    Get retriever.

    Raises:
        HTTPException(503): Embedding or vector index backend not configured
    """
    return _require(lambda: get_service_cache().retriever)
