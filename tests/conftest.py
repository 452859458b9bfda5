"""
Shared test fixtures and configuration for entire test suite.

Provides: In-memory blob store, deterministic embedding provider, FAISS-backed
index manager, wired indexing pipeline and retriever
Dependencies: pytest, faiss-cpu, numpy
System role: Test infrastructure and fixture management
"""

import hashlib
import re
from datetime import datetime, timezone

import pytest

from knowledge_backend.boundary.aws.s3_client import BlobObject, S3BlobStoreClient
from knowledge_backend.boundary.embeddings.base import EmbeddingProvider
from knowledge_backend.boundary.vdb.faiss_index import FAISSIndex
from knowledge_backend.configs import IngestionSettings
from knowledge_backend.core.exceptions import BlobStoreError, EmbeddingError
from knowledge_backend.core.ingestion import KnowledgeIndexingPipeline
from knowledge_backend.core.ingestion.tasks import VectorIndexManager
from knowledge_backend.core.retriever import Retriever


class InMemoryBlobStore(S3BlobStoreClient):
    """Dict-backed blob store with the S3BlobStoreClient interface."""

    def __init__(self) -> None:
        self.objects: dict[tuple[str, str], tuple[bytes, str]] = {}
        self.failing_gets: set[str] = set()

    def add(self, bucket: str, key: str, body: bytes | str, content_type: str = "") -> None:
        data = body.encode("utf-8") if isinstance(body, str) else body
        self.objects[(bucket, key)] = (data, content_type)

    def list_objects(self, bucket: str, prefix: str, max_keys: int = 1000) -> list[BlobObject]:
        keys = sorted(k for (b, k) in self.objects if b == bucket and k.startswith(prefix))
        return [
            BlobObject(
                key=k,
                size=len(self.objects[(bucket, k)][0]),
                last_modified=datetime(2024, 1, 1, tzinfo=timezone.utc),
            )
            for k in keys[:max_keys]
        ]

    def get_object(self, bucket: str, key: str) -> bytes:
        if key in self.failing_gets or (bucket, key) not in self.objects:
            raise BlobStoreError(f"Object not found: {key}", bucket=bucket, key=key)
        return self.objects[(bucket, key)][0]

    def put_object(self, bucket, key, body, content_type="application/octet-stream") -> None:
        self.add(bucket, key, body, content_type)

    def generate_presigned_upload_url(self, bucket, key, content_type="application/octet-stream", expires_in=600) -> str:
        return f"https://{bucket}.s3.test/{key}?method=PUT&expires={expires_in}"

    def generate_presigned_download_url(self, bucket, key, expires_in=600) -> str:
        return f"https://{bucket}.s3.test/{key}?method=GET&expires={expires_in}"


class HashingEmbeddingProvider(EmbeddingProvider):
    """
    Deterministic bag-of-words embeddings.

    Each lower-cased word increments one of `dim` buckets chosen by a
    stable hash, so texts sharing words have positive cosine similarity.
    """

    name = "hashing"

    def __init__(self, dim: int = 32, max_input_chars: int = 8000) -> None:
        super().__init__(max_input_chars=max_input_chars)
        self.dim = dim
        self.calls: list[str] = []
        self.fail_on: set[str] = set()

    def _embed(self, text: str) -> list[float]:
        self.calls.append(text)
        if any(marker in text for marker in self.fail_on):
            raise EmbeddingError("embedding backend unavailable", provider=self.name)
        vector = [0.0] * self.dim
        for word in re.findall(r"[a-z0-9]+", text.lower()):
            bucket = int(hashlib.md5(word.encode("utf-8")).hexdigest(), 16) % self.dim
            vector[bucket] += 1.0
        if not any(vector):
            vector[0] = 1.0
        return vector


@pytest.fixture
def blob_store() -> InMemoryBlobStore:
    return InMemoryBlobStore()


@pytest.fixture
def embedding_provider() -> HashingEmbeddingProvider:
    return HashingEmbeddingProvider()


@pytest.fixture
def faiss_index() -> FAISSIndex:
    return FAISSIndex(index_name="test-index")


@pytest.fixture
def index_manager(faiss_index) -> VectorIndexManager:
    return VectorIndexManager(faiss_index)


@pytest.fixture
def ingestion_settings() -> IngestionSettings:
    return IngestionSettings(chunk_size=50)


@pytest.fixture
def pipeline(ingestion_settings, blob_store, embedding_provider, index_manager) -> KnowledgeIndexingPipeline:
    return KnowledgeIndexingPipeline(
        settings=ingestion_settings,
        blob_client=blob_store,
        embedding_provider=embedding_provider,
        index_manager=index_manager,
    )


@pytest.fixture
def retriever(embedding_provider, index_manager) -> Retriever:
    return Retriever(embedding_provider, index_manager)
