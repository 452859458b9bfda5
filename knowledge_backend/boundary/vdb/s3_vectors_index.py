"""
Amazon S3 Vectors index for production retrieval.

Stores chunk vectors with scope/tenant metadata for filtered kNN search.
Chunk text, source and timestamps are stored as non-filterable metadata.

Entry keys are the deterministic composite IDs and chunk indices are
contiguous from 0, so a source's chunks are deleted by probing keys in
batches from the requested start index until a batch comes back short.

Dependencies: boto3, tenacity
System role: Production vector index (S3 Vectors)
"""

import logging
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential_jitter,
)

from knowledge_backend.boundary.vdb.base import VectorIndex
from knowledge_backend.boundary.vdb.vector_schemas import (
    IndexDocument,
    Scope,
    SearchHit,
    make_entry_id,
)
from knowledge_backend.core.exceptions import IndexProviderError

logger = logging.getLogger(__name__)

NON_FILTERABLE_KEYS = ["content", "source", "created_at"]
THROTTLING_CODES = {
    "ThrottlingException",
    "TooManyRequestsException",
    "ServiceUnavailableException",
}
GET_BATCH_SIZE = 100
MAX_TOP_K = 100


def _error_code(exc: ClientError) -> str:
    return exc.response.get("Error", {}).get("Code", "Unknown")


def _is_throttling(exc: BaseException) -> bool:
    return isinstance(exc, ClientError) and _error_code(exc) in THROTTLING_CODES


class S3VectorsIndex(VectorIndex):
    """S3 Vectors backend for the knowledge base index."""

    name = "s3vectors"

    def __init__(
        self,
        vectors_bucket: str,
        index_name: str = "knowledge-base",
        region: str = "us-east-1",
        distance_metric: str = "cosine",
        batch_size: int = 500,
        client=None,
    ) -> None:
        """
        Initialize S3 Vectors client.

        Args:
            vectors_bucket: S3 Vectors bucket name
            index_name: Index name within the bucket
            region: AWS region for S3 Vectors
            distance_metric: 'cosine' or 'euclidean', used on create
            batch_size: Maximum vectors per put call
            client: Pre-built boto3 s3vectors client (tests inject a stub)

        Raises:
            ValueError: When vectors_bucket or index_name is empty
        """
        if not vectors_bucket:
            raise ValueError("vectors_bucket cannot be empty")
        if not index_name:
            raise ValueError("index_name cannot be empty")

        self.vectors_bucket = vectors_bucket
        self.index_name = index_name
        self.distance_metric = distance_metric
        self.batch_size = max(1, min(500, batch_size))
        self._client = client or boto3.client("s3vectors", region_name=region)

    @retry(
        retry=retry_if_exception(_is_throttling),
        stop=stop_after_attempt(5),
        wait=wait_exponential_jitter(initial=1, max=30, jitter=5),
        before_sleep=lambda retry_state: logger.warning(
            f"{__name__}:_call - Retry {retry_state.attempt_number}/5 after throttling"
        ),
        reraise=True,
    )
    def _call(self, method: str, **kwargs: Any) -> dict:
        """Invoke an s3vectors API with the bucket and index filled in."""
        return getattr(self._client, method)(
            vectorBucketName=self.vectors_bucket,
            indexName=self.index_name,
            **kwargs,
        )

    def get_dimension(self) -> int | None:
        try:
            resp = self._call("get_index")
        except ClientError as e:
            if _error_code(e) in ("NotFoundException", "ResourceNotFoundException"):
                return None
            raise IndexProviderError(str(e), operation="get_index") from e
        except BotoCoreError as e:
            raise IndexProviderError(str(e), operation="get_index") from e
        return int(resp["index"]["dimension"])

    def create_index(self, dimension: int) -> None:
        try:
            self._call(
                "create_index",
                dataType="float32",
                dimension=int(dimension),
                distanceMetric=self.distance_metric,
                metadataConfiguration={"nonFilterableMetadataKeys": NON_FILTERABLE_KEYS},
            )
        except ClientError as e:
            if _error_code(e) == "ConflictException":
                logger.info(f"{__name__}:create_index - Index already exists: {self.index_name}")
                return
            raise IndexProviderError(str(e), operation="create_index") from e
        except BotoCoreError as e:
            raise IndexProviderError(str(e), operation="create_index") from e

        logger.info(
            f"{__name__}:create_index - Created index",
            extra={"index": self.index_name, "dimension": dimension},
        )

    def upsert(self, documents: list[IndexDocument]) -> None:
        for start in range(0, len(documents), self.batch_size):
            batch = documents[start : start + self.batch_size]
            vectors = [
                {
                    "key": doc.id,
                    "data": {"float32": doc.embedding},
                    "metadata": doc.metadata(),
                }
                for doc in batch
            ]
            try:
                self._call("put_vectors", vectors=vectors)
            except (ClientError, BotoCoreError) as e:
                raise IndexProviderError(
                    str(e), operation="upsert", details={"vector_count": len(batch)}
                ) from e

    def delete_source_chunks(
        self,
        scope: Scope,
        tenant_id: str | None,
        source: str,
        start_index: int = 0,
    ) -> int:
        deleted = 0
        index = start_index
        try:
            while True:
                keys = [
                    make_entry_id(scope, tenant_id, source, i)
                    for i in range(index, index + GET_BATCH_SIZE)
                ]
                resp = self._call(
                    "get_vectors", keys=keys, returnData=False, returnMetadata=False
                )
                found = [v["key"] for v in resp.get("vectors", [])]
                if found:
                    self._call("delete_vectors", keys=found)
                    deleted += len(found)
                if len(found) < len(keys):
                    return deleted
                index += GET_BATCH_SIZE
        except ClientError as e:
            if _error_code(e) in ("NotFoundException", "ResourceNotFoundException"):
                return deleted
            raise IndexProviderError(
                str(e), operation="delete", details={"source": source}
            ) from e
        except BotoCoreError as e:
            raise IndexProviderError(
                str(e), operation="delete", details={"source": source}
            ) from e

    def knn_search(
        self,
        scope: Scope,
        tenant_id: str | None,
        vector: list[float],
        k: int,
    ) -> list[SearchHit]:
        if scope == Scope.TENANT:
            metadata_filter: dict[str, Any] = {
                "$and": [
                    {"scope": {"$eq": scope.value}},
                    {"tenant_id": {"$eq": str(tenant_id)}},
                ]
            }
        else:
            metadata_filter = {"scope": {"$eq": scope.value}}

        try:
            resp = self._call(
                "query_vectors",
                topK=max(1, min(MAX_TOP_K, k)),
                queryVector={"float32": vector},
                filter=metadata_filter,
                returnMetadata=True,
                returnDistance=True,
            )
        except ClientError as e:
            if _error_code(e) in ("NotFoundException", "ResourceNotFoundException"):
                return []
            raise IndexProviderError(str(e), operation="search") from e
        except BotoCoreError as e:
            raise IndexProviderError(str(e), operation="search") from e

        return [
            SearchHit.from_metadata(
                match["key"],
                self._score(match.get("distance", 0.0)),
                match.get("metadata"),
            )
            for match in resp.get("vectors", [])
        ]

    def _score(self, distance: float) -> float:
        """Convert a distance into a similarity score (higher is closer)."""
        if self.distance_metric == "cosine":
            return 1.0 - float(distance)
        return 1.0 / (1.0 + float(distance))
