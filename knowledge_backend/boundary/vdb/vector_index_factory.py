"""
Vector index factory for selecting between FAISS (dev) and S3 Vectors (prod).

Depends on VECTOR_INDEX_BACKEND environment variable.
Provides consistent interface regardless of underlying implementation.

Dependencies: knowledge_backend.boundary.vdb, knowledge_backend.configs
System role: Vector index instantiation and selection
"""

import logging

from knowledge_backend.boundary.vdb.base import VectorIndex
from knowledge_backend.configs import VectorIndexSettings
from knowledge_backend.core.exceptions import NotConfiguredError

logger = logging.getLogger(__name__)


def get_vector_index(settings: VectorIndexSettings) -> VectorIndex:
    """
    Factory function to get the vector index backend from configuration.

    Args:
        settings: Vector index settings

    Returns:
        VectorIndex: FAISSIndex or S3VectorsIndex

    Raises:
        NotConfiguredError: S3 Vectors selected without a vectors bucket
        ValueError: If the backend name is invalid
    """
    backend = settings.backend.lower()

    if backend == "faiss":
        from knowledge_backend.boundary.vdb.faiss_index import FAISSIndex

        logger.info(f"{__name__}:get_vector_index - Creating FAISS index (local dev mode)")
        return FAISSIndex(
            index_name=settings.index_name,
            persist_directory=settings.faiss_persist_dir,
        )

    elif backend == "s3vectors":
        from knowledge_backend.boundary.vdb.s3_vectors_index import S3VectorsIndex

        if not settings.vectors_bucket:
            raise NotConfiguredError("Missing VECTOR_INDEX_VECTORS_BUCKET")
        logger.info(f"{__name__}:get_vector_index - Creating S3 Vectors index (production mode)")
        return S3VectorsIndex(
            vectors_bucket=settings.vectors_bucket,
            index_name=settings.index_name,
            region=settings.region,
            distance_metric=settings.distance_metric,
            batch_size=settings.upsert_batch_size,
        )

    else:
        raise ValueError(
            f"Invalid VECTOR_INDEX_BACKEND: {backend}. "
            f"Must be 'faiss' (dev) or 's3vectors' (production)."
        )
