"""
Vector database boundary layer.

Provides vector index backends for storage and retrieval operations.
- S3VectorsIndex: Production S3 Vectors client
- FAISSIndex: Local development index

Dependencies: boto3, faiss-cpu
System role: Vector index adapter for ingestion and retrieval
"""

from knowledge_backend.boundary.vdb.base import VectorIndex
from knowledge_backend.boundary.vdb.vector_schemas import (
    IndexDocument,
    Scope,
    SearchHit,
    make_entry_id,
)
from knowledge_backend.boundary.vdb.vector_index_factory import get_vector_index

__all__ = [
    "IndexDocument",
    "Scope",
    "SearchHit",
    "VectorIndex",
    "get_vector_index",
    "make_entry_id",
]
