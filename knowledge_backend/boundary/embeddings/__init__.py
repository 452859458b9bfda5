"""
Embedding provider boundary.

Exports: EmbeddingProvider, get_embedding_provider
"""

from knowledge_backend.boundary.embeddings.base import EmbeddingProvider
from knowledge_backend.boundary.embeddings.factory import get_embedding_provider

__all__ = ["EmbeddingProvider", "get_embedding_provider"]
