"""
Retrieval logic with scope filtering.

Embeds a query, runs a scope-filtered kNN search and applies a plain
score cutoff. No reranking.

Dependencies: knowledge_backend.boundary.embeddings, core.ingestion.tasks
System role: Query-time retrieval business logic
"""

import logging

from knowledge_backend.boundary.embeddings import EmbeddingProvider
from knowledge_backend.boundary.vdb import Scope, SearchHit
from knowledge_backend.core.exceptions import ValidationError
from knowledge_backend.core.ingestion.tasks import VectorIndexManager
from knowledge_backend.core.scoping import resolve_scope

logger = logging.getLogger(__name__)

DEFAULT_K = 8


class Retriever:
    """Retrieval business logic."""

    def __init__(self, embedding_provider: EmbeddingProvider, index_manager: VectorIndexManager) -> None:
        self._embedding_provider = embedding_provider
        self._index_manager = index_manager

    def query(
        self,
        scope: Scope | str,
        tenant_id: str | None,
        text: str,
        k: int | None = DEFAULT_K,
        threshold: float | None = 0.0,
    ) -> list[SearchHit]:
        """
        Retrieve the chunks closest to a query.

        Args:
            scope: 'global' or 'tenant'
            tenant_id: Required for tenant scope
            text: Query text
            k: Maximum hits, floored at 1
            threshold: Minimum score, floored at 0

        Returns:
            list[SearchHit]: Hits with score >= threshold, best first

        Raises:
            ValidationError: Empty query or bad scope/tenant
            EmbeddingError: Query embedding failed
            DimensionMismatchError: Query vector does not fit the index
        """
        resolved, tenant = resolve_scope(scope, tenant_id)
        if not text or not text.strip():
            raise ValidationError("query is required", field="query")

        top_k = max(1, int(k or DEFAULT_K))
        min_score = max(0.0, float(threshold or 0.0))

        vector = self._embedding_provider.embed(text)
        self._index_manager.ensure_index(len(vector))
        hits = self._index_manager.knn_search(resolved, tenant, vector, top_k)
        results = [hit for hit in hits if hit.score >= min_score]

        logger.info(
            f"{__name__}:query - Retrieved {len(results)} of {len(hits)} hits",
            extra={"scope": resolved.value, "k": top_k, "threshold": min_score},
        )
        return results
