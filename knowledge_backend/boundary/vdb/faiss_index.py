"""
Local FAISS vector index for development.

Provides the same interface as S3VectorsIndex using an in-process FAISS
inner-product index over L2-normalized vectors, so scores are cosine
similarities. Optionally persists to disk between runs.

Dependencies: faiss-cpu, numpy
System role: Development vector index (local testing only)
"""

import json
import logging
import threading
from pathlib import Path

import faiss
import numpy as np

from knowledge_backend.boundary.vdb.base import VectorIndex
from knowledge_backend.boundary.vdb.vector_schemas import IndexDocument, Scope, SearchHit
from knowledge_backend.core.exceptions import IndexProviderError

logger = logging.getLogger(__name__)


class FAISSIndex(VectorIndex):
    """In-process FAISS backend with metadata kept alongside the index."""

    name = "faiss"

    def __init__(self, index_name: str = "knowledge-base", persist_directory: str = "") -> None:
        """
        Initialize FAISS index.

        Args:
            index_name: Local index name (file stem when persisted)
            persist_directory: Directory for persistence; empty keeps it in memory
        """
        self._index_name = index_name
        self._persist_dir = Path(persist_directory) if persist_directory else None
        self._lock = threading.Lock()
        self._index: faiss.IndexIDMap2 | None = None
        self._dimension: int | None = None
        self._next_id = 0
        self._ids: dict[str, int] = {}
        self._metadata: dict[int, dict] = {}
        self._load()

    # -- persistence -------------------------------------------------------

    def _paths(self) -> tuple[Path, Path]:
        assert self._persist_dir is not None
        return (
            self._persist_dir / f"{self._index_name}.faiss",
            self._persist_dir / f"{self._index_name}.json",
        )

    def _load(self) -> None:
        if self._persist_dir is None:
            return
        index_path, meta_path = self._paths()
        if not (index_path.exists() and meta_path.exists()):
            return
        self._index = faiss.read_index(str(index_path))
        state = json.loads(meta_path.read_text(encoding="utf-8"))
        self._dimension = state["dimension"]
        self._next_id = state["next_id"]
        self._ids = state["ids"]
        self._metadata = {int(k): v for k, v in state["metadata"].items()}
        logger.info(
            f"{__name__}:_load - Loaded FAISS index from {index_path}",
            extra={"entries": len(self._ids)},
        )

    def _save(self) -> None:
        if self._persist_dir is None or self._index is None:
            return
        self._persist_dir.mkdir(parents=True, exist_ok=True)
        index_path, meta_path = self._paths()
        faiss.write_index(self._index, str(index_path))
        meta_path.write_text(
            json.dumps(
                {
                    "dimension": self._dimension,
                    "next_id": self._next_id,
                    "ids": self._ids,
                    "metadata": self._metadata,
                }
            ),
            encoding="utf-8",
        )

    # -- VectorIndex -------------------------------------------------------

    def get_dimension(self) -> int | None:
        return self._dimension

    def create_index(self, dimension: int) -> None:
        with self._lock:
            if self._index is not None:
                return
            self._index = faiss.IndexIDMap2(faiss.IndexFlatIP(int(dimension)))
            self._dimension = int(dimension)
            self._save()
        logger.info(f"{__name__}:create_index - Created FAISS index, dimension={dimension}")

    def upsert(self, documents: list[IndexDocument]) -> None:
        if not documents:
            return
        with self._lock:
            if self._index is None:
                raise IndexProviderError("FAISS index has not been created", operation="upsert")
            if any(len(doc.embedding) != self._dimension for doc in documents):
                raise IndexProviderError(
                    f"Vectors must have dimension {self._dimension}", operation="upsert"
                )

            stale = [self._ids[doc.id] for doc in documents if doc.id in self._ids]
            if stale:
                self._remove(stale)

            internal_ids = []
            for doc in documents:
                internal_id = self._next_id
                self._next_id += 1
                self._ids[doc.id] = internal_id
                self._metadata[internal_id] = {"id": doc.id, **doc.metadata()}
                internal_ids.append(internal_id)

            vectors = self._normalize(np.array([doc.embedding for doc in documents], dtype="float32"))
            self._index.add_with_ids(vectors, np.array(internal_ids, dtype="int64"))
            self._save()

    def delete_source_chunks(
        self,
        scope: Scope,
        tenant_id: str | None,
        source: str,
        start_index: int = 0,
    ) -> int:
        with self._lock:
            if self._index is None:
                return 0
            doomed = [
                internal_id
                for internal_id, meta in self._metadata.items()
                if self._in_partition(meta, scope, tenant_id)
                and meta["source"] == source
                and meta["chunk_index"] >= start_index
            ]
            if doomed:
                self._remove(doomed)
                self._save()
            return len(doomed)

    def knn_search(
        self,
        scope: Scope,
        tenant_id: str | None,
        vector: list[float],
        k: int,
    ) -> list[SearchHit]:
        with self._lock:
            if self._index is None or self._index.ntotal == 0:
                return []
            query = self._normalize(np.array([vector], dtype="float32"))
            # Partition filtering happens after the search, so search everything.
            scores, ids = self._index.search(query, self._index.ntotal)

            hits: list[SearchHit] = []
            for score, internal_id in zip(scores[0], ids[0]):
                if internal_id < 0:
                    continue
                meta = self._metadata.get(int(internal_id))
                if meta is None or not self._in_partition(meta, scope, tenant_id):
                    continue
                hits.append(SearchHit.from_metadata(meta["id"], float(score), meta))
                if len(hits) >= k:
                    break
            return hits

    # -- helpers -----------------------------------------------------------

    def _remove(self, internal_ids: list[int]) -> None:
        self._index.remove_ids(np.array(internal_ids, dtype="int64"))
        for internal_id in internal_ids:
            meta = self._metadata.pop(internal_id)
            self._ids.pop(meta["id"], None)

    @staticmethod
    def _normalize(vectors: np.ndarray) -> np.ndarray:
        norms = np.linalg.norm(vectors, axis=1, keepdims=True)
        norms[norms == 0] = 1.0
        return np.ascontiguousarray(vectors / norms, dtype="float32")

    @staticmethod
    def _in_partition(meta: dict, scope: Scope, tenant_id: str | None) -> bool:
        if meta.get("scope") != scope.value:
            return False
        if scope == Scope.TENANT:
            return meta.get("tenant_id") == str(tenant_id)
        return True
