"""Tests for VectorIndexManager over the FAISS backend."""

from unittest.mock import MagicMock

import pytest

from knowledge_backend.boundary.vdb import Scope
from knowledge_backend.boundary.vdb.faiss_index import FAISSIndex
from knowledge_backend.core.exceptions import DimensionMismatchError, ValidationError
from knowledge_backend.core.ingestion.tasks.indexing_task import VectorIndexManager


def unit(i: int, dim: int = 4) -> list[float]:
    vector = [0.0] * dim
    vector[i % dim] = 1.0
    return vector


class TestEnsureIndex:
    """Test index creation and the dimension guard."""

    def test_creates_once_and_caches(self) -> None:
        backend = MagicMock()
        backend.get_dimension.side_effect = [None, 4]
        manager = VectorIndexManager(backend)

        manager.ensure_index(4)
        manager.ensure_index(4)

        backend.create_index.assert_called_once_with(4)
        assert backend.get_dimension.call_count == 2

    def test_existing_index_with_other_dimension_rejected(self) -> None:
        backend = MagicMock()
        backend.get_dimension.return_value = 1024
        manager = VectorIndexManager(backend)

        with pytest.raises(DimensionMismatchError) as exc_info:
            manager.ensure_index(1536)

        assert exc_info.value.expected == 1024
        assert exc_info.value.actual == 1536
        backend.create_index.assert_not_called()

    def test_mismatch_after_cache(self, index_manager) -> None:
        index_manager.ensure_index(4)
        with pytest.raises(DimensionMismatchError):
            index_manager.ensure_index(8)

    def test_unknown_strategy_rejected(self) -> None:
        with pytest.raises(ValueError):
            VectorIndexManager(MagicMock(), replace_strategy="swap")


class TestReplaceSource:
    """Test per-source idempotent replace."""

    @pytest.mark.parametrize("strategy", ["delete_then_insert", "upsert_then_prune"])
    def test_reindex_supersedes_previous_generation(self, strategy) -> None:
        """Should leave only the new chunks after re-indexing with fewer chunks."""
        manager = VectorIndexManager(FAISSIndex(), replace_strategy=strategy)
        manager.ensure_index(4)

        manager.replace_source(Scope.GLOBAL, None, "s3://kb/a.txt", ["old0", "old1", "old2"], [unit(0), unit(1), unit(2)])
        manager.replace_source(Scope.GLOBAL, None, "s3://kb/a.txt", ["new0"], [unit(0)])

        hits = manager.knn_search(Scope.GLOBAL, None, unit(0), k=10)
        assert [(h.content, h.chunk_index) for h in hits] == [("new0", 0)]

    def test_documents_carry_composite_ids(self, index_manager) -> None:
        index_manager.ensure_index(4)
        docs = index_manager.replace_source(Scope.TENANT, "t1", "https://example.com/", ["a", "b"], [unit(0), unit(1)])

        assert [d.id for d in docs] == [
            "tenant#t1#https://example.com/#0",
            "tenant#t1#https://example.com/#1",
        ]
        assert all(d.tenant_id == "t1" for d in docs)

    def test_global_scope_drops_tenant(self, index_manager) -> None:
        index_manager.ensure_index(4)
        docs = index_manager.replace_source(Scope.GLOBAL, "ignored", "src", ["a"], [unit(0)])
        assert docs[0].id == "global#global#src#0"
        assert docs[0].tenant_id is None

    def test_length_mismatch_rejected(self, index_manager) -> None:
        with pytest.raises(ValidationError):
            index_manager.replace_source(Scope.GLOBAL, None, "src", ["a", "b"], [unit(0)])

    def test_delete_then_insert_order(self) -> None:
        backend = MagicMock()
        backend.delete_source_chunks.return_value = 2
        manager = VectorIndexManager(backend)

        manager.replace_source(Scope.GLOBAL, None, "src", ["a"], [unit(0)])

        names = [c[0] for c in backend.mock_calls]
        assert names.index("delete_source_chunks") < names.index("upsert")
        backend.delete_source_chunks.assert_called_once_with(Scope.GLOBAL, None, "src", start_index=0)

    def test_upsert_then_prune_order(self) -> None:
        backend = MagicMock()
        backend.delete_source_chunks.return_value = 0
        manager = VectorIndexManager(backend, replace_strategy="upsert_then_prune")

        manager.replace_source(Scope.GLOBAL, None, "src", ["a", "b"], [unit(0), unit(1)])

        names = [c[0] for c in backend.mock_calls]
        assert names.index("upsert") < names.index("delete_source_chunks")
        backend.delete_source_chunks.assert_called_once_with(Scope.GLOBAL, None, "src", start_index=2)


class TestDeleteAndSearch:
    """Test delete_by_source and partitioned search."""

    def test_delete_by_source_counts_and_isolates(self, index_manager) -> None:
        index_manager.ensure_index(4)
        index_manager.replace_source(Scope.GLOBAL, None, "a", ["1", "2"], [unit(0), unit(1)])
        index_manager.replace_source(Scope.GLOBAL, None, "b", ["3"], [unit(2)])
        index_manager.replace_source(Scope.TENANT, "t1", "a", ["4"], [unit(3)])

        assert index_manager.delete_by_source(Scope.GLOBAL, None, "a") == 2
        assert index_manager.delete_by_source(Scope.GLOBAL, None, "a") == 0

        remaining_global = index_manager.knn_search(Scope.GLOBAL, None, unit(0), k=10)
        remaining_tenant = index_manager.knn_search(Scope.TENANT, "t1", unit(0), k=10)
        assert [h.source for h in remaining_global] == ["b"]
        assert [h.content for h in remaining_tenant] == ["4"]

    def test_search_without_index_is_empty(self, index_manager) -> None:
        assert index_manager.knn_search(Scope.GLOBAL, None, unit(0), k=5) == []
        assert index_manager.delete_by_source(Scope.GLOBAL, None, "x") == 0

    def test_tenants_do_not_see_each_other(self, index_manager) -> None:
        index_manager.ensure_index(4)
        index_manager.replace_source(Scope.TENANT, "t1", "doc", ["t1 text"], [unit(0)])
        index_manager.replace_source(Scope.TENANT, "t2", "doc", ["t2 text"], [unit(0)])

        hits = index_manager.knn_search(Scope.TENANT, "t2", unit(0), k=10)
        assert [h.tenant_id for h in hits] == ["t2"]
