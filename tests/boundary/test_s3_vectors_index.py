"""Tests for S3VectorsIndex with a stubbed s3vectors client."""

from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError
from tenacity import wait_none

from knowledge_backend.boundary.vdb import IndexDocument, Scope, make_entry_id
from knowledge_backend.boundary.vdb.s3_vectors_index import S3VectorsIndex
from knowledge_backend.core.exceptions import IndexProviderError


def client_error(code: str, operation: str = "Op") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": f"{code} happened"}}, operation)


@pytest.fixture
def s3v() -> MagicMock:
    return MagicMock()


@pytest.fixture
def index(s3v) -> S3VectorsIndex:
    return S3VectorsIndex(vectors_bucket="vectors", index_name="kb", batch_size=2, client=s3v)


def doc(i: int, source: str = "src") -> IndexDocument:
    return IndexDocument(
        id=make_entry_id(Scope.GLOBAL, None, source, i),
        scope=Scope.GLOBAL,
        source=source,
        chunk_index=i,
        content=f"chunk {i}",
        embedding=[0.1, 0.2],
    )


class TestConstruction:
    def test_requires_bucket_and_index(self, s3v) -> None:
        with pytest.raises(ValueError):
            S3VectorsIndex(vectors_bucket="", client=s3v)
        with pytest.raises(ValueError):
            S3VectorsIndex(vectors_bucket="b", index_name="", client=s3v)


class TestIndexLifecycle:
    def test_get_dimension(self, index, s3v) -> None:
        s3v.get_index.return_value = {"index": {"dimension": 1024}}

        assert index.get_dimension() == 1024
        s3v.get_index.assert_called_once_with(vectorBucketName="vectors", indexName="kb")

    def test_missing_index(self, index, s3v) -> None:
        s3v.get_index.side_effect = client_error("NotFoundException")
        assert index.get_dimension() is None

    def test_create_conflict_tolerated(self, index, s3v) -> None:
        s3v.create_index.side_effect = client_error("ConflictException")
        index.create_index(1024)

    def test_create_declares_non_filterable_keys(self, index, s3v) -> None:
        index.create_index(8)

        kwargs = s3v.create_index.call_args.kwargs
        assert kwargs["dimension"] == 8
        assert kwargs["distanceMetric"] == "cosine"
        assert set(kwargs["metadataConfiguration"]["nonFilterableMetadataKeys"]) == {"content", "source", "created_at"}

    def test_other_errors_keep_upstream_message(self, index, s3v) -> None:
        s3v.create_index.side_effect = client_error("AccessDeniedException")
        with pytest.raises(IndexProviderError, match="AccessDeniedException happened"):
            index.create_index(8)


class TestUpsert:
    def test_batches_to_limit(self, index, s3v) -> None:
        index.upsert([doc(i) for i in range(5)])

        batches = [c.kwargs["vectors"] for c in s3v.put_vectors.call_args_list]
        assert [len(b) for b in batches] == [2, 2, 1]
        first = batches[0][0]
        assert first["key"] == "global#global#src#0"
        assert first["data"] == {"float32": [0.1, 0.2]}
        assert "tenant_id" not in first["metadata"]

    def test_throttling_retried(self, index, s3v) -> None:
        s3v.put_vectors.side_effect = [client_error("ThrottlingException"), {}]

        with patch.object(S3VectorsIndex._call.retry, "wait", wait_none()):
            index.upsert([doc(0)])

        assert s3v.put_vectors.call_count == 2


class TestDeleteSourceChunks:
    def test_probes_until_short_batch(self, index, s3v) -> None:
        """Should delete found keys batch by batch and stop at the first short batch."""
        s3v.get_vectors.side_effect = lambda **kw: {
            "vectors": [{"key": k} for k in kw["keys"] if int(k.rsplit("#", 1)[1]) < 150]
        }

        deleted = index.delete_source_chunks(Scope.GLOBAL, None, "src")

        assert deleted == 150
        assert s3v.get_vectors.call_count == 2
        assert s3v.delete_vectors.call_count == 2
        assert s3v.delete_vectors.call_args_list[1].kwargs["keys"][-1] == "global#global#src#149"

    def test_start_index(self, index, s3v) -> None:
        s3v.get_vectors.return_value = {"vectors": []}

        assert index.delete_source_chunks(Scope.TENANT, "t1", "src", start_index=3) == 0
        keys = s3v.get_vectors.call_args.kwargs["keys"]
        assert keys[0] == "tenant#t1#src#3"
        s3v.delete_vectors.assert_not_called()

    def test_missing_index_deletes_nothing(self, index, s3v) -> None:
        s3v.get_vectors.side_effect = client_error("NotFoundException")
        assert index.delete_source_chunks(Scope.GLOBAL, None, "src") == 0


class TestKnnSearch:
    def test_global_filter_and_scores(self, index, s3v) -> None:
        s3v.query_vectors.return_value = {
            "vectors": [
                {"key": "global#global#s#0", "distance": 0.25, "metadata": {"content": "c", "source": "s", "chunk_index": 0, "scope": "global"}},
            ]
        }

        hits = index.knn_search(Scope.GLOBAL, None, [0.1, 0.2], k=500)

        kwargs = s3v.query_vectors.call_args.kwargs
        assert kwargs["filter"] == {"scope": {"$eq": "global"}}
        assert kwargs["topK"] == 100
        assert hits[0].score == pytest.approx(0.75)
        assert hits[0].content == "c"

    def test_tenant_filter(self, index, s3v) -> None:
        s3v.query_vectors.return_value = {"vectors": []}

        index.knn_search(Scope.TENANT, "t1", [0.1], k=3)

        assert s3v.query_vectors.call_args.kwargs["filter"] == {
            "$and": [{"scope": {"$eq": "tenant"}}, {"tenant_id": {"$eq": "t1"}}]
        }

    def test_missing_index_returns_empty(self, index, s3v) -> None:
        s3v.query_vectors.side_effect = client_error("NotFoundException")
        assert index.knn_search(Scope.GLOBAL, None, [0.1], k=3) == []

    def test_euclidean_score(self, s3v) -> None:
        index = S3VectorsIndex(vectors_bucket="v", distance_metric="euclidean", client=s3v)
        s3v.query_vectors.return_value = {"vectors": [{"key": "k", "distance": 1.0, "metadata": {}}]}

        assert index.knn_search(Scope.GLOBAL, None, [0.1], k=1)[0].score == pytest.approx(0.5)
