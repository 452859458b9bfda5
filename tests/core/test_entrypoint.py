"""Tests for KnowledgeIndexingPipeline orchestration."""

import json
from unittest.mock import MagicMock

import pytest

from knowledge_backend.boundary.vdb import Scope
from knowledge_backend.configs import IngestionSettings
from knowledge_backend.core.exceptions import ValidationError
from knowledge_backend.core.ingestion import KnowledgeIndexingPipeline
from knowledge_backend.core.ingestion.tasks.fetch_task import FetchedPage

LONG_TEXT = "Scholarship deadlines are in March. " * 4  # 143 chars once trimmed: 3 chunks of 50


class TestIndexFromBlobs:
    """Test blob prefix indexing."""

    def test_indexes_files_and_skips_markers_and_empty(self, pipeline, blob_store, retriever) -> None:
        """Should index text files, skip directory markers and files without text."""
        blob_store.add("kb", "kb/global/", b"")
        blob_store.add("kb", "kb/global/guide.txt", LONG_TEXT)
        blob_store.add("kb", "kb/global/blank.md", b"   ")

        result = pipeline.index_from_blobs("global", None, "kb", "kb/global/")

        assert result.total_files == 2
        assert result.processed_files == 1
        assert result.indexed_chunks == 3

        hits = retriever.query("global", None, "scholarship deadlines", k=10)
        assert {h.source for h in hits} == {"s3://kb/kb/global/guide.txt"}
        assert sorted(h.chunk_index for h in hits) == [0, 1, 2]

    def test_per_file_failure_isolated(self, pipeline, blob_store, embedding_provider) -> None:
        """Should skip a file whose embedding fails and keep processing the rest."""
        blob_store.add("kb", "p/bad.txt", "contains POISON word")
        blob_store.add("kb", "p/good.txt", "perfectly fine text")
        blob_store.failing_gets.add("p/missing.txt")
        blob_store.add("kb", "p/missing.txt", "never read")
        embedding_provider.fail_on.add("POISON")

        result = pipeline.index_from_blobs("global", None, "kb", "p/")

        assert result.total_files == 3
        assert result.processed_files == 1
        assert result.indexed_chunks == 1

    def test_max_files_caps_listing(self, pipeline, blob_store) -> None:
        for i in range(5):
            blob_store.add("kb", f"p/{i}.txt", f"file {i}")

        result = pipeline.index_from_blobs("global", None, "kb", "p/", max_files=2)

        assert result.total_files == 2

    def test_tenant_scope_requires_tenant_id(self, pipeline) -> None:
        with pytest.raises(ValidationError):
            pipeline.index_from_blobs("tenant", None, "kb", "p/")

    def test_invalid_scope_rejected(self, pipeline) -> None:
        with pytest.raises(ValidationError):
            pipeline.index_from_blobs("school", "x", "kb", "p/")

    def test_requires_bucket_and_prefix(self, pipeline) -> None:
        with pytest.raises(ValidationError):
            pipeline.index_from_blobs("global", None, "kb", "")

    def test_reindex_supersedes(self, pipeline, blob_store, retriever) -> None:
        """Should leave only the second generation after a shorter re-index."""
        blob_store.add("kb", "p/doc.txt", LONG_TEXT)
        pipeline.index_from_blobs("global", None, "kb", "p/")

        blob_store.add("kb", "p/doc.txt", "Short replacement text")
        result = pipeline.index_from_blobs("global", None, "kb", "p/")

        hits = retriever.query("global", None, "replacement text scholarship", k=10)
        assert result.indexed_chunks == 1
        assert [(h.content, h.chunk_index) for h in hits] == [("Short replacement text", 0)]

    def test_embedding_failure_keeps_previous_generation(self, pipeline, blob_store, embedding_provider, retriever) -> None:
        blob_store.add("kb", "p/doc.txt", "original content here")
        pipeline.index_from_blobs("global", None, "kb", "p/")

        blob_store.add("kb", "p/doc.txt", "updated POISON content")
        embedding_provider.fail_on.add("POISON")
        pipeline.index_from_blobs("global", None, "kb", "p/")

        hits = retriever.query("global", None, "original content", k=10)
        assert [h.content for h in hits] == ["original content here"]


class TestIndexFromUrls:
    """Test direct URL indexing."""

    @pytest.fixture
    def fetcher(self, pipeline) -> MagicMock:
        fetcher = MagicMock()
        pipeline._fetcher = fetcher
        return fetcher

    def test_mixed_outcomes(self, pipeline, fetcher) -> None:
        """Should report each URL independently."""
        fetcher.fetch.side_effect = lambda url: {
            "https://example.com/a": FetchedPage(url, 200, "text/html", b"<body><p>Visa guide</p></body>"),
            "https://example.com/gone": FetchedPage(url, 404, "text/html", b"missing"),
            "https://example.com/empty": FetchedPage(url, 200, "text/plain", b"   "),
        }[url]

        outcomes = pipeline.index_from_urls(
            "global",
            None,
            ["https://example.com/a", "  ", "http://10.0.0.1/x", "https://example.com/gone", "https://example.com/empty"],
        )

        assert [(o.url, o.ok) for o in outcomes] == [
            ("https://example.com/a", True),
            ("http://10.0.0.1/x", False),
            ("https://example.com/gone", False),
            ("https://example.com/empty", False),
        ]
        assert outcomes[0].indexed_chunks == 1
        assert outcomes[1].error == "Blocked URL host"
        assert outcomes[3].error == "No text extracted"
        assert fetcher.fetch.call_count == 3

    def test_plain_text_url_with_default_chunk_size(
        self, blob_store, embedding_provider, index_manager, retriever
    ) -> None:
        """Should index a short .txt URL as one chunk with its exact text."""
        fetcher = MagicMock()
        fetcher.fetch.return_value = FetchedPage(
            "https://example.com/a.txt", 200, "text/plain", b"hello world"
        )
        pipeline = KnowledgeIndexingPipeline(
            settings=IngestionSettings(),
            blob_client=blob_store,
            embedding_provider=embedding_provider,
            index_manager=index_manager,
            fetcher=fetcher,
        )

        outcomes = pipeline.index_from_urls("global", None, ["https://example.com/a.txt"])

        assert outcomes[0].ok is True
        assert outcomes[0].indexed_chunks == 1
        hits = retriever.query("global", None, "hello world", k=5)
        assert [(h.content, h.chunk_index, h.source) for h in hits] == [
            ("hello world", 0, "https://example.com/a.txt")
        ]

    def test_source_is_url(self, pipeline, fetcher, retriever) -> None:
        fetcher.fetch.return_value = FetchedPage(
            "https://example.com/page", 200, "text/html; charset=utf-8", b"<p>Housing information</p>"
        )

        pipeline.index_from_urls("tenant", "t9", ["https://example.com/page"])

        hits = retriever.query("tenant", "t9", "housing", k=3)
        assert hits[0].source == "https://example.com/page"
        assert hits[0].id == "tenant#t9#https://example.com/page#0"

    def test_pdf_by_content_type(self, pipeline, fetcher) -> None:
        fetcher.fetch.return_value = FetchedPage("https://example.com/doc", 200, "application/pdf", b"raw pdf-ish text")

        outcomes = pipeline.index_from_urls("global", None, ["https://example.com/doc"])

        assert outcomes[0].ok is True

    def test_empty_list_rejected(self, pipeline) -> None:
        with pytest.raises(ValidationError):
            pipeline.index_from_urls("global", None, [])


class TestRunPipeline:
    """Test raw -> cleaned -> curated run."""

    def test_scenario_single_text_file(self, pipeline, blob_store) -> None:
        """Should write cleaned text, index it and write a JSONL audit without vectors."""
        blob_store.add("kb", "raw/sub/notes.md", LONG_TEXT)

        result = pipeline.run_pipeline("global", None, "kb", "/raw", "clean", "curated/", max_files=5)

        assert result.processed_raw == 1
        assert result.wrote_cleaned == 1
        assert result.wrote_curated == 1
        assert result.indexed_chunks == 3
        assert result.failed_files == 0
        assert (result.raw_prefix, result.cleaned_prefix, result.curated_prefix) == ("raw/", "clean/", "curated/")

        cleaned, cleaned_type = blob_store.objects[("kb", "clean/sub/notes.txt")]
        assert cleaned.decode() == LONG_TEXT.strip()
        assert cleaned_type == "text/plain; charset=utf-8"

        curated, curated_type = blob_store.objects[("kb", "curated/sub/notes.jsonl")]
        lines = [json.loads(line) for line in curated.decode().splitlines()]
        assert curated_type == "application/jsonl; charset=utf-8"
        assert [line["chunk_index"] for line in lines] == [0, 1, 2]
        assert all("embedding" not in line for line in lines)
        assert lines[0]["source"] == "s3://kb/raw/sub/notes.md"
        assert lines[0]["scope"] == "global"

    def test_failures_counted_and_isolated(self, pipeline, blob_store, embedding_provider) -> None:
        blob_store.add("kb", "raw/a.txt", "fine text")
        blob_store.add("kb", "raw/b.txt", "POISON text")
        blob_store.add("kb", "raw/c.txt", "more fine text")
        embedding_provider.fail_on.add("POISON")

        result = pipeline.run_pipeline("global", None, "kb", "raw/", "clean/", "curated/")

        assert result.total_raw_files == 3
        assert result.processed_raw == 3
        assert result.wrote_cleaned == 3
        assert result.wrote_curated == 2
        assert result.failed_files == 1
        assert ("kb", "curated/b.jsonl") not in blob_store.objects

    def test_requires_all_prefixes(self, pipeline) -> None:
        with pytest.raises(ValidationError):
            pipeline.run_pipeline("global", None, "kb", "raw/", "", "curated/")

    def test_tenant_metadata_in_audit(self, pipeline, blob_store) -> None:
        blob_store.add("kb", "raw/t.txt", "tenant document")

        pipeline.run_pipeline("tenant", "school-7", "kb", "raw/", "clean/", "curated/")

        line = json.loads(blob_store.objects[("kb", "curated/t.jsonl")][0])
        assert line["tenant_id"] == "school-7"
        assert line["scope"] == Scope.TENANT.value


class TestCrawlDelegation:
    def test_crawl_delegates_to_crawler(self, pipeline) -> None:
        crawler = MagicMock()
        pipeline._crawler = crawler

        pipeline.crawl("kb", "raw/", ["https://example.com/"], max_pages=2)

        crawler.crawl.assert_called_once_with(
            "kb", "raw/", ["https://example.com/"], max_pages=2, max_depth=None, allowed_hosts=None
        )
