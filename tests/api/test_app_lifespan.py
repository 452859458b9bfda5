"""Tests for application startup with incomplete or invalid wiring."""

import logging
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from knowledge_backend.api.deps.dependencies import ServiceCache
from knowledge_backend.api.main import create_app
from knowledge_backend.configs import EmbeddingSettings, Settings, VectorIndexSettings


def cache_with_backend(backend: str) -> ServiceCache:
    cache = ServiceCache(
        settings=Settings(
            embeddings=EmbeddingSettings(provider="openai", openai_api_key="sk-test"),
            vector_index=VectorIndexSettings(backend=backend, vectors_bucket=""),
        )
    )
    cache._blob_client = MagicMock()
    cache._crawler = MagicMock()
    cache._embedding_provider = MagicMock()
    return cache


@pytest.fixture
def patched_startup():
    """Yield a setter that swaps the service cache used by startup and dependencies."""
    patches = []

    def install(cache: ServiceCache) -> None:
        for target in (
            "knowledge_backend.api.main.get_service_cache",
            "knowledge_backend.api.deps.dependencies.get_service_cache",
        ):
            p = patch(target, return_value=cache)
            p.start()
            patches.append(p)
        p = patch("knowledge_backend.api.main.configure_logging")
        p.start()
        patches.append(p)

    yield install
    for p in patches:
        p.stop()


class TestLifespan:
    def test_invalid_index_backend_does_not_abort_startup(self, patched_startup, caplog) -> None:
        """Should log the bad backend at ERROR and keep serving."""
        patched_startup(cache_with_backend("pinecone"))

        with caplog.at_level(logging.ERROR, logger="knowledge_backend.api.main"):
            with TestClient(create_app()) as client:
                health = client.get("/api/v1/health")
                query = client.post("/api/v1/kb/query", json={"query": "hello"})

        assert health.status_code == 200
        assert query.status_code == 503
        assert "VECTOR_INDEX_BACKEND" in query.json()["detail"]
        assert any(
            r.levelno == logging.ERROR and "misconfigured" in r.getMessage() for r in caplog.records
        )

    def test_missing_vectors_bucket_does_not_abort_startup(self, patched_startup) -> None:
        patched_startup(cache_with_backend("s3vectors"))

        with TestClient(create_app()) as client:
            response = client.post("/api/v1/kb/query", json={"query": "hello"})

        assert response.status_code == 503
