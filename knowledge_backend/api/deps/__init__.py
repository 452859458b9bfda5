"""
API dependencies.
"""

from .dependencies import (
    ServiceCache,
    get_blob_client,
    get_crawler,
    get_indexing_pipeline,
    get_retriever,
    get_service_cache,
    get_settings_dependency,
)

__all__ = [
    "ServiceCache",
    "get_blob_client",
    "get_crawler",
    "get_indexing_pipeline",
    "get_retriever",
    "get_service_cache",
    "get_settings_dependency",
]
