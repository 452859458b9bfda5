"""
Models for the indexing pipeline.

Exports: SavedPage, CrawlResult, BlobIndexResult, UrlIndexOutcome, PipelineRunResult
"""

from .results import (
    BlobIndexResult,
    CrawlResult,
    PipelineRunResult,
    SavedPage,
    UrlIndexOutcome,
)

__all__ = [
    "SavedPage",
    "CrawlResult",
    "BlobIndexResult",
    "UrlIndexOutcome",
    "PipelineRunResult",
]
