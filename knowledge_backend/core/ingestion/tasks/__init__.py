"""
Task modules for the indexing pipeline.

Exports: ChunkingTask, TextExtractor, FetchTask, Crawler, VectorIndexManager
"""

from .chunking_task import ChunkingTask, chunk_text
from .crawl_task import Crawler, extract_links
from .extraction_task import TextExtractor, sniff_kind
from .fetch_task import FetchedPage, FetchTask
from .indexing_task import VectorIndexManager

__all__ = [
    "ChunkingTask",
    "chunk_text",
    "Crawler",
    "extract_links",
    "TextExtractor",
    "sniff_kind",
    "FetchTask",
    "FetchedPage",
    "VectorIndexManager",
]
