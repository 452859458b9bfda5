"""
Knowledge base indexing pipeline.

Exports: KnowledgeIndexingPipeline
"""

from .entrypoint import KnowledgeIndexingPipeline

__all__ = ["KnowledgeIndexingPipeline"]
