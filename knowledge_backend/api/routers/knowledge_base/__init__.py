"""
Knowledge base router package.

Exports the router for knowledge base ingestion and query endpoints.
"""

from .knowledge_base_router import router

__all__ = ["router"]
