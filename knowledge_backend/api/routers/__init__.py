"""
API routers.

Exports: health_router, knowledge_base_router
"""

from .health import router as health_router
from .knowledge_base import router as knowledge_base_router

__all__ = ["health_router", "knowledge_base_router"]
