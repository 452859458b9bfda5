"""
Shared helpers for API routers.
"""
