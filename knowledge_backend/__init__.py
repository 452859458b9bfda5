"""Knowledge ingestion and retrieval backend."""

__version__ = "0.1.0"
