"""
Core domain layer: ingestion pipeline, retrieval and exceptions.
"""
