"""
AWS boundary modules.

Exports: S3BlobStoreClient, BlobObject
"""

from .s3_client import BlobObject, S3BlobStoreClient

__all__ = ["BlobObject", "S3BlobStoreClient"]
