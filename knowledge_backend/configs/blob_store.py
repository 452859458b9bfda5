"""
Blob store (S3) configuration.

Settings for raw/cleaned/curated object storage and presigned URL generation.

Dependencies: pydantic_settings
System role: S3 bucket client configuration
"""

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BlobStoreSettings(BaseSettings):
    """Settings for S3 blob store operations."""

    model_config = SettingsConfigDict(
        env_prefix="BLOB_STORE_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    region: str = Field(
        default="us-east-1",
        validation_alias=AliasChoices("BLOB_STORE_REGION", "AWS_REGION", "AWS_DEFAULT_REGION"),
        description="AWS region for the S3 client",
    )
    signed_url_expiry: int = Field(
        default=600,
        description="Presigned URL expiry in seconds (default 10 minutes)",
    )
    list_max_keys: int = Field(
        default=200,
        description="Upper bound on objects returned by a single list call",
    )
