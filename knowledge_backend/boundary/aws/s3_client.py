"""
S3 client for knowledge base blob operations.

Lists, downloads and uploads raw/cleaned/curated objects and generates
presigned URLs for direct browser uploads and downloads. The bucket is
chosen per call so one client serves every knowledge base bucket.

Dependencies: boto3, knowledge_backend.core.exceptions
System role: Blob store boundary
"""

from dataclasses import dataclass
from datetime import datetime

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from knowledge_backend.core.exceptions import BlobStoreError


@dataclass(frozen=True)
class BlobObject:
    """Listing entry for a stored object."""

    key: str
    size: int = 0
    last_modified: datetime | None = None


class S3BlobStoreClient:
    """S3 client for bucket+key byte objects."""

    def __init__(self, region: str = "us-east-1", s3_client=None) -> None:
        """
        Initialize S3 client.

        Args:
            region: AWS region for S3
            s3_client: Pre-built boto3 S3 client (tests inject a stub)
        """
        self._region = region
        self._s3_client = s3_client or boto3.client("s3", region_name=region)

    def list_objects(self, bucket: str, prefix: str, max_keys: int = 1000) -> list[BlobObject]:
        """
        List objects under a prefix, following continuation tokens.

        Args:
            bucket: Bucket name
            prefix: Key prefix
            max_keys: Maximum number of entries returned

        Returns:
            list[BlobObject]: At most max_keys entries in listing order

        Raises:
            BlobStoreError: If the listing fails
        """
        out: list[BlobObject] = []
        params = {"Bucket": bucket, "Prefix": prefix, "MaxKeys": min(1000, max_keys)}
        try:
            while True:
                resp = self._s3_client.list_objects_v2(**params)
                for item in resp.get("Contents", []):
                    if item.get("Key"):
                        out.append(
                            BlobObject(
                                key=item["Key"],
                                size=item.get("Size", 0),
                                last_modified=item.get("LastModified"),
                            )
                        )
                    if len(out) >= max_keys:
                        return out
                if not resp.get("IsTruncated"):
                    return out
                params["ContinuationToken"] = resp["NextContinuationToken"]
        except (ClientError, BotoCoreError) as e:
            raise BlobStoreError(f"Failed to list objects: {e}", bucket=bucket, key=prefix) from e

    def get_object(self, bucket: str, key: str) -> bytes:
        """
        Download an object's bytes.

        Raises:
            BlobStoreError: If the object is missing or the download fails
        """
        try:
            resp = self._s3_client.get_object(Bucket=bucket, Key=key)
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            if error_code in ("404", "NoSuchKey"):
                raise BlobStoreError(f"Object not found: {key}", bucket=bucket, key=key) from e
            raise BlobStoreError(f"Failed to get object: {e}", bucket=bucket, key=key) from e
        except BotoCoreError as e:
            raise BlobStoreError(f"Failed to get object: {e}", bucket=bucket, key=key) from e

        body = resp.get("Body")
        if body is None:
            return b""
        return body.read()

    def put_object(
        self,
        bucket: str,
        key: str,
        body: bytes | str,
        content_type: str = "application/octet-stream",
    ) -> None:
        """
        Upload bytes (str bodies are UTF-8 encoded).

        Raises:
            BlobStoreError: If the upload fails
        """
        data = body.encode("utf-8") if isinstance(body, str) else body
        try:
            self._s3_client.put_object(
                Bucket=bucket,
                Key=key,
                Body=data,
                ContentType=content_type or "application/octet-stream",
            )
        except (ClientError, BotoCoreError) as e:
            raise BlobStoreError(f"Failed to put object: {e}", bucket=bucket, key=key) from e

    def generate_presigned_upload_url(
        self,
        bucket: str,
        key: str,
        content_type: str = "application/octet-stream",
        expires_in: int = 600,
    ) -> str:
        """
        Generate presigned URL for uploading an object.

        Raises:
            BlobStoreError: If presigned URL generation fails
        """
        try:
            return self._s3_client.generate_presigned_url(
                ClientMethod="put_object",
                Params={
                    "Bucket": bucket,
                    "Key": key,
                    "ContentType": content_type,
                },
                ExpiresIn=expires_in,
            )
        except (ClientError, BotoCoreError) as e:
            raise BlobStoreError(f"Failed to presign upload: {e}", bucket=bucket, key=key) from e

    def generate_presigned_download_url(
        self,
        bucket: str,
        key: str,
        expires_in: int = 600,
    ) -> str:
        """
        Generate presigned URL for downloading/viewing an object.

        Raises:
            BlobStoreError: If presigned URL generation fails
        """
        try:
            return self._s3_client.generate_presigned_url(
                ClientMethod="get_object",
                Params={"Bucket": bucket, "Key": key},
                ExpiresIn=expires_in,
            )
        except (ClientError, BotoCoreError) as e:
            raise BlobStoreError(f"Failed to presign download: {e}", bucket=bucket, key=key) from e
