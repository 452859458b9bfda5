"""
Presigned URL and listing handlers.

Builds signed upload keys and lists stored objects with signed download
links for the knowledge base admin UI.

Dependencies: knowledge_backend.api.routers.router_utils.presigned_url_utils,
    knowledge_backend.boundary.aws.s3_client
System role: Presigned URL request handling
"""

import logging

from knowledge_backend.api.routers.router_utils.presigned_url_utils import generate_upload_key
from knowledge_backend.boundary.aws.s3_client import S3BlobStoreClient
from knowledge_backend.configs import BlobStoreSettings
from knowledge_backend.core.exceptions import BlobStoreError, ValidationError
from knowledge_backend.models.knowledge import (
    ListedFile,
    ListRequest,
    ListResponse,
    SignedUploadRequest,
    SignedUploadResponse,
)

logger = logging.getLogger(__name__)

DEFAULT_LIST_FILES = 50


def handle_signed_upload_request(
    request: SignedUploadRequest,
    blob_client: S3BlobStoreClient,
    settings: BlobStoreSettings,
) -> SignedUploadResponse:
    """
    Generate a presigned PUT URL under the requested prefix.

    Raises:
        ValidationError: bucket, prefix or filename missing
        BlobStoreError: Presigning failed
    """
    if not request.bucket or not request.prefix or not request.filename:
        raise ValidationError("bucket, prefix, filename are required")

    key = generate_upload_key(request.prefix, request.filename)
    url = blob_client.generate_presigned_upload_url(
        request.bucket,
        key,
        content_type=request.content_type or "application/octet-stream",
        expires_in=settings.signed_url_expiry,
    )
    logger.info(
        "Signed upload URL generated",
        extra={"bucket": request.bucket, "key": key},
    )
    return SignedUploadResponse(bucket=request.bucket, key=key, signed_upload_url=url)


def handle_list_request(
    request: ListRequest,
    blob_client: S3BlobStoreClient,
    settings: BlobStoreSettings,
) -> ListResponse:
    """
    List objects under a prefix with signed download URLs.

    Directory markers are skipped; a file whose URL cannot be signed is
    still listed with signedGetUrl null.

    Raises:
        ValidationError: bucket or prefix missing
        BlobStoreError: Listing failed
    """
    if not request.bucket or not request.prefix:
        raise ValidationError("bucket and prefix are required")

    max_keys = min(settings.list_max_keys, request.max_files or DEFAULT_LIST_FILES)
    objects = blob_client.list_objects(request.bucket, request.prefix, max_keys=max(1, max_keys))

    files: list[ListedFile] = []
    for obj in objects:
        if not obj.key or obj.key.endswith("/"):
            continue
        try:
            url = blob_client.generate_presigned_download_url(
                request.bucket, obj.key, expires_in=settings.signed_url_expiry
            )
        except BlobStoreError as e:
            logger.warning(f"Presign failed for {obj.key}: {e.message}")
            url = None
        files.append(
            ListedFile(
                key=obj.key,
                name=obj.key.rsplit("/", 1)[-1],
                size=obj.size or 0,
                last_modified=obj.last_modified,
                signed_get_url=url,
            )
        )
    return ListResponse(files=files)
