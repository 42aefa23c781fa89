"""
Tubely S3 Storage Client

Thin boto3 wrapper used to publish finished videos. Works against AWS S3 or any
S3-compatible endpoint (MinIO in development) when ``s3_endpoint_url`` is set.

Calls are synchronous; async callers wrap them in ``asyncio.to_thread``. boto3
errors are logged here and re-raised unchanged for the caller to classify.
"""

import logging

from functools import lru_cache

import boto3

from boto3.exceptions import S3UploadFailedError
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError

from tubely.config import Settings, get_settings


logger = logging.getLogger(__name__)

S3_CLIENT_CONFIG = Config(
    signature_version="s3v4",
    retries={"max_attempts": 3, "mode": "standard"},
)


class StorageClient:
    """
    Writes objects into the configured video bucket.

    Example usage:
        ```python
        storage = get_storage_client()
        storage.upload_file("/tmp/tubely-x.mp4", "landscape/ab12.mp4", "video/mp4")
        ```
    """

    def __init__(self, settings: Settings | None = None) -> None:
        settings = settings or get_settings()
        self.bucket_name = settings.s3_bucket_name
        self.s3_client = boto3.client(
            "s3",
            endpoint_url=settings.s3_endpoint_url,
            aws_access_key_id=settings.s3_access_key_id,
            aws_secret_access_key=settings.s3_secret_access_key,
            region_name=settings.s3_region,
            config=S3_CLIENT_CONFIG,
        )

        logger.info(
            "S3 storage client ready",
            extra={
                "bucket": self.bucket_name,
                "region": settings.s3_region,
                "endpoint": settings.s3_endpoint_url or "aws",
            },
        )

    def upload_file(self, file_path: str, key: str, content_type: str) -> None:
        """
        Put a local file at ``key`` with the given Content-Type.

        boto3's managed transfer streams from disk and switches to multipart
        for large objects.

        Raises:
            S3UploadFailedError, ClientError, BotoCoreError: The put did not complete.
        """
        try:
            self.s3_client.upload_file(
                Filename=file_path,
                Bucket=self.bucket_name,
                Key=key,
                ExtraArgs={"ContentType": content_type},
            )
        except (S3UploadFailedError, ClientError, BotoCoreError):
            logger.exception("S3 put failed", extra={"bucket": self.bucket_name, "key": key})
            raise

        logger.info("Stored object", extra={"key": key, "content_type": content_type})


@lru_cache
def get_storage_client() -> StorageClient:
    """One client per process; boto3 clients are thread-safe."""
    return StorageClient()
