"""
Publishers put a finished artifact somewhere durable and return its URL.

- S3Publisher uploads videos to the bucket; the URL points at the
  distribution host in front of it.
- LocalAssetPublisher moves thumbnails into the assets directory that the
  application serves under /assets.

Both raise StorageError on failure and never retry; boto3's own retry
configuration is the only retry in the path.
"""

import asyncio
import logging
import shutil

from pathlib import Path

from boto3.exceptions import S3UploadFailedError
from botocore.exceptions import BotoCoreError, ClientError

from tubely.config import Settings
from tubely.core.exceptions import StorageError
from tubely.core.storage import StorageClient
from tubely.models.media import StagedFile


logger = logging.getLogger(__name__)


class S3Publisher:
    """Publish to S3 behind a distribution host."""

    def __init__(self, storage: StorageClient, settings: Settings) -> None:
        self.storage = storage
        self.distribution = settings.s3_cf_distribution

    def url_for(self, key: str) -> str:
        return f"https://{self.distribution}/{key}"

    async def publish(self, staged: StagedFile, key: str, content_type: str) -> str:
        """
        Upload ``staged`` under ``key``.

        The blocking boto3 transfer runs in a worker thread so the event loop
        keeps serving other requests.

        Raises:
            StorageError: If the upload fails for any boto3 reason.
        """
        try:
            await asyncio.to_thread(
                self.storage.upload_file, str(staged.path), key, content_type
            )
        except (S3UploadFailedError, ClientError, BotoCoreError) as e:
            raise StorageError(f"Error uploading file to S3: {e}", reason="upload-failed") from e

        return self.url_for(key)


class LocalAssetPublisher:
    """Publish into the local assets directory served at /assets."""

    def __init__(self, settings: Settings) -> None:
        self.assets_root = Path(settings.assets_root)
        self.asset_host = settings.asset_host
        self.port = settings.port

    def url_for(self, key: str) -> str:
        return f"http://{self.asset_host}:{self.port}/assets/{key}"

    def _move(self, source: Path, destination: Path) -> None:
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.move(str(source), str(destination))

    async def publish(self, staged: StagedFile, key: str, content_type: str) -> str:
        """
        Move ``staged`` to ``<assets_root>/<key>``, replacing any previous file.

        ``content_type`` is not stored; StaticFiles derives it from the
        extension in the key.

        Raises:
            StorageError: If the file cannot be moved.
        """
        destination = self.assets_root / key
        try:
            await asyncio.to_thread(self._move, staged.path, destination)
        except OSError as e:
            logger.exception("Failed to write asset %s", destination)
            raise StorageError("Couldn't write thumbnail", reason="write-failed") from e

        logger.info("Wrote asset %s (%s)", destination, content_type)
        return self.url_for(key)
