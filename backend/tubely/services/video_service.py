"""
Video record store backed by the MongoDB ``videos`` collection.

The upload pipeline consumes only two operations from it: look a video up by
ID, and write a modified video back. Driver errors are reported as
PersistenceError so the API answers 503 instead of leaking pymongo details.
"""

import logging

from collections.abc import Iterable
from datetime import UTC, datetime

from pymongo.errors import PyMongoError

from tubely.core.database import DatabaseClient
from tubely.core.exceptions import PersistenceError
from tubely.models.video import Video


logger = logging.getLogger(__name__)


class VideoService:
    """
    Read and update video records.

    Example:
        ```python
        service = VideoService(get_db_client())
        video = await service.get_video("c5a1...")
        video.video_url = url
        await service.update_video(video)
        ```
    """

    def __init__(self, db_client: DatabaseClient) -> None:
        self.db_client = db_client

    async def get_video(self, video_id: str) -> Video | None:
        """
        Fetch a video by ID.

        Returns:
            Video | None: The record, or None if no video has this ID.

        Raises:
            PersistenceError: If the database cannot be read.
        """
        try:
            document = await self.db_client.get_videos_collection().find_one({"_id": video_id})
        except PyMongoError as e:
            logger.exception("Failed to load video %s", video_id)
            raise PersistenceError("Couldn't get video") from e

        if document is None:
            return None
        return Video.model_validate(document)

    async def update_video(self, video: Video, fields: Iterable[str] | None = None) -> Video:
        """
        Write ``video`` back and stamp ``updated_at``.

        Args:
            video: The modified record.
            fields: Names of the fields to write alongside ``updated_at``.
                Every field except the id is written when omitted.

        Raises:
            PersistenceError: If the write fails or the video no longer exists.
        """
        video.updated_at = datetime.now(UTC)
        document = video.to_document()
        document.pop("_id", None)
        if fields is not None:
            document = {name: document[name] for name in (*fields, "updated_at")}

        try:
            result = await self.db_client.get_videos_collection().update_one(
                {"_id": video.id}, {"$set": document}
            )
        except PyMongoError as e:
            logger.exception("Failed to update video %s", video.id)
            raise PersistenceError("Couldn't update video") from e

        if result.matched_count == 0:
            logger.error("Video %s disappeared before update", video.id)
            raise PersistenceError("Couldn't update video: record no longer exists")

        logger.debug("Updated video %s", video.id)
        return video
