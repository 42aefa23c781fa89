"""
Tubely Upload Service Module

Orchestrates the two upload flows:

- Video: validate → stage raw bytes → probe aspect ratio → remux for fast
  start → derive an unguessable key → publish to S3 → record the URL
- Thumbnail: validate → stage → derive the video-ID key → publish to the
  local assets directory → record the URL

Each stage gates the next. Any failure stops the run, every scratch file the
run created is deleted, and the original error propagates to the API layer
unchanged. Metadata is only written after publication succeeds, so a video
record never points at an object that was not stored.

The service integrates with:
- TokenAuthenticator: resolves the bearer token to a user ID
- VideoService: reads and updates video records
- StagingArea: scoped scratch files
- MediaService: ffprobe / ffmpeg
- S3Publisher and LocalAssetPublisher: durable publication
"""

import logging

from starlette.datastructures import UploadFile

from tubely.config import Settings
from tubely.core.auth import TokenAuthenticator
from tubely.core.exceptions import (
    ForbiddenError,
    NotFoundError,
    PersistenceError,
    UploadServiceError,
)
from tubely.models.media import AssetClass, PipelineStage, StagedOrigin
from tubely.models.video import Video
from tubely.services.media_service import MediaService
from tubely.services.publisher import LocalAssetPublisher, S3Publisher
from tubely.services.staging import StagingArea
from tubely.services.video_service import VideoService
from tubely.utils.keys import derive_video_key, media_type_to_ext, thumbnail_key
from tubely.utils.logger import add_log_context
from tubely.utils.upload_validator import (
    validate_content_type,
    validate_upload_part,
    validate_upload_size,
    validate_video_id,
)


# Configure module logger
logger = logging.getLogger(__name__)


class UploadService:
    """
    Upload pipeline for videos and thumbnails.

    Attributes:
        settings: Application settings (size ceilings)
        authenticator: Bearer token verifier
        videos: Video record store
        media: ffprobe/ffmpeg wrapper
        staging: Scratch staging area
        video_publisher: Publisher for finished videos
        thumbnail_publisher: Publisher for thumbnails

    Example:
        ```python
        video = await upload_service.authorize(video_id, token)
        form = await request.form()
        file = upload_service.validate_file(form.get("video"), AssetClass.VIDEO)
        await upload_service.upload_video(video, file)
        ```
    """

    def __init__(
        self,
        settings: Settings,
        authenticator: TokenAuthenticator,
        videos: VideoService,
        media: MediaService,
        staging: StagingArea,
        video_publisher: S3Publisher,
        thumbnail_publisher: LocalAssetPublisher,
    ) -> None:
        self.settings = settings
        self.authenticator = authenticator
        self.videos = videos
        self.media = media
        self.staging = staging
        self.video_publisher = video_publisher
        self.thumbnail_publisher = thumbnail_publisher

    # =========================================================================
    # Validation gate
    # =========================================================================

    def max_bytes(self, asset_class: AssetClass) -> int:
        """Size ceiling for an asset class."""
        if asset_class is AssetClass.VIDEO:
            return self.settings.max_video_upload_bytes
        return self.settings.max_thumbnail_upload_bytes

    async def authorize(self, video_id: str, token: str | None) -> Video:
        """
        Resolve the video a request targets and check the caller owns it.

        Runs before the request body is read. Checks, in order: the ID is a
        UUID, the token is valid, the video exists, the caller is its owner.

        Raises:
            BadRequestError: ``malformed-id``.
            UnauthenticatedError: Missing or invalid token.
            NotFoundError: Unknown video.
            ForbiddenError: Caller is not the owner.
        """
        validate_video_id(video_id)
        user_id = self.authenticator.authenticate(token)

        video = await self.videos.get_video(video_id)
        if video is None:
            raise NotFoundError("Couldn't find video", reason="unknown-video")

        if video.user_id != user_id:
            logger.warning("User %s attempted to access video %s", user_id, video_id)
            raise ForbiddenError("Not authorized to update this video", reason="not-owner")

        return video

    def validate_file(self, part: object, asset_class: AssetClass) -> UploadFile:
        """
        Check the multipart part for an asset class: present and a file, within
        the size ceiling, and with an accepted content type.

        Raises:
            BadRequestError: ``invalid-file``.
            FileTooLargeError: Declared size over the ceiling.
            UnsupportedMediaTypeError: Content type not accepted.
        """
        file = validate_upload_part(part, asset_class.form_field)
        validate_upload_size(file.size, self.max_bytes(asset_class))
        validate_content_type(file.content_type, asset_class)
        return file

    # =========================================================================
    # Pipelines
    # =========================================================================

    async def upload_video(self, video: Video, file: UploadFile) -> Video:
        """
        Run the video pipeline for a validated upload and return the updated
        record.

        Raises:
            FileTooLargeError: Stream longer than the ceiling.
            ProbeError: Geometry could not be read.
            RemuxError: ffmpeg failed.
            StorageError: S3 upload failed.
            PersistenceError: URL could not be recorded. The stored object is
                left in place and its key is logged.
        """
        ctx_logger = add_log_context(logger, video_id=video.id, user_id=video.user_id)
        content_type = file.content_type
        stage = PipelineStage.VALIDATED
        ctx_logger.info("Uploading video", extra={"size": file.size, "content_type": content_type})

        try:
            async with self.staging.session() as session:
                raw = await session.stage(
                    file, self.max_bytes(AssetClass.VIDEO), suffix=media_type_to_ext(content_type)
                )
                stage = self._advance(ctx_logger, PipelineStage.STAGED)

                aspect_ratio = await self.media.get_aspect_ratio(raw.path)
                stage = self._advance(ctx_logger, PipelineStage.CLASSIFIED)

                processed = session.allocate(StagedOrigin.REMUXED, raw.path.suffix)
                await self.media.process_for_fast_start(raw.path, processed.path)
                stage = self._advance(ctx_logger, PipelineStage.REMUXED)

                key = derive_video_key(aspect_ratio, content_type)
                stage = self._advance(ctx_logger, PipelineStage.KEYED)

                url = await self.video_publisher.publish(processed, key, content_type)
                stage = self._advance(ctx_logger, PipelineStage.PUBLISHED)

            updated = video.model_copy(update={"video_url": url})
            try:
                await self.videos.update_video(updated, fields=("video_url",))
            except PersistenceError:
                ctx_logger.error(
                    "Video published but not recorded, object is orphaned",
                    extra={"key": key, "url": url},
                )
                raise
            self._advance(ctx_logger, PipelineStage.COMMITTED)

        except UploadServiceError as e:
            ctx_logger.warning(
                "Video upload failed after stage '%s': %s",
                stage.value,
                e.message,
                extra={"stage": stage.value, "reason": e.reason},
            )
            raise
        except Exception:
            ctx_logger.exception(
                "Unexpected error in video upload after stage '%s'",
                stage.value,
                extra={"stage": stage.value},
            )
            raise

        return updated

    async def upload_thumbnail(self, video: Video, file: UploadFile) -> Video:
        """
        Store a thumbnail for ``video`` in the assets directory and return
        the updated record.

        Raises:
            FileTooLargeError: Stream longer than the ceiling.
            StorageError: Asset could not be written.
            PersistenceError: URL could not be recorded.
        """
        ctx_logger = add_log_context(logger, video_id=video.id, user_id=video.user_id)
        content_type = file.content_type
        ctx_logger.info(
            "Uploading thumbnail", extra={"size": file.size, "content_type": content_type}
        )

        try:
            async with self.staging.session() as session:
                staged = await session.stage(
                    file,
                    self.max_bytes(AssetClass.THUMBNAIL),
                    suffix=media_type_to_ext(content_type),
                )
                key = thumbnail_key(video.id, content_type)
                url = await self.thumbnail_publisher.publish(staged, key, content_type)

            updated = video.model_copy(update={"thumbnail_url": url})
            await self.videos.update_video(updated, fields=("thumbnail_url",))
        except UploadServiceError as e:
            ctx_logger.warning(
                "Thumbnail upload failed: %s", e.message, extra={"reason": e.reason}
            )
            raise

        ctx_logger.info("Thumbnail stored", extra={"key": key})
        return updated

    @staticmethod
    def _advance(ctx_logger: logging.LoggerAdapter, stage: PipelineStage) -> PipelineStage:
        ctx_logger.info("Video pipeline reached stage '%s'", stage.value, extra={"stage": stage.value})
        return stage
