"""
Tubely Video Upload API Endpoints

Routes for attaching media to an existing video record:

- POST /video_upload/{video_id}: Upload the video file (multipart field ``video``)
- POST /thumbnail_upload/{video_id}: Upload a thumbnail (multipart field ``thumbnail``)
- GET /videos/{video_id}: Fetch a video record owned by the caller

All routes require a bearer token for the video's owner. Failures surface as
UploadServiceError subclasses and are rendered by the application's exception
handler, so the handlers here contain no error mapping.

The video ID, token and ownership are checked before the multipart body is
parsed, so a rejected request never spools its upload.
"""

import logging

from fastapi import APIRouter, Depends, Request, status

from tubely.config import Settings, get_settings
from tubely.core.auth import TokenAuthenticator, get_bearer_token
from tubely.core.database import get_db_client
from tubely.core.storage import get_storage_client
from tubely.models.media import AssetClass
from tubely.models.video import Video
from tubely.services.media_service import MediaService
from tubely.services.publisher import LocalAssetPublisher, S3Publisher
from tubely.services.staging import StagingArea
from tubely.services.upload_service import UploadService
from tubely.services.video_service import VideoService


logger = logging.getLogger(__name__)

router = APIRouter()


# ============================================================================
# Error Response Documentation
# ============================================================================

ERROR_RESPONSES = {
    400: {"description": "Malformed video ID or missing file part"},
    401: {"description": "Missing or invalid bearer token"},
    403: {"description": "Caller does not own the video"},
    404: {"description": "Video not found"},
    413: {"description": "File exceeds the size ceiling"},
    415: {"description": "Content type not accepted"},
}


# ============================================================================
# Dependency Injection Functions
# ============================================================================


def get_video_service() -> VideoService:
    """Dependency injection for VideoService."""
    return VideoService(get_db_client())


def get_upload_service(
    settings: Settings = Depends(get_settings),
    videos: VideoService = Depends(get_video_service),
) -> UploadService:
    """
    Dependency injection for UploadService.

    Wires the pipeline collaborators from settings and the shared database and
    storage clients.
    """
    return UploadService(
        settings=settings,
        authenticator=TokenAuthenticator(settings),
        videos=videos,
        media=MediaService(settings),
        staging=StagingArea(settings),
        video_publisher=S3Publisher(get_storage_client(), settings),
        thumbnail_publisher=LocalAssetPublisher(settings),
    )


# ============================================================================
# Endpoints
# ============================================================================


@router.post(
    "/video_upload/{video_id}",
    response_model=None,
    status_code=status.HTTP_200_OK,
    summary="Upload a video file",
    description=(
        "Upload an MP4 for an existing video. The file is probed, remuxed for fast "
        "start and stored in S3; the video's video_url is updated."
    ),
    responses={
        **ERROR_RESPONSES,
        422: {"description": "Video metadata could not be read"},
        502: {"description": "Object storage rejected the upload"},
        503: {"description": "Video record could not be updated"},
    },
)
async def upload_video(
    video_id: str,
    request: Request,
    token: str | None = Depends(get_bearer_token),
    upload_service: UploadService = Depends(get_upload_service),
) -> None:
    """Run the video upload pipeline. Responds with an empty JSON body."""
    video = await upload_service.authorize(video_id, token)

    async with request.form() as form:
        file = upload_service.validate_file(
            form.get(AssetClass.VIDEO.form_field), AssetClass.VIDEO
        )
        logger.info("Uploading video %s for user %s", video.id, video.user_id)
        await upload_service.upload_video(video, file)


@router.post(
    "/thumbnail_upload/{video_id}",
    response_model=Video,
    response_model_by_alias=False,
    summary="Upload a thumbnail",
    description="Upload a thumbnail image for an existing video and return the updated video.",
    responses={**ERROR_RESPONSES, 503: {"description": "Video record could not be updated"}},
)
async def upload_thumbnail(
    video_id: str,
    request: Request,
    token: str | None = Depends(get_bearer_token),
    upload_service: UploadService = Depends(get_upload_service),
) -> Video:
    """Store the thumbnail and return the video with its new thumbnail_url."""
    video = await upload_service.authorize(video_id, token)

    async with request.form() as form:
        file = upload_service.validate_file(
            form.get(AssetClass.THUMBNAIL.form_field), AssetClass.THUMBNAIL
        )
        logger.info("Uploading thumbnail for video %s by user %s", video.id, video.user_id)
        return await upload_service.upload_thumbnail(video, file)


@router.get(
    "/videos/{video_id}",
    response_model=Video,
    response_model_by_alias=False,
    summary="Get a video",
    responses={
        400: ERROR_RESPONSES[400],
        401: ERROR_RESPONSES[401],
        403: ERROR_RESPONSES[403],
        404: ERROR_RESPONSES[404],
    },
)
async def get_video(
    video_id: str,
    token: str | None = Depends(get_bearer_token),
    upload_service: UploadService = Depends(get_upload_service),
) -> Video:
    """Return a video owned by the caller."""
    return await upload_service.authorize(video_id, token)
