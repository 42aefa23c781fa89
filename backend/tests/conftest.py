"""
Pytest Configuration and Test Fixtures for the Tubely Backend

This module provides the shared fixtures:
- Settings pointing scratch and assets directories at tmp_path
- Signed access tokens for the video owner and for another user
- Video records and a mocked VideoService record store
- Mocked S3 StorageClient and MediaService (no ffprobe/ffmpeg needed)
- A real UploadService wired to those mocks
- FastAPI TestClient with the upload service dependency overridden
"""

import uuid

from collections.abc import Callable, Generator
from io import BytesIO
from pathlib import Path
from unittest.mock import AsyncMock, Mock

import pytest

from fastapi.testclient import TestClient
from starlette.datastructures import Headers, UploadFile

from tubely.config import Settings
from tubely.core.auth import TokenAuthenticator, create_access_token
from tubely.core.storage import StorageClient
from tubely.models.media import AspectRatio
from tubely.models.video import Video
from tubely.services.media_service import MediaService
from tubely.services.publisher import LocalAssetPublisher, S3Publisher
from tubely.services.staging import StagingArea
from tubely.services.upload_service import UploadService
from tubely.services.video_service import VideoService


TEST_JWT_SECRET = "test-secret-key-for-jwt-signing-minimum-32-chars"
TEST_DISTRIBUTION = "d111111abcdef8.cloudfront.net"


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: mark test as unit test")


# ==============================================================================
# Settings Fixtures
# ==============================================================================


@pytest.fixture
def scratch_dir(tmp_path: Path) -> Path:
    """Empty scratch directory for staged uploads."""
    path = tmp_path / "scratch"
    path.mkdir()
    return path


@pytest.fixture
def assets_dir(tmp_path: Path) -> Path:
    """Empty assets directory for thumbnails."""
    path = tmp_path / "assets"
    path.mkdir()
    return path


@pytest.fixture
def mock_settings(scratch_dir: Path, assets_dir: Path) -> Settings:
    """
    Settings for tests.

    Ceilings are lowered to 1 MB so oversized uploads stay cheap to build,
    and the chunk size is small so staging streams in several reads.
    """
    return Settings(
        app_env="testing",
        app_name="Tubely-Test",
        json_logs=False,
        jwt_secret=TEST_JWT_SECRET,
        mongodb_uri="mongodb://localhost:27017",
        mongodb_db_name="test_tubely",
        s3_bucket_name="test-bucket",
        s3_region="us-east-1",
        s3_cf_distribution=TEST_DISTRIBUTION,
        assets_root=str(assets_dir),
        asset_host="localhost",
        port=8091,
        scratch_dir=str(scratch_dir),
        upload_chunk_size=1024,
        max_video_upload_mb=1,
        max_thumbnail_upload_mb=1,
    )


# ==============================================================================
# User and Token Fixtures
# ==============================================================================


@pytest.fixture
def owner_id() -> str:
    return str(uuid.uuid4())


@pytest.fixture
def other_user_id() -> str:
    return str(uuid.uuid4())


@pytest.fixture
def owner_token(mock_settings: Settings, owner_id: str) -> str:
    """Valid access token for the video owner."""
    return create_access_token(owner_id, mock_settings)


@pytest.fixture
def other_user_token(mock_settings: Settings, other_user_id: str) -> str:
    """Valid access token for a user who does not own the video."""
    return create_access_token(other_user_id, mock_settings)


# ==============================================================================
# Video Fixtures
# ==============================================================================


@pytest.fixture
def test_video(owner_id: str) -> Video:
    """A video record owned by owner_id with no media yet."""
    return Video(
        _id=str(uuid.uuid4()),
        user_id=owner_id,
        title="Boots in the wild",
        description="A walk through the woods",
    )


@pytest.fixture
def mock_video_service(test_video: Video) -> Mock:
    """Record store returning test_video for its own ID and None otherwise."""
    mock = Mock(spec=VideoService)

    async def get_video(video_id: str) -> Video | None:
        return test_video if video_id == test_video.id else None

    mock.get_video = AsyncMock(side_effect=get_video)
    mock.update_video = AsyncMock(side_effect=lambda video, fields=None: video)
    return mock


# ==============================================================================
# Pipeline Collaborator Fixtures
# ==============================================================================


@pytest.fixture
def mock_storage_client() -> Mock:
    """S3 StorageClient whose uploads succeed."""
    mock = Mock(spec=StorageClient)
    mock.upload_file = Mock(return_value=None)
    return mock


@pytest.fixture
def mock_media_service() -> Mock:
    """
    MediaService classifying every file as landscape and "remuxing" by
    copying input to output.
    """
    mock = Mock(spec=MediaService)

    async def process_for_fast_start(input_path: Path, output_path: Path) -> Path:
        output_path.write_bytes(input_path.read_bytes())
        return output_path

    mock.get_aspect_ratio = AsyncMock(return_value=AspectRatio.LANDSCAPE)
    mock.process_for_fast_start = AsyncMock(side_effect=process_for_fast_start)
    return mock


@pytest.fixture
def upload_service(
    mock_settings: Settings,
    mock_video_service: Mock,
    mock_media_service: Mock,
    mock_storage_client: Mock,
) -> UploadService:
    """Real UploadService with mocked record store, media tools and S3."""
    return UploadService(
        settings=mock_settings,
        authenticator=TokenAuthenticator(mock_settings),
        videos=mock_video_service,
        media=mock_media_service,
        staging=StagingArea(mock_settings),
        video_publisher=S3Publisher(mock_storage_client, mock_settings),
        thumbnail_publisher=LocalAssetPublisher(mock_settings),
    )


@pytest.fixture
def make_upload() -> Callable[..., UploadFile]:
    """
    Factory for in-memory UploadFile objects.

    ``size`` defaults to the data length; pass ``size=None`` to simulate a
    client that did not declare one.
    """
    sentinel = object()

    def _make(
        data: bytes = b"\x00\x00\x00\x20ftypisom" + b"\x00" * 100,
        content_type: str | None = "video/mp4",
        filename: str = "clip.mp4",
        size: int | None | object = sentinel,
    ) -> UploadFile:
        headers = Headers({"content-type": content_type}) if content_type else Headers({})
        return UploadFile(
            file=BytesIO(data),
            size=len(data) if size is sentinel else size,
            filename=filename,
            headers=headers,
        )

    return _make


# ==============================================================================
# FastAPI Client Fixtures
# ==============================================================================


@pytest.fixture
def authed_test_client(upload_service: UploadService) -> Generator[TestClient, None, None]:
    """TestClient whose routes use the test UploadService."""
    from tubely.api.v1.videos import get_upload_service
    from tubely.main import app

    app.dependency_overrides[get_upload_service] = lambda: upload_service

    client = TestClient(app)
    yield client

    app.dependency_overrides.clear()
