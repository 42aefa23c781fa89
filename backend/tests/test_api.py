"""
Endpoint tests for the video routes.

Requests go through the real FastAPI app, routing, form parsing and exception
handler; the upload service behind them uses mocked S3, record store and
media tools (see conftest.authed_test_client).
"""

import re
import uuid

from pathlib import Path
from unittest.mock import Mock

from fastapi.testclient import TestClient

from tubely.core.exceptions import ProbeError
from tubely.models.video import Video


MP4_BYTES = b"\x00\x00\x00\x20ftypisom" + b"\x00" * 256


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


class TestVideoUploadEndpoint:
    """Tests for POST /api/v1/video_upload/{video_id}."""

    def test_success(
        self,
        authed_test_client: TestClient,
        test_video: Video,
        owner_token: str,
        mock_video_service: Mock,
        scratch_dir: Path,
    ) -> None:
        response = authed_test_client.post(
            f"/api/v1/video_upload/{test_video.id}",
            files={"video": ("clip.mp4", MP4_BYTES, "video/mp4")},
            headers=bearer(owner_token),
        )

        assert response.status_code == 200
        assert response.json() is None
        assert "X-Process-Time" in response.headers

        saved = mock_video_service.update_video.await_args.args[0]
        assert re.match(r"^https://[^/]+/landscape/[0-9a-f]{64}\.mp4$", saved.video_url)
        assert list(scratch_dir.iterdir()) == []

    def test_missing_token(self, authed_test_client: TestClient, test_video: Video) -> None:
        response = authed_test_client.post(
            f"/api/v1/video_upload/{test_video.id}",
            files={"video": ("clip.mp4", MP4_BYTES, "video/mp4")},
        )

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"
        assert response.json() == {
            "error": "unauthenticated",
            "message": "Couldn't find bearer token",
            "reason": "missing-token",
        }

    def test_invalid_token(self, authed_test_client: TestClient, test_video: Video) -> None:
        response = authed_test_client.post(
            f"/api/v1/video_upload/{test_video.id}",
            files={"video": ("clip.mp4", MP4_BYTES, "video/mp4")},
            headers=bearer("not-a-real-token"),
        )

        assert response.status_code == 401
        assert response.json()["reason"] == "invalid-token"

    def test_malformed_id(self, authed_test_client: TestClient, owner_token: str) -> None:
        response = authed_test_client.post(
            "/api/v1/video_upload/not-a-uuid",
            files={"video": ("clip.mp4", MP4_BYTES, "video/mp4")},
            headers=bearer(owner_token),
        )

        assert response.status_code == 400
        assert response.json()["reason"] == "malformed-id"

    def test_unknown_video(self, authed_test_client: TestClient, owner_token: str) -> None:
        response = authed_test_client.post(
            f"/api/v1/video_upload/{uuid.uuid4()}",
            files={"video": ("clip.mp4", MP4_BYTES, "video/mp4")},
            headers=bearer(owner_token),
        )

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    def test_non_owner(
        self,
        authed_test_client: TestClient,
        test_video: Video,
        other_user_token: str,
        mock_storage_client: Mock,
        scratch_dir: Path,
    ) -> None:
        response = authed_test_client.post(
            f"/api/v1/video_upload/{test_video.id}",
            files={"video": ("clip.mp4", MP4_BYTES, "video/mp4")},
            headers=bearer(other_user_token),
        )

        assert response.status_code == 403
        mock_storage_client.upload_file.assert_not_called()
        assert list(scratch_dir.iterdir()) == []

    def test_missing_file_part(
        self, authed_test_client: TestClient, test_video: Video, owner_token: str
    ) -> None:
        response = authed_test_client.post(
            f"/api/v1/video_upload/{test_video.id}",
            files={"thumbnail": ("clip.mp4", MP4_BYTES, "video/mp4")},
            headers=bearer(owner_token),
        )

        assert response.status_code == 400
        assert response.json()["reason"] == "invalid-file"

    def test_plain_field_instead_of_file(
        self, authed_test_client: TestClient, test_video: Video, owner_token: str
    ) -> None:
        response = authed_test_client.post(
            f"/api/v1/video_upload/{test_video.id}",
            data={"video": "not a file"},
            headers=bearer(owner_token),
        )

        assert response.status_code == 400
        assert response.json()["reason"] == "invalid-file"

    def test_wrong_content_type(
        self,
        authed_test_client: TestClient,
        test_video: Video,
        owner_token: str,
        mock_storage_client: Mock,
    ) -> None:
        response = authed_test_client.post(
            f"/api/v1/video_upload/{test_video.id}",
            files={"video": ("clip.mov", MP4_BYTES, "video/quicktime")},
            headers=bearer(owner_token),
        )

        assert response.status_code == 415
        assert response.json()["reason"] == "unsupported-type"
        mock_storage_client.upload_file.assert_not_called()

    def test_too_large(
        self, authed_test_client: TestClient, test_video: Video, owner_token: str
    ) -> None:
        response = authed_test_client.post(
            f"/api/v1/video_upload/{test_video.id}",
            files={"video": ("clip.mp4", b"\x00" * (1024 * 1024 + 1), "video/mp4")},
            headers=bearer(owner_token),
        )

        assert response.status_code == 413
        assert response.json()["reason"] == "too-large"

    def test_probe_failure(
        self,
        authed_test_client: TestClient,
        test_video: Video,
        owner_token: str,
        mock_media_service: Mock,
        scratch_dir: Path,
    ) -> None:
        mock_media_service.get_aspect_ratio.side_effect = ProbeError(
            "ffprobe error: moov atom not found", reason="probe-failed"
        )

        response = authed_test_client.post(
            f"/api/v1/video_upload/{test_video.id}",
            files={"video": ("clip.mp4", MP4_BYTES, "video/mp4")},
            headers=bearer(owner_token),
        )

        assert response.status_code == 422
        assert response.json()["error"] == "probe_failed"
        assert list(scratch_dir.iterdir()) == []


class TestThumbnailUploadEndpoint:
    """Tests for POST /api/v1/thumbnail_upload/{video_id}."""

    def test_success(
        self,
        authed_test_client: TestClient,
        test_video: Video,
        owner_token: str,
        assets_dir: Path,
    ) -> None:
        response = authed_test_client.post(
            f"/api/v1/thumbnail_upload/{test_video.id}",
            files={"thumbnail": ("thumb.png", b"\x89PNG\r\n\x1a\n", "image/png")},
            headers=bearer(owner_token),
        )

        assert response.status_code == 200
        body = response.json()
        assert body["id"] == test_video.id
        assert body["thumbnail_url"] == f"http://localhost:8091/assets/{test_video.id}.png"
        assert body["video_url"] is None
        assert (assets_dir / f"{test_video.id}.png").exists()

    def test_non_owner(
        self, authed_test_client: TestClient, test_video: Video, other_user_token: str
    ) -> None:
        response = authed_test_client.post(
            f"/api/v1/thumbnail_upload/{test_video.id}",
            files={"thumbnail": ("thumb.png", b"\x89PNG", "image/png")},
            headers=bearer(other_user_token),
        )

        assert response.status_code == 403


class TestGetVideoEndpoint:
    """Tests for GET /api/v1/videos/{video_id}."""

    def test_owner(
        self, authed_test_client: TestClient, test_video: Video, owner_token: str
    ) -> None:
        response = authed_test_client.get(
            f"/api/v1/videos/{test_video.id}", headers=bearer(owner_token)
        )

        assert response.status_code == 200
        assert response.json()["id"] == test_video.id
        assert response.json()["title"] == "Boots in the wild"

    def test_non_owner(
        self, authed_test_client: TestClient, test_video: Video, other_user_token: str
    ) -> None:
        response = authed_test_client.get(
            f"/api/v1/videos/{test_video.id}", headers=bearer(other_user_token)
        )

        assert response.status_code == 403
        assert response.json()["error"] == "forbidden"


def test_health_check(authed_test_client: TestClient) -> None:
    response = authed_test_client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
