"""Tests for the stateless upload checks."""

import uuid

import pytest

from tubely.core.exceptions import (
    BadRequestError,
    FileTooLargeError,
    UnsupportedMediaTypeError,
)
from tubely.models.media import AssetClass
from tubely.utils.upload_validator import (
    format_file_size,
    validate_content_type,
    validate_upload_part,
    validate_upload_size,
    validate_video_id,
)


class TestValidateVideoId:
    """Tests for validate_video_id."""

    def test_accepts_uuid(self) -> None:
        video_id = str(uuid.uuid4())
        assert validate_video_id(video_id) == video_id

    def test_accepts_uppercase(self) -> None:
        video_id = "12345678-ABCD-5678-ABCD-567812345678"
        assert validate_video_id(video_id) == video_id

    @pytest.mark.parametrize(
        "video_id",
        [
            "{12345678-1234-5678-1234-567812345678}",
            "12345678123456781234567812345678",
            "urn:uuid:12345678-1234-5678-1234-567812345678",
        ],
    )
    def test_rejects_non_canonical_forms(self, video_id: str) -> None:
        with pytest.raises(BadRequestError) as exc_info:
            validate_video_id(video_id)

        assert exc_info.value.reason == "malformed-id"

    @pytest.mark.parametrize("video_id", ["not-a-uuid", "", "12345", "1c5a9f7e-3d0b-4b8e-9d0e"])
    def test_rejects_malformed(self, video_id: str) -> None:
        with pytest.raises(BadRequestError) as exc_info:
            validate_video_id(video_id)

        assert exc_info.value.reason == "malformed-id"
        assert exc_info.value.status_code == 400


class TestValidateUploadPart:
    """Tests for validate_upload_part."""

    def test_accepts_file(self, make_upload) -> None:
        upload = make_upload()
        assert validate_upload_part(upload, "video") is upload

    @pytest.mark.parametrize("part", [None, "just a string field"])
    def test_rejects_non_file(self, part: object) -> None:
        with pytest.raises(BadRequestError) as exc_info:
            validate_upload_part(part, "video")

        assert exc_info.value.reason == "invalid-file"


class TestValidateUploadSize:
    """Tests for validate_upload_size."""

    def test_at_limit(self) -> None:
        validate_upload_size(1024, 1024)

    def test_unknown_size_passes(self) -> None:
        validate_upload_size(None, 1024)

    def test_over_limit(self) -> None:
        with pytest.raises(FileTooLargeError) as exc_info:
            validate_upload_size(1025, 1024)

        assert exc_info.value.reason == "too-large"
        assert exc_info.value.status_code == 413
        assert isinstance(exc_info.value, BadRequestError)


class TestValidateContentType:
    """Tests for validate_content_type."""

    def test_video_mp4(self) -> None:
        assert validate_content_type("video/mp4", AssetClass.VIDEO) == "video/mp4"

    @pytest.mark.parametrize("content_type", ["video/quicktime", "image/png", "video/mp4; x=1"])
    def test_video_rejects_other_types(self, content_type: str) -> None:
        with pytest.raises(UnsupportedMediaTypeError) as exc_info:
            validate_content_type(content_type, AssetClass.VIDEO)

        assert exc_info.value.reason == "unsupported-type"
        assert exc_info.value.status_code == 415

    @pytest.mark.parametrize("content_type", ["image/png", "image/jpeg", "application/x-custom"])
    def test_thumbnail_accepts_any_type(self, content_type: str) -> None:
        assert validate_content_type(content_type, AssetClass.THUMBNAIL) == content_type

    @pytest.mark.parametrize("asset_class", list(AssetClass))
    @pytest.mark.parametrize("content_type", [None, ""])
    def test_missing_type(self, asset_class: AssetClass, content_type: str | None) -> None:
        with pytest.raises(UnsupportedMediaTypeError):
            validate_content_type(content_type, asset_class)


def test_format_file_size() -> None:
    assert format_file_size(512) == "512 B"
    assert format_file_size(1536) == "1.50 KB"
    assert format_file_size(1024 * 1024) == "1.00 MB"
    assert format_file_size(1024 * 1024 * 1024) == "1.00 GB"
