"""
Upload Validation Utilities Module for Tubely

Stateless checks applied to an upload request before anything touches the
filesystem:
- Video identifier must be a UUID
- The multipart part must be a file, not a plain form field
- Declared size must not exceed the asset class ceiling
- Content type must be accepted for the asset class

Each check raises the matching UploadServiceError subclass on failure, so the
caller runs them in order and the first failure wins.
"""

import uuid

from starlette.datastructures import UploadFile

from tubely.core.exceptions import (
    BadRequestError,
    FileTooLargeError,
    UnsupportedMediaTypeError,
)
from tubely.models.media import AssetClass


# =============================================================================
# CONSTANTS
# =============================================================================

BYTES_PER_KB: int = 1024

# Content types accepted per asset class; None means any non-empty type
ALLOWED_CONTENT_TYPES: dict[AssetClass, frozenset[str] | None] = {
    AssetClass.VIDEO: frozenset({"video/mp4"}),
    AssetClass.THUMBNAIL: None,
}


# =============================================================================
# VALIDATORS
# =============================================================================


def validate_video_id(video_id: str) -> str:
    """
    Check that ``video_id`` is a UUID in canonical hyphenated form.

    Braced, URN and unhyphenated spellings are rejected; letter case is not
    significant.

    Returns:
        str: The identifier unchanged, since records are keyed by the string
        the client created them with.

    Raises:
        BadRequestError: With reason ``malformed-id``.
    """
    try:
        canonical = str(uuid.UUID(video_id))
    except (ValueError, TypeError, AttributeError) as e:
        raise BadRequestError("Invalid ID", reason="malformed-id") from e
    if canonical != video_id.lower():
        raise BadRequestError("Invalid ID", reason="malformed-id")
    return video_id


def validate_upload_part(part: object, field_name: str) -> UploadFile:
    """
    Check that a form part exists and carries a file.

    Raises:
        BadRequestError: With reason ``invalid-file``.
    """
    if not isinstance(part, UploadFile):
        raise BadRequestError(f"Unable to parse form file '{field_name}'", reason="invalid-file")
    return part


def validate_upload_size(size: int | None, max_size: int) -> None:
    """
    Check a declared upload size against a ceiling.

    An unknown size passes here; staging enforces the ceiling while streaming.

    Raises:
        FileTooLargeError: If ``size`` exceeds ``max_size``.
    """
    if size is None:
        return
    if size > max_size:
        raise FileTooLargeError(
            f"File size ({format_file_size(size)}) exceeds maximum allowed "
            f"({format_file_size(max_size)})"
        )


def validate_content_type(content_type: str | None, asset_class: AssetClass) -> str:
    """
    Check the declared content type for an asset class.

    Video uploads must be exactly ``video/mp4``. Thumbnails accept any
    non-empty type and are served back with it.

    Returns:
        str: The accepted content type.

    Raises:
        UnsupportedMediaTypeError: If the type is missing or not allowed.
    """
    if not content_type:
        raise UnsupportedMediaTypeError("Missing Content-Type for file")

    allowed = ALLOWED_CONTENT_TYPES[asset_class]
    if allowed is not None and content_type not in allowed:
        raise UnsupportedMediaTypeError(
            f"Invalid file type '{content_type}', expected one of: {', '.join(sorted(allowed))}"
        )
    return content_type


def format_file_size(size_bytes: int) -> str:
    """
    Format file size in bytes to human-readable string.

    Example:
        >>> format_file_size(1536)
        "1.50 KB"
        >>> format_file_size(1048576)
        "1.00 MB"
    """
    bytes_per_mb = BYTES_PER_KB * BYTES_PER_KB
    bytes_per_gb = bytes_per_mb * BYTES_PER_KB

    if size_bytes < BYTES_PER_KB:
        return f"{size_bytes} B"
    if size_bytes < bytes_per_mb:
        return f"{size_bytes / BYTES_PER_KB:.2f} KB"
    if size_bytes < bytes_per_gb:
        return f"{size_bytes / bytes_per_mb:.2f} MB"
    return f"{size_bytes / bytes_per_gb:.2f} GB"
