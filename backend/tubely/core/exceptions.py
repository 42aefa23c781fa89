"""
Upload error taxonomy for Tubely.

Every failure the upload pipeline can surface is an UploadServiceError subclass
carrying the HTTP status it maps to, a stable error code, and an optional
machine-readable reason. The API layer renders them with a single exception
handler, so services raise these directly and never build HTTP responses.
"""

from fastapi import status


class UploadServiceError(Exception):
    """Base exception for upload pipeline errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code: str = "upload_failed"

    def __init__(self, message: str, *, reason: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.reason = reason

    def to_dict(self) -> dict[str, str | None]:
        """Error body returned to clients."""
        return {"error": self.error_code, "message": self.message, "reason": self.reason}


class BadRequestError(UploadServiceError):
    """Malformed identifier, missing or invalid file part."""

    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "bad_request"


class FileTooLargeError(BadRequestError):
    """Upload exceeds the ceiling for its asset class."""

    status_code = 413
    error_code = "file_too_large"

    def __init__(self, message: str, *, reason: str | None = "too-large") -> None:
        super().__init__(message, reason=reason)


class UnsupportedMediaTypeError(BadRequestError):
    """Content type not accepted for the asset class."""

    status_code = status.HTTP_415_UNSUPPORTED_MEDIA_TYPE
    error_code = "unsupported_media_type"

    def __init__(self, message: str, *, reason: str | None = "unsupported-type") -> None:
        super().__init__(message, reason=reason)


class UnauthenticatedError(UploadServiceError):
    """Missing, malformed, expired or otherwise unverifiable bearer token."""

    status_code = status.HTTP_401_UNAUTHORIZED
    error_code = "unauthenticated"


class ForbiddenError(UploadServiceError):
    """Authenticated caller does not own the video."""

    status_code = status.HTTP_403_FORBIDDEN
    error_code = "forbidden"


class NotFoundError(UploadServiceError):
    """Video id is unknown to the record store."""

    status_code = status.HTTP_404_NOT_FOUND
    error_code = "not_found"


class ProbeError(UploadServiceError):
    """ffprobe failed or returned unusable geometry."""

    status_code = 422
    error_code = "probe_failed"


class RemuxError(UploadServiceError):
    """ffmpeg could not rewrite the container for fast start."""

    error_code = "remux_failed"


class StorageError(UploadServiceError):
    """Publication of the final artifact failed."""

    status_code = status.HTTP_502_BAD_GATEWAY
    error_code = "storage_failed"


class PersistenceError(UploadServiceError):
    """Record store read or write failed."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    error_code = "persistence_failed"


__all__ = [
    "UploadServiceError",
    "BadRequestError",
    "FileTooLargeError",
    "UnsupportedMediaTypeError",
    "UnauthenticatedError",
    "ForbiddenError",
    "NotFoundError",
    "ProbeError",
    "RemuxError",
    "StorageError",
    "PersistenceError",
]
