"""
Tubely settings.

Values come from the environment or a ``.env`` file and cover the API server,
token verification, MongoDB, S3 and its distribution host, local thumbnail
assets, upload staging and the ffprobe/ffmpeg executables.
"""

import tempfile

from functools import lru_cache

from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


BYTES_PER_MB = 1024 * 1024

_CHOICES: dict[str, frozenset[str]] = {
    "log_level": frozenset({"debug", "info", "warning", "error", "critical"}),
    "app_env": frozenset({"development", "staging", "production", "testing"}),
}


class Settings(BaseSettings):
    """
    Upload backend settings.

    Ceilings are configured in megabytes and read in bytes through
    ``max_video_upload_bytes`` and ``max_thumbnail_upload_bytes``.
    """

    # =========================================================================
    # Application Configuration
    # =========================================================================

    app_name: str = Field(default="Tubely", description="Application name shown in docs and logs")

    app_env: str = Field(
        default="development",
        description="Application environment (development, staging, production, testing)",
    )

    debug: bool = Field(default=False, description="Enable debug mode and verbose logging")

    log_level: str = Field(
        default="info", description="Logging level (debug, info, warning, error, critical)"
    )

    json_logs: bool = Field(default=True, description="Emit structured JSON log records")

    host: str = Field(default="0.0.0.0", description="Host address for the API server to bind to")

    port: int = Field(default=8091, description="Port number for the API server", ge=1, le=65535)

    cors_origins: list[str] = Field(
        default=["http://localhost:3000"],
        description="List of allowed CORS origins for frontend access",
    )

    # =========================================================================
    # JWT Configuration
    # =========================================================================

    jwt_secret: str = Field(
        default="development-jwt-secret-change-in-production-32chars",
        description="Secret used to verify HS256 access tokens",
        min_length=32,
    )

    jwt_issuer: str = Field(default="tubely-access", description="Expected token issuer claim")

    jwt_algorithm: str = Field(default="HS256", description="JWT signing algorithm")

    jwt_expiration_hours: int = Field(
        default=1, description="Access token lifetime in hours", ge=1, le=168
    )

    # =========================================================================
    # MongoDB Configuration
    # =========================================================================

    mongodb_uri: str = Field(
        default="mongodb://localhost:27017",
        description="MongoDB connection URI (e.g., mongodb://localhost:27017)",
    )

    mongodb_db_name: str = Field(default="tubely", description="MongoDB database name")

    mongodb_min_pool_size: int = Field(
        default=1, description="Minimum number of connections in MongoDB connection pool", ge=0
    )

    mongodb_max_pool_size: int = Field(
        default=50, description="Maximum number of connections in MongoDB connection pool", ge=1
    )

    # =========================================================================
    # S3 Storage Configuration
    # =========================================================================

    s3_endpoint_url: str | None = Field(
        default=None, description="S3-compatible endpoint URL (None for AWS S3)"
    )

    s3_access_key_id: str | None = Field(
        default=None, description="S3 access key ID (None to use the default credential chain)"
    )

    s3_secret_access_key: str | None = Field(default=None, description="S3 secret access key")

    s3_bucket_name: str = Field(default="tubely-videos", description="S3 bucket for video objects")

    s3_region: str = Field(default="us-east-1", description="AWS region of the bucket")

    s3_cf_distribution: str = Field(
        default="d1234567890.cloudfront.net",
        description="Distribution host serving the bucket; video URLs are https://<host>/<key>",
    )

    # =========================================================================
    # Local Assets Configuration
    # =========================================================================

    assets_root: str = Field(default="assets", description="Directory thumbnails are written to")

    asset_host: str = Field(default="localhost", description="Host used in thumbnail URLs")

    # =========================================================================
    # Upload Settings
    # =========================================================================

    scratch_dir: str = Field(
        default_factory=tempfile.gettempdir,
        description="Directory for staging raw uploads and derived files",
    )

    upload_chunk_size: int = Field(
        default=1024 * 1024, description="Chunk size in bytes for streaming uploads", ge=1024
    )

    max_video_upload_mb: int = Field(
        default=1024, description="Maximum video upload size in megabytes (1 GiB)", ge=1
    )

    max_thumbnail_upload_mb: int = Field(
        default=10, description="Maximum thumbnail upload size in megabytes", ge=1
    )

    # =========================================================================
    # Media Tools
    # =========================================================================

    ffprobe_path: str = Field(default="ffprobe", description="ffprobe executable")

    ffmpeg_path: str = Field(default="ffmpeg", description="ffmpeg executable")

    # =========================================================================
    # Model Configuration
    # =========================================================================

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("log_level", "app_env")
    @classmethod
    def validate_choice(cls, v: str, info: ValidationInfo) -> str:
        """Lowercase and check against the field's allowed names."""
        allowed = _CHOICES[info.field_name]
        normalized = v.lower()
        if normalized not in allowed:
            raise ValueError(f"{info.field_name} must be one of {sorted(allowed)}, got '{v}'")
        return normalized

    @field_validator("jwt_algorithm")
    @classmethod
    def validate_jwt_algorithm(cls, v: str) -> str:
        """Tokens are verified with a shared secret, so only HMAC algorithms apply."""
        algorithm = v.upper()
        if algorithm not in {"HS256", "HS384", "HS512"}:
            raise ValueError(f"jwt_algorithm must be an HMAC algorithm, got '{v}'")
        return algorithm

    @field_validator("cors_origins", mode="before")
    @classmethod
    def split_cors_origins(cls, v: str | list[str]) -> list[str]:
        """Accept a comma-separated string from the environment."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator("s3_cf_distribution")
    @classmethod
    def validate_distribution(cls, v: str) -> str:
        """Store the bare host; URLs are always built as https://<host>/<key>."""
        host = v.strip().removeprefix("https://").removeprefix("http://").rstrip("/")
        if not host:
            raise ValueError("s3_cf_distribution must not be empty")
        return host

    # =========================================================================
    # Computed Properties
    # =========================================================================

    @property
    def max_video_upload_bytes(self) -> int:
        """Video ceiling in bytes."""
        return self.max_video_upload_mb * BYTES_PER_MB

    @property
    def max_thumbnail_upload_bytes(self) -> int:
        """Thumbnail ceiling in bytes."""
        return self.max_thumbnail_upload_mb * BYTES_PER_MB


@lru_cache
def get_settings() -> Settings:
    """Settings are read once per process; tests construct Settings directly."""
    return Settings()
