"""
Video Pydantic model for Tubely.

A Video is the long-lived record an upload is attached to. It is created
elsewhere (the metadata endpoints of the wider service); the upload pipeline
only reads one, sets either its video_url or its thumbnail_url, and hands it
back to the record store.
"""

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field


class Video(BaseModel):
    """
    Pydantic model for a user-owned video record.

    Attributes:
        id: UUID string, stored as the MongoDB _id
        user_id: Owner of the video; only the owner may upload to it
        title: Display title
        description: Free-form description
        thumbnail_url: Public URL of the thumbnail, once uploaded
        video_url: Public URL of the fast-start MP4, once uploaded
        created_at: Creation timestamp (UTC)
        updated_at: Last modification timestamp (UTC)
    """

    id: str = Field(..., alias="_id", description="Video UUID stored as the MongoDB _id")

    user_id: str = Field(..., min_length=1, description="Owning user's ID")

    title: str = Field(default="", max_length=500, description="Video title")

    description: str = Field(default="", max_length=5000, description="Video description")

    thumbnail_url: str | None = Field(default=None, description="Public thumbnail URL")

    video_url: str | None = Field(default=None, description="Public video URL")

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC), description="Creation timestamp (UTC)"
    )

    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC), description="Last modification timestamp (UTC)"
    )

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "id": "1c5a9f7e-3d0b-4b8e-9d0e-6f2a1b3c4d5e",
                "user_id": "0b8a3c2e-7f61-4d1a-8e2b-5c9d0f1a2b3c",
                "title": "Boots in the wild",
                "description": "",
                "thumbnail_url": None,
                "video_url": "https://d1234567890.cloudfront.net/landscape/ab12...ef.mp4",
                "created_at": "2025-01-15T10:30:00Z",
                "updated_at": "2025-01-15T10:30:00Z",
            }
        },
    )

    def to_document(self) -> dict:
        """Serialize for MongoDB, keyed by _id."""
        return self.model_dump(by_alias=True)
