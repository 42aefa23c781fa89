"""
Models Package for Tubely.

Pydantic models for video records and the small value types passed between
upload pipeline stages.

Example Usage:
    ```python
    from tubely.models import AspectRatio, Video

    video = Video(_id="1c5a9f7e-3d0b-4b8e-9d0e-6f2a1b3c4d5e", user_id="user123")
    ```
"""

from tubely.models.media import (
    AspectRatio,
    AssetClass,
    PipelineStage,
    StagedFile,
    StagedOrigin,
)
from tubely.models.video import Video


__all__ = [
    "AspectRatio",
    "AssetClass",
    "PipelineStage",
    "StagedFile",
    "StagedOrigin",
    "Video",
]
