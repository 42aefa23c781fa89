"""
Media pipeline models for Tubely.

Small value types passed between the upload pipeline stages: the aspect ratio
classification, the asset class being uploaded, the pipeline stage reached,
and the staged scratch file.
"""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class AspectRatio(str, Enum):
    """Geometry classification; also the storage key prefix for videos."""

    LANDSCAPE = "landscape"
    PORTRAIT = "portrait"
    OTHER = "other"


class AssetClass(str, Enum):
    """
    Kind of upload, selecting the multipart field name, size ceiling,
    accepted content types and where the result is published.
    """

    VIDEO = "video"
    THUMBNAIL = "thumbnail"

    @property
    def form_field(self) -> str:
        """Name of the multipart field carrying the file."""
        return self.value


class PipelineStage(str, Enum):
    """
    Stages of a video upload run, in order.

    A run moves forward one stage per successful step and stops at the first
    failure; the last stage reached is logged with the error.
    """

    VALIDATED = "validated"
    STAGED = "staged"
    CLASSIFIED = "classified"
    REMUXED = "remuxed"
    KEYED = "keyed"
    PUBLISHED = "published"
    COMMITTED = "committed"


class StagedOrigin(str, Enum):
    """Where a staged file came from."""

    RAW = "raw"
    REMUXED = "remuxed"


class StagedFile(BaseModel):
    """A scratch file owned by a single pipeline run."""

    path: Path = Field(..., description="Location in the scratch directory")
    origin: StagedOrigin = Field(..., description="Raw upload bytes or a derived file")

    model_config = ConfigDict(frozen=True)
