"""
Tubely Backend Application Package

FastAPI service that attaches media to Tubely video records:

- Video uploads are probed with ffprobe, remuxed for fast start with ffmpeg
  and published to S3 under an unguessable key
- Thumbnail uploads are served from a local assets directory

Package Structure:
- api/: REST API endpoints organized by version (v1)
- core/: Core infrastructure (database, storage, auth, error taxonomy)
- models/: Pydantic models for video records and pipeline values
- services/: Upload pipeline, staging, media tools and publishers
- utils/: Validation, key derivation and logging helpers
"""

__version__ = "1.0.0"
__app_name__ = "Tubely"
