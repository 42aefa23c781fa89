"""
Tubely API v1 Router Aggregator.

Combines the v1 endpoint routers into a single APIRouter that the application
registers under the /api/v1 prefix.

Router Structure:
    - /video_upload, /thumbnail_upload, /videos: media upload endpoints
"""

import logging

from fastapi import APIRouter

from tubely.api.v1.videos import router as videos_router


logger = logging.getLogger(__name__)

# Create the main API v1 router
api_router = APIRouter()

api_router.include_router(videos_router, tags=["videos"])
logger.debug("Loaded videos router")


__all__ = ["api_router"]
