"""
Storage key derivation.

Video keys are unguessable: 32 random bytes from ``secrets`` rendered as 64 hex
characters, prefixed with the aspect ratio so the bucket can be browsed by
orientation. Thumbnail keys are the video ID, so a second thumbnail upload
replaces the first.
"""

import secrets

from tubely.models.media import AspectRatio


KEY_RANDOM_BYTES = 32
FALLBACK_EXTENSION = ".bin"


def media_type_to_ext(media_type: str | None) -> str:
    """
    Map a MIME type to a file extension.

    Example:
        >>> media_type_to_ext("video/mp4")
        ".mp4"
        >>> media_type_to_ext("garbage")
        ".bin"
    """
    parts = (media_type or "").split("/")
    if len(parts) != 2 or not all(parts):
        return FALLBACK_EXTENSION
    return f".{parts[1]}"


def derive_video_key(aspect_ratio: AspectRatio, media_type: str) -> str:
    """Fresh ``<aspect>/<64 hex><ext>`` key; never the same twice in practice."""
    return f"{aspect_ratio.value}/{secrets.token_hex(KEY_RANDOM_BYTES)}{media_type_to_ext(media_type)}"


def thumbnail_key(video_id: str, media_type: str) -> str:
    return f"{video_id}{media_type_to_ext(media_type)}"
