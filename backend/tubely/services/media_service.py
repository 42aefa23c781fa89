"""
Tubely Media Service Module

Wraps the two external media tools the upload pipeline depends on:

- ffprobe, to read the width and height of the first video stream and
  classify the upload as landscape, portrait or other
- ffmpeg, to rewrite an MP4 so its index (moov atom) sits at the front of the
  file and playback can start before the download finishes

Both tools run as child processes through asyncio with an explicit argument
vector. Stdout and stderr are captured and the exit status is always checked;
a failure is raised, never passed on as a default value.
"""

import asyncio
import json
import logging

from pathlib import Path

from tubely.config import Settings
from tubely.core.exceptions import ProbeError, RemuxError
from tubely.models.media import AspectRatio


logger = logging.getLogger(__name__)

LANDSCAPE_RATIO = 16 / 9
PORTRAIT_RATIO = 9 / 16
RATIO_TOLERANCE = 0.1


def classify_aspect_ratio(width: int, height: int) -> AspectRatio:
    """
    Classify frame geometry.

    Args:
        width: Frame width in pixels, positive.
        height: Frame height in pixels, positive.

    Returns:
        AspectRatio: LANDSCAPE within 0.1 of 16:9, PORTRAIT within 0.1 of 9:16,
        OTHER for everything else.
    """
    ratio = width / height
    if abs(ratio - LANDSCAPE_RATIO) < RATIO_TOLERANCE:
        return AspectRatio.LANDSCAPE
    if abs(ratio - PORTRAIT_RATIO) < RATIO_TOLERANCE:
        return AspectRatio.PORTRAIT
    return AspectRatio.OTHER


class MediaService:
    """
    Probe and remux staged video files.

    Attributes:
        ffprobe_path: ffprobe executable
        ffmpeg_path: ffmpeg executable
    """

    def __init__(self, settings: Settings) -> None:
        self.ffprobe_path = settings.ffprobe_path
        self.ffmpeg_path = settings.ffmpeg_path

    async def _run(self, *args: str) -> tuple[int, bytes, bytes]:
        process = await asyncio.create_subprocess_exec(
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        stdout, stderr = await process.communicate()
        return process.returncode, stdout, stderr

    async def get_aspect_ratio(self, path: Path) -> AspectRatio:
        """
        Read the first video stream's geometry and classify it.

        Raises:
            ProbeError: ``probe-failed`` on a non-zero exit, ``parse-failure``
                when the output is not ffprobe JSON, ``incomplete-metadata`` when no
                usable width and height were reported.
        """
        returncode, stdout, stderr = await self._run(
            self.ffprobe_path,
            "-v",
            "error",
            "-select_streams",
            "v:0",
            "-show_entries",
            "stream=width,height",
            "-of",
            "json",
            str(path),
        )

        if returncode != 0:
            error_output = stderr.decode(errors="replace").strip()
            logger.warning("ffprobe exited with %s: %s", returncode, error_output)
            raise ProbeError(f"ffprobe error: {error_output}", reason="probe-failed")

        try:
            output = json.loads(stdout)
        except ValueError as e:
            logger.warning("Could not parse ffprobe output for %s", path)
            raise ProbeError("Could not parse ffprobe output", reason="parse-failure") from e

        if not isinstance(output, dict) or not isinstance(output.get("streams", []), list):
            logger.warning("Unexpected ffprobe output shape for %s", path)
            raise ProbeError("Unexpected ffprobe output", reason="parse-failure")

        streams = output.get("streams")
        if not streams:
            raise ProbeError("No video streams found", reason="incomplete-metadata")

        stream = streams[0]
        if not isinstance(stream, dict):
            logger.warning("Unexpected ffprobe stream entry for %s", path)
            raise ProbeError("Unexpected ffprobe output", reason="parse-failure")

        width = stream.get("width")
        height = stream.get("height")
        if not isinstance(width, int) or not isinstance(height, int) or width <= 0 or height <= 0:
            raise ProbeError(
                "Video stream has no usable width and height", reason="incomplete-metadata"
            )

        aspect_ratio = classify_aspect_ratio(width, height)
        logger.debug("Probed %s: %dx%d -> %s", path, width, height, aspect_ratio.value)
        return aspect_ratio

    async def process_for_fast_start(self, input_path: Path, output_path: Path) -> Path:
        """
        Copy the streams of ``input_path`` into ``output_path`` with the index
        moved to the front. No re-encoding.

        Raises:
            RemuxError: If ffmpeg exits non-zero.
        """
        returncode, _, stderr = await self._run(
            self.ffmpeg_path,
            "-y",
            "-i",
            str(input_path),
            "-movflags",
            "faststart",
            "-map_metadata",
            "0",
            "-codec",
            "copy",
            "-f",
            "mp4",
            str(output_path),
        )

        if returncode != 0:
            error_output = stderr.decode(errors="replace").strip()
            logger.warning("ffmpeg exited with %s: %s", returncode, error_output)
            raise RemuxError(f"Error processing video: {error_output}", reason="remux-failed")

        return output_path
