"""
Scratch staging for uploads.

Raw upload bytes and every file derived from them live in the scratch
directory only for the duration of one pipeline run. A run opens a session,
creates files through it, and the session removes all of them when the run
ends, whether it succeeded or failed.

Usage:
    ```python
    staging = StagingArea(settings)

    async with staging.session() as session:
        raw = await session.stage(upload, max_bytes, suffix=".mp4")
        processed = session.allocate(StagedOrigin.REMUXED, ".mp4")
        ...
    # raw and processed are gone here
    ```
"""

import contextlib
import logging
import os
import tempfile

from collections.abc import AsyncIterator
from pathlib import Path

import aiofiles

from fastapi import UploadFile

from tubely.config import Settings
from tubely.core.exceptions import FileTooLargeError
from tubely.models.media import StagedFile, StagedOrigin


logger = logging.getLogger(__name__)

SCRATCH_PREFIX = "tubely-upload-"


class StagingArea:
    """Owns the scratch directory and the lifetime of files staged in it."""

    def __init__(self, settings: Settings) -> None:
        self.scratch_dir = Path(settings.scratch_dir)
        self.chunk_size = settings.upload_chunk_size

    @contextlib.asynccontextmanager
    async def session(self) -> AsyncIterator["StagingSession"]:
        """Yield a session whose files are all released when the block exits."""
        session = StagingSession(self)
        try:
            yield session
        finally:
            session.close()

    def reserve(self, origin: StagedOrigin, suffix: str) -> StagedFile:
        """
        Create an empty file with a fresh name in the scratch directory.

        mkstemp creates the file exclusively, so a name is never handed out
        twice, even across processes sharing the directory.
        """
        self.scratch_dir.mkdir(parents=True, exist_ok=True)
        fd, name = tempfile.mkstemp(
            prefix=f"{SCRATCH_PREFIX}{origin.value}-", suffix=suffix, dir=self.scratch_dir
        )
        os.close(fd)
        return StagedFile(path=Path(name), origin=origin)

    def release(self, staged: StagedFile) -> None:
        """
        Delete a staged file.

        Missing files are fine (the publisher may have moved it); any other
        filesystem error is logged and swallowed so cleanup never masks the
        error that ended the run.
        """
        try:
            staged.path.unlink(missing_ok=True)
            logger.debug("Released staged file %s", staged.path)
        except OSError as e:
            logger.warning("Failed to release staged file %s: %s", staged.path, str(e))


class StagingSession:
    """Files staged during one pipeline run."""

    def __init__(self, area: StagingArea) -> None:
        self.area = area
        self.files: list[StagedFile] = []

    def allocate(self, origin: StagedOrigin, suffix: str = "") -> StagedFile:
        """Reserve a path for a derived file and register it for release."""
        staged = self.area.reserve(origin, suffix)
        self.files.append(staged)
        return staged

    async def stage(self, upload: UploadFile, max_bytes: int, suffix: str = "") -> StagedFile:
        """
        Stream an upload into a fresh scratch file.

        The file is registered before the first byte is written so a partial
        write is released too.

        Raises:
            FileTooLargeError: As soon as more than ``max_bytes`` have been read.
        """
        staged = self.allocate(StagedOrigin.RAW, suffix)
        total = 0

        await upload.seek(0)
        async with aiofiles.open(staged.path, "wb") as out:
            while chunk := await upload.read(self.area.chunk_size):
                total += len(chunk)
                if total > max_bytes:
                    logger.warning(
                        "Upload exceeded %d bytes while staging, aborting", max_bytes
                    )
                    raise FileTooLargeError(
                        f"File exceeds the maximum size of {max_bytes} bytes"
                    )
                await out.write(chunk)

        logger.debug("Staged %d bytes to %s", total, staged.path)
        return staged

    def close(self) -> None:
        """Release every registered file."""
        while self.files:
            self.area.release(self.files.pop())
