"""
DevCamper API — Photo Storage Service
======================================

What:  Validates an uploaded bootcamp photo and writes it to the upload
       directory under a deterministic name.
How:   Checks run cheapest-first and raise BadRequestError (400) before any
       byte is written or any row is touched:

           1. a file was sent                    "Please upload a file"
           2. its content type starts with image "Please upload an image file"
           3. its size ≤ MAX_FILE_UPLOAD         "Please upload an image less than <n>"

       The file is then stored as `photo_<bootcampId><ext>` with aiofiles.
       A second upload for the same bootcamp overwrites the first.

Directory Structure:
    public/uploads/
    ├── photo_5d725a03-....jpg
    └── photo_5d713995-....png
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import aiofiles

from devcamper.exceptions import BadRequestError, FileStorageError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PhotoUpload:
    """The parts of a multipart upload the storage service looks at."""

    filename: str
    content_type: Optional[str]
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)


class PhotoStorage:
    """
    Owns the upload directory.

    Args:
        upload_dir: Directory photos are written to (created if missing)
        max_size:   Largest accepted photo in bytes
    """

    def __init__(self, upload_dir: str, max_size: int):
        self.upload_dir = Path(upload_dir).resolve()
        self.max_size = max_size
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        logger.info("PhotoStorage initialized with upload_dir=%s", self.upload_dir)

    def validate(self, upload: Optional[PhotoUpload]) -> PhotoUpload:
        if upload is None or not upload.filename:
            raise BadRequestError(message="Please upload a file", field="file")

        if not (upload.content_type or "").startswith("image"):
            raise BadRequestError(
                message="Please upload an image file",
                field="file",
                context={"content_type": upload.content_type},
            )

        if upload.size > self.max_size:
            raise BadRequestError(
                message=f"Please upload an image less than {self.max_size}",
                field="file",
                context={"size": upload.size, "max_size": self.max_size},
            )
        return upload

    @staticmethod
    def photo_name(resource_id: Any, filename: str) -> str:
        """`photo_<id><ext>`; the extension is taken from the client's filename."""
        return f"photo_{resource_id}{Path(filename).suffix.lower()}"

    async def store(self, resource_id: Any, upload: PhotoUpload) -> str:
        """
        Writes the photo and returns its stored file name.

        Raises:
            FileStorageError if the directory or file cannot be written.
        """
        name = self.photo_name(resource_id, upload.filename)
        path = self.upload_dir / name
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(path, "wb") as f:
                await f.write(upload.content)
        except OSError as e:
            logger.error("Failed to store photo at %s: %s", path, e)
            raise FileStorageError(context={"path": str(path), "os_error": str(e)})

        logger.info("Photo stored: %s (%d bytes)", name, upload.size)
        return name

    async def validate_and_store(self, resource_id: Any, upload: Optional[PhotoUpload]) -> str:
        return await self.store(resource_id, self.validate(upload))
