"""
Infrastructure layer: listing image storage on local disk.
"""
import logging
import os
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from treemarket.config import settings
from treemarket.domain.errors import StorageError, ValidationError

logger = logging.getLogger(__name__)


@dataclass
class ImageUpload:
    """An uploaded file, already read into memory."""
    filename: str
    content_type: Optional[str]
    data: bytes


class ImageStore:
    """
    Writes listing images to a directory served as static files.

    A batch is validated as a whole before anything is written, so a
    rejected file never leaves earlier files of the same request behind.
    """

    def __init__(
        self,
        directory: Optional[str] = None,
        url_prefix: Optional[str] = None,
        max_files: Optional[int] = None,
        max_bytes: Optional[int] = None,
        allowed_types: Optional[Sequence[str]] = None,
    ):
        self.directory = Path(directory or settings.upload_dir)
        self.url_prefix = (url_prefix or settings.upload_url_prefix).rstrip("/")
        self.max_files = max_files or settings.max_upload_files
        self.max_bytes = max_bytes or settings.max_upload_bytes
        self.allowed_types = list(allowed_types or settings.allowed_image_types)

    def validate(self, files: Sequence[ImageUpload]) -> None:
        """
        Check count, type and size of a batch.

        Raises:
            ValidationError: On the first rule the batch breaks
        """
        if not files:
            raise ValidationError("No files provided")
        if len(files) > self.max_files:
            raise ValidationError(f"Maximum {self.max_files} images allowed")
        for upload in files:
            if upload.content_type not in self.allowed_types:
                raise ValidationError(
                    f"Invalid file type: {upload.content_type}. Allowed: JPEG, PNG, WebP"
                )
            if len(upload.data) > self.max_bytes:
                raise ValidationError(
                    f"File too large: {upload.filename}. "
                    f"Maximum size is {self.max_bytes // (1024 * 1024)}MB"
                )

    def save_all(self, files: Sequence[ImageUpload]) -> List[str]:
        """
        Validate and store a batch of images.

        Returns:
            Public URLs of the stored images, in upload order

        Raises:
            ValidationError: If the batch is rejected
            StorageError: If writing to disk fails
        """
        self.validate(files)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            urls = [self._write(upload) for upload in files]
        except OSError as e:
            logger.exception(f"Failed to store uploaded images: {e}")
            raise StorageError("Failed to upload files")
        logger.info(f"Stored {len(urls)} listing image(s)")
        return urls

    def _write(self, upload: ImageUpload) -> str:
        ext = os.path.splitext(upload.filename or "")[1].lstrip(".").lower() or "jpg"
        name = f"{uuid.uuid4()}.{ext}"
        (self.directory / name).write_bytes(upload.data)
        return f"{self.url_prefix}/{name}"
