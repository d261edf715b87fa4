"""
Local file storage for uploaded documents.

Uploads are written before the database row that references them. Use
stored_upload() so the file is removed again unless the caller marks it as
kept after its own write succeeded.
"""
import logging
import os
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path

from fastapi import UploadFile

from app.core.config import settings

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


class UploadRejected(ValueError):
    """Raised when an upload has a disallowed type or exceeds the size limit."""
    pass


@dataclass
class StoredFile:
    filename: str
    original_name: str
    path: str
    mime_type: str
    size: int
    kept: bool = field(default=False)

    def keep(self) -> None:
        self.kept = True


def _extension(filename: str) -> str:
    return Path(filename).suffix.lower().lstrip(".")


def check_upload_type(filename: str | None, content_type: str | None) -> None:
    allowed = [ext.lower() for ext in settings.ALLOWED_UPLOAD_EXTENSIONS]
    if not filename:
        raise UploadRejected("No file uploaded")
    ext = _extension(filename)
    mime = (content_type or "").lower()
    if ext not in allowed or not any(token in mime for token in allowed):
        raise UploadRejected("Invalid file type. Only images, PDFs, and documents are allowed.")


def write_upload(upload: UploadFile, directory: str | None = None) -> StoredFile:
    """Validate and write an upload to disk. The caller owns the file afterwards."""
    check_upload_type(upload.filename, upload.content_type)

    target_dir = Path(directory or settings.UPLOAD_DIR)
    target_dir.mkdir(parents=True, exist_ok=True)

    filename = f"document-{uuid.uuid4().hex}.{_extension(upload.filename)}"
    path = target_dir / filename
    size = 0
    with open(path, "wb") as out:
        while chunk := upload.file.read(CHUNK_SIZE):
            size += len(chunk)
            if size > settings.MAX_UPLOAD_SIZE_BYTES:
                break
            out.write(chunk)

    if size > settings.MAX_UPLOAD_SIZE_BYTES:
        discard_file(str(path))
        raise UploadRejected(f"File exceeds the {settings.MAX_UPLOAD_SIZE_BYTES} byte limit")

    return StoredFile(
        filename=filename,
        original_name=upload.filename,
        path=str(path),
        mime_type=upload.content_type or "application/octet-stream",
        size=size,
    )


def discard_file(path: str) -> None:
    """Best-effort removal; never raises."""
    try:
        if os.path.exists(path):
            os.remove(path)
            logger.info(f"Removed stored file {path}")
    except OSError as e:
        logger.warning(f"Could not remove stored file {path}: {e}")


@contextmanager
def stored_upload(upload: UploadFile, directory: str | None = None) -> Iterator[StoredFile]:
    """
    Write an upload and yield it; the file is discarded on exit unless keep() was called.

    Usage:
        with stored_upload(upload) as stored:
            ...persist a row pointing at stored.path...
            stored.keep()
    """
    stored = write_upload(upload, directory)
    try:
        yield stored
    finally:
        if not stored.kept:
            discard_file(stored.path)
