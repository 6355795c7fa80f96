"""
Local-disk staging for uploaded CSV files. A staged file lives only for the
duration of one ingestion and is discarded afterwards, whatever the outcome.
"""
import hashlib
import logging
import uuid
from dataclasses import dataclass
from pathlib import Path

from fastapi import UploadFile

from bizense.core.errors import InvalidFileError

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".csv"}
ALLOWED_CONTENT_TYPES = {"text/csv", "application/csv", "text/plain", "application/vnd.ms-excel"}
CHUNK_SIZE = 1024 * 64


@dataclass
class StagedFile:
    path: Path
    file_name: str
    size_bytes: int
    sha256: str

    def read_bytes(self) -> bytes:
        return self.path.read_bytes()

    def discard(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError:
            logger.warning("Could not remove staged upload %s", self.path, exc_info=True)


def validate_upload(file: UploadFile) -> str:
    """Check extension and content type; return the original file name."""
    file_name = (file.filename or "").strip()
    if not any(file_name.lower().endswith(ext) for ext in ALLOWED_EXTENSIONS):
        raise InvalidFileError("invalid_file", "Only CSV files are allowed")
    content_type = (file.content_type or "").split(";")[0].strip().lower()
    if content_type and content_type not in ALLOWED_CONTENT_TYPES:
        raise InvalidFileError("invalid_file", f"Content-Type must be CSV (got {content_type})")
    return file_name


async def stage_upload(file: UploadFile, staging_dir: Path, max_size: int) -> StagedFile:
    """
    Validate and stream an upload to staging_dir.
    Enforces the size limit while reading and computes a SHA256 checksum.
    """
    file_name = validate_upload(file)
    staging_dir.mkdir(parents=True, exist_ok=True)
    path = staging_dir / f"{uuid.uuid4()}.csv"

    sha256_hash = hashlib.sha256()
    total_size = 0
    try:
        with open(path, "wb") as f:
            while chunk := await file.read(CHUNK_SIZE):
                total_size += len(chunk)
                if total_size > max_size:
                    raise InvalidFileError(
                        "file_too_large",
                        f"File exceeds maximum size of {max_size} bytes",
                    )
                sha256_hash.update(chunk)
                f.write(chunk)
    except BaseException:
        # No partial file survives an aborted read
        path.unlink(missing_ok=True)
        raise

    return StagedFile(
        path=path,
        file_name=file_name,
        size_bytes=total_size,
        sha256=sha256_hash.hexdigest(),
    )
