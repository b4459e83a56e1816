# =============================================================================
# core/services/package_service.py - Package File Storage
# =============================================================================
# Handles the binary side of catalog entries: validating uploaded packages,
# writing them into the flat upload directory under a generated name, and
# resolving them again for download.
#
# The database record is created by the caller after save_upload() returns;
# this module never touches the database.
# =============================================================================

import asyncio
import logging
import re
import secrets
import time
from dataclasses import dataclass
from pathlib import Path

from fastapi import UploadFile

from app.config import settings
from app.exceptions import FileTooLargeError, InvalidFileTypeError, PackageStorageError

logger = logging.getLogger(__name__)

# Read uploads 1MB at a time
CHUNK_SIZE = 1024 * 1024

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


@dataclass(frozen=True)
class StoredPackage:
    """A package file that was written to the upload directory."""
    file_name: str
    file_size: int
    path: Path


class PackageService:
    """
    Service for package files on local disk.

    Files live directly in settings.UPLOAD_DIR (no subdirectories).
    """

    @staticmethod
    def upload_dir() -> Path:
        return Path(settings.UPLOAD_DIR)

    @staticmethod
    def ensure_upload_dir() -> Path:
        """Create the upload directory if it doesn't exist. Idempotent."""
        path = PackageService.upload_dir()
        path.mkdir(parents=True, exist_ok=True)
        logger.info(f"Package directory ready: {path.resolve()}")
        return path

    @staticmethod
    def validate_filename(filename: str | None) -> str:
        """
        Check the upload's name against the allowed extensions.

        This is a suffix check only; the file content is not inspected.

        Raises:
            InvalidFileTypeError: If the name has no allowed extension
        """
        allowed = settings.allowed_extensions_list
        name = (filename or "").strip()

        if not name or not any(name.lower().endswith(ext) for ext in allowed):
            raise InvalidFileTypeError(name or "<missing>", allowed)

        return name

    @staticmethod
    def generate_storage_name(original_name: str) -> str:
        """
        Build a collision-resistant storage name.

        Format: <epoch millis>-<random 9 digits>-<sanitized original name>
        """
        base = Path(original_name.replace("\\", "/")).name
        safe = _UNSAFE_CHARS.sub("_", base).strip("._") or "package.zip"
        timestamp = int(time.time() * 1000)
        suffix = secrets.randbelow(10**9)
        return f"{timestamp}-{suffix:09d}-{safe}"

    @staticmethod
    async def save_upload(upload: UploadFile) -> StoredPackage:
        """
        Validate an uploaded package and stream it to disk.

        The body is written in chunks; as soon as it exceeds the configured
        limit the partial file is removed and the upload rejected.

        Args:
            upload: The multipart file part

        Returns:
            StoredPackage with the generated name and measured size

        Raises:
            InvalidFileTypeError: Wrong extension (nothing is written)
            FileTooLargeError: Body exceeds MAX_UPLOAD_SIZE_MB
            PackageStorageError: Disk write failed
        """
        original_name = PackageService.validate_filename(upload.filename)
        max_bytes = settings.max_upload_size_bytes

        directory = PackageService.ensure_upload_dir()
        file_name = PackageService.generate_storage_name(original_name)
        path = directory / file_name

        size = 0
        try:
            with open(path, "wb") as out:
                while True:
                    chunk = await upload.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    size += len(chunk)
                    if size > max_bytes:
                        raise FileTooLargeError(settings.MAX_UPLOAD_SIZE_MB)
                    await asyncio.to_thread(out.write, chunk)

        except FileTooLargeError:
            path.unlink(missing_ok=True)
            logger.warning(f"Rejected oversized upload: {original_name}")
            raise

        except OSError as e:
            path.unlink(missing_ok=True)
            logger.error(f"Failed to write package {file_name}: {e}")
            raise PackageStorageError()

        logger.info(f"Stored package {file_name} ({size} bytes)")
        return StoredPackage(file_name=file_name, file_size=size, path=path)

    @staticmethod
    def resolve_package_path(file_name: str) -> Path | None:
        """
        Find a stored package on disk.

        Returns:
            The file path, or None if it is missing or the name points
            outside the upload directory
        """
        directory = PackageService.upload_dir().resolve()
        path = (directory / file_name).resolve()

        if path.parent != directory:
            logger.warning(f"Refusing package path outside upload dir: {file_name}")
            return None

        if not path.is_file():
            return None

        return path

    @staticmethod
    def delete_package(file_name: str) -> bool:
        """
        Remove a stored package.

        Returns:
            True if a file was deleted, False if there was nothing to delete
        """
        path = PackageService.resolve_package_path(file_name)
        if path is None:
            return False

        try:
            path.unlink()
            logger.info(f"Deleted package file: {file_name}")
            return True
        except OSError as e:
            logger.error(f"Failed to delete package {file_name}: {e}")
            return False
