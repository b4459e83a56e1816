# =============================================================================
# tests/test_package_service.py - Package File Storage Tests
# =============================================================================
# Tests for PackageService:
# - Extension check and storage name generation
# - Streaming uploads to disk with the size limit
# - Resolving and deleting stored packages
# =============================================================================

import asyncio
import io
import re

import pytest
from fastapi import UploadFile

from app.config import settings
from app.exceptions import FileTooLargeError, InvalidFileTypeError
from core.services.package_service import PackageService


def _upload(filename: str, content: bytes) -> UploadFile:
    return UploadFile(file=io.BytesIO(content), filename=filename)


# =============================================================================
# Validation
# =============================================================================

class TestValidateFilename:

    @pytest.mark.parametrize("name", ["tool.zip", "TOOL.ZIP", "my tool-1.2.zip"])
    def test_zip_accepted(self, name):
        assert PackageService.validate_filename(name) == name

    @pytest.mark.parametrize("name", ["tool.txt", "tool.zip.exe", "zip", "", None])
    def test_other_names_rejected(self, name):
        with pytest.raises(InvalidFileTypeError) as exc_info:
            PackageService.validate_filename(name)

        assert exc_info.value.status_code == 400


class TestStorageName:

    def test_format(self):
        name = PackageService.generate_storage_name("htop.zip")

        assert re.fullmatch(r"\d+-\d{9}-htop\.zip", name)

    def test_names_are_unique(self):
        names = {PackageService.generate_storage_name("same.zip") for _ in range(200)}

        assert len(names) == 200

    def test_path_components_are_stripped(self):
        name = PackageService.generate_storage_name("../../etc/evil pkg.zip")

        assert "/" not in name
        assert name.endswith("-evil_pkg.zip")


# =============================================================================
# Saving Uploads
# =============================================================================

class TestSaveUpload:

    def test_saves_file_with_measured_size(self, upload_dir):
        content = b"PK\x03\x04" + b"x" * 5000

        stored = asyncio.run(PackageService.save_upload(_upload("tool.zip", content)))

        assert stored.file_size == len(content)
        assert stored.path.parent == upload_dir
        assert stored.path.read_bytes() == content
        assert stored.file_name.endswith("-tool.zip")

    def test_wrong_extension_writes_nothing(self, upload_dir):
        with pytest.raises(InvalidFileTypeError):
            asyncio.run(PackageService.save_upload(_upload("tool.txt", b"hello")))

        assert list(upload_dir.iterdir()) == []

    def test_oversized_upload_removed(self, upload_dir, monkeypatch):
        monkeypatch.setattr(settings, "MAX_UPLOAD_SIZE_MB", 1)
        content = b"x" * (1024 * 1024 + 1)

        with pytest.raises(FileTooLargeError) as exc_info:
            asyncio.run(PackageService.save_upload(_upload("big.zip", content)))

        assert exc_info.value.status_code == 413
        assert list(upload_dir.iterdir()) == []

    def test_exactly_at_limit_is_accepted(self, upload_dir, monkeypatch):
        monkeypatch.setattr(settings, "MAX_UPLOAD_SIZE_MB", 1)
        content = b"x" * (1024 * 1024)

        stored = asyncio.run(PackageService.save_upload(_upload("edge.zip", content)))

        assert stored.file_size == 1024 * 1024

    def test_creates_missing_directory(self, tmp_path, monkeypatch):
        target = tmp_path / "not-yet"
        monkeypatch.setattr(settings, "UPLOAD_DIR", str(target))

        stored = asyncio.run(PackageService.save_upload(_upload("tool.zip", b"data")))

        assert target.is_dir()
        assert stored.path.exists()


# =============================================================================
# Resolving and Deleting
# =============================================================================

class TestResolveAndDelete:

    def test_resolve_existing(self, upload_dir):
        (upload_dir / "1-2-a.zip").write_bytes(b"a")

        assert PackageService.resolve_package_path("1-2-a.zip") == (upload_dir / "1-2-a.zip").resolve()

    def test_resolve_missing(self, upload_dir):
        assert PackageService.resolve_package_path("nope.zip") is None

    def test_resolve_outside_directory(self, upload_dir, tmp_path):
        (tmp_path / "secret.zip").write_bytes(b"s")

        assert PackageService.resolve_package_path("../secret.zip") is None

    def test_delete(self, upload_dir):
        (upload_dir / "1-2-a.zip").write_bytes(b"a")

        assert PackageService.delete_package("1-2-a.zip") is True
        assert not (upload_dir / "1-2-a.zip").exists()
        assert PackageService.delete_package("1-2-a.zip") is False

    def test_ensure_upload_dir_is_idempotent(self, upload_dir):
        PackageService.ensure_upload_dir()
        PackageService.ensure_upload_dir()

        assert upload_dir.is_dir()
