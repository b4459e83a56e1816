# =============================================================================
# app/routers/apps.py - Public Catalog Endpoints
# =============================================================================
# Unauthenticated catalog browsing and package download.
#
# GET /{app_id}/download only streams the file. Counting the download is a
# separate authenticated call (POST /api/downloads) made by the client.
# =============================================================================

import logging
import re
from typing import Annotated

from fastapi import APIRouter, Path
from fastapi.responses import FileResponse

from app.exceptions import AppNotFoundError, PackageFileNotFoundError
from core.models import App
from core.services.catalog_storage import CatalogStorage
from core.services.package_service import PackageService

logger = logging.getLogger(__name__)

router = APIRouter()

# Characters that would break a Content-Disposition filename
_HEADER_UNSAFE = re.compile(r'[\\/"\r\n]+')


def _download_filename(app_name: str) -> str:
    return f"{_HEADER_UNSAFE.sub('_', app_name).strip() or 'package'}.zip"


@router.get("", response_model=list[App])
def list_active_apps():
    """
    List the public catalog.

    Only active apps are returned, newest first.
    """
    return CatalogStorage.get_active_apps()


@router.get("/{app_id}", response_model=App)
def get_app(
    app_id: Annotated[str, Path(description="App ID")],
):
    """
    Get a single app.

    Inactive apps are still returned here so direct links keep working.
    """
    app = CatalogStorage.get_app(app_id)
    if app is None:
        raise AppNotFoundError(app_id)
    return app


@router.get("/{app_id}/download")
def download_app(
    app_id: Annotated[str, Path(description="App ID")],
):
    """
    Stream an app's package file.

    The attachment is named after the app ("<name>.zip"), not after the
    generated storage name. Returns 404 when the app or its file is missing.
    """
    app = CatalogStorage.get_app(app_id)
    if app is None:
        raise AppNotFoundError(app_id)

    path = PackageService.resolve_package_path(app.file_name)
    if path is None:
        logger.warning(f"Package file missing for app {app_id}: {app.file_name}")
        raise PackageFileNotFoundError(app_id)

    return FileResponse(
        path,
        media_type="application/zip",
        filename=_download_filename(app.name),
    )
