# =============================================================================
# app/routers/admin.py - Catalog Administration
# =============================================================================
# Administrator-only endpoints: full catalog listing, package upload,
# partial updates and deletion. Every route requires the admin flag.
#
# Handlers that only touch the database are plain `def` and run in the
# threadpool. The upload handler is async for the streaming file copy and
# hands its database calls to a worker thread.
# =============================================================================

import asyncio
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Path, UploadFile, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from app.auth import AuthUser, require_admin
from app.exceptions import AppNotFoundError
from core.models import App, AppCreate, AppUpdate
from core.services.catalog_storage import CatalogStorage
from core.services.package_service import PackageService

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_admin)])


@router.get("/apps", response_model=list[App])
def list_all_apps():
    """Full catalog including inactive apps, newest first."""
    return CatalogStorage.get_all_apps()


@router.post("/apps", response_model=App, status_code=status.HTTP_201_CREATED)
async def upload_app(
    file: Annotated[UploadFile, File(description="ZIP package")],
    name: Annotated[str, Form()],
    description: Annotated[str, Form()],
    category: Annotated[str, Form()],
    version: Annotated[str | None, Form()] = None,
    icon_url: Annotated[str | None, Form(alias="iconUrl")] = None,
    admin: AuthUser = Depends(require_admin),
):
    """
    Upload a package and create its catalog entry.

    This endpoint:
    1. Validates the metadata fields
    2. Checks the file extension (.zip)
    3. Streams the file to the package directory, enforcing the size limit
    4. Creates the app record with the stored name and measured size

    Nothing is stored when any step fails.
    """
    # =========================================================================
    # 1. Validate Metadata
    # =========================================================================

    try:
        metadata = AppCreate(
            name=name,
            description=description,
            category=category,
            version=version,
            icon_url=icon_url,
        )
    except ValidationError as e:
        raise RequestValidationError(e.errors())

    # =========================================================================
    # 2-3. Validate and Store File
    # =========================================================================

    stored = await PackageService.save_upload(file)

    # =========================================================================
    # 4. Create Record
    # =========================================================================

    try:
        app = await asyncio.to_thread(
            CatalogStorage.create_app, metadata, stored.file_name, stored.file_size
        )
    except Exception:
        PackageService.delete_package(stored.file_name)
        raise

    logger.info(f"Admin {admin.id} uploaded app {app.id}: {stored.file_name} ({stored.file_size} bytes)")
    return app


@router.patch("/apps/{app_id}", response_model=App)
def update_app(
    app_id: Annotated[str, Path(description="App ID")],
    changes: AppUpdate,
):
    """
    Partially update an app.

    Typical use is toggling visibility: `{"isActive": false}`.
    """
    app = CatalogStorage.update_app(app_id, changes)
    if app is None:
        raise AppNotFoundError(app_id)
    return app


@router.delete("/apps/{app_id}")
def delete_app(
    app_id: Annotated[str, Path(description="App ID")],
):
    """
    Delete an app and its package file.

    Download and report history that references the app is kept.
    """
    app = CatalogStorage.get_app(app_id)
    if app is None:
        raise AppNotFoundError(app_id)

    CatalogStorage.delete_app(app_id)
    PackageService.delete_package(app.file_name)

    return {"message": "App deleted", "id": app_id}
