# =============================================================================
# app/routers/downloads.py - Download Recording
# =============================================================================
# POST /api/downloads logs a download and bumps the app's counter.
# Both writes happen in one transaction.
# =============================================================================

import logging

from fastapi import APIRouter, Depends

from app.auth import AuthUser, get_current_user
from app.exceptions import AppNotFoundError
from core.models import DownloadCreate, DownloadRecorded
from core.services.catalog_storage import CatalogStorage

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=DownloadRecorded)
def record_download(
    body: DownloadCreate,
    user: AuthUser = Depends(get_current_user),
):
    """
    Record that the current user downloaded an app.

    - **appId**: the app being downloaded

    Nothing is written when the app doesn't exist (404).
    """
    recorded = CatalogStorage.record_download(user.id, body.app_id)
    if recorded is None:
        raise AppNotFoundError(body.app_id)
    return recorded
