# =============================================================================
# app/routers/reports.py - Issue Reports API
# =============================================================================

import logging

from fastapi import APIRouter, Depends, status

from app.auth import AuthUser, get_current_user
from app.exceptions import AppNotFoundError
from core.models import Report, ReportCreate
from core.services.catalog_storage import CatalogStorage

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("", response_model=Report, status_code=status.HTTP_201_CREATED)
def submit_report(
    report: ReportCreate,
    user: AuthUser = Depends(get_current_user),
):
    """
    Report a problem.

    - **appId**: optional; must name an existing app when given
    - **issueType**: bug, download, security, broken or other
    - **description**: at least 20 characters
    """
    if report.app_id is not None and CatalogStorage.get_app(report.app_id) is None:
        logger.info(f"Report from user {user.id} names unknown app {report.app_id}")
        raise AppNotFoundError(report.app_id)

    return CatalogStorage.create_report(user.id, report)
