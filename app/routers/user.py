# =============================================================================
# app/routers/user.py - Current User's Activity
# =============================================================================
# Read-only views over the signed-in user's own history.
# =============================================================================

from fastapi import APIRouter, Depends

from app.auth import AuthUser, get_current_user
from core.models import DownloadWithApp, Feedback, ReportWithApp, UserStats
from core.services.catalog_storage import CatalogStorage

router = APIRouter()


@router.get("/stats", response_model=UserStats)
def get_stats(user: AuthUser = Depends(get_current_user)):
    """Counts of the user's downloads, feedback and reports."""
    return CatalogStorage.get_user_stats(user.id)


@router.get("/downloads", response_model=list[DownloadWithApp])
def get_downloads(user: AuthUser = Depends(get_current_user)):
    """
    Download history, newest first.

    Each entry carries its app; `app` is null when the app was deleted.
    """
    return CatalogStorage.get_user_downloads_with_apps(user.id)


@router.get("/feedback", response_model=list[Feedback])
def get_feedback(user: AuthUser = Depends(get_current_user)):
    return CatalogStorage.get_user_feedback(user.id)


@router.get("/reports", response_model=list[ReportWithApp])
def get_reports(user: AuthUser = Depends(get_current_user)):
    """Report history, newest first, each with its app (or null)."""
    return CatalogStorage.get_user_reports_with_apps(user.id)
