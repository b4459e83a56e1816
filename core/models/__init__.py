# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - base.py: shared camelCase configuration
# - user.py: user identity and activity counts
# - catalog.py: catalog app schemas
# - activity.py: feedback, report and download schemas
#
# These models define the "contract" between API and clients.
# =============================================================================

from .base import CatalogModel

from .user import (
    User,
    UserStats,
    UserUpsert,
)

from .catalog import (
    App,
    AppCreate,
    AppUpdate,
)

from .activity import (
    Download,
    DownloadCreate,
    DownloadRecorded,
    DownloadWithApp,
    Feedback,
    FeedbackCreate,
    FeedbackStatus,
    Report,
    ReportCreate,
    ReportIssueType,
    ReportStatus,
    ReportWithApp,
)

__all__ = [
    "CatalogModel",
    # Users
    "User",
    "UserStats",
    "UserUpsert",
    # Catalog
    "App",
    "AppCreate",
    "AppUpdate",
    # Activity
    "Download",
    "DownloadCreate",
    "DownloadRecorded",
    "DownloadWithApp",
    "Feedback",
    "FeedbackCreate",
    "FeedbackStatus",
    "Report",
    "ReportCreate",
    "ReportIssueType",
    "ReportStatus",
    "ReportWithApp",
]
