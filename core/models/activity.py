# =============================================================================
# core/models/activity.py - Feedback, Report and Download Schemas
# =============================================================================
# User-generated activity records:
# - Feedback: free-form feedback with an optional 1-5 rating
# - Report: an issue report, optionally about one app
# - Download: one row per recorded download (append-only)
#
# The *Create schemas describe client input; the owning user_id is always
# taken from the verified identity, never from the request body.
# =============================================================================

from datetime import datetime
from enum import Enum

from pydantic import Field, field_validator

from .base import CatalogModel
from .catalog import App


class FeedbackStatus(str, Enum):
    PENDING = "pending"
    REVIEWED = "reviewed"
    RESOLVED = "resolved"


class ReportStatus(str, Enum):
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    CLOSED = "closed"


class ReportIssueType(str, Enum):
    """Kinds of problems a user can report."""
    BUG = "bug"
    DOWNLOAD = "download"
    SECURITY = "security"
    BROKEN = "broken"
    OTHER = "other"


# =============================================================================
# Feedback
# =============================================================================

class FeedbackCreate(CatalogModel):
    """
    Body of POST /api/feedback.

    Example:
        {"subject": "Great catalog", "message": "Found everything I needed.", "rating": 5}
    """

    subject: str = Field(..., min_length=3, max_length=255)
    message: str = Field(..., min_length=10)

    # Optional star rating
    rating: int | None = Field(default=None, ge=1, le=5)

    @field_validator("subject", "message", mode="before")
    @classmethod
    def strip_text(cls, value):
        return value.strip() if isinstance(value, str) else value


class Feedback(CatalogModel):
    id: str
    user_id: str
    subject: str
    message: str
    rating: int | None = None
    status: str = FeedbackStatus.PENDING.value
    created_at: datetime


# =============================================================================
# Reports
# =============================================================================

class ReportCreate(CatalogModel):
    """
    Body of POST /api/reports.

    Example:
        {
            "appId": "0b6e...",
            "issueType": "download",
            "description": "The archive is truncated after 40MB."
        }
    """

    # The app this report is about, if any
    app_id: str | None = Field(default=None, max_length=255)

    issue_type: ReportIssueType = Field(..., description="Kind of problem")

    description: str = Field(..., min_length=20)

    @field_validator("app_id", mode="before")
    @classmethod
    def blank_app_id(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("description", mode="before")
    @classmethod
    def strip_text(cls, value):
        return value.strip() if isinstance(value, str) else value


class Report(CatalogModel):
    id: str
    user_id: str
    app_id: str | None = None
    issue_type: str
    description: str
    status: str = ReportStatus.OPEN.value
    created_at: datetime


class ReportWithApp(Report):
    """Report joined with its app; `app` is None once the app is deleted."""
    app: App | None = None


# =============================================================================
# Downloads
# =============================================================================

class DownloadCreate(CatalogModel):
    """Body of POST /api/downloads: {"appId": "..."}."""

    app_id: str = Field(..., min_length=1, max_length=255)


class Download(CatalogModel):
    id: str
    user_id: str
    app_id: str
    downloaded_at: datetime


class DownloadWithApp(Download):
    """Download joined with its app; `app` is None once the app is deleted."""
    app: App | None = None


class DownloadRecorded(CatalogModel):
    """Response of POST /api/downloads."""

    success: bool = True
    download: Download
    download_count: int = Field(..., ge=0, description="App counter after this download")
