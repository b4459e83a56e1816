# =============================================================================
# core/tables.py - SQLAlchemy Table Definitions
# =============================================================================
# Relational schema for the catalog:
# - users:     identities issued by the external provider
# - apps:      catalog entries, one per uploaded package
# - feedback:  free-form feedback from signed-in users
# - reports:   issue reports, optionally about one app
# - downloads: append-only download log
#
# user_id columns are real foreign keys. app_id columns on reports and
# downloads are soft references: deleting an app keeps their history rows,
# and joining them back to apps yields nothing.
# =============================================================================

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserModel(Base):
    """SQLAlchemy model for users."""

    __tablename__ = "users"

    id = Column(String, primary_key=True)  # external identity ("sub")
    email = Column(String, unique=True, nullable=True)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    profile_image_url = Column(String, nullable=True)
    is_admin = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)


class AppModel(Base):
    """SQLAlchemy model for catalog apps."""

    __tablename__ = "apps"

    id = Column(String, primary_key=True, default=_new_id)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String(100), nullable=False)
    version = Column(String(50), nullable=True)
    file_name = Column(String(255), nullable=False)
    file_size = Column(Integer, nullable=True)
    icon_url = Column(String(500), nullable=True)
    download_count = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    __table_args__ = (
        Index("idx_apps_active_created", "is_active", "created_at"),
    )


class FeedbackModel(Base):
    """SQLAlchemy model for user feedback."""

    __tablename__ = "feedback"

    id = Column(String, primary_key=True, default=_new_id)
    user_id = Column(String, ForeignKey("users.id"), nullable=False)
    subject = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    rating = Column(Integer, nullable=True)
    status = Column(String(50), nullable=False, default="pending")
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    __table_args__ = (
        Index("idx_feedback_user_created", "user_id", "created_at"),
    )


class ReportModel(Base):
    """SQLAlchemy model for issue reports."""

    __tablename__ = "reports"

    id = Column(String, primary_key=True, default=_new_id)
    user_id = Column(String, ForeignKey("users.id"), nullable=False)
    app_id = Column(String, nullable=True)  # soft reference to apps.id
    issue_type = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    status = Column(String(50), nullable=False, default="open")
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    __table_args__ = (
        Index("idx_reports_user_created", "user_id", "created_at"),
        Index("idx_reports_app_id", "app_id"),
    )


class DownloadModel(Base):
    """SQLAlchemy model for the download log."""

    __tablename__ = "downloads"

    id = Column(String, primary_key=True, default=_new_id)
    user_id = Column(String, ForeignKey("users.id"), nullable=False)
    app_id = Column(String, nullable=False)  # soft reference to apps.id
    downloaded_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    __table_args__ = (
        Index("idx_downloads_user_downloaded", "user_id", "downloaded_at"),
        Index("idx_downloads_app_id", "app_id"),
    )
