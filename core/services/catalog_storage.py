# =============================================================================
# core/services/catalog_storage.py - Catalog Data Access
# =============================================================================
# The only component that reads or writes persistent entities. Routers and
# the upload pipeline call through here; nothing else opens a session.
#
# Conventions:
# - A missing entity is reported as None, never as an exception
# - Database errors are logged and re-raised unchanged
# - Every call runs in its own short transaction
# =============================================================================

import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from core.models import (
    App,
    AppCreate,
    AppUpdate,
    Download,
    DownloadRecorded,
    DownloadWithApp,
    Feedback,
    FeedbackCreate,
    Report,
    ReportCreate,
    ReportWithApp,
    User,
    UserStats,
    UserUpsert,
)
from core.tables import AppModel, DownloadModel, FeedbackModel, ReportModel, UserModel
from lib.database import Database

logger = logging.getLogger(__name__)

# Columns refreshed from the identity provider on every login
_USER_PROFILE_FIELDS = ("email", "first_name", "last_name", "profile_image_url")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CatalogStorage:
    """
    Data-access operations for users, apps, feedback, reports and downloads.

    All methods are static; the shared engine lives in lib.database.
    """

    # -------------------------------------------------------------------------
    # Users
    # -------------------------------------------------------------------------

    @staticmethod
    def get_user(user_id: str) -> User | None:
        with Database.session() as session:
            row = session.get(UserModel, user_id)
            return User.model_validate(row) if row else None

    @staticmethod
    def upsert_user(data: UserUpsert) -> User:
        """
        Insert a user on first sight of an identity, refresh it otherwise.

        Profile fields and updated_at are overwritten on conflict. is_admin
        is only written when the caller sets it. Calling this repeatedly
        with the same data leaves exactly one row.

        Args:
            data: Identity data from a verified token

        Returns:
            The stored user after the write
        """
        now = _utcnow()
        values: dict[str, Any] = {field: getattr(data, field) for field in _USER_PROFILE_FIELDS}
        values["updated_at"] = now

        conflict_set = dict(values)
        if data.is_admin is not None:
            conflict_set["is_admin"] = data.is_admin

        insert_values = {
            **values,
            "id": data.id,
            "is_admin": bool(data.is_admin),
            "created_at": now,
        }

        try:
            with Database.session() as session:
                dialect = session.get_bind().dialect.name

                if dialect in ("postgresql", "sqlite"):
                    insert = pg_insert if dialect == "postgresql" else sqlite_insert
                    stmt = insert(UserModel).values(**insert_values)
                    stmt = stmt.on_conflict_do_update(
                        index_elements=[UserModel.id],
                        set_=conflict_set,
                    )
                    session.execute(stmt)
                else:
                    row = session.get(UserModel, data.id)
                    if row is None:
                        session.add(UserModel(**insert_values))
                    else:
                        for key, value in conflict_set.items():
                            setattr(row, key, value)

                session.flush()
                session.expire_all()
                row = session.get(UserModel, data.id)
                return User.model_validate(row)

        except Exception as e:
            logger.error(f"Failed to upsert user {data.id}: {e}")
            raise

    # -------------------------------------------------------------------------
    # Apps
    # -------------------------------------------------------------------------

    @staticmethod
    def get_all_apps() -> list[App]:
        """Full catalog, newest first. For administrators."""
        with Database.session() as session:
            rows = session.scalars(
                select(AppModel).order_by(AppModel.created_at.desc())
            ).all()
            return [App.model_validate(row) for row in rows]

    @staticmethod
    def get_active_apps() -> list[App]:
        """Public catalog: active apps only, newest first."""
        with Database.session() as session:
            rows = session.scalars(
                select(AppModel)
                .where(AppModel.is_active.is_(True))
                .order_by(AppModel.created_at.desc())
            ).all()
            return [App.model_validate(row) for row in rows]

    @staticmethod
    def get_app(app_id: str) -> App | None:
        """Single app by ID, active or not."""
        with Database.session() as session:
            row = session.get(AppModel, app_id)
            return App.model_validate(row) if row else None

    @staticmethod
    def create_app(data: AppCreate, file_name: str, file_size: int | None = None) -> App:
        """
        Insert a catalog entry for an already-stored package.

        Args:
            data: Validated metadata from the upload form
            file_name: Generated storage name of the package file
            file_size: Size of the stored file in bytes

        Returns:
            The new app with download_count=0 and is_active=True
        """
        now = _utcnow()
        row = AppModel(
            name=data.name,
            description=data.description,
            category=data.category,
            version=data.version,
            icon_url=data.icon_url,
            file_name=file_name,
            file_size=file_size,
            download_count=0,
            is_active=True,
            created_at=now,
            updated_at=now,
        )

        try:
            with Database.session() as session:
                session.add(row)
                session.flush()
                app = App.model_validate(row)

            logger.info(f"Created app: {app.id} ({app.name})")
            return app

        except Exception as e:
            logger.error(f"Failed to create app {data.name}: {e}")
            raise

    @staticmethod
    def update_app(app_id: str, data: AppUpdate | dict[str, Any]) -> App | None:
        """
        Apply a partial update and refresh updated_at.

        Only the given fields are written, so a concurrent counter increment
        is never overwritten.

        Returns:
            The updated app, or None if the ID is unknown
        """
        changes = data.changes() if isinstance(data, AppUpdate) else dict(data)

        with Database.session() as session:
            row = session.get(AppModel, app_id)
            if row is None:
                return None

            for key, value in changes.items():
                setattr(row, key, value)
            row.updated_at = _utcnow()
            session.flush()

            logger.info(f"Updated app {app_id}: {sorted(changes)}")
            return App.model_validate(row)

    @staticmethod
    def delete_app(app_id: str) -> None:
        """
        Hard-delete an app.

        Downloads and reports that point at it are kept; their app_id is a
        soft reference and simply stops resolving.
        """
        with Database.session() as session:
            row = session.get(AppModel, app_id)
            if row is not None:
                session.delete(row)
                logger.info(f"Deleted app: {app_id}")

    @staticmethod
    def increment_download_count(app_id: str) -> bool:
        """
        Atomically add one to an app's download counter.

        Runs a single `download_count = download_count + 1` UPDATE so
        concurrent downloads of the same app are all counted.

        Returns:
            True if the app exists
        """
        with Database.session() as session:
            result = session.execute(
                update(AppModel)
                .where(AppModel.id == app_id)
                .values(download_count=AppModel.download_count + 1)
            )
            return result.rowcount > 0

    # -------------------------------------------------------------------------
    # Feedback
    # -------------------------------------------------------------------------

    @staticmethod
    def create_feedback(user_id: str, data: FeedbackCreate) -> Feedback:
        row = FeedbackModel(
            user_id=user_id,
            subject=data.subject,
            message=data.message,
            rating=data.rating,
            created_at=_utcnow(),
        )
        with Database.session() as session:
            session.add(row)
            session.flush()
            feedback = Feedback.model_validate(row)

        logger.info(f"Feedback {feedback.id} submitted by user {user_id}")
        return feedback

    @staticmethod
    def get_user_feedback(user_id: str) -> list[Feedback]:
        with Database.session() as session:
            rows = session.scalars(
                select(FeedbackModel)
                .where(FeedbackModel.user_id == user_id)
                .order_by(FeedbackModel.created_at.desc())
            ).all()
            return [Feedback.model_validate(row) for row in rows]

    # -------------------------------------------------------------------------
    # Reports
    # -------------------------------------------------------------------------

    @staticmethod
    def create_report(user_id: str, data: ReportCreate) -> Report:
        row = ReportModel(
            user_id=user_id,
            app_id=data.app_id,
            issue_type=data.issue_type.value,
            description=data.description,
            created_at=_utcnow(),
        )
        with Database.session() as session:
            session.add(row)
            session.flush()
            report = Report.model_validate(row)

        logger.info(f"Report {report.id} ({report.issue_type}) filed by user {user_id}")
        return report

    @staticmethod
    def get_user_reports(user_id: str) -> list[Report]:
        with Database.session() as session:
            rows = session.scalars(
                select(ReportModel)
                .where(ReportModel.user_id == user_id)
                .order_by(ReportModel.created_at.desc())
            ).all()
            return [Report.model_validate(row) for row in rows]

    @staticmethod
    def get_user_reports_with_apps(user_id: str) -> list[ReportWithApp]:
        """User's reports, newest first, each joined with its app (or None)."""
        with Database.session() as session:
            rows = session.execute(
                select(ReportModel, AppModel)
                .outerjoin(AppModel, AppModel.id == ReportModel.app_id)
                .where(ReportModel.user_id == user_id)
                .order_by(ReportModel.created_at.desc())
            ).all()
            return [
                ReportWithApp(
                    **Report.model_validate(report).model_dump(),
                    app=App.model_validate(app) if app is not None else None,
                )
                for report, app in rows
            ]

    # -------------------------------------------------------------------------
    # Downloads
    # -------------------------------------------------------------------------

    @staticmethod
    def create_download(user_id: str, app_id: str) -> Download:
        """Append one row to the download log. Does not touch the counter."""
        row = DownloadModel(user_id=user_id, app_id=app_id, downloaded_at=_utcnow())
        with Database.session() as session:
            session.add(row)
            session.flush()
            return Download.model_validate(row)

    @staticmethod
    def record_download(user_id: str, app_id: str) -> DownloadRecorded | None:
        """
        Log a download and bump the app counter in one transaction.

        Either both writes happen or neither does, so the counter stays equal
        to the number of log rows for the app.

        Returns:
            The new log row and the counter after the increment, or None if
            the app doesn't exist (nothing is written)
        """
        with Database.session() as session:
            exists = session.scalar(select(AppModel.id).where(AppModel.id == app_id))
            if exists is None:
                return None

            row = DownloadModel(user_id=user_id, app_id=app_id, downloaded_at=_utcnow())
            session.add(row)
            session.flush()

            session.execute(
                update(AppModel)
                .where(AppModel.id == app_id)
                .values(download_count=AppModel.download_count + 1)
            )
            count = session.scalar(select(AppModel.download_count).where(AppModel.id == app_id))

            logger.info(f"Recorded download of app {app_id} by user {user_id} (count={count})")
            return DownloadRecorded(download=Download.model_validate(row), download_count=count)

    @staticmethod
    def get_user_downloads(user_id: str) -> list[Download]:
        with Database.session() as session:
            rows = session.scalars(
                select(DownloadModel)
                .where(DownloadModel.user_id == user_id)
                .order_by(DownloadModel.downloaded_at.desc())
            ).all()
            return [Download.model_validate(row) for row in rows]

    @staticmethod
    def get_user_downloads_with_apps(user_id: str) -> list[DownloadWithApp]:
        """User's downloads, newest first, each joined with its app (or None)."""
        with Database.session() as session:
            rows = session.execute(
                select(DownloadModel, AppModel)
                .outerjoin(AppModel, AppModel.id == DownloadModel.app_id)
                .where(DownloadModel.user_id == user_id)
                .order_by(DownloadModel.downloaded_at.desc())
            ).all()
            return [
                DownloadWithApp(
                    **Download.model_validate(download).model_dump(),
                    app=App.model_validate(app) if app is not None else None,
                )
                for download, app in rows
            ]

    # -------------------------------------------------------------------------
    # Stats
    # -------------------------------------------------------------------------

    @staticmethod
    def get_user_stats(user_id: str) -> UserStats:
        """
        Count a user's downloads, feedback and reports.

        Three independent COUNT queries, not a join.
        """
        with Database.session() as session:
            downloads = session.scalar(
                select(func.count()).select_from(DownloadModel).where(DownloadModel.user_id == user_id)
            )
            feedback = session.scalar(
                select(func.count()).select_from(FeedbackModel).where(FeedbackModel.user_id == user_id)
            )
            reports = session.scalar(
                select(func.count()).select_from(ReportModel).where(ReportModel.user_id == user_id)
            )

        return UserStats(
            downloads=downloads or 0,
            feedback=feedback or 0,
            reports=reports or 0,
        )
