# =============================================================================
# tests/test_catalog_storage.py - Data-Access Layer Tests
# =============================================================================
# Tests for CatalogStorage against a real (temporary) SQLite database:
# - User upsert idempotency
# - Active-only listing and newest-first ordering
# - Atomic download counter under concurrency
# - Per-user stats and history
# - App deletion keeping history rows
# =============================================================================

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError

from core.models import AppCreate, AppUpdate, FeedbackCreate, ReportCreate, UserUpsert
from core.services.catalog_storage import CatalogStorage
from core.tables import AppModel, DownloadModel, UserModel
from lib.database import Database


def _make_app(name: str, **overrides):
    data = AppCreate(
        name=name,
        description=f"{name} is a handy Linux tool",
        category=overrides.pop("category", "utilities"),
    )
    return CatalogStorage.create_app(data, f"stored-{name}.zip", overrides.pop("file_size", 100))


def _set_created_at(app_id: str, when: datetime) -> None:
    with Database.session() as session:
        session.execute(update(AppModel).where(AppModel.id == app_id).values(created_at=when))


# =============================================================================
# Users
# =============================================================================

class TestUsers:

    def test_get_unknown_user(self, database):
        assert CatalogStorage.get_user("nobody") is None

    def test_upsert_creates_user(self, database):
        user = CatalogStorage.upsert_user(UserUpsert(id="u1", email="u1@example.com", first_name="Una"))

        assert user.id == "u1"
        assert user.first_name == "Una"
        assert user.is_admin is False
        assert CatalogStorage.get_user("u1") == user

    def test_upsert_twice_keeps_one_row_with_latest_name(self, database):
        """Same identity, different display names -> one row, latest name."""
        first = CatalogStorage.upsert_user(UserUpsert(id="u1", first_name="Old"))
        second = CatalogStorage.upsert_user(UserUpsert(id="u1", first_name="New"))

        assert second.first_name == "New"
        assert second.created_at == first.created_at
        assert second.updated_at >= first.updated_at
        assert CatalogStorage.get_user("u1").first_name == "New"

        with Database.session() as session:
            ids = session.scalars(select(UserModel.id)).all()
        assert ids == ["u1"]

    def test_upsert_without_admin_flag_keeps_existing_flag(self, database):
        CatalogStorage.upsert_user(UserUpsert(id="u1", is_admin=True))

        user = CatalogStorage.upsert_user(UserUpsert(id="u1", first_name="Again"))

        assert user.is_admin is True


# =============================================================================
# Apps
# =============================================================================

class TestApps:

    def test_create_app_defaults(self, database, sample_app_data):
        app = CatalogStorage.create_app(sample_app_data, "123-456-htop.zip", 2048)

        assert app.id
        assert app.download_count == 0
        assert app.is_active is True
        assert app.file_name == "123-456-htop.zip"
        assert app.file_size == 2048
        assert app.created_at is not None

    def test_get_app_returns_inactive(self, database):
        app = _make_app("hidden")
        CatalogStorage.update_app(app.id, AppUpdate(is_active=False))

        fetched = CatalogStorage.get_app(app.id)

        assert fetched is not None
        assert fetched.is_active is False

    def test_get_unknown_app(self, database):
        assert CatalogStorage.get_app("missing") is None

    def test_active_apps_filtered_and_newest_first(self, database):
        base = datetime(2024, 1, 1, tzinfo=timezone.utc)
        oldest = _make_app("oldest")
        middle = _make_app("middle")
        newest = _make_app("newest")
        _set_created_at(oldest.id, base)
        _set_created_at(middle.id, base + timedelta(days=1))
        _set_created_at(newest.id, base + timedelta(days=2))
        CatalogStorage.update_app(middle.id, {"is_active": False})

        active = CatalogStorage.get_active_apps()
        everything = CatalogStorage.get_all_apps()

        assert [a.name for a in active] == ["newest", "oldest"]
        assert all(a.is_active for a in active)
        assert [a.name for a in everything] == ["newest", "middle", "oldest"]

    def test_update_app_partial(self, database):
        app = _make_app("tool")

        updated = CatalogStorage.update_app(app.id, AppUpdate(version="2.0"))

        assert updated.version == "2.0"
        assert updated.name == "tool"
        assert updated.updated_at >= app.updated_at

    def test_update_unknown_app(self, database):
        assert CatalogStorage.update_app("missing", AppUpdate(is_active=False)) is None

    def test_delete_app_removes_from_listings(self, database):
        app = _make_app("doomed")

        CatalogStorage.delete_app(app.id)

        assert CatalogStorage.get_app(app.id) is None
        assert CatalogStorage.get_all_apps() == []
        assert CatalogStorage.get_active_apps() == []

    def test_delete_unknown_app_is_noop(self, database):
        CatalogStorage.delete_app("missing")


# =============================================================================
# Download Counter
# =============================================================================

class TestDownloadCounter:

    def test_increment(self, database, sample_app):
        assert CatalogStorage.increment_download_count(sample_app.id) is True

        assert CatalogStorage.get_app(sample_app.id).download_count == 1

    def test_increment_unknown_app(self, database):
        assert CatalogStorage.increment_download_count("missing") is False

    def test_concurrent_increments_are_all_counted(self, database, sample_app):
        """N concurrent increments raise the counter by exactly N."""
        n = 40

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda _: CatalogStorage.increment_download_count(sample_app.id), range(n)))

        assert all(results)
        assert CatalogStorage.get_app(sample_app.id).download_count == n

    def test_record_download_pairs_log_and_counter(self, database, sample_user, sample_app):
        for _ in range(3):
            recorded = CatalogStorage.record_download(sample_user.id, sample_app.id)

        assert recorded.download_count == 3
        assert recorded.download.app_id == sample_app.id
        assert len(CatalogStorage.get_user_downloads(sample_user.id)) == 3
        assert CatalogStorage.get_app(sample_app.id).download_count == 3

    def test_record_download_unknown_app_writes_nothing(self, database, sample_user):
        assert CatalogStorage.record_download(sample_user.id, "missing") is None

        assert CatalogStorage.get_user_downloads(sample_user.id) == []

    def test_create_download_leaves_counter_alone(self, database, sample_user, sample_app):
        CatalogStorage.create_download(sample_user.id, sample_app.id)

        assert CatalogStorage.get_app(sample_app.id).download_count == 0


# =============================================================================
# Feedback, Reports and Stats
# =============================================================================

class TestActivity:

    def test_feedback_defaults_and_history(self, database, sample_user):
        first = CatalogStorage.create_feedback(
            sample_user.id, FeedbackCreate(subject="First", message="The first message here.")
        )
        second = CatalogStorage.create_feedback(
            sample_user.id, FeedbackCreate(subject="Second", message="The second message here.", rating=4)
        )

        history = CatalogStorage.get_user_feedback(sample_user.id)

        assert first.status == "pending"
        assert second.rating == 4
        assert {f.id for f in history} == {first.id, second.id}
        assert history[0].created_at >= history[1].created_at

    def test_report_defaults(self, database, sample_user, sample_app):
        report = CatalogStorage.create_report(
            sample_user.id,
            ReportCreate(app_id=sample_app.id, issue_type="bug", description="Segfaults when started as root."),
        )

        assert report.status == "open"
        assert report.issue_type == "bug"
        assert CatalogStorage.get_user_reports(sample_user.id)[0].id == report.id

    def test_activity_requires_existing_user(self, database, sample_app):
        """Foreign keys reject rows for unknown users."""
        with pytest.raises(IntegrityError):
            CatalogStorage.create_download("ghost", sample_app.id)

        with pytest.raises(IntegrityError):
            CatalogStorage.create_feedback("ghost", FeedbackCreate(subject="Hey", message="I do not exist at all."))

    @pytest.mark.parametrize("downloads, feedback, reports", [
        (0, 0, 0),
        (1, 0, 2),
        (3, 1, 0),
        (5, 4, 3),
    ])
    def test_user_stats_match_row_counts(self, database, sample_user, sample_app, downloads, feedback, reports):
        other = CatalogStorage.upsert_user(UserUpsert(id="other"))
        # Noise from another user must not leak into the counts
        CatalogStorage.record_download(other.id, sample_app.id)
        CatalogStorage.create_feedback(other.id, FeedbackCreate(subject="Other", message="Someone else's note."))

        for _ in range(downloads):
            CatalogStorage.record_download(sample_user.id, sample_app.id)
        for i in range(feedback):
            CatalogStorage.create_feedback(sample_user.id, FeedbackCreate(subject=f"Sub {i}", message="A perfectly fine message."))
        for _ in range(reports):
            CatalogStorage.create_report(
                sample_user.id, ReportCreate(issue_type="other", description="Something is off with this app.")
            )

        stats = CatalogStorage.get_user_stats(sample_user.id)

        assert stats.downloads == downloads
        assert stats.feedback == feedback
        assert stats.reports == reports


# =============================================================================
# Deleting Apps Keeps History
# =============================================================================

class TestDeletedAppHistory:

    def test_downloads_survive_app_deletion(self, database, sample_user, sample_app):
        recorded = CatalogStorage.record_download(sample_user.id, sample_app.id)

        CatalogStorage.delete_app(sample_app.id)

        with Database.session() as session:
            row = session.get(DownloadModel, recorded.download.id)
            assert row is not None
            assert row.app_id == sample_app.id

        history = CatalogStorage.get_user_downloads_with_apps(sample_user.id)
        assert len(history) == 1
        assert history[0].app_id == sample_app.id
        assert history[0].app is None

    def test_reports_survive_app_deletion(self, database, sample_user, sample_app):
        CatalogStorage.create_report(
            sample_user.id,
            ReportCreate(app_id=sample_app.id, issue_type="broken", description="Does not start on Debian 12."),
        )

        CatalogStorage.delete_app(sample_app.id)

        history = CatalogStorage.get_user_reports_with_apps(sample_user.id)
        assert history[0].app_id == sample_app.id
        assert history[0].app is None

    def test_history_joins_existing_app(self, database, sample_user, sample_app):
        CatalogStorage.record_download(sample_user.id, sample_app.id)

        history = CatalogStorage.get_user_downloads_with_apps(sample_user.id)

        assert history[0].app.name == sample_app.name
