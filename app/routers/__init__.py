# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - apps.py: Public catalog and package download
# - downloads.py: Download recording
# - feedback.py: Feedback submission
# - reports.py: Issue reports
# - user.py: The signed-in user's own history and stats
# - admin.py: Catalog administration and package upload
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import apps
from . import downloads
from . import feedback
from . import reports
from . import user
from . import admin

__all__ = [
    "health",
    "apps",
    "downloads",
    "feedback",
    "reports",
    "user",
    "admin",
]
