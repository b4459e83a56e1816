# =============================================================================
# app/routers/feedback.py - User Feedback API
# =============================================================================
# Signed-in users submit free-form feedback about the catalog.
# =============================================================================

from fastapi import APIRouter, Depends, status

from app.auth import AuthUser, get_current_user
from core.models import Feedback, FeedbackCreate
from core.services.catalog_storage import CatalogStorage

router = APIRouter()


@router.post("", response_model=Feedback, status_code=status.HTTP_201_CREATED)
def submit_feedback(
    feedback: FeedbackCreate,
    user: AuthUser = Depends(get_current_user),
):
    """
    Submit feedback.

    - **subject**: at least 3 characters
    - **message**: at least 10 characters
    - **rating**: optional, 1 to 5
    """
    return CatalogStorage.create_feedback(user.id, feedback)
