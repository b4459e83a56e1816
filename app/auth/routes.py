# =============================================================================
# app/auth/routes.py - Authentication Routes
# =============================================================================
# Sign-in itself happens at the identity provider. These routes expose the
# stored user record behind the presented token.
# =============================================================================

import logging

from fastapi import APIRouter, Depends

from app.auth.dependencies import get_current_user
from app.auth.models import AuthUser
from app.exceptions import AuthenticationError
from core.models import User
from core.services.catalog_storage import CatalogStorage

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/user", response_model=User)
def get_current_user_info(
    user: AuthUser = Depends(get_current_user)
) -> User:
    """
    Get the current authenticated user's profile.

    Returns:
        User: id, email, names, image and admin flag

    Raises:
        401: If not authenticated
    """
    record = CatalogStorage.get_user(user.id)
    if record is None:
        # The row was upserted by the dependency a moment ago
        logger.error(f"User {user.id} vanished after authentication")
        raise AuthenticationError("User not found")
    return record
