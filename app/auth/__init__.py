# =============================================================================
# app/auth/__init__.py - Authentication Module
# =============================================================================
# Verifies identity-provider tokens and exposes the request identity.
#
# Usage:
#   from app.auth import get_current_user, require_admin, AuthUser
#
#   @router.get("/protected")
#   def protected(user: AuthUser = Depends(get_current_user)):
#       return {"user_id": user.id}
# =============================================================================

from app.auth.dependencies import decode_token, get_current_user, require_admin
from app.auth.models import AuthUser, TokenClaims

__all__ = [
    "decode_token",
    "get_current_user",
    "require_admin",
    "AuthUser",
    "TokenClaims",
]
