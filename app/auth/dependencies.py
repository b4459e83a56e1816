# =============================================================================
# app/auth/dependencies.py - FastAPI Auth Dependencies
# =============================================================================
# The single authorization boundary of the API.
#
# Tokens come from an external identity provider. We support:
# - HS256 tokens signed with a shared secret (AUTH_JWT_SECRET)
# - Asymmetric tokens (RS256/ES256) verified against AUTH_JWKS_URL
#
# A verified token upserts the user row (first login creates it, later
# logins refresh the profile) and yields an AuthUser with the stored admin
# flag.
#
# Usage:
#   from app.auth import get_current_user, require_admin, AuthUser
#
#   @router.get("/protected")
#   def protected(user: AuthUser = Depends(get_current_user)):
#       return {"user_id": user.id}
# =============================================================================

import logging
import time
from typing import Any, Optional

import httpx
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt
from pydantic import ValidationError

from app.auth.models import AuthUser, TokenClaims
from app.config import settings
from app.exceptions import AdminRequiredError, AuthenticationError
from core.models import UserUpsert
from core.services.catalog_storage import CatalogStorage

logger = logging.getLogger(__name__)

# Missing credentials are reported by us (401), not by HTTPBearer
security = HTTPBearer(auto_error=False)

# Cache for JWKS keys
_jwks_cache: dict = {}
_jwks_cache_time: float = 0
JWKS_CACHE_TTL = 3600  # 1 hour


def _fetch_jwks() -> dict:
    """Fetch the provider's JWKS with caching."""
    global _jwks_cache, _jwks_cache_time

    current_time = time.time()

    if _jwks_cache and (current_time - _jwks_cache_time) < JWKS_CACHE_TTL:
        return _jwks_cache

    try:
        response = httpx.get(settings.AUTH_JWKS_URL, timeout=10)
        response.raise_for_status()
        _jwks_cache = response.json()
        _jwks_cache_time = current_time
        logger.debug(f"Fetched JWKS from {settings.AUTH_JWKS_URL}")
        return _jwks_cache
    except httpx.HTTPError as e:
        logger.warning(f"Failed to fetch JWKS: {e}")
        # Fall back to stale keys
        if _jwks_cache:
            return _jwks_cache
        return {"keys": []}


def _get_signing_key(token: str) -> tuple[Any, str]:
    """
    Pick the verification key for a token.

    Returns:
        Tuple of (key, algorithm) to use for verification
    """
    try:
        unverified_header = jwt.get_unverified_header(token)
    except JWTError:
        return settings.AUTH_JWT_SECRET, settings.AUTH_JWT_ALGORITHM

    alg = unverified_header.get("alg", settings.AUTH_JWT_ALGORITHM)
    kid = unverified_header.get("kid")

    if alg.startswith("HS") or not settings.AUTH_JWKS_URL:
        return settings.AUTH_JWT_SECRET, settings.AUTH_JWT_ALGORITHM

    for key in _fetch_jwks().get("keys", []):
        if kid is None or key.get("kid") == kid:
            return key, alg

    logger.warning(f"No JWKS key for alg={alg}, kid={kid}")
    raise AuthenticationError("Invalid token: unknown signing key")


def decode_token(token: str) -> TokenClaims:
    """
    Verify a token and return its claims.

    Raises:
        AuthenticationError: If the signature, expiry or claims are invalid
    """
    try:
        signing_key, algorithm = _get_signing_key(token)
        payload = jwt.decode(
            token,
            signing_key,
            algorithms=[algorithm],
            audience=settings.AUTH_AUDIENCE,
            issuer=settings.AUTH_ISSUER,
            options={"verify_aud": settings.AUTH_AUDIENCE is not None},
        )
        return TokenClaims.model_validate(payload)

    except ExpiredSignatureError:
        logger.warning("Token has expired")
        raise AuthenticationError("Token has expired")

    except JWTError as e:
        logger.warning(f"Token validation failed: {e}")
        raise AuthenticationError("Invalid token")

    except ValidationError:
        logger.warning("Token missing 'sub' claim")
        raise AuthenticationError("Invalid token: missing user ID")


def _claims_to_upsert(claims: TokenClaims) -> UserUpsert:
    email = claims.email.strip() if claims.email else None
    promote = bool(email) and email.lower() in settings.admin_emails_list
    return UserUpsert(
        id=claims.sub,
        email=email,
        first_name=claims.resolved_first_name,
        last_name=claims.resolved_last_name,
        profile_image_url=claims.resolved_image_url,
        # Only ever grant; never revoke a flag set in the database
        is_admin=True if promote else None,
    )


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> AuthUser:
    """
    Resolve the request's identity.

    This dependency:
    1. Extracts the Bearer token from the Authorization header
    2. Verifies it against the identity provider's key
    3. Upserts the user row from the token's profile claims
    4. Returns an AuthUser carrying the stored admin flag

    Raises:
        AuthenticationError: 401 if the token is missing or invalid
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError()

    claims = decode_token(credentials.credentials)
    user = CatalogStorage.upsert_user(_claims_to_upsert(claims))

    logger.debug(f"Authenticated user: {user.id}")
    return AuthUser(id=user.id, email=user.email, is_admin=user.is_admin)


def require_admin(user: AuthUser = Depends(get_current_user)) -> AuthUser:
    """
    Require a signed-in administrator.

    Raises:
        AuthenticationError: 401 if not signed in
        AdminRequiredError: 403 if signed in without the admin flag
    """
    if not user.is_admin:
        logger.warning(f"User {user.id} denied admin access")
        raise AdminRequiredError()
    return user
