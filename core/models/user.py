# =============================================================================
# core/models/user.py - User Schemas
# =============================================================================
# - UserUpsert: identity data taken from a verified token
# - User: stored user returned to clients
# - UserStats: per-user activity counts
# =============================================================================

from datetime import datetime

from pydantic import Field, computed_field

from .base import CatalogModel


class UserUpsert(CatalogModel):
    """
    Identity data used to create or refresh a user row.

    `is_admin` is left out of the write when it is None, so a login never
    revokes an admin flag that was granted in the database.
    """

    # External identity (the token's "sub" claim)
    id: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Identity issued by the external provider"
    )

    email: str | None = Field(default=None, max_length=255)
    first_name: str | None = Field(default=None, max_length=255)
    last_name: str | None = Field(default=None, max_length=255)
    profile_image_url: str | None = Field(default=None, max_length=500)

    is_admin: bool | None = Field(
        default=None,
        description="Only written when set"
    )


class User(CatalogModel):
    """
    Stored user returned by GET /api/auth/user.

    Example:
        {
            "id": "48213",
            "email": "ada@example.com",
            "firstName": "Ada",
            "lastName": "Lovelace",
            "displayName": "Ada Lovelace",
            "isAdmin": false,
            ...
        }
    """

    id: str
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    profile_image_url: str | None = None
    is_admin: bool = False
    created_at: datetime
    updated_at: datetime

    @computed_field
    @property
    def display_name(self) -> str | None:
        parts = [part for part in (self.first_name, self.last_name) if part]
        if parts:
            return " ".join(parts)
        return self.email


class UserStats(CatalogModel):
    """Activity counts for one user, one independent query each."""

    downloads: int = Field(default=0, ge=0)
    feedback: int = Field(default=0, ge=0)
    reports: int = Field(default=0, ge=0)
