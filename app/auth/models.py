# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================
# Pydantic models for authentication data.
# =============================================================================

from pydantic import BaseModel, ConfigDict, Field


class AuthUser(BaseModel):
    """
    Verified request identity.

    Produced once per request by the auth dependency and passed to route
    handlers; handlers never look at raw tokens or headers.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    email: str | None = None
    is_admin: bool = False


class TokenClaims(BaseModel):
    """
    Decoded token payload from the identity provider.

    Accepts both the provider's snake_case profile claims and the standard
    OIDC names (given_name, family_name, picture).
    """

    model_config = ConfigDict(extra="ignore")

    sub: str = Field(..., min_length=1)  # User ID
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    profile_image_url: str | None = None
    given_name: str | None = None
    family_name: str | None = None
    picture: str | None = None
    exp: int | None = None
    iat: int | None = None

    @property
    def resolved_first_name(self) -> str | None:
        return self.first_name or self.given_name

    @property
    def resolved_last_name(self) -> str | None:
        return self.last_name or self.family_name

    @property
    def resolved_image_url(self) -> str | None:
        return self.profile_image_url or self.picture
