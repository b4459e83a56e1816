# =============================================================================
# core/models/catalog.py - Catalog App Schemas
# =============================================================================
# These models define the API contract for catalog entries:
# - AppCreate: metadata submitted with a package upload
# - AppUpdate: partial update from the admin console
# - App: stored catalog entry returned to clients
#
# An app is one downloadable Linux package (a ZIP archive on disk) plus its
# descriptive metadata and a download counter.
# =============================================================================

from datetime import datetime

from pydantic import ConfigDict, Field, HttpUrl, TypeAdapter, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from .base import CatalogModel

_http_url = TypeAdapter(HttpUrl)


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _check_icon_url(value: str | None) -> str | None:
    value = _blank_to_none(value)
    if value is not None:
        try:
            _http_url.validate_python(value)
        except ValidationError:
            raise ValueError("must be an http(s) URL")
    return value


class AppCreate(CatalogModel):
    """
    Schema for the metadata part of a package upload.

    The file itself travels separately in the multipart body; the stored
    file name and measured size are added by the upload pipeline.

    Example:
        {
            "name": "htop",
            "description": "Interactive process viewer for Linux",
            "category": "system",
            "version": "3.3.0",
            "iconUrl": "https://example.com/htop.png"
        }
    """

    # Display name, also used for the download filename
    name: str = Field(
        ...,
        min_length=2,
        max_length=255,
        description="Display name of the app"
    )

    description: str = Field(
        ...,
        min_length=10,
        description="What the app does"
    )

    # Free-form, e.g. "utilities", "development", "system"
    category: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Catalog category"
    )

    version: str | None = Field(
        default=None,
        max_length=50,
        description="Package version string"
    )

    icon_url: str | None = Field(
        default=None,
        max_length=500,
        description="Icon image URL (http or https)"
    )

    @field_validator("name", "description", "category", mode="before")
    @classmethod
    def strip_text(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("version", mode="before")
    @classmethod
    def blank_version(cls, value):
        return _blank_to_none(value) if isinstance(value, str) else value

    @field_validator("icon_url", mode="before")
    @classmethod
    def validate_icon_url(cls, value):
        return _check_icon_url(value) if isinstance(value, str) else value


class AppUpdate(CatalogModel):
    """
    Schema for PATCH /api/admin/apps/{id}.

    Only fields the client actually sends are written. The download counter,
    stored file name and timestamps cannot be changed here.

    Example:
        {"isActive": false}
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )

    name: str | None = Field(default=None, min_length=2, max_length=255)
    description: str | None = Field(default=None, min_length=10)
    category: str | None = Field(default=None, min_length=1, max_length=100)
    version: str | None = Field(default=None, max_length=50)
    icon_url: str | None = Field(default=None, max_length=500)
    is_active: bool | None = None

    @field_validator("name", "description", "category", mode="before")
    @classmethod
    def strip_text(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("icon_url", mode="before")
    @classmethod
    def validate_icon_url(cls, value):
        return _check_icon_url(value) if isinstance(value, str) else value

    def changes(self) -> dict:
        """Fields explicitly set by the client, keyed by column name."""
        data = self.model_dump(exclude_unset=True)
        # Non-nullable columns can't be cleared
        for key in ("name", "description", "category", "is_active"):
            if key in data and data[key] is None:
                data.pop(key)
        return data


class App(CatalogModel):
    """
    Stored catalog entry.

    Returned by the public catalog, the admin console and the upload
    endpoint.
    """

    id: str = Field(..., description="Unique app identifier")
    name: str
    description: str
    category: str
    version: str | None = None

    # Generated storage name inside the upload directory
    file_name: str = Field(..., description="Stored package file name")

    # Measured at upload time, in bytes
    file_size: int | None = Field(default=None, ge=0)

    icon_url: str | None = None
    download_count: int = Field(default=0, ge=0)
    is_active: bool = True
    created_at: datetime
    updated_at: datetime
