# =============================================================================
# core/models/base.py - Shared Schema Configuration
# =============================================================================
# Python code uses snake_case attributes; the JSON contract with the web
# client uses camelCase (downloadCount, isActive, appId, ...). Every schema
# inherits from CatalogModel so both spellings are accepted on input and
# camelCase is produced on output.
# =============================================================================

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CatalogModel(BaseModel):
    """Base schema: camelCase on the wire, buildable from ORM rows."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )
