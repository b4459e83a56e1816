# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains the catalog's data and storage logic:
# - models/: Pydantic schemas for validation and the camelCase wire format
# - tables.py: SQLAlchemy table definitions
# - services/: Catalog queries and package file storage
#
# Routers call into services; services never build HTTP responses.
# =============================================================================
