# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the App Catalog API:
# - test_models.py: Pydantic schema validation
# - test_catalog_storage.py: Data-access layer against SQLite
# - test_package_service.py: Package file validation and storage
# - test_auth.py: Token verification and user upsert on login
# - test_api.py: HTTP endpoints through the FastAPI test client
#
# Run tests with: pytest
# =============================================================================
