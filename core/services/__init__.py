# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .catalog_storage import CatalogStorage
from .package_service import PackageService, StoredPackage

__all__ = [
    "CatalogStorage",
    "PackageService",
    "StoredPackage",
]
