# =============================================================================
# app/exceptions.py - Custom Exception Handlers
# =============================================================================
# Centralized exception handling for the API.
# Every domain failure maps to one exception class with a fixed status code;
# the handlers at the bottom turn them into structured JSON responses.
# =============================================================================

import logging
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class CatalogException(Exception):
    """
    Base exception for the catalog API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "CATALOG_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}
        self.headers = headers

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Authorization Exceptions
# =============================================================================

class AuthenticationError(CatalogException):
    """Raised when a request carries no valid identity."""

    def __init__(self, reason: str = "Not authenticated"):
        super().__init__(
            message=reason,
            code="UNAUTHORIZED",
            status_code=401,
            suggestion="Sign in and send the token as 'Authorization: Bearer <token>'",
            headers={"WWW-Authenticate": "Bearer"},
        )


class AdminRequiredError(CatalogException):
    """Raised when a signed-in user without the admin flag hits an admin route."""

    def __init__(self):
        super().__init__(
            message="Administrator access required",
            code="FORBIDDEN",
            status_code=403,
        )


# =============================================================================
# Catalog Exceptions
# =============================================================================

class AppNotFoundError(CatalogException):
    """Raised when an app ID doesn't exist."""

    def __init__(self, app_id: str):
        super().__init__(
            message=f"App not found: {app_id}",
            code="APP_NOT_FOUND",
            status_code=404,
            suggestion="Check that the app ID is correct and the app hasn't been deleted",
            details={"app_id": app_id}
        )


class PackageFileNotFoundError(CatalogException):
    """Raised when an app record exists but its package file is gone."""

    def __init__(self, app_id: str):
        super().__init__(
            message="File not found",
            code="PACKAGE_FILE_NOT_FOUND",
            status_code=404,
            suggestion="Ask an administrator to re-upload this package",
            details={"app_id": app_id}
        )


# =============================================================================
# Upload Exceptions
# =============================================================================

class InvalidFileTypeError(CatalogException):
    """Raised when uploaded file type is not allowed."""

    def __init__(self, filename: str, allowed: list[str]):
        super().__init__(
            message=f"Invalid file type: {filename}",
            code="INVALID_FILE_TYPE",
            status_code=400,
            suggestion=f"Only these file types are supported: {', '.join(allowed)}",
            details={"filename": filename, "allowed_types": allowed}
        )


class FileTooLargeError(CatalogException):
    """Raised when uploaded file exceeds size limit."""

    def __init__(self, max_mb: int):
        super().__init__(
            message=f"File too large (max: {max_mb}MB)",
            code="FILE_TOO_LARGE",
            status_code=413,
            suggestion=f"Upload a file smaller than {max_mb}MB",
            details={"max_mb": max_mb}
        )


class PackageStorageError(CatalogException):
    """Raised when a package cannot be written to disk."""

    def __init__(self):
        super().__init__(
            message="Failed to store package file",
            code="PACKAGE_STORAGE_ERROR",
            status_code=500,
            suggestion="Try again later or contact support if the issue persists",
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def catalog_exception_handler(
    request: Request,
    exc: CatalogException
) -> JSONResponse:
    """
    Convert CatalogException to JSON response.

    Returns structured error with:
    - detail: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
        headers=exc.headers,
    )


def _format_errors(errors: list[dict[str, Any]]) -> list[dict[str, str]]:
    """Flatten pydantic error entries to {field, message} pairs."""
    formatted = []
    for error in errors:
        # Drop the "body"/"query" location prefix, keep the field path
        location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        formatted.append({
            "field": ".".join(location) or "__root__",
            "message": error.get("msg", "Invalid value"),
        })
    return formatted


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """
    Handle request validation errors.

    Converts validation errors to a 400 with field-level detail. Schemas
    validated inside a handler must be re-raised as RequestValidationError
    to get here; any other ValidationError is a server fault.
    """
    errors = _format_errors(exc.errors())

    logger.debug(f"Validation failed on {request.url.path}: {errors}")

    return JSONResponse(
        status_code=400,
        content={
            "detail": "Validation error",
            "code": "VALIDATION_ERROR",
            "errors": errors,
        }
    )
